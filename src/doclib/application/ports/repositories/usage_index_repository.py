"""Usage index repository port."""

from pathlib import Path
from typing import Protocol

from doclib.domain.entities import UsageIndex


class UsageIndexRepository(Protocol):
    """Port for loading and saving the whole usage index."""

    @property
    def path(self) -> Path: ...

    def load(self) -> UsageIndex: ...

    def save(self, index: UsageIndex) -> None: ...
