"""Library index repository port."""

from pathlib import Path
from typing import Protocol

from doclib.domain.entities import LibraryIndex


class LibraryIndexRepository(Protocol):
    """Port for loading and saving the whole library index."""

    @property
    def path(self) -> Path: ...

    def load(self) -> LibraryIndex: ...

    def save(self, index: LibraryIndex) -> None: ...
