"""Folder entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Folder:
    """Node of the library folder tree."""

    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    parent_id: str | None = None
