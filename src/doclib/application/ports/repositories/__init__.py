"""Repository ports."""

from doclib.application.ports.repositories.library_index_repository import (
    LibraryIndexRepository,
)
from doclib.application.ports.repositories.usage_index_repository import (
    UsageIndexRepository,
)

__all__ = [
    "LibraryIndexRepository",
    "UsageIndexRepository",
]
