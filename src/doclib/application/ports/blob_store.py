"""Blob store port - physical bytes in live or trash area."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from doclib.domain.value_objects import StorageArea


@dataclass(frozen=True)
class BlobStat:
    size_bytes: int
    modified_at: datetime


@dataclass(frozen=True)
class MoveResult:
    moved: bool
    missing: bool = False


class BlobStore(Protocol):
    """Port for document bytes addressed by validated document id."""

    def path_for(self, document_id: str, area: StorageArea) -> Path: ...

    def write(self, document_id: str, data: bytes, area: StorageArea) -> None: ...

    def read(
        self, document_id: str, prefer: StorageArea = StorageArea.LIVE
    ) -> tuple[bytes, StorageArea]: ...

    def locate(
        self, document_id: str, prefer: StorageArea = StorageArea.LIVE
    ) -> StorageArea | None: ...

    def move(self, document_id: str, src: StorageArea, dst: StorageArea) -> MoveResult: ...

    def delete(self, document_id: str) -> bool: ...

    def stat(self, document_id: str, area: StorageArea) -> BlobStat | None: ...

    def list_ids(self, area: StorageArea) -> list[str]: ...
