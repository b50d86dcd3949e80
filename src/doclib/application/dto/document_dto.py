"""Document DTOs."""

from dataclasses import dataclass, field

from doclib.domain.entities import Document, Folder, UsageLink
from doclib.domain.value_objects import (
    DocumentKind,
    StorageArea,
    TouchedEvent,
    UploadDecision,
)


@dataclass
class UploadFile:
    """One incoming file of an upload batch."""

    filename: str
    data: bytes
    declared_mime: str | None = None


@dataclass
class UploadInput:
    """Batch of files targeting one folder."""

    files: list[UploadFile]
    folder_id: str | None = None
    overrides: set[str] = field(default_factory=set)  # display names allowed to replace
    replace_existing: bool = False


@dataclass
class UploadConflict:
    """An existing document that collides by name with different content."""

    filename: str
    name: str
    existing_document_id: str | None
    existing_hash: str | None
    incoming_hash: str
    reason: str

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "name": self.name,
            "existing_document_id": self.existing_document_id,
            "existing_hash": self.existing_hash,
            "incoming_hash": self.incoming_hash,
            "reason": self.reason,
        }


@dataclass
class UploadItemResult:
    filename: str
    decision: UploadDecision | None
    document: Document | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass
class UploadOutput:
    items: list[UploadItemResult]
    touched: list[TouchedEvent]


@dataclass
class ReplaceOutput:
    """Result of replacing a document's bytes."""

    updated: bool
    document: Document
    touched: list[TouchedEvent]


@dataclass
class DocumentUpdateOutput:
    """Result of rename / move."""

    document: Document
    touched: list[TouchedEvent]


@dataclass
class DocumentFile:
    document: Document
    data: bytes
    area: StorageArea
    restored: bool = False


@dataclass
class LibraryListInput:
    q: str | None = None
    folder_id: str | None = None
    trashed: bool | None = None
    graph_id: str | None = None
    ext: str | None = None


@dataclass
class DocumentView:
    document: Document
    usage: list[UsageLink]


@dataclass
class LibraryListOutput:
    documents: list[DocumentView]
    folders: list[Folder]
    total_documents: int
    total_folders: int
    trashed_documents: int
    unlinked_live_documents: int


@dataclass(frozen=True)
class UploadLimits:
    """Per-kind and per-batch byte ceilings."""

    max_text_bytes: int
    max_image_bytes: int
    max_context_bytes: int

    def for_kind(self, kind: DocumentKind) -> int:
        return self.max_image_bytes if kind is DocumentKind.IMAGE else self.max_text_bytes
