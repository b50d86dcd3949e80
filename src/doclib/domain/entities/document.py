"""Document entity and its hash-bound analysis cache."""

from dataclasses import dataclass, field, replace
from datetime import datetime

from doclib.domain.value_objects import DocumentKind, StorageArea


@dataclass
class Analysis:
    """Derived attributes; each expensive field is bound to the hash it was computed for."""

    excerpt: str | None = None
    summary: str | None = None
    summary_hash: str | None = None
    image_description: str | None = None
    image_description_hash: str | None = None
    description_language: str | None = None
    model: str | None = None
    updated_at: datetime | None = None

    def current_summary(self, file_hash: str | None) -> str | None:
        if file_hash and self.summary and self.summary_hash == file_hash:
            return self.summary
        return None

    def current_image_description(self, file_hash: str | None) -> str | None:
        if file_hash and self.image_description and self.image_description_hash == file_hash:
            return self.image_description
        return None

    def current_description_language(self, file_hash: str | None) -> str | None:
        """Language fixed for this hash; only meaningful while the binding holds."""
        if file_hash and self.description_language and self.image_description_hash == file_hash:
            return self.description_language
        return None

    def bound_to(self, file_hash: str | None) -> "Analysis":
        """Copy with every field whose bound hash no longer matches cleared."""
        keep_summary = self.current_summary(file_hash) is not None
        keep_description = self.current_image_description(file_hash) is not None
        return replace(
            self,
            summary=self.summary if keep_summary else None,
            summary_hash=self.summary_hash if keep_summary else None,
            image_description=self.image_description if keep_description else None,
            image_description_hash=self.image_description_hash if keep_description else None,
            description_language=self.description_language if keep_description else None,
        )


@dataclass
class Document:
    """A library file addressed by an opaque id, independent of its display name."""

    id: str
    name: str
    kind: DocumentKind
    mime: str
    size_bytes: int
    file_hash: str | None
    created_at: datetime
    updated_at: datetime
    folder_id: str | None = None
    trashed_at: datetime | None = None
    analysis: Analysis = field(default_factory=Analysis)

    @property
    def is_trashed(self) -> bool:
        return self.trashed_at is not None

    @property
    def area(self) -> StorageArea:
        return StorageArea.TRASH if self.is_trashed else StorageArea.LIVE

    @property
    def summary(self) -> str | None:
        return self.analysis.current_summary(self.file_hash)

    @property
    def image_description(self) -> str | None:
        return self.analysis.current_image_description(self.file_hash)
