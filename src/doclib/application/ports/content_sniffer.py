"""Content sniffer port - magic bytes are authoritative over names and declared types."""

from dataclasses import dataclass
from typing import Protocol

from doclib.domain.value_objects import DocumentKind


@dataclass(frozen=True)
class SniffResult:
    kind: DocumentKind
    mime: str
    ext: str


class ContentSniffer(Protocol):
    """Port for classifying uploaded bytes."""

    def sniff(
        self, data: bytes, filename: str, declared_mime: str | None = None
    ) -> SniffResult: ...
