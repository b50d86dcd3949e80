"""Document kinds determined by content sniffing."""

from enum import StrEnum


class DocumentKind(StrEnum):
    """What the bytes are, never what the client claims."""

    IMAGE = "image"
    TEXT = "text"
