"""Document id value object - validated before any path is built."""

import re
from dataclasses import dataclass
from uuid import uuid4

from doclib.domain.exceptions import InvalidReference

DOCUMENT_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\.[a-z0-9]{1,16}$"
)


@dataclass(frozen=True)
class DocumentId:
    """Opaque `<uuid>.<ext>` token; the extension is fixed at creation."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not DOCUMENT_ID_PATTERN.match(self.value):
            raise InvalidReference(f"Invalid document id: {self.value!r}")

    @classmethod
    def new(cls, ext: str) -> "DocumentId":
        return cls(f"{uuid4()}.{ext.lower()}")

    @classmethod
    def is_valid(cls, value: object) -> bool:
        return isinstance(value, str) and bool(DOCUMENT_ID_PATTERN.match(value))

    @property
    def ext(self) -> str:
        return self.value.rsplit(".", 1)[1]

    def __str__(self) -> str:
        return self.value
