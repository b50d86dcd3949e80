"""Domain value objects."""

from doclib.domain.value_objects.document_id import DOCUMENT_ID_PATTERN, DocumentId
from doclib.domain.value_objects.document_kind import DocumentKind
from doclib.domain.value_objects.patch_kind import PatchKind
from doclib.domain.value_objects.storage_area import StorageArea
from doclib.domain.value_objects.touched_event import TouchedEvent
from doclib.domain.value_objects.upload_decision import UploadDecision

__all__ = [
    "DOCUMENT_ID_PATTERN",
    "DocumentId",
    "DocumentKind",
    "PatchKind",
    "StorageArea",
    "TouchedEvent",
    "UploadDecision",
]
