"""Upload classification - a pure function over existing records and one incoming file."""

from collections.abc import Iterable
from dataclasses import dataclass

from doclib.application.services.naming import name_key
from doclib.domain.entities import Document
from doclib.domain.value_objects import UploadDecision

REASON_DIFFERENT_CONTENT = "DIFFERENT_CONTENT"
REASON_UNKNOWN_HASH = "EXISTING_HASH_UNKNOWN"
REASON_DUPLICATE_IN_BATCH = "DUPLICATE_NAME_IN_BATCH"


@dataclass(frozen=True)
class Classification:
    decision: UploadDecision
    existing: Document | None = None
    reason: str | None = None


def find_name_matches(candidates: Iterable[Document], key: str) -> list[Document]:
    """Live documents whose display name collides with `key`, newest first."""
    matches = [d for d in candidates if not d.is_trashed and name_key(d.name) == key]
    matches.sort(key=lambda d: d.updated_at, reverse=True)
    return matches


def classify_upload(
    existing: Iterable[Document], incoming_hash: str, override: bool
) -> Classification:
    """Classify one incoming file against the name matches in its target folder.

    Identity is never assumed without a known, equal hash.
    """
    matches = list(existing)
    if not matches:
        return Classification(UploadDecision.NEW)
    for doc in matches:
        if doc.file_hash and doc.file_hash == incoming_hash:
            return Classification(UploadDecision.ATTACHABLE, existing=doc)
    target = matches[0]
    if override:
        return Classification(UploadDecision.OVERRIDE, existing=target)
    reason = REASON_DIFFERENT_CONTENT if target.file_hash else REASON_UNKNOWN_HASH
    return Classification(UploadDecision.CONFLICT, existing=target, reason=reason)
