"""Kinds of touched-node patches emitted by mutations."""

from enum import StrEnum


class PatchKind(StrEnum):
    """How an open graph should apply a touched event."""

    METADATA_REFRESHED = "metadata_refreshed"
    IDENTITY_CHANGED = "identity_changed"
    REMOVED = "removed"

    @property
    def marks_stale(self) -> bool:
        return self is not PatchKind.METADATA_REFRESHED
