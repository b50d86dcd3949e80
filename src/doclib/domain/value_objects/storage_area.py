"""Physical areas of the blob store."""

from enum import StrEnum


class StorageArea(StrEnum):
    """Live and trash are mutually exclusive for a given document id."""

    LIVE = "live"
    TRASH = "trash"

    @property
    def other(self) -> "StorageArea":
        return StorageArea.TRASH if self is StorageArea.LIVE else StorageArea.LIVE
