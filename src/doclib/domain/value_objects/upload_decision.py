"""Classification outcome for one incoming upload."""

from enum import StrEnum


class UploadDecision(StrEnum):
    NEW = "new"
    ATTACHABLE = "attachable"
    CONFLICT = "conflict"
    OVERRIDE = "override"
