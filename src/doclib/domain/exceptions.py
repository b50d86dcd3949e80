"""Domain exceptions."""


class DocLibError(Exception):
    """Base exception for doclib."""

    pass


class InvalidReference(DocLibError):
    """Document id does not match the structural id pattern."""

    pass


class NotFound(DocLibError):
    """Requested resource was not found."""

    pass


class Conflict(DocLibError):
    """Name collision with differing content that was not overridden."""

    def __init__(self, message: str, conflicts: list | None = None) -> None:
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class SizeLimitExceeded(DocLibError):
    """File or batch is larger than the configured ceiling."""

    pass


class UnsupportedType(DocLibError):
    """Content failed the sniffing allowlist."""

    pass


class IndexCorrupt(DocLibError):
    """Structured index file could not be read."""

    pass


class DependencyUnavailable(DocLibError):
    """External generation provider failed or timed out."""

    pass


class ValidationError(DocLibError):
    """Validation failed for input data."""

    pass


class FolderNotEmpty(DocLibError):
    """Folder still contains documents or subfolders."""

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason
