"""Mapping from domain exceptions to HTTP responses."""

import falcon
import falcon.asgi

from doclib.domain.exceptions import (
    Conflict,
    DependencyUnavailable,
    DocLibError,
    FolderNotEmpty,
    IndexCorrupt,
    InvalidReference,
    NotFound,
    SizeLimitExceeded,
    UnsupportedType,
    ValidationError,
)

_STATUS = (
    (InvalidReference, falcon.HTTP_400),
    (ValidationError, falcon.HTTP_400),
    (NotFound, falcon.HTTP_404),
    (Conflict, falcon.HTTP_409),
    (FolderNotEmpty, falcon.HTTP_409),
    (SizeLimitExceeded, falcon.HTTP_413),
    (UnsupportedType, falcon.HTTP_415),
    (DependencyUnavailable, falcon.HTTP_502),
    (IndexCorrupt, falcon.HTTP_500),
)


def status_for(error: DocLibError) -> str:
    for exc_type, status in _STATUS:
        if isinstance(error, exc_type):
            return status
    return falcon.HTTP_500


def set_error(resp: falcon.asgi.Response, error: DocLibError) -> None:
    """Write `{"error": ..., "code": ...}` plus the details some errors carry."""
    resp.status = status_for(error)
    body = {"error": str(error), "code": type(error).__name__}
    if isinstance(error, Conflict):
        body["conflicts"] = [c.to_dict() if hasattr(c, "to_dict") else c for c in error.conflicts]
    if isinstance(error, FolderNotEmpty):
        body["reason"] = error.reason
    resp.media = body


async def read_json_body(req: falcon.asgi.Request) -> dict:
    """Request body as a dict; a missing body reads as empty. Raises ValidationError."""
    try:
        body = await req.get_media(default_when_empty={})
    except falcon.MediaMalformedError as e:
        raise ValidationError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise ValidationError("JSON body must be an object")
    return body


def optional_str(body: dict, key: str) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value.strip() or None


def required_str(body: dict, key: str) -> str:
    value = optional_str(body, key)
    if value is None:
        raise ValidationError(f"{key} required")
    return value


def as_bool(body: dict, key: str, default: bool = False) -> bool:
    """JSON booleans, or the strings true/false as older clients send them."""
    value = body.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    raise ValidationError(f"{key} must be a boolean")
