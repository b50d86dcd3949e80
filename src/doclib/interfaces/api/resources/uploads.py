"""Upload and replace API resources (multipart)."""

import re
from urllib.parse import unquote_to_bytes

import falcon.asgi

from doclib.application.dto.document_dto import UploadFile, UploadInput
from doclib.application.use_cases.document.replace_document import ReplaceDocumentUseCase
from doclib.application.use_cases.document.upload_documents import UploadDocumentsUseCase
from doclib.domain.exceptions import DocLibError, ValidationError
from doclib.interfaces.api.errors import set_error
from doclib.interfaces.api.serializers import (
    document_to_dict,
    touched_to_list,
    upload_item_to_dict,
)

# RFC 5987: filename*=charset''percent-encoded (two single quotes)
_FILENAME_STAR_RFC5987 = re.compile(r"([\w-]+)''([^;\s]+)")

_FILE_FIELDS = ("files", "files[]", "file")
_TRUE_VALUES = ("1", "true", "yes", "on")


def _decode_filename(raw: str | None) -> str:
    """Decode filename to UTF-8, fixing mojibake when UTF-8 bytes were read as Latin-1."""
    if not raw or not raw.strip():
        return ""
    raw = raw.strip()
    try:
        return raw.encode("latin-1").decode("utf-8")
    except UnicodeEncodeError:
        return raw
    except UnicodeDecodeError:
        try:
            return raw.encode("latin-1").decode("cp1251")
        except (UnicodeEncodeError, UnicodeDecodeError):
            return raw


def _parse_filename_star_from_header(raw_header_value: bytes) -> str | None:
    """Parse Content-Disposition raw value for filename*=charset''percent-encoded (RFC 5987)."""
    if not raw_header_value:
        return None
    decoded = raw_header_value.decode("utf-8", errors="replace")
    idx = decoded.find("filename*=")
    if idx == -1:
        return None
    rest = decoded[idx + len("filename*=") :].strip()
    match = _FILENAME_STAR_RFC5987.match(rest)
    if not match:
        return None
    charset, encoded = match.groups()
    try:
        return unquote_to_bytes(encoded).decode(charset)
    except (ValueError, LookupError):
        return None


def _get_part_filename(part: object, fallback_index: int) -> str:
    """Get filename from multipart part: part.filename / filename* from raw header + _decode_filename, else file_N."""
    raw = (getattr(part, "filename", None) or "").strip()
    if not raw:
        headers = getattr(part, "_headers", None)
        if isinstance(headers, dict):
            raw_star = _parse_filename_star_from_header(headers.get(b"content-disposition", b""))
            if raw_star:
                raw = raw_star.strip()
    decoded = _decode_filename(raw) if raw else ""
    return decoded if decoded else f"file_{fallback_index}"


def _part_mime(part: object) -> str | None:
    mime = (getattr(part, "content_type", None) or "").strip()
    return mime or None


async def _read_form(req: falcon.asgi.Request) -> tuple[dict[str, list[str]], list[UploadFile]]:
    """Split a multipart body into text fields and file parts."""
    content_type = req.content_type or ""
    if "multipart/form-data" not in content_type:
        raise ValidationError("multipart/form-data required")
    try:
        form = await req.get_media()
    except falcon.MediaMalformedError as e:
        raise ValidationError(f"Invalid multipart: {e}") from e
    fields: dict[str, list[str]] = {}
    files: list[UploadFile] = []
    file_index = 0
    async for part in form:
        name = (part.name or "").strip()
        data = await part.get_data()
        if name in _FILE_FIELDS:
            file_index += 1
            files.append(
                UploadFile(
                    filename=_get_part_filename(part, file_index),
                    data=bytes(data),
                    declared_mime=_part_mime(part),
                )
            )
        elif name:
            fields.setdefault(name, []).append(data.decode("utf-8", errors="replace").strip())
    return fields, files


def _first(fields: dict[str, list[str]], name: str) -> str | None:
    values = [v for v in fields.get(name, []) if v]
    return values[0] if values else None


class UploadResource:
    """POST /v1/library/upload - batch upload with name-conflict detection."""

    def __init__(self, upload_documents: UploadDocumentsUseCase) -> None:
        self._upload_documents = upload_documents

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Multipart: files (repeatable), folder_id, override (repeatable name), replace_existing."""
        try:
            fields, files = await _read_form(req)
            if not files:
                raise ValidationError("At least one file required")
            overrides = {v for v in fields.get("override", []) + fields.get("override[]", []) if v}
            result = await self._upload_documents.execute(
                UploadInput(
                    files=files,
                    folder_id=_first(fields, "folder_id"),
                    overrides=overrides,
                    replace_existing=(_first(fields, "replace_existing") or "").lower()
                    in _TRUE_VALUES,
                )
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "items": [upload_item_to_dict(i) for i in result.items],
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_201


class ReplaceResource:
    """POST /v1/library/replace - new bytes for an existing document id."""

    def __init__(self, replace_document: ReplaceDocumentUseCase) -> None:
        self._replace_document = replace_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Multipart: document_id + file."""
        try:
            fields, files = await _read_form(req)
            document_id = _first(fields, "document_id")
            if not document_id:
                raise ValidationError("document_id required")
            if len(files) != 1:
                raise ValidationError("Exactly one file required")
            upload = files[0]
            result = await self._replace_document.execute(
                document_id,
                upload.data,
                declared_mime=upload.declared_mime,
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "updated": result.updated,
            "document": document_to_dict(result.document),
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200
