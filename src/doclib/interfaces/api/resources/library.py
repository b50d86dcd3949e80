"""Library API resources - listing, metadata edits and file access."""

from urllib.parse import quote

import falcon.asgi

from doclib.application.dto.document_dto import LibraryListInput
from doclib.application.services.text import decode_text
from doclib.application.use_cases.document.get_document_file import GetDocumentFileUseCase
from doclib.application.use_cases.document.list_library import ListLibraryUseCase
from doclib.application.use_cases.document.update_document import (
    MoveDocumentUseCase,
    RenameDocumentUseCase,
)
from doclib.domain.exceptions import DocLibError, UnsupportedType
from doclib.domain.value_objects import DocumentKind
from doclib.interfaces.api.errors import optional_str, read_json_body, required_str, set_error
from doclib.interfaces.api.serializers import (
    document_to_dict,
    document_view_to_dict,
    folder_to_dict,
    touched_to_list,
)


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """RFC 5987 header value: ASCII fallback plus the exact UTF-8 name."""
    fallback = "".join(c if 32 <= ord(c) < 127 and c not in '"\\' else "_" for c in filename)
    return f"{disposition}; filename=\"{fallback or 'file'}\"; filename*=UTF-8''{quote(filename, safe='')}"


class LibraryResource:
    """GET /v1/library - documents and folders with filters."""

    def __init__(self, list_library: ListLibraryUseCase) -> None:
        self._list_library = list_library

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List library. Query: q, folder_id, trashed, graph_id, ext."""
        try:
            result = await self._list_library.execute(
                LibraryListInput(
                    q=req.get_param("q"),
                    folder_id=req.get_param("folder_id") or None,
                    trashed=req.get_param_as_bool("trashed"),
                    graph_id=req.get_param("graph_id") or None,
                    ext=req.get_param("ext"),
                )
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "documents": [document_view_to_dict(v) for v in result.documents],
            "folders": [folder_to_dict(f) for f in result.folders],
            "meta": {
                "total_documents": result.total_documents,
                "total_folders": result.total_folders,
                "trashed_documents": result.trashed_documents,
                "unlinked_live_documents": result.unlinked_live_documents,
            },
        }
        resp.status = falcon.HTTP_200


class RenameResource:
    """POST /v1/library/rename - change display name only."""

    def __init__(self, rename_document: RenameDocumentUseCase) -> None:
        self._rename_document = rename_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            result = await self._rename_document.execute(
                required_str(body, "document_id"), required_str(body, "name")
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "document": document_to_dict(result.document),
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200


class MoveResource:
    """POST /v1/library/move - move a document to another folder (null = root)."""

    def __init__(self, move_document: MoveDocumentUseCase) -> None:
        self._move_document = move_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            result = await self._move_document.execute(
                required_str(body, "document_id"), optional_str(body, "folder_id")
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "document": document_to_dict(result.document),
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200


class FileResource:
    """GET /v1/library/file/{document_id} - raw bytes, restoring from trash if needed."""

    def __init__(self, get_document_file: GetDocumentFileUseCase) -> None:
        self._get_document_file = get_document_file

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        try:
            result = await self._get_document_file.execute(document_id)
        except DocLibError as e:
            set_error(resp, e)
            return
        disposition = "attachment" if req.get_param_as_bool("download") else "inline"
        resp.content_type = result.document.mime
        resp.set_header("Content-Disposition", content_disposition(result.document.name, disposition))
        resp.set_header("X-Library-File-Location", result.area.value)
        resp.set_header("X-Library-Restored", "true" if result.restored else "false")
        resp.cache_control = ["no-store"]
        resp.data = result.data
        resp.status = falcon.HTTP_200


class TextResource:
    """GET /v1/library/text/{document_id} - decoded content of a text document."""

    def __init__(self, get_document_file: GetDocumentFileUseCase) -> None:
        self._get_document_file = get_document_file

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, document_id: str
    ) -> None:
        try:
            result = await self._get_document_file.execute(document_id)
            if result.document.kind is not DocumentKind.TEXT:
                raise UnsupportedType(f"Document {document_id} is not a text document")
            try:
                text = decode_text(result.data)
            except UnicodeDecodeError as e:
                raise UnsupportedType("Stored content is not UTF-8 text") from e
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "document_id": result.document.id,
            "name": result.document.name,
            "text": text,
            "restored": result.restored,
        }
        resp.status = falcon.HTTP_200
