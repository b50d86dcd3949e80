"""Trash API resources."""

import falcon.asgi

from doclib.application.dto.gc_dto import GcInput
from doclib.application.use_cases.gc.collect_garbage import CollectGarbageUseCase
from doclib.application.use_cases.trash.trash_document import (
    MoveUnlinkedToTrashUseCase,
    RestoreDocumentUseCase,
    TrashDocumentUseCase,
)
from doclib.domain.exceptions import DocLibError
from doclib.interfaces.api.errors import optional_str, read_json_body, required_str, set_error
from doclib.interfaces.api.serializers import document_to_dict, touched_to_list


class TrashMoveResource:
    """POST /v1/library/trash/move - soft delete one document."""

    def __init__(self, trash_document: TrashDocumentUseCase) -> None:
        self._trash_document = trash_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            result = await self._trash_document.execute(required_str(body, "document_id"))
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "document": document_to_dict(result.document),
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200


class TrashRestoreResource:
    """POST /v1/library/trash/restore."""

    def __init__(self, restore_document: RestoreDocumentUseCase) -> None:
        self._restore_document = restore_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            result = await self._restore_document.execute(required_str(body, "document_id"))
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "document": document_to_dict(result.document),
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200


class TrashMoveUnlinkedResource:
    """POST /v1/library/trash/move-unlinked - trash every unreferenced live document."""

    def __init__(self, move_unlinked: MoveUnlinkedToTrashUseCase) -> None:
        self._move_unlinked = move_unlinked

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            trashed = await self._move_unlinked.execute(optional_str(body, "folder_id"))
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {"trashed_ids": trashed, "count": len(trashed)}
        resp.status = falcon.HTTP_200


class TrashEmptyResource:
    """POST /v1/library/trash/empty - permanently delete everything in trash."""

    def __init__(self, collect_garbage: CollectGarbageUseCase) -> None:
        self._collect_garbage = collect_garbage

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            result = await self._collect_garbage.execute(GcInput(trash_older_than_days=0))
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "deleted_ids": result.deleted_ids,
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200
