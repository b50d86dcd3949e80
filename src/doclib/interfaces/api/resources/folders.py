"""Folder API resources."""

import falcon.asgi

from doclib.application.use_cases.folder.create_folder import CreateFolderUseCase
from doclib.application.use_cases.folder.delete_folder import DeleteFolderUseCase
from doclib.application.use_cases.folder.rename_folder import RenameFolderUseCase
from doclib.domain.exceptions import DocLibError
from doclib.interfaces.api.errors import optional_str, read_json_body, required_str, set_error
from doclib.interfaces.api.serializers import folder_to_dict


class FoldersResource:
    """POST /v1/library/folders - create folder."""

    def __init__(self, create_folder: CreateFolderUseCase) -> None:
        self._create_folder = create_folder

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            folder = await self._create_folder.execute(
                required_str(body, "name"), parent_id=optional_str(body, "parent_id")
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {"folder": folder_to_dict(folder)}
        resp.status = falcon.HTTP_201


class FolderRenameResource:
    """POST /v1/library/folders/rename."""

    def __init__(self, rename_folder: RenameFolderUseCase) -> None:
        self._rename_folder = rename_folder

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            folder = await self._rename_folder.execute(
                required_str(body, "folder_id"), required_str(body, "name")
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {"folder": folder_to_dict(folder)}
        resp.status = falcon.HTTP_200


class FolderDeleteResource:
    """POST /v1/library/folders/delete - only empty folders."""

    def __init__(self, delete_folder: DeleteFolderUseCase) -> None:
        self._delete_folder = delete_folder

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            folder_id = required_str(body, "folder_id")
            await self._delete_folder.execute(folder_id)
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {"deleted": folder_id}
        resp.status = falcon.HTTP_200
