"""Delete folder use case - only empty folders."""

from doclib.domain.exceptions import FolderNotEmpty

REASON_HAS_SUBFOLDERS = "FOLDER_NOT_EMPTY_HAS_SUBFOLDERS"
REASON_HAS_DOCUMENTS = "FOLDER_NOT_EMPTY_HAS_DOCUMENTS"


class DeleteFolderUseCase:
    """A folder holding subfolders or documents (trashed ones included) is kept."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, folder_id: str) -> None:
        async with self._uow_factory() as uow:
            uow.library.require_folder(folder_id)
            if uow.library.subfolders(folder_id):
                raise FolderNotEmpty("Folder has subfolders", REASON_HAS_SUBFOLDERS)
            if uow.library.documents_in(folder_id):
                raise FolderNotEmpty("Folder has documents", REASON_HAS_DOCUMENTS)
            uow.library.remove_folder(folder_id)
