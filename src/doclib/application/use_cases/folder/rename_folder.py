"""Rename folder use case."""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from doclib.application.services.naming import normalize_display_name
from doclib.domain.entities import Folder
from doclib.domain.exceptions import ValidationError


class RenameFolderUseCase:
    def __init__(
        self,
        unit_of_work_factory: type,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, folder_id: str, name: str) -> Folder:
        if not name or not name.strip():
            raise ValidationError("name required")
        async with self._uow_factory() as uow:
            folder = uow.library.require_folder(folder_id)
            updated = replace(folder, name=normalize_display_name(name), updated_at=self._clock())
            uow.library.put_folder(updated)
        return updated
