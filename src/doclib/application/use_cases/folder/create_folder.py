"""Create folder use case."""

from collections.abc import Callable
from datetime import UTC, datetime
from uuid import uuid4

from doclib.application.services.naming import normalize_display_name
from doclib.domain.entities import Folder
from doclib.domain.exceptions import ValidationError


class CreateFolderUseCase:
    """Create a folder under `parent_id` (None = root)."""

    def __init__(
        self,
        unit_of_work_factory: type,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, name: str, parent_id: str | None = None) -> Folder:
        if not name or not name.strip():
            raise ValidationError("name required")
        now = self._clock()
        async with self._uow_factory() as uow:
            if parent_id is not None:
                uow.library.require_folder(parent_id)
            folder = Folder(
                id=str(uuid4()),
                name=normalize_display_name(name),
                parent_id=parent_id,
                created_at=now,
                updated_at=now,
            )
            uow.library.put_folder(folder)
        return folder
