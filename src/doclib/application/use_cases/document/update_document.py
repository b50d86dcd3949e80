"""Rename and move use cases - display metadata only, identity unchanged."""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from doclib.application.dto.document_dto import DocumentUpdateOutput
from doclib.application.services.naming import normalize_display_name
from doclib.application.services.reconciler import touched_events
from doclib.domain.exceptions import ValidationError
from doclib.domain.value_objects import DocumentId, PatchKind


class RenameDocumentUseCase:
    """Change the display name; referencing nodes are refreshed, never marked stale."""

    def __init__(
        self,
        unit_of_work_factory: type,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, document_id: str, name: str) -> DocumentUpdateOutput:
        doc_id = DocumentId(document_id)
        if not name or not name.strip():
            raise ValidationError("name required")
        new_name = normalize_display_name(name)
        async with self._uow_factory() as uow:
            doc = uow.library.require(doc_id.value)
            if doc.name == new_name:
                return DocumentUpdateOutput(document=doc, touched=[])
            updated = replace(doc, name=new_name)
            uow.library.put(updated)
            touched = touched_events(uow.usage, [doc.id], PatchKind.METADATA_REFRESHED)
        return DocumentUpdateOutput(document=updated, touched=touched)


class MoveDocumentUseCase:
    """Move a document to another folder (None = root)."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, document_id: str, folder_id: str | None) -> DocumentUpdateOutput:
        doc_id = DocumentId(document_id)
        async with self._uow_factory() as uow:
            if folder_id is not None:
                uow.library.require_folder(folder_id)
            doc = uow.library.require(doc_id.value)
            if doc.folder_id == folder_id:
                return DocumentUpdateOutput(document=doc, touched=[])
            updated = replace(doc, folder_id=folder_id)
            uow.library.put(updated)
            touched = touched_events(uow.usage, [doc.id], PatchKind.METADATA_REFRESHED)
        return DocumentUpdateOutput(document=updated, touched=touched)
