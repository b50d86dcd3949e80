"""Trash and restore use cases."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from doclib.application.dto.document_dto import DocumentUpdateOutput
from doclib.application.ports import BlobStore, GraphStore
from doclib.application.services.graph_sync import unlink_from_graphs
from doclib.application.services.lifecycle import restore_document, trash_document
from doclib.application.services.reconciler import touched_events
from doclib.domain.value_objects import DocumentId, PatchKind

logger = logging.getLogger(__name__)


class TrashDocumentUseCase:
    """Quarantine a document: blob to trash, references dropped from every graph."""

    def __init__(
        self,
        unit_of_work_factory: type,
        blob_store: BlobStore,
        graph_store: GraphStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store
        self._graph_store = graph_store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, document_id: str) -> DocumentUpdateOutput:
        doc_id = DocumentId(document_id)
        async with self._uow_factory() as uow:
            doc = uow.library.require(doc_id.value)
            if doc.is_trashed:
                return DocumentUpdateOutput(document=doc, touched=[])
            touched = touched_events(uow.usage, [doc.id], PatchKind.REMOVED)
            updated = trash_document(uow.library, self._blob_store, doc, self._clock())
            uow.usage.remove_documents([doc.id])
        # Index committed; graph cleanup is best effort, reads reconcile the rest.
        await unlink_from_graphs(self._graph_store, touched)
        return DocumentUpdateOutput(document=updated, touched=touched)


class RestoreDocumentUseCase:
    """Bring a trashed document back to live. Already live is a no-op."""

    def __init__(self, unit_of_work_factory: type, blob_store: BlobStore) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store

    async def execute(self, document_id: str) -> DocumentUpdateOutput:
        doc_id = DocumentId(document_id)
        async with self._uow_factory() as uow:
            doc = uow.library.require(doc_id.value)
            updated = restore_document(uow.library, self._blob_store, doc)
            touched = touched_events(uow.usage, [doc.id], PatchKind.METADATA_REFRESHED)
        return DocumentUpdateOutput(document=updated, touched=touched)


class MoveUnlinkedToTrashUseCase:
    """Trash every live document that no graph references."""

    def __init__(
        self,
        unit_of_work_factory: type,
        blob_store: BlobStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, folder_id: str | None = None) -> list[str]:
        now = self._clock()
        trashed: list[str] = []
        async with self._uow_factory() as uow:
            for doc in list(uow.library.iter_documents(trashed=False)):
                if folder_id is not None and doc.folder_id != folder_id:
                    continue
                if uow.usage.has_usage(doc.id):
                    continue
                trash_document(uow.library, self._blob_store, doc, now)
                trashed.append(doc.id)
        logger.info("Moved %d unlinked document(s) to trash", len(trashed))
        return sorted(trashed)
