"""Get document bytes, restoring from trash transparently."""

import logging

from doclib.application.dto.document_dto import DocumentFile
from doclib.application.ports import BlobStore
from doclib.application.services.lifecycle import restore_document
from doclib.domain.exceptions import NotFound
from doclib.domain.value_objects import DocumentId, StorageArea

logger = logging.getLogger(__name__)


class GetDocumentFileUseCase:
    """A read that finds the document in trash moves it back to live first."""

    def __init__(self, unit_of_work_factory: type, blob_store: BlobStore) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store

    async def execute(self, document_id: str) -> DocumentFile:
        doc_id = DocumentId(document_id)
        async with self._uow_factory() as uow:
            doc = uow.library.require(doc_id.value)
            area = self._blob_store.locate(doc.id, prefer=doc.area)
            if area is None:
                raise NotFound(f"File missing in live and trash: {doc.id}")
            restored = doc.is_trashed or area is StorageArea.TRASH
            if doc.is_trashed:
                doc = restore_document(uow.library, self._blob_store, doc)
            elif area is StorageArea.TRASH:
                # Index says live but the blob sits in trash: put it back where the index expects.
                logger.warning("Document %s found in trash while live; moving back", doc.id)
                self._blob_store.move(doc.id, StorageArea.TRASH, StorageArea.LIVE)
            data, area = self._blob_store.read(doc.id, prefer=StorageArea.LIVE)
        return DocumentFile(document=doc, data=data, area=area, restored=restored)
