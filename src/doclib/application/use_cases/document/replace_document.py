"""Replace document use case - new bytes, same id."""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from doclib.application.dto.document_dto import ReplaceOutput, UploadLimits
from doclib.application.ports import BlobStore, ContentSniffer
from doclib.application.services.lifecycle import revise_content, sha256_hex
from doclib.application.services.reconciler import touched_events
from doclib.domain.exceptions import SizeLimitExceeded, UnsupportedType, ValidationError
from doclib.domain.value_objects import DocumentId, PatchKind

logger = logging.getLogger(__name__)


class ReplaceDocumentUseCase:
    """Swap the bytes behind an id; identical content is a no-op."""

    def __init__(
        self,
        unit_of_work_factory: type,
        blob_store: BlobStore,
        sniffer: ContentSniffer,
        limits: UploadLimits,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store
        self._sniffer = sniffer
        self._limits = limits
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(
        self,
        document_id: str,
        data: bytes,
        declared_mime: str | None = None,
    ) -> ReplaceOutput:
        """Text is judged against the id's extension, not the uploaded file name."""
        doc_id = DocumentId(document_id)
        if not data:
            raise ValidationError("File is empty")
        file_hash, sniffed = await asyncio.to_thread(
            lambda: (
                sha256_hex(data),
                self._sniffer.sniff(data, doc_id.value, declared_mime),
            )
        )
        if sniffed.ext != doc_id.ext:
            raise UnsupportedType(
                f"Detected .{sniffed.ext} content cannot replace a .{doc_id.ext} document"
            )
        limit = self._limits.for_kind(sniffed.kind)
        if len(data) > limit:
            raise SizeLimitExceeded(f"{sniffed.kind.value} file exceeds {limit} bytes")

        async with self._uow_factory() as uow:
            doc = uow.library.require(doc_id.value)
            if doc.file_hash == file_hash:
                return ReplaceOutput(updated=False, document=doc, touched=[])
            self._blob_store.write(doc.id, data, doc.area)
            updated = revise_content(
                doc, data=data, file_hash=file_hash, sniffed=sniffed, now=self._clock()
            )
            uow.library.put(updated)
            touched = touched_events(uow.usage, [doc.id], PatchKind.IDENTITY_CHANGED)

        logger.info("Replaced document %s (%d graph(s) touched)", doc.id, len(touched))
        return ReplaceOutput(updated=True, document=updated, touched=touched)
