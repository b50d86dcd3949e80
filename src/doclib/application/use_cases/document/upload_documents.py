"""Upload documents use case: prepare without side effects, then commit all or nothing."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from doclib.application.dto.document_dto import (
    UploadConflict,
    UploadFile,
    UploadInput,
    UploadItemResult,
    UploadLimits,
    UploadOutput,
)
from doclib.application.ports import BlobStore, ContentSniffer, SniffResult
from doclib.application.services.classification import (
    REASON_DUPLICATE_IN_BATCH,
    classify_upload,
    find_name_matches,
)
from doclib.application.services.lifecycle import new_document, revise_content, sha256_hex
from doclib.application.services.naming import name_key, normalize_display_name
from doclib.application.services.reconciler import touched_events
from doclib.domain.entities import Document
from doclib.domain.exceptions import Conflict, DocLibError, SizeLimitExceeded, ValidationError
from doclib.domain.value_objects import DocumentId, PatchKind, StorageArea, UploadDecision

logger = logging.getLogger(__name__)


@dataclass
class PreparedFile:
    """Everything computable about one file without touching the library."""

    source: UploadFile
    name: str
    key: str
    file_hash: str = ""
    sniffed: SniffResult | None = None
    error: str | None = None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UploadDocumentsUseCase:
    """Upload a batch: hash and sniff in parallel, classify, abort on any conflict, then write."""

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

    def _prepare_file(self, upload: UploadFile) -> PreparedFile:
        name = normalize_display_name(upload.filename)
        prepared = PreparedFile(source=upload, name=name, key=name_key(name))
        try:
            if not upload.data:
                raise ValidationError("File is empty")
            prepared.file_hash = sha256_hex(upload.data)
            prepared.sniffed = self._sniffer.sniff(upload.data, name, upload.declared_mime)
            limit = self._limits.for_kind(prepared.sniffed.kind)
            if len(upload.data) > limit:
                raise SizeLimitExceeded(
                    f"{prepared.sniffed.kind.value} file exceeds {limit} bytes"
                )
        except DocLibError as e:
            prepared.error = str(e)
            prepared.error_code = type(e).__name__
        return prepared

    async def prepare(self, files: list[UploadFile]) -> list[PreparedFile]:
        """No side effects; files are hashed concurrently in worker threads."""
        prepared = list(
            await asyncio.gather(*(asyncio.to_thread(self._prepare_file, f) for f in files))
        )
        total = 0
        for item in prepared:
            if not item.ok:
                continue
            total += len(item.source.data)
            if total > self._limits.max_context_bytes:
                item.error = f"Batch exceeds {self._limits.max_context_bytes} bytes"
                item.error_code = SizeLimitExceeded.__name__
                total -= len(item.source.data)
        return prepared

    async def execute(self, input_data: UploadInput) -> UploadOutput:
        """Upload files into a folder. Raises Conflict with the full list before any mutation."""
        if not input_data.files:
            raise ValidationError("At least one file required")
        prepared = await self.prepare(input_data.files)
        overrides = {name_key(n) for n in input_data.overrides}

        async with self._uow_factory() as uow:
            if input_data.folder_id is not None:
                uow.library.require_folder(input_data.folder_id)
            candidates = uow.library.documents_in(input_data.folder_id, trashed=False)

            plans: list[tuple[PreparedFile, UploadDecision | None, Document | None]] = []
            conflicts: list[UploadConflict] = []
            seen_in_batch: dict[str, PreparedFile] = {}
            for item in prepared:
                if not item.ok:
                    plans.append((item, None, None))
                    continue
                first = seen_in_batch.get(item.key)
                matches = find_name_matches(candidates, item.key)
                if first is not None and first.file_hash != item.file_hash:
                    conflicts.append(
                        UploadConflict(
                            filename=item.source.filename,
                            name=item.name,
                            existing_document_id=matches[0].id if matches else None,
                            existing_hash=first.file_hash,
                            incoming_hash=item.file_hash,
                            reason=REASON_DUPLICATE_IN_BATCH,
                        )
                    )
                    continue
                if first is not None:
                    # Same bytes twice in one batch: resolved together with the first copy.
                    plans.append((item, UploadDecision.ATTACHABLE, None))
                    continue
                seen_in_batch[item.key] = item
                override = input_data.replace_existing or item.key in overrides
                result = classify_upload(matches, item.file_hash, override)
                if result.decision is UploadDecision.CONFLICT:
                    conflicts.append(
                        UploadConflict(
                            filename=item.source.filename,
                            name=item.name,
                            existing_document_id=result.existing.id,
                            existing_hash=result.existing.file_hash,
                            incoming_hash=item.file_hash,
                            reason=result.reason,
                        )
                    )
                    continue
                plans.append((item, result.decision, result.existing))

            if conflicts:
                logger.info("Upload aborted: %d conflict(s)", len(conflicts))
                raise Conflict("Name collision with different content", conflicts)

            now = self._clock()
            results: list[UploadItemResult] = []
            resolved: dict[str, Document] = {}
            changed_ids: list[str] = []
            for item, decision, existing in plans:
                if decision is None:
                    results.append(
                        UploadItemResult(
                            filename=item.source.filename,
                            decision=None,
                            error=item.error,
                            error_code=item.error_code,
                        )
                    )
                    continue
                try:
                    doc = self._commit_one(
                        uow, item, decision, existing, resolved, input_data.folder_id, now
                    )
                except DocLibError as e:
                    results.append(
                        UploadItemResult(
                            filename=item.source.filename,
                            decision=decision,
                            error=str(e),
                            error_code=type(e).__name__,
                        )
                    )
                    continue
                if decision is UploadDecision.OVERRIDE:
                    changed_ids.append(doc.id)
                results.append(
                    UploadItemResult(filename=item.source.filename, decision=decision, document=doc)
                )
            touched = touched_events(uow.usage, changed_ids, PatchKind.IDENTITY_CHANGED)

        return UploadOutput(items=results, touched=touched)

    def _commit_one(
        self,
        uow: object,
        item: PreparedFile,
        decision: UploadDecision,
        existing: Document | None,
        resolved: dict[str, Document],
        folder_id: str | None,
        now: datetime,
    ) -> Document:
        data = item.source.data
        if decision is UploadDecision.ATTACHABLE:
            doc = existing or resolved.get(item.key)
            if doc is None:
                raise ValidationError("Duplicate of a file that was not stored")
        elif decision is UploadDecision.OVERRIDE:
            if DocumentId(existing.id).ext != item.sniffed.ext:
                raise ValidationError(
                    f"Content type {item.sniffed.ext} does not match document {existing.id}"
                )
            self._blob_store.write(existing.id, data, existing.area)
            doc = revise_content(
                existing, data=data, file_hash=item.file_hash, sniffed=item.sniffed, now=now
            )
            uow.library.put(doc)
            logger.info("Replaced document %s via upload override", doc.id)
        else:
            doc_id = DocumentId.new(item.sniffed.ext).value
            self._blob_store.write(doc_id, data, StorageArea.LIVE)
            doc = new_document(
                document_id=doc_id,
                name=item.name,
                folder_id=folder_id,
                data=data,
                file_hash=item.file_hash,
                sniffed=item.sniffed,
                now=now,
            )
            uow.library.put(doc)
            logger.info("Created document %s (%s)", doc.id, doc.name)
        resolved[item.key] = doc
        return doc
