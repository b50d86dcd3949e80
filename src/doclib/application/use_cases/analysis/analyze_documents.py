"""Analyze documents use case - lazy, hash-bound summaries and image descriptions.

The provider is called without holding the index locks. Results are written
back afterwards, and only if the document still has the hash that was analyzed.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from doclib.application.dto.analysis_dto import (
    AnalyzeInput,
    AnalyzeItemResult,
    AnalyzeOutput,
    ProviderSettings,
)
from doclib.application.ports import BlobStore, TextGenerator
from doclib.application.services.lifecycle import sha256_hex
from doclib.application.services.quality_gate import is_bad_image_description
from doclib.application.services.reconciler import touched_events
from doclib.application.services.text import decode_text, detect_language, sanitize_language_hint
from doclib.domain.entities import Document
from doclib.domain.exceptions import DependencyUnavailable, NotFound
from doclib.domain.value_objects import DocumentId, DocumentKind, PatchKind

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_ERROR = "error"

REASON_INVALID_REFERENCE = "INVALID_REFERENCE"
REASON_NOT_FOUND = "NOT_FOUND"
REASON_FILE_MISSING = "FILE_MISSING"
REASON_UP_TO_DATE = "UP_TO_DATE"
REASON_SUMMARY_DISABLED = "SUMMARY_DISABLED"
REASON_CONTENT_CHANGED = "CONTENT_CHANGED"

ERROR_LOW_QUALITY = "LOW_QUALITY"
ERROR_EMPTY_RESULT = "EMPTY_RESULT"
ERROR_NOT_TEXT = "NOT_UTF8_TEXT"
ERROR_NO_PROVIDER = "PROVIDER_NOT_CONFIGURED"
ERROR_DEPENDENCY = "DEPENDENCY_UNAVAILABLE"


@dataclass
class _Job:
    document: Document
    data: bytes


@dataclass
class _Outcome:
    document_id: str
    file_hash: str
    model: str | None
    summary: str | None = None
    image_description: str | None = None
    description_language: str | None = None


def _usable(provider: ProviderSettings | None) -> bool:
    return provider is not None and bool(provider.api_key)


class AnalyzeDocumentsUseCase:
    """Compute missing derived attributes; never touches fields that are current."""

    def __init__(
        self,
        unit_of_work_factory: type,
        blob_store: BlobStore,
        text_generator: TextGenerator,
        default_provider: ProviderSettings | None = None,
        summarization_enabled: bool = True,
        summary_max_chars: int = 25_000,
        summary_min_chars: int = 100,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store
        self._text_generator = text_generator
        self._default_provider = default_provider
        self._summarization_enabled = summarization_enabled
        self._summary_max_chars = summary_max_chars
        self._summary_min_chars = summary_min_chars
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, input_data: AnalyzeInput) -> AnalyzeOutput:
        summarize = (
            self._summarization_enabled if input_data.summarize is None else input_data.summarize
        )
        provider = input_data.provider or self._default_provider
        hint = sanitize_language_hint(input_data.language_hint)

        results: dict[str, AnalyzeItemResult] = {}
        jobs = await self._collect_jobs(input_data.document_ids, summarize, results)

        outcomes: list[_Outcome] = []
        for job in jobs:
            doc = job.document
            try:
                if doc.kind is DocumentKind.TEXT:
                    outcome = await self._summarize(job, provider)
                else:
                    outcome = await self._describe(job, provider, hint)
            except DependencyUnavailable as e:
                logger.warning("Analysis of %s failed: %s", doc.id, e)
                results[doc.id] = self._error(doc, ERROR_DEPENDENCY, str(e))
                continue
            if isinstance(outcome, AnalyzeItemResult):
                results[doc.id] = outcome
            else:
                outcomes.append(outcome)

        touched = await self._store(outcomes, results) if outcomes else []
        ordered = [results[i] for i in dict.fromkeys(input_data.document_ids) if i in results]
        return AnalyzeOutput(items=ordered, touched=touched)

    async def _collect_jobs(
        self,
        document_ids: list[str],
        summarize: bool,
        results: dict[str, AnalyzeItemResult],
    ) -> list[_Job]:
        jobs: list[_Job] = []
        async with self._uow_factory() as uow:
            for raw_id in dict.fromkeys(document_ids):
                if not DocumentId.is_valid(raw_id):
                    results[raw_id] = AnalyzeItemResult(
                        document_id=str(raw_id), status=STATUS_SKIPPED, reason=REASON_INVALID_REFERENCE
                    )
                    continue
                doc = uow.library.get(raw_id)
                if doc is None:
                    results[raw_id] = AnalyzeItemResult(
                        document_id=raw_id, status=STATUS_SKIPPED, reason=REASON_NOT_FOUND
                    )
                    continue
                if doc.kind is DocumentKind.TEXT and not summarize:
                    results[raw_id] = self._skipped(doc, REASON_SUMMARY_DISABLED)
                    continue
                current = doc.summary if doc.kind is DocumentKind.TEXT else doc.image_description
                if current is not None:
                    results[raw_id] = self._skipped(doc, REASON_UP_TO_DATE)
                    continue
                try:
                    data, _ = self._blob_store.read(doc.id, prefer=doc.area)
                except NotFound:
                    results[raw_id] = self._skipped(doc, REASON_FILE_MISSING)
                    continue
                if doc.file_hash is None:
                    # Legacy record without a hash: bind it to the bytes on disk first.
                    doc = replace(doc, file_hash=sha256_hex(data))
                    uow.library.put(doc)
                jobs.append(_Job(document=doc, data=data))
        return jobs

    async def _summarize(
        self, job: _Job, provider: ProviderSettings | None
    ) -> _Outcome | AnalyzeItemResult:
        doc = job.document
        try:
            text = decode_text(job.data).strip()
        except UnicodeDecodeError:
            return self._error(doc, ERROR_NOT_TEXT, "Stored content is not UTF-8 text")
        if len(text) < self._summary_min_chars:
            summary = text
        elif not _usable(provider):
            return self._no_provider(doc)
        else:
            summary = await self._text_generator.summarize(
                text[: self._summary_max_chars], provider
            )
        if not summary or not summary.strip():
            return self._error(doc, ERROR_EMPTY_RESULT, "Provider returned an empty summary")
        return _Outcome(
            document_id=doc.id,
            file_hash=doc.file_hash,
            model=provider.model if _usable(provider) else None,
            summary=summary.strip(),
        )

    async def _describe(
        self, job: _Job, provider: ProviderSettings | None, hint: str
    ) -> _Outcome | AnalyzeItemResult:
        doc = job.document
        if not _usable(provider):
            return self._no_provider(doc)
        # Fixed once per hash; nothing is stored for this hash yet, so the hint decides.
        language = doc.analysis.current_description_language(doc.file_hash) or detect_language(hint)
        description = ""
        for strict in (False, True):
            candidate = await self._text_generator.describe_image(
                job.data,
                doc.mime,
                provider,
                language=language,
                language_hint=hint or None,
                strict=strict,
            )
            if not is_bad_image_description(candidate):
                description = candidate.strip()
                break
            logger.info("Rejected image description for %s (strict=%s)", doc.id, strict)
        if not description:
            return self._error(doc, ERROR_LOW_QUALITY, "Description failed the quality gate twice")
        return _Outcome(
            document_id=doc.id,
            file_hash=doc.file_hash,
            model=provider.image_model,
            image_description=description,
            description_language=language,
        )

    async def _store(
        self, outcomes: list[_Outcome], results: dict[str, AnalyzeItemResult]
    ) -> list:
        now = self._clock()
        stored: list[str] = []
        async with self._uow_factory() as uow:
            for outcome in outcomes:
                doc = uow.library.get(outcome.document_id)
                if doc is None or doc.file_hash != outcome.file_hash:
                    # Replaced or deleted while the provider was running: the newer state wins.
                    results[outcome.document_id] = AnalyzeItemResult(
                        document_id=outcome.document_id,
                        status=STATUS_SKIPPED,
                        reason=REASON_CONTENT_CHANGED if doc else REASON_NOT_FOUND,
                    )
                    continue
                analysis = replace(
                    doc.analysis, model=outcome.model or doc.analysis.model, updated_at=now
                )
                if outcome.summary is not None:
                    analysis = replace(
                        analysis, summary=outcome.summary, summary_hash=outcome.file_hash
                    )
                if outcome.image_description is not None:
                    analysis = replace(
                        analysis,
                        image_description=outcome.image_description,
                        image_description_hash=outcome.file_hash,
                        description_language=outcome.description_language,
                    )
                updated = replace(doc, analysis=analysis)
                uow.library.put(updated)
                stored.append(doc.id)
                results[doc.id] = AnalyzeItemResult(
                    document_id=doc.id,
                    status=STATUS_OK,
                    kind=doc.kind.value,
                    analysis=analysis.bound_to(doc.file_hash),
                )
            touched = touched_events(uow.usage, stored, PatchKind.METADATA_REFRESHED)
        return touched

    @staticmethod
    def _skipped(doc: Document, reason: str) -> AnalyzeItemResult:
        return AnalyzeItemResult(
            document_id=doc.id,
            status=STATUS_SKIPPED,
            reason=reason,
            kind=doc.kind.value,
            analysis=doc.analysis.bound_to(doc.file_hash),
        )

    @staticmethod
    def _error(doc: Document, code: str, message: str) -> AnalyzeItemResult:
        return AnalyzeItemResult(
            document_id=doc.id,
            status=STATUS_ERROR,
            reason=code,
            error=message,
            kind=doc.kind.value,
            analysis=doc.analysis.bound_to(doc.file_hash),
        )

    @classmethod
    def _no_provider(cls, doc: Document) -> AnalyzeItemResult:
        return cls._error(doc, ERROR_NO_PROVIDER, "No generation provider configured")
