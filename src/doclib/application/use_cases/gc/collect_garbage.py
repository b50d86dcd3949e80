"""Garbage collection use case - explicit, reference-aware, with dry-run planning."""

import logging
import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from doclib.application.dto.gc_dto import GcInput, GcOutput, GcPlan
from doclib.application.ports import BlobStore, GraphStore
from doclib.application.services.graph_sync import unlink_from_graphs
from doclib.application.services.reconciler import touched_events
from doclib.domain.entities import LibraryIndex, UsageIndex
from doclib.domain.exceptions import ValidationError
from doclib.domain.value_objects import PatchKind, StorageArea

logger = logging.getLogger(__name__)

MAX_TRASH_AGE_DAYS = 100 * 365


def build_gc_plan(
    library: LibraryIndex,
    usage: UsageIndex,
    blob_store: BlobStore,
    input_data: GcInput,
    now: datetime,
) -> GcPlan:
    """Deterministic for a given library, usage index, blob store state and `now`.

    Trash age comes from trashed_at; blobs no record accounts for are aged by
    file mtime (trash) or treated as unreferenced (live).
    """
    purge_all = input_data.trash_older_than_days <= 0
    cutoff = now - timedelta(days=input_data.trash_older_than_days)

    trash_ids = {
        d.id
        for d in library.iter_documents(trashed=True)
        if purge_all or d.trashed_at <= cutoff
    }
    for doc_id in blob_store.list_ids(StorageArea.TRASH):
        if doc_id in library.documents:
            continue
        st = blob_store.stat(doc_id, StorageArea.TRASH)
        if st is not None and (purge_all or st.modified_at <= cutoff):
            trash_ids.add(doc_id)

    live_ids: set[str] = set()
    if input_data.purge_live_orphans:
        live_ids = {
            d.id for d in library.iter_documents(trashed=False) if not usage.has_usage(d.id)
        }
        live_ids.update(
            doc_id
            for doc_id in blob_store.list_ids(StorageArea.LIVE)
            if doc_id not in library.documents
        )
    return GcPlan(trash_ids=sorted(trash_ids), live_orphan_ids=sorted(live_ids - trash_ids))


class CollectGarbageUseCase:
    """Delete old trash and, on request, unreferenced live documents."""

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

    async def execute(self, input_data: GcInput) -> GcOutput:
        days = input_data.trash_older_than_days
        if not math.isfinite(days) or days < 0 or days > MAX_TRASH_AGE_DAYS:
            raise ValidationError(
                f"trash_older_than_days must be between 0 and {MAX_TRASH_AGE_DAYS}"
            )
        async with self._uow_factory() as uow:
            plan = build_gc_plan(
                uow.library, uow.usage, self._blob_store, input_data, self._clock()
            )
            if input_data.dry_run:
                return GcOutput(plan=plan, dry_run=True)

            ids = plan.all_ids
            touched = touched_events(uow.usage, ids, PatchKind.REMOVED)
            uow.library.remove(ids)
            uow.usage.remove_documents(ids)

        # Records go first: a blob left behind by a failed delete is untracked
        # and the next run sweeps it.
        for doc_id in ids:
            self._blob_store.delete(doc_id)
        await unlink_from_graphs(self._graph_store, touched)

        logger.info(
            "GC deleted %d trashed and %d live orphan document(s)",
            len(plan.trash_ids),
            len(plan.live_orphan_ids),
        )
        return GcOutput(plan=plan, dry_run=False, deleted_ids=ids, touched=touched)
