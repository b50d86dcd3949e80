"""Orphans report use case - read-only input for a GC confirmation screen."""

from collections.abc import Callable
from datetime import UTC, datetime

from doclib.application.dto.gc_dto import OrphansReport, TrashItem
from doclib.application.ports import BlobStore
from doclib.domain.value_objects import StorageArea

_DAY_SECONDS = 24 * 60 * 60


def _age_days(since: datetime, now: datetime) -> float:
    return max(0.0, round((now - since).total_seconds() / _DAY_SECONDS, 1))


class OrphansReportUseCase:
    """Unreferenced live documents and trash contents with their age."""

    def __init__(
        self,
        unit_of_work_factory: type,
        blob_store: BlobStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(
        self, folder_id: str | None = None, graph_id: str | None = None
    ) -> OrphansReport:
        now = self._clock()
        async with self._uow_factory() as uow:
            library, usage = uow.library, uow.usage
            referenced = usage.referenced_ids(graph_id)

            def in_scope(doc) -> bool:
                return folder_id is None or doc.folder_id == folder_id

            live_orphans = sorted(
                d.id
                for d in library.iter_documents(trashed=False)
                if in_scope(d) and d.id not in referenced
            )
            trash_items = [
                TrashItem(
                    document_id=d.id,
                    name=d.name,
                    size_bytes=d.size_bytes,
                    trashed_at=d.trashed_at,
                    age_days=_age_days(d.trashed_at, now),
                )
                for d in library.iter_documents(trashed=True)
                if in_scope(d)
            ]
            if folder_id is None:
                # Blobs the index lost track of.
                live_orphans = sorted(
                    set(live_orphans)
                    | {
                        doc_id
                        for doc_id in self._blob_store.list_ids(StorageArea.LIVE)
                        if doc_id not in library.documents
                    }
                )
                for doc_id in self._blob_store.list_ids(StorageArea.TRASH):
                    if doc_id in library.documents:
                        continue
                    st = self._blob_store.stat(doc_id, StorageArea.TRASH)
                    if st is None:
                        continue
                    trash_items.append(
                        TrashItem(
                            document_id=doc_id,
                            name=None,
                            size_bytes=st.size_bytes,
                            trashed_at=None,
                            age_days=_age_days(st.modified_at, now),
                            tracked=False,
                        )
                    )
        trash_items.sort(key=lambda t: (-t.age_days, t.document_id))
        return OrphansReport(
            live_orphan_ids=live_orphans,
            trash_items=trash_items,
            referenced_count=len(referenced),
            graph_id=graph_id,
        )
