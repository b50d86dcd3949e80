"""Unit tests for trash, restore, garbage collection and the orphans report."""

import pytest

from doclib.application.dto.gc_dto import GcInput
from doclib.application.use_cases.document.get_document_file import GetDocumentFileUseCase
from doclib.application.use_cases.folder.create_folder import CreateFolderUseCase
from doclib.application.use_cases.gc.collect_garbage import CollectGarbageUseCase
from doclib.application.use_cases.gc.orphans_report import OrphansReportUseCase
from doclib.application.use_cases.graph.reindex_usage import ReindexUsageUseCase
from doclib.application.use_cases.trash.trash_document import (
    MoveUnlinkedToTrashUseCase,
    RestoreDocumentUseCase,
    TrashDocumentUseCase,
)
from doclib.domain.exceptions import NotFound, ValidationError
from doclib.domain.value_objects import DocumentId, PatchKind, StorageArea

from tests.conftest import graph_with


def _trash(env) -> TrashDocumentUseCase:
    return TrashDocumentUseCase(env.uow_factory, env.blob_store, env.graph_store, env.clock)


def _gc(env) -> CollectGarbageUseCase:
    return CollectGarbageUseCase(env.uow_factory, env.blob_store, env.graph_store, env.clock)


def _orphans(env) -> OrphansReportUseCase:
    return OrphansReportUseCase(env.uow_factory, env.blob_store, env.clock)


class ReadOnlyGraphStore:
    """Graph store whose writes fail, as on a full or read-only disk."""

    def __init__(self, inner) -> None:
        self._inner = inner

    async def load(self, graph_id):
        return await self._inner.load(graph_id)

    async def save(self, graph) -> None:
        raise OSError(28, "No space left on device")


# --- Trash / Restore ---


@pytest.mark.asyncio
async def test_trash_and_restore_are_reversible(env, clock) -> None:
    doc = await env.upload_one("a.txt", b"keep me")

    trashed = await _trash(env).execute(doc.id)
    assert trashed.document.trashed_at == clock.now
    assert env.blob_store.locate(doc.id) is StorageArea.TRASH

    restored = await RestoreDocumentUseCase(env.uow_factory, env.blob_store).execute(doc.id)
    assert restored.document.trashed_at is None
    assert env.blob_store.read(doc.id) == (b"keep me", StorageArea.LIVE)
    assert env.library().documents[doc.id] == doc


@pytest.mark.asyncio
async def test_trash_unlinks_stored_graphs(env) -> None:
    doc = await env.upload_one("a.txt", b"x")
    other = await env.upload_one("b.txt", b"y")
    await env.save_graph(graph_with("g1", {"n1": [doc, other]}))

    result = await _trash(env).execute(doc.id)

    assert [(e.graph_id, e.node_ids, e.patch_kind) for e in result.touched] == [
        ("g1", ("n1",), PatchKind.REMOVED)
    ]
    stored = await env.graph_store.load("g1")
    assert [a.document_id for a in stored.nodes[0].attachments] == [other.id]
    assert stored.nodes[0].is_stale is True
    assert env.usage().has_usage(doc.id) is False
    assert env.usage().has_usage(other.id) is True


@pytest.mark.asyncio
async def test_trash_commits_even_when_graph_write_fails(env, clock) -> None:
    doc = await env.upload_one("a.txt", b"x")
    await env.save_graph(graph_with("g1", {"n1": [doc]}))
    use_case = TrashDocumentUseCase(
        env.uow_factory, env.blob_store, ReadOnlyGraphStore(env.graph_store), env.clock
    )

    result = await use_case.execute(doc.id)

    assert result.touched[0].patch_kind is PatchKind.REMOVED
    assert env.blob_store.locate(doc.id) is StorageArea.TRASH
    assert env.library().documents[doc.id].trashed_at == clock.now
    assert env.usage().has_usage(doc.id) is False
    stored = await env.graph_store.load("g1")
    assert [a.document_id for a in stored.nodes[0].attachments] == [doc.id]


@pytest.mark.asyncio
async def test_trash_twice_is_noop(env) -> None:
    doc = await env.upload_one("a.txt", b"x")
    first = await _trash(env).execute(doc.id)
    second = await _trash(env).execute(doc.id)
    assert second.document.trashed_at == first.document.trashed_at
    assert second.touched == []


@pytest.mark.asyncio
async def test_reading_trashed_document_restores_it(env) -> None:
    doc = await env.upload_one("a.txt", b"content")
    await _trash(env).execute(doc.id)

    result = await GetDocumentFileUseCase(env.uow_factory, env.blob_store).execute(doc.id)

    assert result.restored is True
    assert result.data == b"content"
    assert result.area is StorageArea.LIVE
    assert env.library().documents[doc.id].is_trashed is False


@pytest.mark.asyncio
async def test_reading_live_document_does_not_restore(env) -> None:
    doc = await env.upload_one("a.txt", b"content")
    result = await GetDocumentFileUseCase(env.uow_factory, env.blob_store).execute(doc.id)
    assert result.restored is False


@pytest.mark.asyncio
async def test_reading_document_with_missing_blob(env) -> None:
    doc = await env.upload_one("a.txt", b"content")
    env.blob_store.delete(doc.id)
    with pytest.raises(NotFound):
        await GetDocumentFileUseCase(env.uow_factory, env.blob_store).execute(doc.id)


@pytest.mark.asyncio
async def test_saving_graph_that_references_trash_restores(env) -> None:
    doc = await env.upload_one("a.txt", b"x")
    await _trash(env).execute(doc.id)

    result = await env.save_graph(graph_with("g2", {"n1": [doc]}))

    assert result.restored_document_ids == [doc.id]
    assert env.library().documents[doc.id].is_trashed is False
    assert env.blob_store.locate(doc.id) is StorageArea.LIVE
    assert env.usage().referenced_ids("g2") == {doc.id}


@pytest.mark.asyncio
async def test_move_unlinked_to_trash(env) -> None:
    used = await env.upload_one("used.txt", b"1")
    unused = await env.upload_one("unused.txt", b"2")
    await env.save_graph(graph_with("g1", {"n1": [used]}))

    trashed = await MoveUnlinkedToTrashUseCase(env.uow_factory, env.blob_store).execute()

    assert trashed == [unused.id]
    assert env.library().documents[used.id].is_trashed is False


# --- CollectGarbageUseCase ---


@pytest.mark.asyncio
async def test_gc_dry_run_matches_real_run(env, clock) -> None:
    old = await env.upload_one("old.txt", b"old")
    recent = await env.upload_one("recent.txt", b"recent")
    orphan = await env.upload_one("orphan.txt", b"orphan")
    used = await env.upload_one("used.txt", b"used")
    await env.save_graph(graph_with("g1", {"n1": [used]}))
    await _trash(env).execute(old.id)
    clock.advance(days=9)
    await _trash(env).execute(recent.id)
    clock.advance(days=1)
    request = GcInput(trash_older_than_days=7, purge_live_orphans=True, dry_run=True)

    plan = (await _gc(env).execute(request)).plan
    assert plan.trash_ids == [old.id]
    assert plan.live_orphan_ids == [orphan.id]
    assert env.blob_store.locate(old.id) is StorageArea.TRASH

    request.dry_run = False
    result = await _gc(env).execute(request)

    assert result.deleted_ids == plan.all_ids
    assert set(env.library().documents) == {recent.id, used.id}
    assert env.blob_store.locate(old.id) is None
    assert env.blob_store.locate(orphan.id) is None


@pytest.mark.asyncio
async def test_gc_without_orphan_purge_keeps_live(env) -> None:
    doc = await env.upload_one("a.txt", b"x")
    result = await _gc(env).execute(GcInput(trash_older_than_days=0))
    assert result.deleted_ids == []
    assert doc.id in env.library().documents


@pytest.mark.asyncio
async def test_gc_zero_days_empties_trash_including_untracked(env) -> None:
    doc = await env.upload_one("a.txt", b"x")
    await _trash(env).execute(doc.id)
    stray = DocumentId.new("txt").value
    env.blob_store.write(stray, b"lost", StorageArea.TRASH)

    result = await _gc(env).execute(GcInput(trash_older_than_days=0))

    assert result.deleted_ids == sorted([doc.id, stray])
    assert env.blob_store.list_ids(StorageArea.TRASH) == []


@pytest.mark.asyncio
async def test_gc_removes_records_even_when_graph_write_fails(env) -> None:
    doc = await env.upload_one("a.txt", b"x")
    await env.save_graph(graph_with("g1", {"n1": [doc]}))
    read_only = ReadOnlyGraphStore(env.graph_store)
    await TrashDocumentUseCase(env.uow_factory, env.blob_store, read_only, env.clock).execute(
        doc.id
    )
    # The stored graph still points at the trashed document, so usage does too.
    await ReindexUsageUseCase(env.uow_factory, env.graph_store).execute()
    assert env.usage().has_usage(doc.id) is True
    use_case = CollectGarbageUseCase(env.uow_factory, env.blob_store, read_only, env.clock)

    result = await use_case.execute(GcInput(trash_older_than_days=0))

    assert result.deleted_ids == [doc.id]
    assert [e.graph_id for e in result.touched] == ["g1"]
    assert doc.id not in env.library().documents
    assert env.usage().has_usage(doc.id) is False
    assert env.blob_store.locate(doc.id) is None


@pytest.mark.asyncio
async def test_gc_rejects_negative_days(env) -> None:
    with pytest.raises(ValidationError):
        await _gc(env).execute(GcInput(trash_older_than_days=-1))


@pytest.mark.asyncio
@pytest.mark.parametrize("days", [float("nan"), float("inf"), 1e9])
async def test_gc_rejects_unusable_days(env, days) -> None:
    with pytest.raises(ValidationError):
        await _gc(env).execute(GcInput(trash_older_than_days=days))


# --- OrphansReportUseCase ---


@pytest.mark.asyncio
async def test_orphans_report_global_and_per_graph(env) -> None:
    docs = [await env.upload_one(f"doc{i}.txt", f"content {i}".encode()) for i in range(5)]
    await env.save_graph(graph_with("g1", {"n1": [docs[0], docs[1]]}))
    await env.save_graph(graph_with("g2", {"n1": [docs[2]]}))

    report = await _orphans(env).execute()
    assert report.live_orphan_ids == sorted([docs[3].id, docs[4].id])
    assert report.referenced_count == 3

    scoped = await _orphans(env).execute(graph_id="g2")
    assert scoped.graph_id == "g2"
    assert scoped.referenced_count == 1
    assert scoped.live_orphan_ids == sorted(d.id for d in docs if d is not docs[2])


@pytest.mark.asyncio
async def test_orphans_report_trash_ages_and_untracked_blobs(env, clock) -> None:
    doc = await env.upload_one("a.txt", b"x")
    await _trash(env).execute(doc.id)
    clock.advance(days=3)
    stray = DocumentId.new("txt").value
    env.blob_store.write(stray, b"lost", StorageArea.LIVE)

    report = await _orphans(env).execute()

    assert stray in report.live_orphan_ids
    assert [(t.document_id, t.age_days, t.tracked) for t in report.trash_items] == [
        (doc.id, 3.0, True)
    ]


@pytest.mark.asyncio
async def test_orphans_report_folder_scope(env) -> None:
    folder = await CreateFolderUseCase(env.uow_factory).execute("Scoped")
    inside = await env.upload_one("in.txt", b"1", folder_id=folder.id)
    await env.upload_one("out.txt", b"2")

    report = await _orphans(env).execute(folder_id=folder.id)

    assert report.live_orphan_ids == [inside.id]
