"""Tests for the filesystem blob store."""

import pytest

from doclib.domain.exceptions import InvalidReference, NotFound
from doclib.domain.value_objects import DocumentId, StorageArea
from doclib.infrastructure.storage.filesystem_blob_store import FilesystemBlobStore


@pytest.fixture
def store(tmp_path) -> FilesystemBlobStore:
    s = FilesystemBlobStore(tmp_path)
    s.ensure_dirs()
    return s


@pytest.fixture
def doc_id() -> str:
    return DocumentId.new("txt").value


def test_write_then_read_from_live(store, doc_id) -> None:
    store.write(doc_id, b"content", StorageArea.LIVE)
    assert store.read(doc_id) == (b"content", StorageArea.LIVE)
    assert store.locate(doc_id) is StorageArea.LIVE


def test_read_falls_back_to_other_area(store, doc_id) -> None:
    store.write(doc_id, b"content", StorageArea.TRASH)
    data, area = store.read(doc_id, prefer=StorageArea.LIVE)
    assert data == b"content"
    assert area is StorageArea.TRASH


def test_read_missing_raises_not_found(store, doc_id) -> None:
    with pytest.raises(NotFound):
        store.read(doc_id)


def test_move_and_repeat_is_idempotent(store, doc_id) -> None:
    store.write(doc_id, b"x", StorageArea.LIVE)
    assert store.move(doc_id, StorageArea.LIVE, StorageArea.TRASH).moved is True
    again = store.move(doc_id, StorageArea.LIVE, StorageArea.TRASH)
    assert again.moved is False
    assert again.missing is False
    assert store.locate(doc_id) is StorageArea.TRASH


def test_move_of_absent_blob_reports_missing(store, doc_id) -> None:
    result = store.move(doc_id, StorageArea.LIVE, StorageArea.TRASH)
    assert result.moved is False
    assert result.missing is True


@pytest.mark.parametrize("bad", ["../etc/passwd", "not-an-id.txt", "a/b", ""])
def test_invalid_id_never_reaches_filesystem(store, bad) -> None:
    with pytest.raises(InvalidReference):
        store.path_for(bad, StorageArea.LIVE)
    with pytest.raises(InvalidReference):
        store.write(bad, b"x", StorageArea.LIVE)


def test_delete_removes_from_both_areas(store, doc_id) -> None:
    store.write(doc_id, b"a", StorageArea.LIVE)
    store.write(doc_id, b"b", StorageArea.TRASH)
    assert store.delete(doc_id) is True
    assert store.locate(doc_id) is None
    assert store.delete(doc_id) is False


def test_list_ids_ignores_temp_and_stray_files(store, tmp_path, doc_id) -> None:
    store.write(doc_id, b"a", StorageArea.LIVE)
    (tmp_path / "files" / f".{doc_id}.abc.tmp").write_bytes(b"partial")
    (tmp_path / "files" / "stray.txt").write_bytes(b"?")
    assert store.list_ids(StorageArea.LIVE) == [doc_id]
    assert store.list_ids(StorageArea.TRASH) == []


def test_stat_reports_size(store, doc_id) -> None:
    store.write(doc_id, b"12345", StorageArea.LIVE)
    assert store.stat(doc_id, StorageArea.LIVE).size_bytes == 5
    assert store.stat(doc_id, StorageArea.TRASH) is None
