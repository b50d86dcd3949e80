"""Tests for JSON index repositories, unit of work and graph store."""

import json

import pytest

from doclib.domain.entities import Folder, Graph, UsageIndex
from doclib.domain.exceptions import IndexCorrupt, InvalidReference
from doclib.domain.value_objects import DocumentId
from doclib.infrastructure.persistence.json.graph_store import (
    JsonGraphStore,
    graph_from_dict,
    graph_to_dict,
    validate_graph_id,
)
from doclib.infrastructure.persistence.json.library_index_repository import (
    JsonLibraryIndexRepository,
    decode_library_index,
    encode_library_index,
)
from doclib.infrastructure.persistence.json.usage_index_repository import (
    JsonUsageIndexRepository,
    decode_usage_index,
    encode_usage_index,
)

from tests.conftest import FIXED_NOW, make_document


def test_decode_legacy_v1_index() -> None:
    doc_id = DocumentId.new("png").value
    raw = {
        "version": 1,
        "folders": [{"id": "f1", "name": "Specs", "parentId": None, "createdAt": 1767225600000}],
        "docs": [
            {
                "docId": doc_id,
                "name": "diagram.png",
                "folderId": "f1",
                "kind": "image",
                "mime": "image/png",
                "sizeBytes": 120,
                "fileHash": "abc",
                "createdAt": 1767225600000,
                "fileUpdatedAt": 1767225660000,
                "analysis": {
                    "imageForFileHash": "abc",
                    "image": {"description": "A diagram", "descriptionLanguage": "en"},
                },
            }
        ],
    }

    index = decode_library_index(raw)

    doc = index.documents[doc_id]
    assert index.folders["f1"].name == "Specs"
    assert doc.folder_id == "f1"
    assert doc.size_bytes == 120
    assert doc.image_description == "A diagram"
    assert doc.analysis.description_language == "en"
    assert doc.updated_at > doc.created_at
    assert encode_library_index(index)["version"] == 2


def test_decode_skips_records_with_invalid_ids() -> None:
    raw = {
        "version": 2,
        "documents": [
            {"id": "../escape.txt", "kind": "text", "created_at": FIXED_NOW.isoformat()}
        ],
    }
    assert decode_library_index(raw).documents == {}


@pytest.mark.parametrize("raw", [[], {"version": 99}, {"version": 2, "folders": [{"id": "x"}]}])
def test_decode_rejects_unknown_shapes(raw) -> None:
    with pytest.raises(IndexCorrupt):
        decode_library_index(raw)


def test_library_round_trip_on_disk(tmp_path) -> None:
    repo = JsonLibraryIndexRepository(tmp_path / "library-index.json")
    index = repo.load()
    doc = make_document(name="Отчёт.md", folder_id="f1")
    index.put(doc)
    repo.save(index)

    loaded = repo.load()

    assert loaded.documents[doc.id] == doc
    assert index.dirty is False


def test_corrupt_index_is_quarantined(tmp_path) -> None:
    path = tmp_path / "library-index.json"
    path.write_text("{not json", encoding="utf-8")

    index = JsonLibraryIndexRepository(path).load()

    assert index.documents == {}
    assert not path.exists()
    quarantined = list(tmp_path.glob("library-index.json.corrupt-*"))
    assert len(quarantined) == 1
    assert quarantined[0].read_text(encoding="utf-8") == "{not json"


def test_usage_index_encode_decode() -> None:
    doc_id = DocumentId.new("txt").value
    usage = UsageIndex()
    usage.replace_graph("g1", [(doc_id, "n1"), (doc_id, "n2")], FIXED_NOW)

    decoded = decode_usage_index(json.loads(json.dumps(encode_usage_index(usage))))

    assert decoded.links_for(doc_id)[0].node_ids == ["n1", "n2"]
    assert decoded.referenced_ids("g1") == {doc_id}
    assert decoded.referenced_ids("g2") == set()


def test_usage_decode_drops_empty_links() -> None:
    doc_id = DocumentId.new("txt").value
    raw = {"version": 1, "documents": {doc_id: {"graphs": {"g1": {"node_ids": []}}}}}
    assert decode_usage_index(raw).documents == {}


@pytest.mark.asyncio
async def test_uow_rolls_back_on_error(env) -> None:
    async with env.uow_factory() as uow:
        uow.library.put(make_document(name="kept.txt"))
    before = env.library_repo.path.read_text(encoding="utf-8")

    with pytest.raises(RuntimeError):
        async with env.uow_factory() as uow:
            uow.library.put(make_document(name="lost.txt"))
            raise RuntimeError("boom")

    assert env.library_repo.path.read_text(encoding="utf-8") == before
    assert [d.name for d in env.library().documents.values()] == ["kept.txt"]


@pytest.mark.asyncio
async def test_uow_saves_only_dirty_indexes(env) -> None:
    async with env.uow_factory() as uow:
        uow.library.put_folder(
            Folder(id="f1", name="Docs", created_at=FIXED_NOW, updated_at=FIXED_NOW)
        )
    assert env.library_repo.path.exists()
    assert not env.usage_repo.path.exists()


def test_graph_dict_keeps_unknown_fields() -> None:
    raw = {
        "title": "Plan",
        "nodes": [
            {
                "id": "n1",
                "position": {"x": 1, "y": 2},
                "response": "Done",
                "attachments": [{"document_id": "abc.txt"}, {"name": "no id"}],
            }
        ],
    }

    graph = graph_from_dict("g1", raw)
    out = graph_to_dict(graph)

    assert out["title"] == "Plan"
    assert out["nodes"][0]["position"] == {"x": 1, "y": 2}
    assert [a["document_id"] for a in out["nodes"][0]["attachments"]] == ["abc.txt"]
    assert out["nodes"][0]["attachments"][0]["name"] == "abc.txt"


@pytest.mark.asyncio
async def test_graph_store_round_trip(tmp_path) -> None:
    store = JsonGraphStore(tmp_path / "graphs")
    doc = make_document()
    graph = graph_from_dict("g-1", {"nodes": [{"id": "n1", "attachments": [{"document_id": doc.id}]}]})

    await store.save(graph)

    assert await store.list_ids() == ["g-1"]
    loaded = await store.load("g-1")
    assert isinstance(loaded, Graph)
    assert loaded.attachment_pairs() == [(doc.id, "n1")]
    assert await store.delete("g-1") is True
    assert await store.delete("g-1") is False
    assert await store.load("g-1") is None


@pytest.mark.asyncio
async def test_graph_store_malformed_graph_is_corrupt(tmp_path) -> None:
    directory = tmp_path / "graphs"
    directory.mkdir()
    (directory / "bad.json").write_text('{"nodes": [{"response": "no id"}]}', encoding="utf-8")
    with pytest.raises(IndexCorrupt):
        await JsonGraphStore(directory).load("bad")


@pytest.mark.asyncio
async def test_graph_store_mistyped_response_is_corrupt(tmp_path) -> None:
    directory = tmp_path / "graphs"
    directory.mkdir()
    (directory / "g1.json").write_text('{"nodes": [{"id": "n1", "response": 7}]}', encoding="utf-8")
    with pytest.raises(IndexCorrupt):
        await JsonGraphStore(directory).load("g1")


@pytest.mark.parametrize(
    ("node", "message"),
    [
        ({"id": "n1", "response": 123}, "node.response"),
        ({"id": "n1", "excluded_attachment_ids": ["a", None]}, "excluded_attachment_ids"),
        ({"id": "n1", "attachments": [{"document_id": "d", "size_bytes": True}]}, "size_bytes"),
        ({"id": "n1", "attachments": [{"document_id": "d", "summary": 1}]}, "attachment.summary"),
    ],
)
def test_graph_from_dict_rejects_mistyped_fields(node, message) -> None:
    with pytest.raises(ValueError, match=message):
        graph_from_dict("g1", {"nodes": [node]})


@pytest.mark.parametrize("graph_id", ["../x", "", "a b", "x" * 129])
def test_invalid_graph_ids(graph_id) -> None:
    with pytest.raises(InvalidReference):
        validate_graph_id(graph_id)
