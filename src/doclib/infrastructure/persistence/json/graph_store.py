"""Graph store - one JSON file per graph."""

import asyncio
import logging
import re
from pathlib import Path

from doclib.domain.entities import Attachment, Graph, GraphNode
from doclib.domain.exceptions import IndexCorrupt, InvalidReference
from doclib.infrastructure.persistence.json.atomic_io import (
    read_json_or_none,
    write_json_atomic,
)

logger = logging.getLogger(__name__)

GRAPH_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")

_ATTACHMENT_TEXT_FIELDS = (
    "name",
    "kind",
    "mime",
    "file_hash",
    "file_updated_at",
    "excerpt",
    "summary",
    "image_description",
)
_ATTACHMENT_FIELDS = (*_ATTACHMENT_TEXT_FIELDS, "size_bytes")
_NODE_FIELDS = {"id", "response", "is_stale", "attachments", "excluded_attachment_ids"}


def validate_graph_id(graph_id: str) -> str:
    if not isinstance(graph_id, str) or not GRAPH_ID_PATTERN.match(graph_id):
        raise InvalidReference(f"Invalid graph id: {graph_id!r}")
    return graph_id


def _optional_str(raw: dict, key: str, owner: str) -> str | None:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{owner}.{key} must be a string or null")
    return value


def attachment_from_dict(raw: dict) -> Attachment | None:
    doc_id = raw.get("document_id")
    if not isinstance(doc_id, str) or not doc_id:
        return None
    fields = {f: _optional_str(raw, f, "attachment") for f in _ATTACHMENT_TEXT_FIELDS}
    size = raw.get("size_bytes")
    if size is not None and (isinstance(size, bool) or not isinstance(size, int)):
        raise ValueError("attachment.size_bytes must be an integer or null")
    fields["size_bytes"] = size
    fields["name"] = fields["name"] or doc_id
    return Attachment(document_id=doc_id, **fields)


def attachment_to_dict(a: Attachment) -> dict:
    return {"document_id": a.document_id, **{f: getattr(a, f) for f in _ATTACHMENT_FIELDS}}


def graph_from_dict(graph_id: str, raw: dict) -> Graph:
    """Build a graph from its JSON body; unknown fields survive a round trip."""
    if not isinstance(raw, dict):
        raise ValueError("Graph body must be an object")
    nodes = []
    for n in raw.get("nodes") or []:
        if not isinstance(n, dict) or not n.get("id"):
            raise ValueError("Every node needs an id")
        excluded = n.get("excluded_attachment_ids") or []
        if not isinstance(excluded, list) or not all(isinstance(x, str) for x in excluded):
            raise ValueError("node.excluded_attachment_ids must be a list of strings")
        attachments = [
            a
            for a in (attachment_from_dict(x) for x in n.get("attachments") or [] if isinstance(x, dict))
            if a is not None
        ]
        nodes.append(
            GraphNode(
                id=str(n["id"]),
                response=_optional_str(n, "response", "node"),
                is_stale=bool(n.get("is_stale", False)),
                attachments=attachments,
                excluded_attachment_ids=list(excluded),
                extra={k: v for k, v in n.items() if k not in _NODE_FIELDS},
            )
        )
    extra = {k: v for k, v in raw.items() if k not in ("id", "nodes")}
    return Graph(id=graph_id, nodes=nodes, extra=extra)


def graph_to_dict(graph: Graph) -> dict:
    return {
        **graph.extra,
        "id": graph.id,
        "nodes": [
            {
                **node.extra,
                "id": node.id,
                "response": node.response,
                "is_stale": node.is_stale,
                "attachments": [attachment_to_dict(a) for a in node.attachments],
                "excluded_attachment_ids": list(node.excluded_attachment_ids),
            }
            for node in graph.nodes
        ],
    }


class JsonGraphStore:
    """Plain key-value storage for graphs under `<root>/graphs/<id>.json`."""

    def __init__(self, directory: Path | str) -> None:
        self._dir = Path(directory)

    def _path(self, graph_id: str) -> Path:
        return self._dir / f"{validate_graph_id(graph_id)}.json"

    async def load(self, graph_id: str) -> Graph | None:
        path = self._path(graph_id)
        raw = await asyncio.to_thread(read_json_or_none, path)
        if raw is None:
            return None
        try:
            return graph_from_dict(graph_id, raw)
        except (ValueError, TypeError, AttributeError) as e:
            raise IndexCorrupt(f"Malformed graph {graph_id}: {e}") from e

    async def save(self, graph: Graph) -> None:
        await asyncio.to_thread(write_json_atomic, self._path(graph.id), graph_to_dict(graph))

    async def delete(self, graph_id: str) -> bool:
        try:
            await asyncio.to_thread(self._path(graph_id).unlink)
        except FileNotFoundError:
            return False
        return True

    async def list_ids(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        return sorted(
            p.stem for p in self._dir.glob("*.json") if GRAPH_ID_PATTERN.match(p.stem)
        )
