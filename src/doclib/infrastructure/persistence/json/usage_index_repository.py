"""Usage index stored as one JSON file."""

import logging
from pathlib import Path

from doclib.domain.entities import UsageIndex, UsageLink
from doclib.domain.exceptions import IndexCorrupt
from doclib.domain.value_objects import DocumentId
from doclib.infrastructure.persistence.json.atomic_io import (
    format_timestamp,
    load_or_quarantine,
    parse_timestamp,
    write_json_atomic,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION = 1


def decode_usage_index(raw: object) -> UsageIndex:
    if not isinstance(raw, dict) or raw.get("version") != CURRENT_VERSION:
        raise IndexCorrupt("Unknown usage index format")
    index = UsageIndex(updated_at=parse_timestamp(raw.get("updated_at")))
    try:
        for doc_id, entry in (raw.get("documents") or {}).items():
            if not DocumentId.is_valid(doc_id):
                logger.warning("Dropping usage entry with invalid id %r", doc_id)
                continue
            by_graph = {}
            for graph_id, link in (entry.get("graphs") or {}).items():
                node_ids = [n for n in link.get("node_ids") or [] if isinstance(n, str) and n]
                if not node_ids:
                    continue
                by_graph[graph_id] = UsageLink(
                    graph_id=graph_id,
                    node_ids=node_ids,
                    updated_at=parse_timestamp(link.get("updated_at")) or index.updated_at,
                )
            if by_graph:
                index.documents[doc_id] = by_graph
    except (AttributeError, TypeError) as e:
        raise IndexCorrupt(f"Malformed usage index: {e}") from e
    return index


def encode_usage_index(index: UsageIndex) -> dict:
    return {
        "version": CURRENT_VERSION,
        "updated_at": format_timestamp(index.updated_at),
        "documents": {
            doc_id: {
                "graphs": {
                    graph_id: {
                        "node_ids": list(link.node_ids),
                        "updated_at": format_timestamp(link.updated_at),
                    }
                    for graph_id, link in sorted(by_graph.items())
                }
            }
            for doc_id, by_graph in sorted(index.documents.items())
        },
    }


class JsonUsageIndexRepository:
    """Loads and saves the whole usage index file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> UsageIndex:
        return load_or_quarantine(self._path, decode_usage_index, UsageIndex)

    def save(self, index: UsageIndex) -> None:
        write_json_atomic(self._path, encode_usage_index(index))
        index.dirty = False
