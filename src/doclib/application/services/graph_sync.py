"""Pushes reference removals into persisted graphs."""

import logging

from doclib.application.ports import GraphStore
from doclib.application.services.reconciler import apply_touched
from doclib.domain.exceptions import IndexCorrupt, InvalidReference
from doclib.domain.value_objects import PatchKind, TouchedEvent

logger = logging.getLogger(__name__)


async def unlink_from_graphs(graph_store: GraphStore, events: list[TouchedEvent]) -> list[str]:
    """Drop removed attachments from stored graphs so a later save cannot resurrect them.

    Best effort: a graph that cannot be read or written is skipped and the
    others are still processed; its next read reconciles it.
    """
    updated = []
    for event in events:
        if event.patch_kind is not PatchKind.REMOVED:
            continue
        try:
            graph = await graph_store.load(event.graph_id)
            if graph is None or not apply_touched(graph, event, {}):
                continue
            await graph_store.save(graph)
        except (IndexCorrupt, InvalidReference) as e:
            logger.warning("Skipping graph %s while unlinking: %s", event.graph_id, e)
            continue
        except Exception:
            logger.exception("Failed to unlink documents from graph %s", event.graph_id)
            continue
        updated.append(graph.id)
    return updated
