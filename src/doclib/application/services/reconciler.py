"""Consistency reconciler - keeps graph attachment snapshots in line with the library.

Two entry points share one refresh rule:

* `reconcile_graph` runs on every graph read against the library index and is
  the source of truth.
* `apply_touched` applies a `TouchedEvent` emitted by a mutation to a graph a
  caller already holds in memory, so it does not have to wait for a reload.

Only identity changes (hash, size, mime) or reference removal mark a node stale,
and only when the node already carries a generated response.
"""

from collections.abc import Iterable, Mapping
from copy import deepcopy

from doclib.application.dto.graph_dto import ReconcileResult
from doclib.domain.entities import Attachment, Document, Graph, GraphNode, UsageIndex
from doclib.domain.value_objects import PatchKind, TouchedEvent

_IDENTITY_FIELDS = ("file_hash", "size_bytes", "mime")


def snapshot_of(document: Document) -> Attachment:
    """Attachment snapshot reflecting the authoritative record."""
    return Attachment(
        document_id=document.id,
        name=document.name,
        kind=document.kind.value,
        mime=document.mime,
        size_bytes=document.size_bytes,
        file_hash=document.file_hash,
        file_updated_at=document.updated_at.isoformat(),
        excerpt=document.analysis.excerpt,
        summary=document.summary,
        image_description=document.image_description,
    )


def refresh_attachment(attachment: Attachment, document: Document) -> tuple[bool, bool]:
    """Update `attachment` in place from `document`.

    Returns (changed, identity_changed). A snapshot field that was never
    recorded is filled in without counting as an identity change.
    """
    fresh = snapshot_of(document)
    identity_changed = any(
        getattr(attachment, f) is not None and getattr(attachment, f) != getattr(fresh, f)
        for f in _IDENTITY_FIELDS
    )
    changed = False
    for name, value in vars(fresh).items():
        if getattr(attachment, name) != value:
            setattr(attachment, name, value)
            changed = True
    return changed, identity_changed


def _refresh_node(
    node: GraphNode, documents: Mapping[str, Document], only: set[str] | None = None
) -> tuple[bool, bool]:
    changed = identity_changed = False
    for attachment in node.attachments:
        if only is not None and attachment.document_id not in only:
            continue
        doc = documents.get(attachment.document_id)
        # Unknown or trashed references are the trash/GC path's concern.
        if doc is None or doc.is_trashed:
            continue
        att_changed, att_identity = refresh_attachment(attachment, doc)
        changed = changed or att_changed
        identity_changed = identity_changed or att_identity
    return changed, identity_changed


def reconcile_graph(graph: Graph, documents: Mapping[str, Document]) -> ReconcileResult:
    """Return a corrected copy of `graph`; the input is not modified."""
    view = deepcopy(graph)
    result = ReconcileResult(graph=view)
    for node in view.nodes:
        changed, identity_changed = _refresh_node(node, documents)
        if changed:
            result.refreshed_node_ids.append(node.id)
        if identity_changed and node.has_response and not node.is_stale:
            node.is_stale = True
            result.stale_node_ids.append(node.id)
    return result


def apply_touched(
    graph: Graph, event: TouchedEvent, documents: Mapping[str, Document]
) -> list[str]:
    """Apply one touched event to an open graph in place. Returns changed node ids."""
    if event.graph_id != graph.id:
        return []
    doc_ids = set(event.document_ids)
    node_ids = set(event.node_ids)
    changed_nodes = []
    for node in graph.nodes:
        if node.id not in node_ids:
            continue
        if event.patch_kind is PatchKind.REMOVED:
            kept = [a for a in node.attachments if a.document_id not in doc_ids]
            changed = len(kept) != len(node.attachments)
            node.attachments = kept
            node.excluded_attachment_ids = [
                i for i in node.excluded_attachment_ids if i not in doc_ids
            ]
            if changed and node.has_response:
                node.is_stale = True
        else:
            changed, identity_changed = _refresh_node(node, documents, only=doc_ids)
            if (
                event.patch_kind is PatchKind.IDENTITY_CHANGED
                and identity_changed
                and node.has_response
            ):
                node.is_stale = True
        if changed:
            changed_nodes.append(node.id)
    return changed_nodes


def touched_events(
    usage: UsageIndex, document_ids: Iterable[str], patch_kind: PatchKind
) -> list[TouchedEvent]:
    """One event per graph that references any of `document_ids`, sorted by graph id."""
    by_graph = usage.nodes_referencing(document_ids)
    events = []
    for graph_id in sorted(by_graph):
        nodes = by_graph[graph_id]
        referenced = sorted({d for ids in nodes.values() for d in ids})
        events.append(
            TouchedEvent(
                graph_id=graph_id,
                node_ids=tuple(sorted(nodes)),
                patch_kind=patch_kind,
                document_ids=tuple(referenced),
            )
        )
    return events
