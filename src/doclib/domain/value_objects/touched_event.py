"""Touched-node event emitted by every mutating operation."""

from dataclasses import dataclass

from doclib.domain.value_objects.patch_kind import PatchKind


@dataclass(frozen=True)
class TouchedEvent:
    """Nodes of one graph that reference documents changed by a mutation."""

    graph_id: str
    node_ids: tuple[str, ...]
    patch_kind: PatchKind
    document_ids: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "graph_id": self.graph_id,
            "node_ids": list(self.node_ids),
            "patch_kind": self.patch_kind.value,
            "document_ids": list(self.document_ids),
        }
