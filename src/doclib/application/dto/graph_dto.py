"""Graph DTOs."""

from dataclasses import dataclass, field

from doclib.domain.entities import Graph


@dataclass
class ReconcileResult:
    """Corrected in-memory view of a graph; never written back."""

    graph: Graph
    stale_node_ids: list[str] = field(default_factory=list)
    refreshed_node_ids: list[str] = field(default_factory=list)


@dataclass
class GraphSaveOutput:
    graph_id: str
    referenced_document_ids: list[str]
    restored_document_ids: list[str]


@dataclass
class ReindexOutput:
    graphs: int
    skipped_graphs: int
    documents: int
