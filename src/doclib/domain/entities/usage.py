"""Usage index aggregate - reverse map from document id to graph nodes."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class UsageLink:
    """Nodes of one graph that reference a document."""

    graph_id: str
    node_ids: list[str]
    updated_at: datetime


@dataclass
class UsageIndex:
    """Derived and rebuildable; each graph's contribution is replaced wholesale on save."""

    documents: dict[str, dict[str, UsageLink]] = field(default_factory=dict)
    updated_at: datetime | None = None
    dirty: bool = field(default=False, compare=False, repr=False)

    def remove_graph(self, graph_id: str, now: datetime | None = None) -> None:
        for doc_id in list(self.documents):
            by_graph = self.documents[doc_id]
            if by_graph.pop(graph_id, None) is not None:
                self.dirty = True
            if not by_graph:
                del self.documents[doc_id]
        if self.dirty and now is not None:
            self.updated_at = now

    def replace_graph(
        self, graph_id: str, pairs: Iterable[tuple[str, str]], now: datetime
    ) -> None:
        """Drop the graph's previous contribution, then record (document_id, node_id) pairs."""
        self.remove_graph(graph_id)
        collected: dict[str, list[str]] = {}
        for doc_id, node_id in pairs:
            nodes = collected.setdefault(doc_id, [])
            if node_id not in nodes:
                nodes.append(node_id)
        for doc_id, node_ids in collected.items():
            self.documents.setdefault(doc_id, {})[graph_id] = UsageLink(
                graph_id=graph_id, node_ids=node_ids, updated_at=now
            )
        self.updated_at = now
        self.dirty = True

    def remove_documents(self, document_ids: Iterable[str]) -> None:
        for doc_id in document_ids:
            if self.documents.pop(doc_id, None) is not None:
                self.dirty = True

    def clear(self) -> None:
        self.documents = {}
        self.dirty = True

    def links_for(self, document_id: str) -> list[UsageLink]:
        by_graph = self.documents.get(document_id, {})
        return [by_graph[g] for g in sorted(by_graph)]

    def has_usage(self, document_id: str) -> bool:
        return any(link.node_ids for link in self.documents.get(document_id, {}).values())

    def referenced_ids(self, graph_id: str | None = None) -> set[str]:
        ids = set()
        for doc_id, by_graph in self.documents.items():
            if graph_id is None:
                links = list(by_graph.values())
            else:
                links = [by_graph[graph_id]] if graph_id in by_graph else []
            if any(link.node_ids for link in links):
                ids.add(doc_id)
        return ids

    def nodes_referencing(self, document_ids: Iterable[str]) -> dict[str, dict[str, set[str]]]:
        """graph_id -> node_id -> document ids referenced from that node."""
        out: dict[str, dict[str, set[str]]] = {}
        for doc_id in document_ids:
            for link in self.documents.get(doc_id, {}).values():
                nodes = out.setdefault(link.graph_id, {})
                for node_id in link.node_ids:
                    nodes.setdefault(node_id, set()).add(doc_id)
        return out
