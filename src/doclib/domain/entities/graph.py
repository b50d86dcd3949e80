"""Graph entities - only the parts of a graph that reference documents."""

from dataclasses import dataclass, field


@dataclass
class Attachment:
    """Snapshot of a document embedded in a node at attach time."""

    document_id: str
    name: str
    kind: str | None = None
    mime: str | None = None
    size_bytes: int | None = None
    file_hash: str | None = None
    file_updated_at: str | None = None
    excerpt: str | None = None
    summary: str | None = None
    image_description: str | None = None


@dataclass
class GraphNode:
    id: str
    response: str | None = None
    is_stale: bool = False
    attachments: list[Attachment] = field(default_factory=list)
    excluded_attachment_ids: list[str] = field(default_factory=list)
    extra: dict = field(default_factory=dict)

    @property
    def has_response(self) -> bool:
        return isinstance(self.response, str) and bool(self.response.strip())


@dataclass
class Graph:
    """User-authored graph; fields this engine does not own are kept in `extra`."""

    id: str
    nodes: list[GraphNode] = field(default_factory=list)
    extra: dict = field(default_factory=dict)

    def attachment_pairs(self) -> list[tuple[str, str]]:
        return [(a.document_id, node.id) for node in self.nodes for a in node.attachments]
