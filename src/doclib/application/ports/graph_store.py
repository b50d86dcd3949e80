"""Graph persistence port."""

from typing import Protocol

from doclib.domain.entities import Graph


class GraphStore(Protocol):
    """Port for plain key-value graph storage."""

    async def load(self, graph_id: str) -> Graph | None: ...

    async def save(self, graph: Graph) -> None: ...

    async def delete(self, graph_id: str) -> bool: ...

    async def list_ids(self) -> list[str]: ...
