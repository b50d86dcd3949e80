"""Delete graph use case."""

from collections.abc import Callable
from datetime import UTC, datetime

from doclib.application.ports import GraphStore
from doclib.domain.exceptions import NotFound


class DeleteGraphUseCase:
    """Remove the graph and its usage contribution; documents stay in the library."""

    def __init__(
        self,
        unit_of_work_factory: type,
        graph_store: GraphStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._graph_store = graph_store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, graph_id: str) -> None:
        async with self._uow_factory() as uow:
            deleted = await self._graph_store.delete(graph_id)
            uow.usage.remove_graph(graph_id, self._clock())
        if not deleted:
            raise NotFound(f"Graph not found: {graph_id}")
