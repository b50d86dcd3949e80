"""Load graph use case - every read is reconciled against the library."""

from doclib.application.dto.graph_dto import ReconcileResult
from doclib.application.ports import GraphStore
from doclib.application.services.reconciler import reconcile_graph
from doclib.domain.exceptions import NotFound


class LoadGraphUseCase:
    """Returns the corrected view; the stored graph is left as it is."""

    def __init__(self, unit_of_work_factory: type, graph_store: GraphStore) -> None:
        self._uow_factory = unit_of_work_factory
        self._graph_store = graph_store

    async def execute(self, graph_id: str) -> ReconcileResult:
        graph = await self._graph_store.load(graph_id)
        if graph is None:
            raise NotFound(f"Graph not found: {graph_id}")
        async with self._uow_factory() as uow:
            return reconcile_graph(graph, uow.library.documents)
