"""Reindex usage use case - rebuild the usage index from every stored graph."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from doclib.application.dto.graph_dto import ReindexOutput
from doclib.application.ports import GraphStore
from doclib.application.use_cases.graph.save_graph import valid_pairs
from doclib.domain.exceptions import IndexCorrupt

logger = logging.getLogger(__name__)


class ReindexUsageUseCase:
    """Unreadable graphs are skipped and counted."""

    def __init__(
        self,
        unit_of_work_factory: type,
        graph_store: GraphStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._graph_store = graph_store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self) -> ReindexOutput:
        now = self._clock()
        graphs = skipped = 0
        async with self._uow_factory() as uow:
            uow.usage.clear()
            for graph_id in await self._graph_store.list_ids():
                try:
                    graph = await self._graph_store.load(graph_id)
                except IndexCorrupt as e:
                    logger.warning("Skipping unreadable graph %s: %s", graph_id, e)
                    skipped += 1
                    continue
                if graph is None:
                    continue
                uow.usage.replace_graph(graph.id, valid_pairs(graph, uow.library), now)
                graphs += 1
            documents = len(uow.usage.documents)
        logger.info("Usage index rebuilt from %d graph(s), %d skipped", graphs, skipped)
        return ReindexOutput(graphs=graphs, skipped_graphs=skipped, documents=documents)
