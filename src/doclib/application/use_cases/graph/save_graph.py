"""Save graph use case - persist, restore referenced trash, rebuild its usage."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from doclib.application.dto.graph_dto import GraphSaveOutput
from doclib.application.ports import BlobStore, GraphStore
from doclib.application.services.lifecycle import restore_document
from doclib.domain.entities import Graph, LibraryIndex
from doclib.domain.value_objects import DocumentId

logger = logging.getLogger(__name__)


def valid_pairs(graph: Graph, library: LibraryIndex) -> list[tuple[str, str]]:
    """(document_id, node_id) pairs whose id is well formed and known to the library."""
    return [
        (doc_id, node_id)
        for doc_id, node_id in graph.attachment_pairs()
        if DocumentId.is_valid(doc_id) and doc_id in library.documents
    ]


class SaveGraphUseCase:
    """The graph's previous usage contribution is replaced wholesale."""

    def __init__(
        self,
        unit_of_work_factory: type,
        blob_store: BlobStore,
        graph_store: GraphStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._blob_store = blob_store
        self._graph_store = graph_store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def execute(self, graph: Graph) -> GraphSaveOutput:
        async with self._uow_factory() as uow:
            pairs = valid_pairs(graph, uow.library)
            referenced = sorted({doc_id for doc_id, _ in pairs})
            restored = []
            for doc_id in referenced:
                doc = uow.library.get(doc_id)
                if doc.is_trashed:
                    # A reference to a trashed document is an undo: bring it back.
                    restore_document(uow.library, self._blob_store, doc)
                    restored.append(doc_id)
            await self._graph_store.save(graph)
            uow.usage.replace_graph(graph.id, pairs, self._clock())
        if restored:
            logger.info("Graph %s restored %d document(s) from trash", graph.id, len(restored))
        return GraphSaveOutput(
            graph_id=graph.id,
            referenced_document_ids=referenced,
            restored_document_ids=restored,
        )
