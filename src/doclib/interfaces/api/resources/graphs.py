"""Graph API resources - reconciled reads, saves that rebuild usage."""

import falcon.asgi

from doclib.application.use_cases.graph.delete_graph import DeleteGraphUseCase
from doclib.application.use_cases.graph.load_graph import LoadGraphUseCase
from doclib.application.use_cases.graph.reindex_usage import ReindexUsageUseCase
from doclib.application.use_cases.graph.save_graph import SaveGraphUseCase
from doclib.domain.exceptions import DocLibError, ValidationError
from doclib.infrastructure.persistence.json.graph_store import (
    graph_from_dict,
    graph_to_dict,
    validate_graph_id,
)
from doclib.interfaces.api.errors import read_json_body, set_error


class GraphResource:
    """GET/PUT/DELETE /v1/graphs/{graph_id}."""

    def __init__(
        self,
        load_graph: LoadGraphUseCase,
        save_graph: SaveGraphUseCase,
        delete_graph: DeleteGraphUseCase,
    ) -> None:
        self._load_graph = load_graph
        self._save_graph = save_graph
        self._delete_graph = delete_graph

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, graph_id: str
    ) -> None:
        """Graph with attachment snapshots corrected against the library."""
        try:
            result = await self._load_graph.execute(validate_graph_id(graph_id))
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "graph": graph_to_dict(result.graph),
            "stale_node_ids": result.stale_node_ids,
            "refreshed_node_ids": result.refreshed_node_ids,
        }
        resp.status = falcon.HTTP_200

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, graph_id: str
    ) -> None:
        try:
            validate_graph_id(graph_id)
            body = await read_json_body(req)
            try:
                graph = graph_from_dict(graph_id, body)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            result = await self._save_graph.execute(graph)
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "graph_id": result.graph_id,
            "referenced_document_ids": result.referenced_document_ids,
            "restored_document_ids": result.restored_document_ids,
        }
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, graph_id: str
    ) -> None:
        try:
            await self._delete_graph.execute(validate_graph_id(graph_id))
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.status = falcon.HTTP_204


class ReindexUsageResource:
    """POST /v1/library/reindex-usage - rebuild the usage index from stored graphs."""

    def __init__(self, reindex_usage: ReindexUsageUseCase) -> None:
        self._reindex_usage = reindex_usage

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            result = await self._reindex_usage.execute()
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "graphs": result.graphs,
            "skipped_graphs": result.skipped_graphs,
            "documents": result.documents,
        }
        resp.status = falcon.HTTP_200
