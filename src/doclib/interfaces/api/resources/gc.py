"""Garbage collection and orphans report resources."""

import falcon.asgi

from doclib.application.dto.gc_dto import GcInput
from doclib.application.use_cases.gc.collect_garbage import CollectGarbageUseCase
from doclib.application.use_cases.gc.orphans_report import OrphansReportUseCase
from doclib.domain.exceptions import DocLibError, ValidationError
from doclib.infrastructure.persistence.json.graph_store import validate_graph_id
from doclib.interfaces.api.errors import as_bool, read_json_body, set_error
from doclib.interfaces.api.serializers import (
    gc_plan_to_dict,
    touched_to_list,
    trash_item_to_dict,
)


def _days(body: dict, default: float) -> float:
    value = body.get("trash_older_than_days", default)
    if isinstance(value, bool):
        raise ValidationError("trash_older_than_days must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("trash_older_than_days must be a number") from e


class GcResource:
    """POST /v1/library/gc - plan (dry_run) or delete."""

    def __init__(
        self, collect_garbage: CollectGarbageUseCase, retention_days: float = 7
    ) -> None:
        self._collect_garbage = collect_garbage
        self._retention_days = retention_days

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            result = await self._collect_garbage.execute(
                GcInput(
                    trash_older_than_days=_days(body, self._retention_days),
                    purge_live_orphans=as_bool(body, "purge_live_orphans"),
                    dry_run=as_bool(body, "dry_run"),
                )
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        media = {"dry_run": result.dry_run, "plan": gc_plan_to_dict(result.plan)}
        if not result.dry_run:
            media["deleted_ids"] = result.deleted_ids
            media["touched"] = touched_to_list(result.touched)
        resp.media = media
        resp.status = falcon.HTTP_200


class OrphansResource:
    """GET /v1/library/orphans - read-only input for a cleanup screen."""

    def __init__(self, orphans_report: OrphansReportUseCase) -> None:
        self._orphans_report = orphans_report

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Query: folder_id, graph_id."""
        try:
            graph_id = req.get_param("graph_id") or None
            if graph_id is not None:
                validate_graph_id(graph_id)
            report = await self._orphans_report.execute(
                folder_id=req.get_param("folder_id") or None, graph_id=graph_id
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "graph_id": report.graph_id,
            "referenced_count": report.referenced_count,
            "live": {"orphan_ids": report.live_orphan_ids},
            "trash": {
                "total": len(report.trash_items),
                "items": [trash_item_to_dict(t) for t in report.trash_items],
            },
        }
        resp.status = falcon.HTTP_200
