"""JSON shapes shared by the API resources."""

from datetime import datetime

from doclib.application.dto.analysis_dto import AnalyzeItemResult
from doclib.application.dto.document_dto import DocumentView, UploadItemResult
from doclib.application.dto.gc_dto import GcPlan, TrashItem
from doclib.domain.entities import Analysis, Document, Folder, UsageLink
from doclib.domain.value_objects import TouchedEvent


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _analysis_fields(current: Analysis) -> dict:
    return {
        "excerpt": current.excerpt,
        "summary": current.summary,
        "image_description": current.image_description,
        "description_language": current.description_language,
        "model": current.model,
        "updated_at": _iso(current.updated_at),
    }


def analysis_to_dict(analysis: Analysis, file_hash: str | None) -> dict:
    """Only fields still bound to `file_hash` are exposed."""
    return _analysis_fields(analysis.bound_to(file_hash))


def document_to_dict(d: Document) -> dict:
    return {
        "id": d.id,
        "name": d.name,
        "kind": d.kind.value,
        "mime": d.mime,
        "size_bytes": d.size_bytes,
        "file_hash": d.file_hash,
        "folder_id": d.folder_id,
        "created_at": _iso(d.created_at),
        "updated_at": _iso(d.updated_at),
        "trashed_at": _iso(d.trashed_at),
        "analysis": analysis_to_dict(d.analysis, d.file_hash),
    }


def usage_link_to_dict(link: UsageLink) -> dict:
    return {
        "graph_id": link.graph_id,
        "node_ids": list(link.node_ids),
        "updated_at": _iso(link.updated_at),
    }


def document_view_to_dict(view: DocumentView) -> dict:
    return {**document_to_dict(view.document), "usage": [usage_link_to_dict(u) for u in view.usage]}


def folder_to_dict(f: Folder) -> dict:
    return {
        "id": f.id,
        "name": f.name,
        "parent_id": f.parent_id,
        "created_at": _iso(f.created_at),
        "updated_at": _iso(f.updated_at),
    }


def touched_to_list(touched: list[TouchedEvent]) -> list[dict]:
    return [t.to_dict() for t in touched]


def upload_item_to_dict(item: UploadItemResult) -> dict:
    return {
        "filename": item.filename,
        "decision": item.decision.value if item.decision else None,
        "document": document_to_dict(item.document) if item.document else None,
        "error": item.error,
        "error_code": item.error_code,
    }


def analyze_item_to_dict(item: AnalyzeItemResult) -> dict:
    out = {"document_id": item.document_id, "status": item.status}
    if item.reason:
        out["reason"] = item.reason
    if item.error:
        out["error"] = item.error
    if item.kind:
        out["kind"] = item.kind
    if item.analysis is not None:
        # Already bound to the hash that was analyzed.
        out["analysis"] = _analysis_fields(item.analysis)
    return out


def gc_plan_to_dict(plan: GcPlan) -> dict:
    return {"trash_ids": plan.trash_ids, "live_orphan_ids": plan.live_orphan_ids}


def trash_item_to_dict(item: TrashItem) -> dict:
    return {
        "document_id": item.document_id,
        "name": item.name,
        "size_bytes": item.size_bytes,
        "trashed_at": _iso(item.trashed_at),
        "age_days": item.age_days,
        "tracked": item.tracked,
    }
