"""Library index stored as one JSON file.

Two on-disk shapes exist. Version 1 is the legacy layout (camelCase keys, epoch
millisecond timestamps, nested image analysis). Version 2 is the current one.
`upgrade_payload` is the only place that knows about version 1; everything past
it works on version 2.
"""

import logging
from pathlib import Path

from doclib.domain.entities import Analysis, Document, Folder, LibraryIndex
from doclib.domain.exceptions import IndexCorrupt
from doclib.domain.value_objects import DocumentId, DocumentKind
from doclib.infrastructure.persistence.json.atomic_io import (
    format_timestamp,
    load_or_quarantine,
    parse_timestamp,
    write_json_atomic,
)

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2


def _upgrade_v1(raw: dict) -> dict:
    folders = [
        {
            "id": f.get("id"),
            "parent_id": f.get("parentId"),
            "name": f.get("name"),
            "created_at": f.get("createdAt"),
            "updated_at": f.get("updatedAt", f.get("createdAt")),
        }
        for f in raw.get("folders") or []
    ]
    documents = []
    for d in raw.get("docs") or []:
        legacy = d.get("analysis") or {}
        image = legacy.get("image") or {}
        documents.append(
            {
                "id": d.get("docId"),
                "name": d.get("name"),
                "folder_id": d.get("folderId"),
                "kind": d.get("kind"),
                "mime": d.get("mime"),
                "size_bytes": d.get("sizeBytes"),
                "file_hash": d.get("fileHash") or None,
                "created_at": d.get("createdAt"),
                "updated_at": d.get("fileUpdatedAt", d.get("createdAt")),
                "trashed_at": d.get("trashedAt"),
                "analysis": {
                    "excerpt": legacy.get("excerpt"),
                    "summary": legacy.get("summary"),
                    "summary_hash": legacy.get("summaryForFileHash"),
                    "image_description": image.get("description"),
                    "image_description_hash": legacy.get("imageForFileHash"),
                    "description_language": image.get("descriptionLanguage"),
                    "model": legacy.get("model"),
                    "updated_at": legacy.get("updatedAt"),
                },
            }
        )
    return {"version": 2, "folders": folders, "documents": documents}


_UPGRADES = {1: _upgrade_v1}


def upgrade_payload(raw: object) -> dict:
    """Bring any known index version up to the current one."""
    if not isinstance(raw, dict):
        raise IndexCorrupt("Library index root must be an object")
    version = raw.get("version")
    while version != CURRENT_VERSION:
        upgrade = _UPGRADES.get(version)
        if upgrade is None:
            raise IndexCorrupt(f"Unknown library index version: {version!r}")
        raw = upgrade(raw)
        version = raw["version"]
    return raw


def _decode_analysis(raw: dict | None) -> Analysis:
    raw = raw or {}
    return Analysis(
        excerpt=raw.get("excerpt"),
        summary=raw.get("summary"),
        summary_hash=raw.get("summary_hash"),
        image_description=raw.get("image_description"),
        image_description_hash=raw.get("image_description_hash"),
        description_language=raw.get("description_language"),
        model=raw.get("model"),
        updated_at=parse_timestamp(raw.get("updated_at")),
    )


def _decode_document(raw: dict) -> Document | None:
    doc_id = raw.get("id")
    if not DocumentId.is_valid(doc_id):
        logger.warning("Skipping library record with invalid id %r", doc_id)
        return None
    try:
        kind = DocumentKind(raw.get("kind"))
    except ValueError:
        logger.warning("Skipping library record %s with unknown kind %r", doc_id, raw.get("kind"))
        return None
    created_at = parse_timestamp(raw.get("created_at"))
    if created_at is None:
        raise IndexCorrupt(f"Document {doc_id} has no created_at")
    return Document(
        id=doc_id,
        name=raw.get("name") or doc_id,
        kind=kind,
        mime=raw.get("mime") or "application/octet-stream",
        size_bytes=int(raw.get("size_bytes") or 0),
        file_hash=raw.get("file_hash") or None,
        created_at=created_at,
        updated_at=parse_timestamp(raw.get("updated_at")) or created_at,
        folder_id=raw.get("folder_id"),
        trashed_at=parse_timestamp(raw.get("trashed_at")),
        analysis=_decode_analysis(raw.get("analysis")),
    )


def decode_library_index(raw: object) -> LibraryIndex:
    payload = upgrade_payload(raw)
    index = LibraryIndex()
    try:
        for f in payload.get("folders") or []:
            created_at = parse_timestamp(f.get("created_at"))
            if not f.get("id") or created_at is None:
                raise IndexCorrupt(f"Malformed folder record: {f!r}")
            index.folders[f["id"]] = Folder(
                id=f["id"],
                name=f.get("name") or "",
                parent_id=f.get("parent_id"),
                created_at=created_at,
                updated_at=parse_timestamp(f.get("updated_at")) or created_at,
            )
        for d in payload.get("documents") or []:
            doc = _decode_document(d)
            if doc is not None:
                index.documents[doc.id] = doc
    except (AttributeError, TypeError, ValueError) as e:
        raise IndexCorrupt(f"Malformed library index: {e}") from e
    return index


def _encode_analysis(a: Analysis) -> dict:
    return {
        "excerpt": a.excerpt,
        "summary": a.summary,
        "summary_hash": a.summary_hash,
        "image_description": a.image_description,
        "image_description_hash": a.image_description_hash,
        "description_language": a.description_language,
        "model": a.model,
        "updated_at": format_timestamp(a.updated_at),
    }


def encode_library_index(index: LibraryIndex) -> dict:
    return {
        "version": CURRENT_VERSION,
        "folders": [
            {
                "id": f.id,
                "parent_id": f.parent_id,
                "name": f.name,
                "created_at": format_timestamp(f.created_at),
                "updated_at": format_timestamp(f.updated_at),
            }
            for f in index.folders.values()
        ],
        "documents": [
            {
                "id": d.id,
                "name": d.name,
                "folder_id": d.folder_id,
                "kind": d.kind.value,
                "mime": d.mime,
                "size_bytes": d.size_bytes,
                "file_hash": d.file_hash,
                "created_at": format_timestamp(d.created_at),
                "updated_at": format_timestamp(d.updated_at),
                "trashed_at": format_timestamp(d.trashed_at),
                "analysis": _encode_analysis(d.analysis),
            }
            for d in index.documents.values()
        ],
    }


class JsonLibraryIndexRepository:
    """Loads and saves the whole library index file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LibraryIndex:
        return load_or_quarantine(self._path, decode_library_index, LibraryIndex)

    def save(self, index: LibraryIndex) -> None:
        write_json_atomic(self._path, encode_library_index(index))
        index.dirty = False
