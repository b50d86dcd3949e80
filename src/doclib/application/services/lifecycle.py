"""Document lifecycle transitions shared by the use cases.

Each function updates the blob store first and the in-memory library index
second; the caller's unit of work persists the index.
"""

import hashlib
import logging
from dataclasses import replace
from datetime import datetime

from doclib.application.ports import BlobStore, SniffResult
from doclib.application.services.text import build_excerpt, decode_text
from doclib.domain.entities import Analysis, Document, LibraryIndex
from doclib.domain.value_objects import DocumentKind, StorageArea

logger = logging.getLogger(__name__)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def excerpt_for(kind: DocumentKind, data: bytes) -> str | None:
    if kind is not DocumentKind.TEXT:
        return None
    return build_excerpt(decode_text(data))


def trash_document(
    library: LibraryIndex, blob_store: BlobStore, doc: Document, now: datetime
) -> Document:
    """Move live -> trash and stamp trashed_at. Already trashed is a no-op."""
    if doc.is_trashed:
        return doc
    blob_store.move(doc.id, StorageArea.LIVE, StorageArea.TRASH)
    updated = replace(doc, trashed_at=now)
    library.put(updated)
    logger.info("Trashed document %s", doc.id)
    return updated


def restore_document(library: LibraryIndex, blob_store: BlobStore, doc: Document) -> Document:
    """Move trash -> live and clear trashed_at. Already live is a no-op."""
    if not doc.is_trashed:
        return doc
    blob_store.move(doc.id, StorageArea.TRASH, StorageArea.LIVE)
    updated = replace(doc, trashed_at=None)
    library.put(updated)
    logger.info("Restored document %s", doc.id)
    return updated


def revise_content(
    doc: Document, *, data: bytes, file_hash: str, sniffed: SniffResult, now: datetime
) -> Document:
    """New bytes for an existing id; the only place hash-bound analysis is invalidated."""
    analysis = doc.analysis.bound_to(file_hash)
    analysis = replace(analysis, excerpt=excerpt_for(sniffed.kind, data))
    return replace(
        doc,
        kind=sniffed.kind,
        mime=sniffed.mime,
        size_bytes=len(data),
        file_hash=file_hash,
        updated_at=now,
        analysis=analysis,
    )


def new_document(
    *,
    document_id: str,
    name: str,
    folder_id: str | None,
    data: bytes,
    file_hash: str,
    sniffed: SniffResult,
    now: datetime,
) -> Document:
    return Document(
        id=document_id,
        name=name,
        kind=sniffed.kind,
        mime=sniffed.mime,
        size_bytes=len(data),
        file_hash=file_hash,
        created_at=now,
        updated_at=now,
        folder_id=folder_id,
        analysis=Analysis(excerpt=excerpt_for(sniffed.kind, data)),
    )
