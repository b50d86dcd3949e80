"""Pytest fixtures for doclib tests."""

from __future__ import annotations

import io
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from doclib.application.dto.analysis_dto import ProviderSettings
from doclib.application.dto.document_dto import (
    UploadFile,
    UploadInput,
    UploadLimits,
    UploadOutput,
)
from doclib.application.services.reconciler import snapshot_of
from doclib.application.use_cases.document.upload_documents import UploadDocumentsUseCase
from doclib.application.use_cases.graph.save_graph import SaveGraphUseCase
from doclib.domain.entities import Analysis, Document, Graph, GraphNode, LibraryIndex, UsageIndex
from doclib.domain.value_objects import DocumentId, DocumentKind
from doclib.infrastructure.persistence.json.graph_store import JsonGraphStore
from doclib.infrastructure.persistence.json.library_index_repository import (
    JsonLibraryIndexRepository,
)
from doclib.infrastructure.persistence.json.unit_of_work import IndexLocks, create_uow_factory
from doclib.infrastructure.persistence.json.usage_index_repository import (
    JsonUsageIndexRepository,
)
from doclib.infrastructure.sniffing.pillow_sniffer import PillowContentSniffer
from doclib.infrastructure.storage.filesystem_blob_store import FilesystemBlobStore

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)

GOOD_DESCRIPTION = (
    "A small square filled with a single flat red colour. There is no text, "
    "no people and no recognisable objects in the picture."
)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def png_bytes(color: tuple[int, int, int] = (255, 0, 0), size: tuple[int, int] = (4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_document(
    doc_id: str | None = None,
    *,
    name: str = "report.txt",
    kind: DocumentKind = DocumentKind.TEXT,
    mime: str = "text/plain",
    size_bytes: int = 10,
    file_hash: str | None = "h1",
    folder_id: str | None = None,
    trashed_at: datetime | None = None,
    analysis: Analysis | None = None,
    updated_at: datetime = FIXED_NOW,
) -> Document:
    ext = "png" if kind is DocumentKind.IMAGE else "txt"
    return Document(
        id=doc_id or DocumentId.new(ext).value,
        name=name,
        kind=kind,
        mime=mime,
        size_bytes=size_bytes,
        file_hash=file_hash,
        created_at=FIXED_NOW,
        updated_at=updated_at,
        folder_id=folder_id,
        trashed_at=trashed_at,
        analysis=analysis or Analysis(),
    )


def graph_with(
    graph_id: str, nodes: dict[str, list[Document]], response: str | None = "An answer"
) -> Graph:
    """Graph whose nodes attach snapshots of the given documents."""
    return Graph(
        id=graph_id,
        nodes=[
            GraphNode(id=node_id, response=response, attachments=[snapshot_of(d) for d in docs])
            for node_id, docs in nodes.items()
        ],
    )


class LibraryEnv:
    """Real JSON-backed infrastructure under a temporary data directory."""

    def __init__(self, root: Path, clock: FakeClock) -> None:
        self.root = root
        self.clock = clock
        self.library_repo = JsonLibraryIndexRepository(root / "library-index.json")
        self.usage_repo = JsonUsageIndexRepository(root / "usage-index.json")
        self.uow_factory = create_uow_factory(self.library_repo, self.usage_repo, IndexLocks())
        self.blob_store = FilesystemBlobStore(root)
        self.blob_store.ensure_dirs()
        self.graph_store = JsonGraphStore(root / "graphs")
        self.sniffer = PillowContentSniffer()
        self.limits = UploadLimits(
            max_text_bytes=1024 * 1024,
            max_image_bytes=3 * 1024 * 1024,
            max_context_bytes=8 * 1024 * 1024,
        )

    def library(self) -> LibraryIndex:
        return self.library_repo.load()

    def usage(self) -> UsageIndex:
        return self.usage_repo.load()

    def uploader(self) -> UploadDocumentsUseCase:
        return UploadDocumentsUseCase(
            unit_of_work_factory=self.uow_factory,
            blob_store=self.blob_store,
            sniffer=self.sniffer,
            limits=self.limits,
            clock=self.clock,
        )

    async def upload(
        self,
        *files: tuple[str, bytes],
        folder_id: str | None = None,
        overrides: set[str] | None = None,
        replace_existing: bool = False,
    ) -> UploadOutput:
        return await self.uploader().execute(
            UploadInput(
                files=[UploadFile(filename=name, data=data) for name, data in files],
                folder_id=folder_id,
                overrides=overrides or set(),
                replace_existing=replace_existing,
            )
        )

    async def upload_one(self, name: str, data: bytes, **kwargs) -> Document:
        result = await self.upload((name, data), **kwargs)
        return result.items[0].document

    async def save_graph(self, graph: Graph):
        use_case = SaveGraphUseCase(
            unit_of_work_factory=self.uow_factory,
            blob_store=self.blob_store,
            graph_store=self.graph_store,
            clock=self.clock,
        )
        return await use_case.execute(graph)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def env(tmp_path: Path, clock: FakeClock) -> LibraryEnv:
    """Fresh library on disk for each test."""
    return LibraryEnv(tmp_path / "data", clock)


@pytest.fixture
def provider() -> ProviderSettings:
    return ProviderSettings(
        api_key="sk-test",
        base_url="http://llm.test/v1",
        model="summary-model",
        vision_model="vision-model",
    )


@pytest.fixture
def mock_text_generator():
    """AsyncMock for TextGenerator - fixed summary and a description that passes the gate."""
    mock = AsyncMock()
    mock.summarize.return_value = "A short summary of the document."
    mock.describe_image.return_value = GOOD_DESCRIPTION
    return mock
