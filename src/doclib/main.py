"""Application entry point and composition root."""

import logging

import falcon.asgi

from doclib import __version__
from doclib.application.dto.analysis_dto import ProviderSettings
from doclib.application.dto.document_dto import UploadLimits
from doclib.application.ports import TextGenerator
from doclib.application.use_cases.analysis.analyze_documents import AnalyzeDocumentsUseCase
from doclib.application.use_cases.document.get_document_file import GetDocumentFileUseCase
from doclib.application.use_cases.document.list_library import ListLibraryUseCase
from doclib.application.use_cases.document.replace_document import ReplaceDocumentUseCase
from doclib.application.use_cases.document.update_document import (
    MoveDocumentUseCase,
    RenameDocumentUseCase,
)
from doclib.application.use_cases.document.upload_documents import UploadDocumentsUseCase
from doclib.application.use_cases.folder.create_folder import CreateFolderUseCase
from doclib.application.use_cases.folder.delete_folder import DeleteFolderUseCase
from doclib.application.use_cases.folder.rename_folder import RenameFolderUseCase
from doclib.application.use_cases.gc.collect_garbage import CollectGarbageUseCase
from doclib.application.use_cases.gc.orphans_report import OrphansReportUseCase
from doclib.application.use_cases.graph.delete_graph import DeleteGraphUseCase
from doclib.application.use_cases.graph.load_graph import LoadGraphUseCase
from doclib.application.use_cases.graph.reindex_usage import ReindexUsageUseCase
from doclib.application.use_cases.graph.save_graph import SaveGraphUseCase
from doclib.application.use_cases.trash.trash_document import (
    MoveUnlinkedToTrashUseCase,
    RestoreDocumentUseCase,
    TrashDocumentUseCase,
)
from doclib.config import Settings, get_settings
from doclib.infrastructure.generation.openai_provider import OpenAITextGenerator
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
from doclib.interfaces.api.middleware.cors import CORSMiddleware
from doclib.interfaces.api.resources.analysis import AnalyzeResource
from doclib.interfaces.api.resources.folders import (
    FolderDeleteResource,
    FolderRenameResource,
    FoldersResource,
)
from doclib.interfaces.api.resources.gc import GcResource, OrphansResource
from doclib.interfaces.api.resources.graphs import GraphResource, ReindexUsageResource
from doclib.interfaces.api.resources.health import HealthResource
from doclib.interfaces.api.resources.library import (
    FileResource,
    LibraryResource,
    MoveResource,
    RenameResource,
    TextResource,
)
from doclib.interfaces.api.resources.trash import (
    TrashEmptyResource,
    TrashMoveResource,
    TrashMoveUnlinkedResource,
    TrashRestoreResource,
)
from doclib.interfaces.api.resources.uploads import ReplaceResource, UploadResource

logger = logging.getLogger(__name__)

LIBRARY_INDEX_FILE = "library-index.json"
USAGE_INDEX_FILE = "usage-index.json"
GRAPHS_DIR = "graphs"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def default_provider(settings: Settings) -> ProviderSettings | None:
    if not settings.generation_api_key:
        return None
    return ProviderSettings(
        api_key=settings.generation_api_key,
        base_url=settings.generation_api_url,
        model=settings.generation_model,
        vision_model=settings.vision_model or None,
    )


def main() -> None:
    """CLI entry point."""
    print(f"doclib v{__version__}")
    run_server()


def create_doclib_app(
    settings: Settings | None = None,
    text_generator: TextGenerator | None = None,
):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    data_dir = settings.data_dir
    data_dir.mkdir(parents=True, exist_ok=True)

    library_repo = JsonLibraryIndexRepository(data_dir / LIBRARY_INDEX_FILE)
    usage_repo = JsonUsageIndexRepository(data_dir / USAGE_INDEX_FILE)
    uow_factory = create_uow_factory(library_repo, usage_repo, IndexLocks())

    blob_store = FilesystemBlobStore(data_dir)
    blob_store.ensure_dirs()
    graph_store = JsonGraphStore(data_dir / GRAPHS_DIR)
    sniffer = PillowContentSniffer()
    limits = UploadLimits(
        max_text_bytes=settings.max_text_bytes,
        max_image_bytes=settings.max_image_bytes,
        max_context_bytes=settings.max_context_bytes,
    )
    text_generator = text_generator or OpenAITextGenerator(
        summary_timeout=settings.summary_timeout_seconds,
        vision_timeout=settings.vision_timeout_seconds,
    )
    provider = default_provider(settings)

    upload_documents = UploadDocumentsUseCase(
        unit_of_work_factory=uow_factory,
        blob_store=blob_store,
        sniffer=sniffer,
        limits=limits,
    )
    replace_document = ReplaceDocumentUseCase(
        unit_of_work_factory=uow_factory,
        blob_store=blob_store,
        sniffer=sniffer,
        limits=limits,
    )
    get_document_file = GetDocumentFileUseCase(
        unit_of_work_factory=uow_factory,
        blob_store=blob_store,
    )
    collect_garbage = CollectGarbageUseCase(
        unit_of_work_factory=uow_factory,
        blob_store=blob_store,
        graph_store=graph_store,
    )
    analyze_documents = AnalyzeDocumentsUseCase(
        unit_of_work_factory=uow_factory,
        blob_store=blob_store,
        text_generator=text_generator,
        default_provider=provider,
        summarization_enabled=settings.summarization_enabled,
        summary_max_chars=settings.summary_max_chars,
        summary_min_chars=settings.summary_min_chars,
    )

    health_resource = HealthResource(data_dir)
    library_resource = LibraryResource(ListLibraryUseCase(uow_factory))
    upload_resource = UploadResource(upload_documents)
    replace_resource = ReplaceResource(replace_document)
    rename_resource = RenameResource(RenameDocumentUseCase(uow_factory))
    move_resource = MoveResource(MoveDocumentUseCase(uow_factory))
    file_resource = FileResource(get_document_file)
    text_resource = TextResource(get_document_file)
    trash_move_resource = TrashMoveResource(
        TrashDocumentUseCase(uow_factory, blob_store, graph_store)
    )
    trash_restore_resource = TrashRestoreResource(RestoreDocumentUseCase(uow_factory, blob_store))
    trash_move_unlinked_resource = TrashMoveUnlinkedResource(
        MoveUnlinkedToTrashUseCase(uow_factory, blob_store)
    )
    trash_empty_resource = TrashEmptyResource(collect_garbage)
    gc_resource = GcResource(collect_garbage, settings.trash_retention_days)
    orphans_resource = OrphansResource(OrphansReportUseCase(uow_factory, blob_store))
    analyze_resource = AnalyzeResource(analyze_documents, provider)
    folders_resource = FoldersResource(CreateFolderUseCase(uow_factory))
    folder_rename_resource = FolderRenameResource(RenameFolderUseCase(uow_factory))
    folder_delete_resource = FolderDeleteResource(DeleteFolderUseCase(uow_factory))
    graph_resource = GraphResource(
        LoadGraphUseCase(uow_factory, graph_store),
        SaveGraphUseCase(uow_factory, blob_store, graph_store),
        DeleteGraphUseCase(uow_factory, graph_store),
    )
    reindex_resource = ReindexUsageResource(ReindexUsageUseCase(uow_factory, graph_store))

    cors_origins = [
        o.strip() for o in settings.cors_origins.split(",") if o.strip()
    ]
    app = falcon.asgi.App(middleware=[CORSMiddleware(cors_origins)])
    # Whole files arrive as single parts; the default part buffer is 1 MiB.
    multipart = app.req_options.media_handlers[falcon.MEDIA_MULTIPART]
    multipart.parse_options.max_body_part_buffer_size = (
        max(settings.max_text_bytes, settings.max_image_bytes) + 64 * 1024
    )

    async def log_exception(req, resp, ex, params):
        logger.exception("Unhandled error on %s %s", req.method, req.path)
        resp.status = falcon.HTTP_500
        resp.media = {"error": "Internal server error"}

    app.add_error_handler(Exception, log_exception)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/library", library_resource)
    app.add_route("/v1/library/upload", upload_resource)
    app.add_route("/v1/library/replace", replace_resource)
    app.add_route("/v1/library/rename", rename_resource)
    app.add_route("/v1/library/move", move_resource)
    app.add_route("/v1/library/file/{document_id}", file_resource)
    app.add_route("/v1/library/text/{document_id}", text_resource)
    app.add_route("/v1/library/trash/move", trash_move_resource)
    app.add_route("/v1/library/trash/restore", trash_restore_resource)
    app.add_route("/v1/library/trash/move-unlinked", trash_move_unlinked_resource)
    app.add_route("/v1/library/trash/empty", trash_empty_resource)
    app.add_route("/v1/library/gc", gc_resource)
    app.add_route("/v1/library/orphans", orphans_resource)
    app.add_route("/v1/library/analyze", analyze_resource)
    app.add_route("/v1/library/folders", folders_resource)
    app.add_route("/v1/library/folders/rename", folder_rename_resource)
    app.add_route("/v1/library/folders/delete", folder_delete_resource)
    app.add_route("/v1/library/reindex-usage", reindex_resource)
    app.add_route("/v1/graphs/{graph_id}", graph_resource)

    logger.info(
        "doclib v%s (%s) serving data from %s", __version__, settings.environment, data_dir
    )
    return app


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_doclib_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)
