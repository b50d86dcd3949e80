"""Application ports - interfaces for external adapters."""

from doclib.application.ports.blob_store import BlobStat, BlobStore, MoveResult
from doclib.application.ports.content_sniffer import ContentSniffer, SniffResult
from doclib.application.ports.graph_store import GraphStore
from doclib.application.ports.text_generator import TextGenerator
from doclib.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "BlobStat",
    "BlobStore",
    "ContentSniffer",
    "GraphStore",
    "MoveResult",
    "SniffResult",
    "TextGenerator",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
