"""Domain entities."""

from doclib.domain.entities.document import Analysis, Document
from doclib.domain.entities.folder import Folder
from doclib.domain.entities.graph import Attachment, Graph, GraphNode
from doclib.domain.entities.library import LibraryIndex
from doclib.domain.entities.usage import UsageIndex, UsageLink

__all__ = [
    "Analysis",
    "Attachment",
    "Document",
    "Folder",
    "Graph",
    "GraphNode",
    "LibraryIndex",
    "UsageIndex",
    "UsageLink",
]
