"""Library index aggregate - folders and documents of one library."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from doclib.domain.entities.document import Document
from doclib.domain.entities.folder import Folder
from doclib.domain.exceptions import NotFound


@dataclass
class LibraryIndex:
    """In-memory view of the library index file.

    Mutations go through methods so the unit of work knows whether to save.
    """

    folders: dict[str, Folder] = field(default_factory=dict)
    documents: dict[str, Document] = field(default_factory=dict)
    dirty: bool = field(default=False, compare=False, repr=False)

    def get(self, document_id: str) -> Document | None:
        return self.documents.get(document_id)

    def require(self, document_id: str) -> Document:
        doc = self.documents.get(document_id)
        if doc is None:
            raise NotFound(f"Document not found: {document_id}")
        return doc

    def put(self, document: Document) -> None:
        self.documents[document.id] = document
        self.dirty = True

    def remove(self, document_ids: Iterable[str]) -> list[str]:
        removed = []
        for doc_id in document_ids:
            if self.documents.pop(doc_id, None) is not None:
                removed.append(doc_id)
        if removed:
            self.dirty = True
        return removed

    def iter_documents(self, *, trashed: bool | None = None) -> Iterator[Document]:
        for doc in self.documents.values():
            if trashed is None or doc.is_trashed == trashed:
                yield doc

    def documents_in(self, folder_id: str | None, *, trashed: bool | None = None) -> list[Document]:
        return [d for d in self.iter_documents(trashed=trashed) if d.folder_id == folder_id]

    def get_folder(self, folder_id: str) -> Folder | None:
        return self.folders.get(folder_id)

    def require_folder(self, folder_id: str) -> Folder:
        folder = self.folders.get(folder_id)
        if folder is None:
            raise NotFound(f"Folder not found: {folder_id}")
        return folder

    def put_folder(self, folder: Folder) -> None:
        self.folders[folder.id] = folder
        self.dirty = True

    def remove_folder(self, folder_id: str) -> None:
        if self.folders.pop(folder_id, None) is not None:
            self.dirty = True

    def subfolders(self, folder_id: str | None) -> list[Folder]:
        return [f for f in self.folders.values() if f.parent_id == folder_id]
