"""List library use case - documents, folders and counters."""

from doclib.application.dto.document_dto import (
    DocumentView,
    LibraryListInput,
    LibraryListOutput,
)
from doclib.domain.value_objects import DocumentId


class ListLibraryUseCase:
    """Filtered listing; counters always describe the whole library."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, input_data: LibraryListInput) -> LibraryListOutput:
        q = (input_data.q or "").strip().casefold()
        ext = (input_data.ext or "").strip().lower().lstrip(".")
        async with self._uow_factory() as uow:
            library, usage = uow.library, uow.usage
            in_graph = usage.referenced_ids(input_data.graph_id) if input_data.graph_id else None
            views = []
            for doc in library.iter_documents(trashed=input_data.trashed):
                if input_data.folder_id is not None and doc.folder_id != input_data.folder_id:
                    continue
                if q and q not in doc.name.casefold():
                    continue
                if ext and DocumentId(doc.id).ext != ext:
                    continue
                if in_graph is not None and doc.id not in in_graph:
                    continue
                views.append(DocumentView(document=doc, usage=usage.links_for(doc.id)))
            views.sort(key=lambda v: v.document.updated_at, reverse=True)
            live = list(library.iter_documents(trashed=False))
            return LibraryListOutput(
                documents=views,
                folders=sorted(library.folders.values(), key=lambda f: f.name.casefold()),
                total_documents=len(library.documents),
                total_folders=len(library.folders),
                trashed_documents=len(library.documents) - len(live),
                unlinked_live_documents=sum(1 for d in live if not usage.has_usage(d.id)),
            )
