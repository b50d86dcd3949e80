"""Filesystem blob store with live and trash areas."""

import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from doclib.application.ports.blob_store import BlobStat, MoveResult
from doclib.domain.exceptions import NotFound
from doclib.domain.value_objects import DocumentId, StorageArea

logger = logging.getLogger(__name__)

LIVE_DIR = "files"
TRASH_DIR = ".trash"


class FilesystemBlobStore:
    """Maps validated document ids to `<root>/files/<id>` or `<root>/.trash/<id>`."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._dirs = {
            StorageArea.LIVE: self._root / LIVE_DIR,
            StorageArea.TRASH: self._root / TRASH_DIR,
        }

    def ensure_dirs(self) -> None:
        for directory in self._dirs.values():
            directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, document_id: str, area: StorageArea) -> Path:
        # Raises InvalidReference before any path is built.
        doc_id = DocumentId(document_id)
        return self._dirs[area] / doc_id.value

    def write(self, document_id: str, data: bytes, area: StorageArea) -> None:
        """Write via temp file + rename so readers never see a partial file."""
        target = self.path_for(document_id, area)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def locate(
        self, document_id: str, prefer: StorageArea = StorageArea.LIVE
    ) -> StorageArea | None:
        for area in (prefer, prefer.other):
            if self.path_for(document_id, area).is_file():
                return area
        return None

    def read(
        self, document_id: str, prefer: StorageArea = StorageArea.LIVE
    ) -> tuple[bytes, StorageArea]:
        """Read from the expected area, falling back to the other one."""
        for area in (prefer, prefer.other):
            try:
                return self.path_for(document_id, area).read_bytes(), area
            except FileNotFoundError:
                continue
        raise NotFound(f"File not found in live or trash: {document_id}")

    def move(self, document_id: str, src: StorageArea, dst: StorageArea) -> MoveResult:
        """Move between areas; a missing source is an idempotent success."""
        source = self.path_for(document_id, src)
        target = self.path_for(document_id, dst)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            os.replace(source, target)
        except FileNotFoundError:
            if target.is_file():
                return MoveResult(moved=False)
            logger.warning("Blob %s missing in %s and %s", document_id, src, dst)
            return MoveResult(moved=False, missing=True)
        logger.info("Moved blob %s from %s to %s", document_id, src, dst)
        return MoveResult(moved=True)

    def delete(self, document_id: str) -> bool:
        """Unlink the id from both areas. Returns True when anything was removed."""
        removed = False
        for area in StorageArea:
            try:
                self.path_for(document_id, area).unlink()
                removed = True
            except FileNotFoundError:
                continue
        return removed

    def stat(self, document_id: str, area: StorageArea) -> BlobStat | None:
        try:
            st = self.path_for(document_id, area).stat()
        except FileNotFoundError:
            return None
        return BlobStat(
            size_bytes=st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=UTC),
        )

    def list_ids(self, area: StorageArea) -> list[str]:
        """Valid document ids present in `area`; temp files and strays are ignored."""
        directory = self._dirs[area]
        if not directory.is_dir():
            return []
        return sorted(
            p.name for p in directory.iterdir() if p.is_file() and DocumentId.is_valid(p.name)
        )
