"""JSON file I/O: atomic writes and corrupt-file quarantine."""

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from doclib.domain.exceptions import IndexCorrupt

logger = logging.getLogger(__name__)


def read_json_or_none(path: Path) -> object | None:
    """Parsed JSON, or None when the file does not exist. Unparseable content raises."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise IndexCorrupt(f"{path}: {e}") from e


def write_json_atomic(path: Path, payload: object) -> None:
    """Serialize to a temp file in the same directory, then rename over the target."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def quarantine_corrupt(path: Path) -> Path | None:
    """Rename an unreadable file aside so the next save does not destroy it."""
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%f")
    target = path.with_name(f"{path.name}.corrupt-{stamp}")
    try:
        os.replace(path, target)
    except FileNotFoundError:
        return None
    return target


def load_or_quarantine(path: Path, decode, empty):
    """Decode the file at `path`; an unreadable index degrades to `empty()` and is logged loudly."""
    try:
        raw = read_json_or_none(path)
        if raw is None:
            return empty()
        return decode(raw)
    except IndexCorrupt as e:
        moved = quarantine_corrupt(path)
        logger.error(
            "Index %s is corrupt (%s); continuing with an empty index, original kept at %s",
            path,
            e,
            moved,
        )
        return empty()


def parse_timestamp(value: object) -> datetime | None:
    """ISO-8601 string or epoch milliseconds to an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise IndexCorrupt(f"Invalid timestamp: {value!r}")
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as e:
            raise IndexCorrupt(f"Invalid timestamp: {value!r}") from e
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    raise IndexCorrupt(f"Invalid timestamp: {value!r}")


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
