"""Content sniffer: Pillow magic-byte detection for images, strict UTF-8 for text."""

import io
from pathlib import PurePosixPath

from PIL import Image, UnidentifiedImageError

from doclib.application.ports.content_sniffer import SniffResult
from doclib.domain.exceptions import UnsupportedType
from doclib.domain.value_objects import DocumentKind

# Pillow format name -> (mime, extension)
IMAGE_FORMATS = {
    "PNG": ("image/png", "png"),
    "JPEG": ("image/jpeg", "jpg"),
    "WEBP": ("image/webp", "webp"),
    "GIF": ("image/gif", "gif"),
}

TEXT_EXTENSIONS = {"txt", "md", "markdown", "json", "csv", "yaml", "yml"}

ALLOWED_TEXT_DECLARED_MIMES = {
    "text/plain",
    "text/markdown",
    "text/x-markdown",
    "text/md",
    "application/json",
    "text/csv",
    "application/yaml",
    "text/yaml",
    "application/octet-stream",
}


def looks_like_utf8_text(data: bytes) -> bool:
    if b"\x00" in data:
        return False
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def _lower_ext(filename: str) -> str:
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix
    return suffix[1:].lower() if suffix else ""


def _detect_image(data: bytes) -> tuple[str, str] | None:
    try:
        with Image.open(io.BytesIO(data), formats=list(IMAGE_FORMATS)) as img:
            return IMAGE_FORMATS.get(img.format or "")
    except (UnidentifiedImageError, OSError):
        return None


class PillowContentSniffer:
    """Image when the bytes say so; otherwise text only with an allowed extension and UTF-8 content."""

    def sniff(self, data: bytes, filename: str, declared_mime: str | None = None) -> SniffResult:
        image = _detect_image(data)
        if image is not None:
            mime, ext = image
            return SniffResult(kind=DocumentKind.IMAGE, mime=mime, ext=ext)

        ext = _lower_ext(filename)
        if ext not in TEXT_EXTENSIONS:
            raise UnsupportedType(
                "Only txt/md/markdown/json/csv/yaml/yml text and png/jpg/webp/gif images are allowed"
            )
        declared = (declared_mime or "").split(";")[0].strip().lower()
        if declared and declared not in ALLOWED_TEXT_DECLARED_MIMES:
            raise UnsupportedType(f"Declared type not allowed: {declared}")
        if not looks_like_utf8_text(data):
            raise UnsupportedType("Content is not UTF-8 text")
        mime = "text/plain" if declared in ("", "application/octet-stream") else declared
        return SniffResult(kind=DocumentKind.TEXT, mime=mime, ext=ext)
