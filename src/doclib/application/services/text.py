"""Text helpers: decoding, excerpts, language detection and hint sanitizing."""

import re

EXCERPT_MAX_CHARS = 2000
LANGUAGE_HINT_MAX_CHARS = 400

_HINT_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# Ordered: the first script with any match wins, Latin is the fallback before "und".
_SCRIPTS: list[tuple[str, re.Pattern[str]]] = [
    ("ru", re.compile(r"[Ѐ-ӿ]")),
    ("ja", re.compile(r"[぀-ゟ゠-ヿ]")),
    ("zh", re.compile(r"[一-鿿]")),
    ("ko", re.compile(r"[가-힯ᄀ-ᇿ]")),
    ("ar", re.compile(r"[؀-ۿ]")),
    ("he", re.compile(r"[֐-׿]")),
    ("hi", re.compile(r"[ऀ-ॿ]")),
    ("en", re.compile(r"[A-Za-z]")),
]


def decode_text(data: bytes) -> str:
    """Strict UTF-8 decode with BOM removed."""
    return data.decode("utf-8-sig")


def build_excerpt(text: str, max_chars: int = EXCERPT_MAX_CHARS) -> str:
    cleaned = text.strip()
    if len(cleaned) <= max_chars:
        return cleaned
    return cleaned[:max_chars].rstrip() + "..."


def sanitize_language_hint(raw: str | None) -> str:
    """Hint text is untrusted data: drop control characters and cap its length."""
    if not raw:
        return ""
    cleaned = _HINT_CONTROL_CHARS.sub("", raw).strip()
    return cleaned[:LANGUAGE_HINT_MAX_CHARS]


def detect_language(text: str | None) -> str:
    """Heuristic language code from the dominant script, "und" when unknown."""
    if not text:
        return "und"
    # Japanese text mixes kana with Han ideographs, so kana decides first.
    for code, pattern in _SCRIPTS:
        if pattern.search(text):
            return code
    return "und"
