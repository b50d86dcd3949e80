"""Quality gate for generated image descriptions."""

import re

MIN_DESCRIPTION_CHARS = 40

_PLACEHOLDERS = ("no description", "(no description)", "нет описания", "(нет описания)")
_CODE_LINE = re.compile(r"^\s{2,}.*[;{}\[\]=<>]")
_CODE_KEYWORDS = re.compile(
    r"\b(import|export|function|const|let|var|class|def|return|public|private)\b|=>"
)


def is_bad_image_description(text: str | None) -> bool:
    """True when the description must not be cached."""
    if not text:
        return True
    stripped = text.strip()
    if not stripped:
        return True
    lowered = stripped.lower()
    if lowered in _PLACEHOLDERS or any(p in lowered for p in _PLACEHOLDERS):
        return True
    if len(stripped) < MIN_DESCRIPTION_CHARS:
        return True
    if "```" in stripped:
        return True
    lines = stripped.splitlines()
    if len(lines) >= 4:
        if sum(1 for line in lines if _CODE_LINE.match(line)) >= 2:
            return True
        if _CODE_KEYWORDS.search(stripped):
            return True
    return False
