"""Display name normalization and name keys for collision detection."""

import re

MAX_NAME_LENGTH = 200
DEFAULT_NAME = "file"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def normalize_display_name(raw: str | None) -> str:
    """Strip directories and control characters, trim, cap length; never empty."""
    name = (raw or "").replace("\\", "/").rsplit("/", 1)[-1]
    name = _CONTROL_CHARS.sub("", name).strip()
    name = name[:MAX_NAME_LENGTH].strip()
    return name or DEFAULT_NAME


def name_key(raw: str | None) -> str:
    """Case-folded key: two names collide when their keys are equal."""
    return normalize_display_name(raw).casefold()
