"""Deterministic value normalization shared by the sanitizer and the stages."""

from __future__ import annotations

import re
import unicodedata
from datetime import UTC, datetime
from typing import Final

_NON_SLUG_CHARS: Final = re.compile(r"[\W_]+")
_UUID_PATTERN: Final = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_TRUE_VALUES: Final = frozenset({"true", "1"})
_FALSE_VALUES: Final = frozenset({"false", "0"})
# exports store epoch milliseconds; anything below this is treated as seconds
_EPOCH_MILLIS_THRESHOLD: Final = 100_000_000_000


def is_blank(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def normalize_slug(value: object) -> str | None:
    """Return a case-folded, hyphen separated slug or None if nothing is left."""

    if is_blank(value):
        return None
    text = unicodedata.normalize("NFKC", str(value)).casefold()
    slug = _NON_SLUG_CHARS.sub("-", text).strip("-")
    return slug or None


def is_valid_uuid(value: object) -> bool:
    return isinstance(value, str) and _UUID_PATTERN.match(value.strip()) is not None


def is_boolean_like(value: object) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value in {0, 1}
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES | _FALSE_VALUES
    return False


def parse_bool(value: object, *, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    return default


def parse_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _from_epoch(value: float) -> datetime | None:
    seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def parse_timestamp(value: object) -> datetime | None:
    """Parse epoch seconds/milliseconds or ISO-8601 strings into aware UTC datetimes."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int | float):
        return _from_epoch(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return _from_epoch(int(text))
        except ValueError:
            pass
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
