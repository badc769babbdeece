"""Small text/format helpers used by reports and the cleanup picker."""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Literal

BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")

_SIZE_PATTERN = re.compile(r"^([0-9]+(?:\.[0-9]+)?)\s*(B|KB|MB|GB|TB)$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def format_bytes(num_bytes: float) -> str:
    """Format a byte count using base-1024 units (e.g. "1.50 MB")."""
    if not _is_finite_number(num_bytes) or num_bytes < 0:
        return "0 B"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{value:.0f} {BYTE_UNITS[unit]}"
    return f"{value:.2f} {BYTE_UNITS[unit]}"


def format_percent(ratio: float) -> str:
    if not _is_finite_number(ratio) or ratio < 0:
        return "0.0%"
    return f"{ratio * 100:.1f}%"


def format_time(mtime_ms: float) -> str:
    """Format an epoch-milliseconds timestamp as local "YYYY-MM-DD HH:MM"."""
    if not _is_finite_number(mtime_ms) or mtime_ms <= 0:
        return "-"
    try:
        return datetime.fromtimestamp(mtime_ms / 1000).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return "-"


def ellipsize_middle(text: str, max_len: int) -> str:
    """Shorten text to max_len by replacing its middle with a single ellipsis."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]

    keep = max_len - 1
    left = math.ceil(keep / 2)
    right = keep // 2
    return f"{text[:left]}…{text[len(text) - right :]}"


def truncate_end(text: str, max_len: int) -> str:
    """Shorten text to max_len, ending with a single ellipsis when cut."""
    if len(text) <= max_len:
        return text
    return f"{text[: max(1, max_len - 1)].rstrip()}…"


def pad(value: str, width: int, align: Literal["left", "right"] = "left") -> str:
    clipped = value[:width] if len(value) > width else value
    return clipped.rjust(width) if align == "right" else clipped.ljust(width)


def clamp_ratio(value: Any, fallback: float) -> float:
    """Clamp a ratio into [0, 1], using fallback for non-numeric input."""
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return fallback
    if not _is_finite_number(value):
        return fallback
    return min(1.0, max(0.0, float(value)))


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def parse_size(raw: str) -> int | None:
    """Parse a human size string like "10GB" or "512 kb" into bytes.

    Units are base-1024. The result is floored to whole bytes.

    Returns:
        Byte count, or None for malformed, non-positive or non-finite input.
    """
    match = _SIZE_PATTERN.match(raw.strip())
    if not match:
        return None

    value = float(match.group(1))
    if not math.isfinite(value) or value <= 0:
        return None

    power = BYTE_UNITS.index(match.group(2).upper())
    num_bytes = value * 1024**power
    if not math.isfinite(num_bytes) or num_bytes <= 0:
        return None

    floored = math.floor(num_bytes)
    return floored if floored > 0 else None
