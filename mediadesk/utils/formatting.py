"""Display helpers for sizes, dates and asset URLs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(num_bytes: int) -> str:
    """Human-readable size with at most two decimals, e.g. ``1.5 MB``."""
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    exponent = 0
    while value >= 1024 and exponent < len(SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"


def format_kilobytes(num_bytes: int) -> str:
    return f"{num_bytes / 1024:.2f} KB"


def _parse_timestamp(value: str) -> Optional[datetime]:
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_date_input(value: Optional[str]) -> str:
    """Normalise a stored timestamp to the ``YYYY-MM-DD`` form a date input expects."""
    parsed = _parse_timestamp(value or "")
    if parsed is None:
        return ""
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def format_display_date(value: Optional[str]) -> str:
    parsed = _parse_timestamp(value or "")
    return parsed.date().isoformat() if parsed else ""


def join_url(base: str, path: Optional[str]) -> Optional[str]:
    """Join a base URL and a stored relative path; None when there is no path."""
    if not path:
        return None
    return f"{base.rstrip('/')}/{path.lstrip('/')}"
