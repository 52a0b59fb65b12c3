"""Identifier and clock helpers."""

from __future__ import annotations

import secrets
import time


def now_seconds() -> int:
    """Return the current UNIX timestamp in seconds."""
    return int(time.time())


def generate_token(prefix: str) -> str:
    """Return a random URL-safe identifier with the given prefix."""
    return f"{prefix}_{secrets.token_urlsafe(12)}"
