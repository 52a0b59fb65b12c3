"""What a submitted form asks the route layer to do next."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SessionUpdate:
    """A pending write of all three session values, or a full clear."""
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    registered: bool = False
    clear: bool = False

    @classmethod
    def cleared(cls) -> "SessionUpdate":
        return cls(clear=True)


@dataclass(frozen=True)
class FormOutcome:
    ok: bool
    navigate_to: Optional[str] = None
    # True means a full page load (HTTP redirect), not an in-app route change.
    full_page: bool = False
    session_update: Optional[SessionUpdate] = None
