"""Which screen a visitor lands on, decided from the session alone."""

from __future__ import annotations

from enum import Enum

from mediadesk.utils.session import SessionContext


class View(str, Enum):
    LANDING = "landing"
    COMPLETE_PROFILE = "complete-profile"
    PROFILE = "profile"


VIEW_PATHS = {
    View.LANDING: "/",
    View.COMPLETE_PROFILE: "/user/register",
    View.PROFILE: "/user",
}


def resolve_view(session: SessionContext) -> View:
    """No token: landing. Token without the registered flag: complete profile. Otherwise: profile."""
    if not session.is_authenticated:
        return View.LANDING
    if not session.registered:
        return View.COMPLETE_PROFILE
    return View.PROFILE
