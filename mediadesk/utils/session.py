"""Session store backed by the three browser cookies.

The access token, the cached profile snapshot and the registered flag
only ever change together through :func:`write_session` (or disappear
together through :func:`clear_session`), so two screens can never leave
the browser holding a token from one write and a profile from another.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from flask import Response

from mediadesk.config import AppConfig, get_config
from mediadesk.models import Profile

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
USER_DATA_COOKIE = "user_data"
REGISTERED_COOKIE = "userRegistered"
REGISTERED_VALUE = "true"


class SessionWriteError(Exception):
    """Raised when a session write would leave the three values inconsistent."""


@dataclass(frozen=True)
class SessionContext:
    """Snapshot of the visitor's session, injected into clients and controllers."""

    access_token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    registered: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    @property
    def is_registered(self) -> bool:
        return self.is_authenticated and self.registered

    @property
    def user_id(self) -> Optional[int]:
        if not self.user:
            return None
        user_id = self.user.get("id")
        if user_id in (None, ""):
            return None
        try:
            return int(user_id)
        except (TypeError, ValueError, OverflowError):
            return None

    def profile(self) -> Optional[Profile]:
        if not self.user:
            return None
        return Profile.from_dict(self.user)


def _cookie_options(config: AppConfig) -> Dict[str, Any]:
    return {
        "secure": config.is_production,
        "samesite": "Strict",
        "path": "/",
    }


def load_session(cookies: Mapping[str, str]) -> SessionContext:
    """Build a :class:`SessionContext` from the request cookies."""
    token = cookies.get(ACCESS_TOKEN_COOKIE) or None
    raw_user = cookies.get(USER_DATA_COOKIE)

    user: Optional[Dict[str, Any]] = None
    if raw_user:
        try:
            parsed = json.loads(raw_user)
        except ValueError:
            logger.warning("Ignoring unparseable %s cookie", USER_DATA_COOKIE)
            parsed = None
        if isinstance(parsed, dict):
            user = parsed

    registered = cookies.get(REGISTERED_COOKIE) == REGISTERED_VALUE
    return SessionContext(access_token=token, user=user, registered=registered)


def write_session(
    response: Response,
    token: Optional[str],
    user: Optional[Dict[str, Any]],
    registered: bool,
    *,
    config: Optional[AppConfig] = None,
) -> SessionContext:
    """Write all three session values onto ``response`` or none of them.

    Args:
        response: The Flask response that will carry the cookies
        token: The bearer token issued by the backend
        user: The profile snapshot to cache, or None to drop the cached copy
        registered: Whether the profile has been completed

    Returns:
        The session context the browser will hold after this response

    Raises:
        SessionWriteError: If the token is missing or the snapshot cannot be
            serialized. No cookie is touched in that case.
    """
    if not token:
        raise SessionWriteError("Cannot write a session without an access token.")

    serialized_user: Optional[str] = None
    if user is not None:
        try:
            serialized_user = json.dumps(user, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise SessionWriteError(f"User snapshot is not serializable: {exc}") from exc

    options = _cookie_options(config or get_config())

    response.set_cookie(ACCESS_TOKEN_COOKIE, token, **options)
    if serialized_user is None:
        response.delete_cookie(USER_DATA_COOKIE, **options)
    else:
        response.set_cookie(USER_DATA_COOKIE, serialized_user, **options)
    if registered:
        response.set_cookie(REGISTERED_COOKIE, REGISTERED_VALUE, **options)
    else:
        response.delete_cookie(REGISTERED_COOKIE, **options)

    return SessionContext(access_token=token, user=user, registered=registered)


def clear_session(response: Response, *, config: Optional[AppConfig] = None) -> SessionContext:
    """Delete every session cookie (logout or expired token)."""
    options = _cookie_options(config or get_config())
    for name in (ACCESS_TOKEN_COOKIE, USER_DATA_COOKIE, REGISTERED_COOKIE):
        response.delete_cookie(name, **options)
    return SessionContext()
