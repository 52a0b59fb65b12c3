"""Route-level helpers for the session cookies and backend clients."""

from __future__ import annotations

from typing import Optional, Tuple, Type, TypeVar

from flask import current_app, g, redirect, request
from werkzeug.wrappers import Response

from mediadesk.config import AppConfig
from mediadesk.forms.outcome import SessionUpdate
from mediadesk.services.api_client import BackendClient
from mediadesk.utils.session import SessionContext, clear_session, load_session, write_session

ClientT = TypeVar("ClientT", bound=BackendClient)

LANDING_PAGE = "/"


def app_config() -> AppConfig:
    return current_app.config["APP_CONFIG"]


def current_session() -> SessionContext:
    """The session carried by the incoming request's cookies (cached per request)."""
    if "session_context" not in g:
        g.session_context = load_session(request.cookies)
    return g.session_context


def client_for(client_cls: Type[ClientT], session: Optional[SessionContext] = None) -> ClientT:
    """Build a backend client bound to the visitor's session."""
    return client_cls(
        session or current_session(),
        config=app_config(),
        http=current_app.config.get("HTTP_SESSION"),
    )


def require_session(
    *,
    registered: bool = False,
    with_user: bool = False,
) -> Tuple[SessionContext, Optional[Response]]:
    """Validate the session for a protected screen.

    Returns:
        ``(session, None)`` when the guard passes, otherwise the session and
        a redirect to the landing page
    """
    session = current_session()
    if not session.is_authenticated:
        return session, redirect(LANDING_PAGE, code=303)
    if registered and not session.registered:
        return session, redirect(LANDING_PAGE, code=303)
    if with_user and session.user is None:
        return session, redirect(LANDING_PAGE, code=303)
    return session, None


def apply_session_update(response: Response, update: Optional[SessionUpdate]) -> Response:
    """Write (or clear) all three session cookies on ``response``."""
    if update is None:
        return response
    config = app_config()
    if update.clear:
        g.session_context = clear_session(response, config=config)
    else:
        g.session_context = write_session(
            response, update.token, update.user, update.registered, config=config
        )
    return response


def expire_session(response: Response) -> Response:
    """Clear the cookies after the backend rejected the token."""
    return apply_session_update(response, SessionUpdate.cleared())
