"""Account routes: registration, sign-in and sign-out."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, redirect, request

from mediadesk.forms.outcome import SessionUpdate
from mediadesk.services.auth_service import AuthService
from mediadesk.utils.auth import apply_session_update, client_for
from mediadesk.utils.workspace import discard_workspace, get_workspace

bp = Blueprint("auth", __name__)


def _apply_fields(controller, payload: Any):
    """Feed edited fields into a form controller; returns an error response on bad input."""
    if not isinstance(payload, dict):
        return jsonify(error="Expected a JSON object of field values."), 400
    for name, value in payload.items():
        try:
            controller.change(name, value)
        except KeyError:
            return jsonify(error=f"Unknown field: {name}"), 400
    return None


@bp.get("/register")
def register_form():
    """Return the registration form state."""
    workspace = get_workspace()
    return jsonify(view="register", form=workspace.register_form.view()), 200


@bp.patch("/register")
def edit_register_form():
    """Apply field edits; each edited field loses its error."""
    workspace = get_workspace()
    payload = request.get_json(silent=True) or {}
    error_response = _apply_fields(workspace.register_form, payload)
    if error_response is not None:
        return error_response
    return jsonify(form=workspace.register_form.view()), 200


@bp.post("/register")
def submit_register_form():
    """Validate and submit the registration form."""
    workspace = get_workspace()
    form = workspace.register_form
    payload = request.get_json(silent=True) or {}
    error_response = _apply_fields(form, payload)
    if error_response is not None:
        return error_response

    outcome = form.submit(client_for(AuthService))
    if not outcome.ok:
        return jsonify(form=form.view()), 400

    current_app.logger.info("Account created; continuing to %s", outcome.navigate_to)
    workspace.profile_form = None
    response = jsonify(ok=True, navigate=outcome.navigate_to)
    return apply_session_update(response, outcome.session_update), 200


@bp.post("/login")
def submit_login_form():
    """Sign in and route the visitor to the screen their profile state calls for."""
    workspace = get_workspace()
    form = workspace.login_form
    payload = request.get_json(silent=True) or {}
    error_response = _apply_fields(form, payload)
    if error_response is not None:
        return error_response

    outcome = form.submit(client_for(AuthService))
    if not outcome.ok:
        return jsonify(form=form.view()), 400

    workspace.profile_form = None
    response = jsonify(ok=True, navigate=outcome.navigate_to)
    return apply_session_update(response, outcome.session_update), 200


@bp.post("/logout")
def logout():
    """Clear the session cookies and the visitor's screen state."""
    discard_workspace()
    response = redirect("/", code=303)
    return apply_session_update(response, SessionUpdate.cleared())
