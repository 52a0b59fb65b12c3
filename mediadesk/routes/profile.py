"""/user/register routes: completing the profile after sign-up."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, redirect, request

from mediadesk.models import FilePayload
from mediadesk.services.options_service import OptionsService
from mediadesk.services.user_service import UserService
from mediadesk.utils.auth import apply_session_update, client_for, require_session
from mediadesk.utils.navigation import View
from mediadesk.utils.workspace import get_workspace

bp = Blueprint("profile", __name__, url_prefix="/user/register")

TOGGLE_SKILL_KEY = "toggleSkill"


def _profile_form(session):
    form = get_workspace().profile_form_for(session.user)
    if not form.options_loaded:
        form.load_options(client_for(OptionsService, session))
    return form


def _apply_fields(form, payload: Any):
    if not isinstance(payload, dict):
        return jsonify(error="Expected a JSON object of field values."), 400
    for name, value in payload.items():
        if name == TOGGLE_SKILL_KEY:
            try:
                form.toggle_skill(int(value))
            except (TypeError, ValueError, OverflowError):
                return jsonify(error="toggleSkill must be a skill id."), 400
            continue
        try:
            form.change(name, value)
        except KeyError:
            return jsonify(error=f"Unknown field: {name}"), 400
        except ValueError as exc:
            return jsonify(error=str(exc)), 400
    return None


@bp.get("")
def complete_profile_form():
    """Return the complete-profile form, pre-filled from the cached profile."""
    session, error_response = require_session(with_user=True)
    if error_response is not None:
        return error_response

    form = _profile_form(session)
    return jsonify(view=View.COMPLETE_PROFILE.value, form=form.view()), 200


@bp.patch("")
def edit_complete_profile_form():
    """Apply field edits (and skill toggles) to the form."""
    session, error_response = require_session(with_user=True)
    if error_response is not None:
        return error_response

    form = _profile_form(session)
    error_response = _apply_fields(form, request.get_json(silent=True) or {})
    if error_response is not None:
        return error_response
    return jsonify(form=form.view()), 200


@bp.post("/image")
def select_profile_image():
    """Check a picked profile image right away; rejected files never replace the selection."""
    session, error_response = require_session(with_user=True)
    if error_response is not None:
        return error_response

    storage = request.files.get("profileImage")
    if storage is None or storage.filename == "":
        return jsonify(error="No image uploaded."), 400

    form = _profile_form(session)
    image = FilePayload(name=storage.filename, mime_type=storage.mimetype, content=storage.read())
    if not form.select_profile_image(image):
        return jsonify(form=form.view()), 400
    return jsonify(form=form.view()), 200


@bp.post("")
def submit_complete_profile_form():
    """Submit the profile; success and expiry both end in a full page load."""
    session, error_response = require_session(with_user=True)
    if error_response is not None:
        return error_response

    workspace = get_workspace()
    form = _profile_form(session)
    error_response = _apply_fields(form, request.get_json(silent=True) or {})
    if error_response is not None:
        return error_response

    outcome = form.submit(session, client_for(UserService, session))
    if outcome.full_page:
        if outcome.ok:
            current_app.logger.info("Profile completed for user %s", session.user_id)
        workspace.profile_form = None
        response = redirect(outcome.navigate_to, code=303)
        return apply_session_update(response, outcome.session_update)

    return jsonify(form=form.view()), 400
