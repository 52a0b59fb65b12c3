"""Landing and profile screens, plus the view router behind "/"."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, redirect, request

from mediadesk.forms.outcome import SessionUpdate
from mediadesk.forms.profile_form import check_profile_image
from mediadesk.models import FilePayload
from mediadesk.services.user_service import UserService
from mediadesk.utils.auth import (
    app_config,
    apply_session_update,
    client_for,
    current_session,
    expire_session,
    require_session,
)
from mediadesk.utils.formatting import format_date_input, join_url
from mediadesk.utils.navigation import VIEW_PATHS, View, resolve_view
from mediadesk.utils.workspace import get_workspace

bp = Blueprint("pages", __name__)


@bp.get("/")
def index():
    """Render the landing screen or send the visitor to the screen their session calls for."""
    view = resolve_view(current_session())
    if view is not View.LANDING:
        return redirect(VIEW_PATHS[view], code=303)

    workspace = get_workspace()
    return jsonify(view=View.LANDING.value, login=workspace.login_form.view()), 200


@bp.get("/user")
def profile():
    """Return the completed profile of the signed-in visitor."""
    session, error_response = require_session(registered=True, with_user=True)
    if error_response is not None:
        return error_response

    profile = session.profile()
    return (
        jsonify(
            view=View.PROFILE.value,
            profile={
                "id": profile.id,
                "email": profile.email,
                "fullName": profile.full_name,
                "dateOfBirth": format_date_input(profile.date_of_birth),
                "preferredLocation": profile.preferred_location.to_dict()
                if profile.preferred_location else None,
                "resumeSummary": profile.resume_summary,
                "programmingSkills": [skill.to_dict() for skill in profile.programming_skills],
                "profileImageUrl": join_url(app_config().public_url, profile.profile_image),
            },
        ),
        200,
    )


@bp.post("/user/profile-image")
def update_profile_image():
    """Replace the profile image; the cached profile changes only when the backend accepts it."""
    session, error_response = require_session(registered=True, with_user=True)
    if error_response is not None:
        return error_response

    user_id = session.user_id
    if user_id is None:
        return expire_session(jsonify(error="User data not found", navigate="/")), 401

    storage = request.files.get("profileImage")
    if storage is None or storage.filename == "":
        return jsonify(error="No image uploaded."), 400

    image = FilePayload(name=storage.filename, mime_type=storage.mimetype, content=storage.read())
    problem = check_profile_image(image)
    if problem:
        return jsonify(error=problem), 400

    result = client_for(UserService, session).update_profile_image(user_id, image)
    if result.error is not None:
        if result.error.status == 401:
            return expire_session(jsonify(error=result.error.message, navigate="/")), 401
        current_app.logger.warning("Profile image update failed: %s", result.error)
        return jsonify(error="Failed to update profile image. Please try again."), 400

    # A new snapshot invalidates any half-filled profile form.
    get_workspace().profile_form = None
    updated = result.data if isinstance(result.data, dict) else session.user
    response = jsonify(ok=True, profileImageUrl=join_url(
        app_config().public_url, updated.get("profileImage")
    ))
    update = SessionUpdate(token=session.access_token, user=updated, registered=True)
    return apply_session_update(response, update), 200
