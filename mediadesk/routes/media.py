"""/user/media routes: staging, tagging and uploading files, and the gallery."""

from __future__ import annotations

from typing import Dict, List, Optional

from flask import Blueprint, Response, current_app, jsonify, request

from mediadesk.models import FilePayload
from mediadesk.services.media_service import MediaService
from mediadesk.services.tag_service import TagService
from mediadesk.uploads.workflow import Toast, UploadOutcome, gallery_item
from mediadesk.utils.auth import app_config, client_for, expire_session, require_session
from mediadesk.utils.workspace import get_workspace

bp = Blueprint("media", __name__, url_prefix="/user/media")
previews_bp = Blueprint("previews", __name__, url_prefix="/previews")


def _toast(toast: Optional[Toast]) -> Optional[Dict[str, str]]:
    return toast.to_dict() if toast else None


def _outcome_response(outcome: UploadOutcome, workflow, success_status: int = 200):
    body = jsonify(
        ok=outcome.ok,
        toast=_toast(outcome.toast),
        rejected=outcome.rejected,
        upload=workflow.view(),
        navigate="/" if outcome.unauthorized else None,
    )
    if outcome.unauthorized:
        return expire_session(body), 401
    return body, success_status if outcome.ok else 400


@bp.get("")
def media_page():
    """Return the upload screen; the tag list is fetched on every page load."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    workflow = get_workspace().uploads
    toast = workflow.load_tags(client_for(TagService, session))
    return jsonify(view="media", upload=workflow.view(), toast=_toast(toast)), 200


@bp.post("/files")
def stage_files():
    """Stage dropped or picked files; unsupported or oversized files are skipped silently."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    candidates: List[FilePayload] = []
    for storage in request.files.getlist("files"):
        if storage.filename == "":
            continue
        candidates.append(
            FilePayload(name=storage.filename, mime_type=storage.mimetype, content=storage.read())
        )

    workflow = get_workspace().uploads
    added = workflow.add_files(candidates)
    return jsonify(added=[pending.to_dict() for pending in added], upload=workflow.view()), 200


@bp.delete("/files/<file_id>")
def remove_staged_file(file_id: str):
    """Remove one staged file and release its preview."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    workflow = get_workspace().uploads
    if not workflow.remove_file(file_id):
        return jsonify(error="File not found."), 404
    return jsonify(upload=workflow.view()), 200


@bp.put("/tag")
def select_tag():
    """Select (or, with a null id, clear) the tag for the next batch."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return jsonify(error="Expected a JSON object with tagId."), 400
    raw_tag = payload.get("tagId")
    workflow = get_workspace().uploads
    try:
        workflow.select_tag(int(raw_tag) if raw_tag not in (None, "") else None)
    except (TypeError, ValueError, OverflowError):
        return jsonify(error="Unknown tag."), 400
    return jsonify(upload=workflow.view()), 200


@bp.post("/submit")
def submit_batch():
    """Upload every staged file in one request."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    workflow = get_workspace().uploads
    outcome = workflow.submit(client_for(MediaService, session))
    if outcome.ok:
        current_app.logger.info("Uploaded media batch for user %s", session.user_id)
    return _outcome_response(outcome, workflow, success_status=201)


@bp.post("/gallery")
def toggle_gallery():
    """Switch between the upload view and the visitor's stored media."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    workflow = get_workspace().uploads
    outcome = workflow.toggle_gallery(client_for(MediaService, session), session)
    return _outcome_response(outcome, workflow)


@bp.get("/gallery")
def gallery_page():
    """Standalone gallery listing, fetched fresh on every visit."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    user_id = session.user_id
    if user_id is None:
        return jsonify(view="gallery", items=[], toast=Toast("error", "User not found").to_dict()), 200

    result = client_for(MediaService, session).get_user_media(user_id)
    if not result.ok:
        current_app.logger.warning("Gallery fetch failed: %s", result.error)
        body = jsonify(view="gallery", items=[], toast=Toast("error", "Failed to load media").to_dict())
        if result.error.status == 401:
            return expire_session(body), 401
        return body, 200

    config = app_config()
    return jsonify(view="gallery", items=[gallery_item(record, config) for record in result.data]), 200


@bp.delete("/stored/<int:media_id>")
def delete_stored_media(media_id: int):
    """Delete a media record that has already been uploaded."""
    session, error_response = require_session()
    if error_response is not None:
        return error_response

    workflow = get_workspace().uploads
    outcome = workflow.delete_stored_media(client_for(MediaService, session), media_id)
    return _outcome_response(outcome, workflow)


@previews_bp.get("/<preview_id>")
def preview(preview_id: str):
    """Serve the local preview of a staged file to the visitor who staged it."""
    handle = get_workspace().previews.get(preview_id)
    if handle is None:
        return jsonify(error="Preview not found."), 404
    return Response(handle.content, mimetype=handle.mime_type)
