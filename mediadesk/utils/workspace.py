"""Per-visitor screen state: form controllers, the upload workflow and previews."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from flask import Flask, current_app, session as flask_session

from mediadesk.config import AppConfig
from mediadesk.forms.login_form import LoginFormController
from mediadesk.forms.profile_form import ProfileFormController
from mediadesk.forms.register_form import RegisterFormController
from mediadesk.storage import workspaces
from mediadesk.uploads.previews import PreviewRegistry
from mediadesk.uploads.workflow import UploadWorkflow
from mediadesk.utils.ids import generate_token, now_seconds

WORKSPACE_KEY = "workspace_id"
WORKSPACE_TTL_SECONDS = 24 * 60 * 60


@dataclass
class Workspace:
    id: str
    previews: PreviewRegistry
    uploads: UploadWorkflow
    register_form: RegisterFormController = field(default_factory=RegisterFormController)
    login_form: LoginFormController = field(default_factory=LoginFormController)
    profile_form: Optional[ProfileFormController] = None
    last_seen: int = field(default_factory=now_seconds)

    @classmethod
    def create(cls, config: AppConfig) -> "Workspace":
        previews = PreviewRegistry()
        return cls(
            id=generate_token("ws"),
            previews=previews,
            uploads=UploadWorkflow(previews, config),
        )

    def profile_form_for(self, user: Optional[Dict[str, Any]]) -> ProfileFormController:
        if self.profile_form is None:
            self.profile_form = ProfileFormController(user)
        return self.profile_form

    def dispose(self) -> None:
        """Release every preview handle this visitor still holds."""
        self.uploads.clear()
        self.previews.release_all()


def get_workspace() -> Workspace:
    """Return (creating if needed) the workspace for the current visitor."""
    workspace_id = flask_session.get(WORKSPACE_KEY)
    workspace = workspaces.get(workspace_id) if workspace_id else None
    if workspace is None:
        workspace = Workspace.create(current_app.config["APP_CONFIG"])
        workspaces[workspace.id] = workspace
        flask_session[WORKSPACE_KEY] = workspace.id
    workspace.last_seen = now_seconds()
    return workspace


def discard_workspace() -> None:
    """Drop the current visitor's workspace (logout)."""
    workspace_id = flask_session.pop(WORKSPACE_KEY, None)
    workspace = workspaces.pop(workspace_id, None) if workspace_id else None
    if workspace is not None:
        workspace.dispose()


def prune_expired() -> None:
    """Dispose of workspaces nobody has touched within the TTL."""
    cutoff = now_seconds() - WORKSPACE_TTL_SECONDS
    for workspace_id, workspace in list(workspaces.items()):
        if workspace.last_seen <= cutoff:
            workspaces.pop(workspace_id, None)
            workspace.dispose()


def register_workspace_cleanup(app: Flask) -> None:
    """Attach a before-request handler that keeps workspace state tidy."""

    @app.before_request  # pragma: no cover - trivial wiring
    def _cleanup_state() -> None:
        prune_expired()
