"""In-memory state backing each visitor's screens."""

from typing import Any, Dict

# Per-visitor workspaces keyed by the id kept in the signed Flask session.
# Values are mediadesk.utils.workspace.Workspace instances.
workspaces: Dict[str, Any] = {}
