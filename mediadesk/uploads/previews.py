"""Local preview handles for files that have not been uploaded yet."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from mediadesk.models import FilePayload
from mediadesk.utils.ids import generate_token


@dataclass(frozen=True)
class PreviewHandle:
    id: str
    url: str
    mime_type: str
    content: bytes


class PreviewRegistry:
    """Owns preview blobs; every :meth:`acquire` must be paired with :meth:`release`."""

    def __init__(self, url_prefix: str = "/previews"):
        self.url_prefix = url_prefix.rstrip("/")
        self._handles: Dict[str, PreviewHandle] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, preview_id: object) -> bool:
        return preview_id in self._handles

    def acquire(self, payload: FilePayload) -> PreviewHandle:
        preview_id = generate_token("preview")
        handle = PreviewHandle(
            id=preview_id,
            url=f"{self.url_prefix}/{preview_id}",
            mime_type=payload.mime_type,
            content=payload.content,
        )
        with self._lock:
            self._handles[preview_id] = handle
        return handle

    def get(self, preview_id: str) -> Optional[PreviewHandle]:
        return self._handles.get(preview_id)

    def release(self, preview_id: str) -> bool:
        with self._lock:
            return self._handles.pop(preview_id, None) is not None

    def release_all(self) -> int:
        with self._lock:
            released = len(self._handles)
            self._handles.clear()
        return released
