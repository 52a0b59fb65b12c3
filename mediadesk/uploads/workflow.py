"""Upload workflow: staging dropped files, tagging and submitting a batch."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from mediadesk.config import AppConfig, BATCH_ALL_OR_NOTHING, get_config
from mediadesk.models import FilePayload, MediaRecord, Tag
from mediadesk.services.media_service import MediaService
from mediadesk.services.tag_service import TagService
from mediadesk.uploads.previews import PreviewRegistry
from mediadesk.utils.formatting import format_display_date, format_file_size, format_kilobytes, join_url
from mediadesk.utils.ids import generate_token
from mediadesk.utils.session import SessionContext

logger = logging.getLogger(__name__)

MAX_MEDIA_BYTES = 104857600  # 100 MB
ACCEPTED_MEDIA_PREFIXES = ("image/", "video/")
ACCEPTED_MEDIA_TYPES = ("application/pdf",)


class UploadState(str, Enum):
    IDLE = "idle"
    STAGED = "staged"
    READY = "ready"
    SUBMITTING = "submitting"
    GALLERY = "gallery"


@dataclass
class Toast:
    level: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"level": self.level, "message": self.message}


@dataclass
class PendingFile:
    """A staged file plus the preview handle it holds until it leaves the list."""
    id: str
    name: str
    mime_type: str
    byte_size: int
    preview_id: str
    preview_url: str
    payload: FilePayload
    tag_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.mime_type,
            "size": self.byte_size,
            "sizeLabel": format_file_size(self.byte_size),
            "url": self.preview_url,
            "tagId": self.tag_id,
        }


@dataclass
class UploadOutcome:
    ok: bool
    toast: Optional[Toast] = None
    # The backend (or the missing token) says the session is no longer valid.
    unauthorized: bool = False
    rejected: List[str] = field(default_factory=list)


def accepts_media_file(candidate: FilePayload) -> bool:
    """Drop-zone filter: images, videos and PDFs up to 100 MB."""
    mime_type = (candidate.mime_type or "").lower()
    if candidate.size > MAX_MEDIA_BYTES:
        return False
    return mime_type.startswith(ACCEPTED_MEDIA_PREFIXES) or mime_type in ACCEPTED_MEDIA_TYPES


def gallery_item(record: MediaRecord, config: AppConfig) -> Dict[str, Any]:
    return {
        "id": record.id,
        "name": record.original_name,
        "type": record.mime_category,
        "isImage": record.mime_category == "image",
        "url": join_url(config.media_url, record.storage_path),
        "createdAt": format_display_date(record.created_at),
        "sizeLabel": format_kilobytes(record.byte_size),
        "views": record.view_count,
    }


class UploadWorkflow:
    """Per-visitor upload state.

    The state is derived rather than stored: ``gallery`` while the gallery is
    shown, ``submitting`` while a batch is in flight, otherwise ``idle``,
    ``staged`` or ``ready`` depending on the pending list and the tag.
    """

    def __init__(self, previews: PreviewRegistry, config: Optional[AppConfig] = None):
        self.previews = previews
        self.config = config or get_config()
        self.pending: List[PendingFile] = []
        self.selected_tag_id: Optional[int] = None
        self.tags: List[Tag] = []
        self.tags_loaded = False
        self.showing_gallery = False
        self.gallery_items: List[MediaRecord] = []
        self._submitting = False

    @property
    def state(self) -> UploadState:
        if self.showing_gallery:
            return UploadState.GALLERY
        if self._submitting:
            return UploadState.SUBMITTING
        if not self.pending:
            return UploadState.IDLE
        if self.selected_tag_id is None:
            return UploadState.STAGED
        return UploadState.READY

    @property
    def can_submit(self) -> bool:
        return self.state is UploadState.READY

    def load_tags(self, tags: TagService) -> Optional[Toast]:
        """Refresh the tag list; on failure the previous list is kept."""
        result = tags.get_tags()
        if not result.ok:
            logger.warning("Loading tags failed: %s", result.error)
            return Toast("error", "Failed to load tags")
        self.tags = result.data or []
        self.tags_loaded = True
        if self.selected_tag_id is not None and self.selected_tag_id not in self._tag_ids():
            self.selected_tag_id = None
        return None

    def _tag_ids(self) -> Set[int]:
        return {tag.id for tag in self.tags}

    def add_files(self, files: Iterable[FilePayload]) -> List[PendingFile]:
        """Stage every acceptable file; the rest are dropped without a message."""
        added: List[PendingFile] = []
        for candidate in files:
            if not accepts_media_file(candidate):
                logger.debug(
                    "Dropping %s (%s, %d bytes)", candidate.name, candidate.mime_type, candidate.size
                )
                continue
            handle = self.previews.acquire(candidate)
            pending = PendingFile(
                id=generate_token("file"),
                name=candidate.name,
                mime_type=candidate.mime_type,
                byte_size=candidate.size,
                preview_id=handle.id,
                preview_url=handle.url,
                payload=candidate,
                tag_id=self.selected_tag_id,
            )
            self.pending.append(pending)
            added.append(pending)
        return added

    def select_tag(self, tag_id: Optional[int]) -> None:
        if not tag_id:
            self.selected_tag_id = None
            return
        if tag_id not in self._tag_ids():
            raise ValueError(f"Unknown tag id {tag_id}")
        self.selected_tag_id = tag_id

    def remove_file(self, file_id: str) -> bool:
        """Remove one pending file and release its preview; the others are untouched."""
        for index, pending in enumerate(self.pending):
            if pending.id == file_id:
                del self.pending[index]
                self.previews.release(pending.preview_id)
                return True
        return False

    def _discard(self, batch: Iterable[PendingFile]) -> None:
        discarded = {pending.id for pending in batch}
        for pending in self.pending:
            if pending.id in discarded:
                self.previews.release(pending.preview_id)
        self.pending = [pending for pending in self.pending if pending.id not in discarded]

    def clear(self) -> None:
        self._discard(list(self.pending))
        self.selected_tag_id = None

    def submit(self, media: MediaService) -> UploadOutcome:
        """
        Upload the whole pending list as one request.

        Args:
            media: Client used for the multipart upload

        Returns:
            The outcome and the toast to show. Nothing is sent unless the
            workflow is ``ready``.
        """
        if self._submitting:
            return UploadOutcome(ok=False, toast=Toast("error", "Upload in progress"))
        if not self.can_submit:
            message = "Please select a tag" if self.pending else "Add at least one file"
            return UploadOutcome(ok=False, toast=Toast("error", message))

        batch = list(self.pending)
        tag_id = self.selected_tag_id
        for pending in batch:
            pending.tag_id = tag_id

        self._submitting = True
        try:
            result = media.upload_media([pending.payload for pending in batch], tag_id)
        finally:
            self._submitting = False

        if result.error is not None:
            return UploadOutcome(
                ok=False,
                toast=Toast("error", result.error.message or "Failed to upload files"),
                unauthorized=result.error.status == 401,
            )

        if self.config.upload_batch_semantics == BATCH_ALL_OR_NOTHING:
            self._discard(batch)
            self.selected_tag_id = None
            return UploadOutcome(ok=True, toast=Toast("success", "Files uploaded successfully!"))

        stored_names = {record.original_name for record in result.data or []}
        accepted = [pending for pending in batch if pending.name in stored_names]
        rejected = [pending.name for pending in batch if pending.name not in stored_names]
        self._discard(accepted)
        if not self.pending:
            self.selected_tag_id = None
        if rejected:
            logger.warning("Backend kept %d of %d files", len(accepted), len(batch))
            return UploadOutcome(
                ok=True,
                toast=Toast("warning", f"{len(rejected)} file(s) were not accepted"),
                rejected=rejected,
            )
        return UploadOutcome(ok=True, toast=Toast("success", "Files uploaded successfully!"))

    def toggle_gallery(self, media: MediaService, session: SessionContext) -> UploadOutcome:
        """Show the stored media (fetching it) or go back to the upload view."""
        if self.showing_gallery:
            self.showing_gallery = False
            return UploadOutcome(ok=True)

        if session.user is None:
            return UploadOutcome(ok=False, toast=Toast("error", "Please log in to view your media"))
        user_id = session.user_id
        if user_id is None:
            return UploadOutcome(ok=False, toast=Toast("error", "User ID not found"))

        result = media.get_user_media(user_id)
        if result.error is not None:
            logger.warning("Loading media for user %s failed: %s", user_id, result.error)
            return UploadOutcome(
                ok=False,
                toast=Toast("error", "Failed to load media"),
                unauthorized=result.error.status == 401,
            )

        self.gallery_items = result.data or []
        self.showing_gallery = True
        return UploadOutcome(ok=True)

    def delete_stored_media(self, media: MediaService, media_id: int) -> UploadOutcome:
        result = media.delete_media(media_id)
        if result.error is not None:
            return UploadOutcome(
                ok=False,
                toast=Toast("error", result.error.message or "Failed to delete media"),
                unauthorized=result.error.status == 401,
            )
        self.gallery_items = [item for item in self.gallery_items if item.id != media_id]
        return UploadOutcome(ok=True, toast=Toast("success", "Media deleted"))

    def view(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "files": [pending.to_dict() for pending in self.pending],
            "tags": [tag.to_dict() for tag in self.tags],
            "tagsLoaded": self.tags_loaded,
            "selectedTagId": self.selected_tag_id,
            "canSubmit": self.can_submit,
            "showGallery": self.showing_gallery,
            "gallery": [gallery_item(record, self.config) for record in self.gallery_items]
            if self.showing_gallery else [],
        }
