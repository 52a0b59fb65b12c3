"""Client for the media resource family."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from mediadesk.models import FilePayload, MediaRecord
from mediadesk.services.api_client import ApiResult, BackendClient

MEDIA_PATH = "/api/media"
USER_MEDIA_PATH = "/api/users/media"


def _records(data: Any) -> List[MediaRecord]:
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return []
    return [MediaRecord.from_dict(item) for item in data if isinstance(item, dict)]


class MediaService(BackendClient):
    """Upload, list and delete the visitor's media."""

    def upload_media(
        self,
        files: Sequence[FilePayload],
        tag_id: Optional[int] = None,
    ) -> ApiResult[List[MediaRecord]]:
        """
        Send a whole batch of files as one multipart request.

        Args:
            files: Files to upload, each sent under the ``files`` field
            tag_id: Tag the batch is filed under

        Returns:
            The media records the backend reports as stored
        """
        form: Dict[str, Any] = {}
        if tag_id is not None:
            form["tagId"] = str(tag_id)

        result = self._post(
            "/media",
            resource_path=MEDIA_PATH,
            data=form,
            files=[item.as_multipart("files") for item in files],
        )
        return result.map(_records)

    def list_media(self) -> ApiResult[List[MediaRecord]]:
        """List all media visible to the current token."""
        return self._get("/media", resource_path=MEDIA_PATH).map(_records)

    def delete_media(self, media_id: int) -> ApiResult[Any]:
        """Delete one stored media record."""
        return self._delete(f"/media/{media_id}", resource_path=MEDIA_PATH)

    def get_user_media(self, user_id: int) -> ApiResult[List[MediaRecord]]:
        """List the media owned by ``user_id``."""
        return self._get(f"/users/{user_id}/media", resource_path=USER_MEDIA_PATH).map(_records)
