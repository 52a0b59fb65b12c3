"""Client for the tag reference list."""

from __future__ import annotations

from typing import Any, List

from mediadesk.models import Tag
from mediadesk.services.api_client import ApiResult, BackendClient

TAGS_PATH = "/api/tags"


def _tags(data: Any) -> List[Tag]:
    if not isinstance(data, list):
        return []
    return [Tag.from_dict(item) for item in data if isinstance(item, dict)]


class TagService(BackendClient):

    def get_tags(self) -> ApiResult[List[Tag]]:
        """Fetch every tag a media batch can be filed under."""
        result = self._get("/tags", resource_path=TAGS_PATH)
        return result.map(_tags)
