"""Client for profile updates."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mediadesk.models import FilePayload
from mediadesk.services.api_client import ApiResult, BackendClient

USERS_PATH = "/api/users"


@dataclass
class ProfileUpdate:
    """Validated fields sent when the visitor completes their profile."""
    full_name: str
    date_of_birth: str
    resume_summary: str
    preferred_location_id: int
    programming_skills: List[int] = field(default_factory=list)
    profile_image: Optional[FilePayload] = None

    def form_fields(self) -> Dict[str, str]:
        return {
            "fullName": self.full_name,
            "dateOfBirth": self.date_of_birth,
            "resumeSummary": self.resume_summary,
            "preferredLocationId": str(self.preferred_location_id),
            "programmingSkills": json.dumps(self.programming_skills),
        }


class UserService(BackendClient):

    def update_user_profile(self, user_id: int, update: ProfileUpdate) -> ApiResult[Dict[str, Any]]:
        """
        PATCH the profile as multipart form data.

        Args:
            user_id: Id of the cached user
            update: Validated profile fields, optionally with a new image

        Returns:
            The updated profile snapshot
        """
        files = None
        if update.profile_image is not None:
            files = [update.profile_image.as_multipart("profileImage")]

        return self._patch(
            f"/users/{user_id}",
            resource_path=USERS_PATH,
            data=update.form_fields(),
            files=files,
        )

    def update_profile_image(self, user_id: int, image: FilePayload) -> ApiResult[Dict[str, Any]]:
        """Replace only the profile image."""
        return self._patch(
            f"/users/{user_id}",
            resource_path=USERS_PATH,
            files=[image.as_multipart("profileImage")],
        )
