"""Controller behind the complete-profile form."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from mediadesk.forms.outcome import FormOutcome, SessionUpdate
from mediadesk.forms.schemas import CompleteProfileInput, profile_context, validate_form
from mediadesk.models import FilePayload, Option
from mediadesk.services.api_client import ApiError
from mediadesk.services.options_service import OptionsService, ProfileOptions
from mediadesk.services.user_service import ProfileUpdate, UserService
from mediadesk.utils.formatting import format_date_input
from mediadesk.utils.session import SessionContext

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "fullName",
    "dateOfBirth",
    "resumeSummary",
    "preferredLocationId",
    "programmingSkills",
)
MAX_PROFILE_IMAGE_BYTES = 5 * 1024 * 1024

PROFILE_PAGE = "/user"
LANDING_PAGE = "/"
REGISTRATION_FAILED = "Registration failed. Please try again."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again."


def _as_id(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def check_profile_image(image: FilePayload) -> Optional[str]:
    """Return the error for an unacceptable profile image, or None."""
    if image.size > MAX_PROFILE_IMAGE_BYTES:
        return "File size must be less than 5MB"
    if not (image.mime_type or "").startswith("image/"):
        return "Please upload an image file"
    return None


def prefill_values(user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Initial field values from the cached profile, empty where absent."""
    user = user or {}
    location = user.get("preferredLocation") or {}
    skills = user.get("programmingSkills")
    return {
        "fullName": user.get("fullName") or "",
        "dateOfBirth": format_date_input(user.get("dateOfBirth")),
        "resumeSummary": user.get("resumeSummary") or "",
        "preferredLocationId": _as_id(location.get("id")) if isinstance(location, dict) else 0,
        "programmingSkills": [
            _as_id(skill.get("id")) for skill in skills if isinstance(skill, dict)
        ] if isinstance(skills, list) else [],
    }


class ProfileFormController:
    """Holds the profile fields, the selected image and per-field errors."""

    def __init__(self, user: Optional[Dict[str, Any]] = None) -> None:
        self.values: Dict[str, Any] = prefill_values(user)
        self.profile_image: Optional[FilePayload] = None
        self.errors: Dict[str, str] = {}
        self.is_loading = False
        self.locations: List[Option] = []
        self.skills: List[Option] = []
        self.options_loaded = False
        self.option_warnings: List[str] = []

    def load_options(self, options: OptionsService) -> ProfileOptions:
        """Fetch both option lists; a failed source leaves its list empty and is reported."""
        fetched = options.fetch_profile_options()
        self.locations = fetched.locations.data or []
        self.skills = fetched.skills.data or []
        self.option_warnings = [
            f"Could not load {name}"
            for name, result in (("locations", fetched.locations), ("skills", fetched.skills))
            if not result.ok
        ]
        self.options_loaded = True
        return fetched

    def change(self, field: str, value: Any) -> None:
        if field not in PROFILE_FIELDS:
            raise KeyError(field)
        if field == "preferredLocationId":
            value = _as_id(value) if value not in (None, "") else 0
        elif field == "programmingSkills":
            if value is None:
                value = []
            if not isinstance(value, list):
                raise ValueError("programmingSkills must be a list of skill ids")
            value = [_as_id(item) for item in value]
        else:
            value = "" if value is None else str(value)
        self.values[field] = value
        self.errors.pop(field, None)

    def toggle_skill(self, skill_id: int) -> None:
        skills: List[int] = self.values["programmingSkills"]
        if skill_id in skills:
            self.values["programmingSkills"] = [s for s in skills if s != skill_id]
        else:
            self.values["programmingSkills"] = skills + [skill_id]
        self.errors.pop("programmingSkills", None)

    def select_profile_image(self, image: FilePayload) -> bool:
        """Check an image as soon as it is picked; a rejected file leaves the selection as it was."""
        error = check_profile_image(image)
        if error:
            self.errors["profileImage"] = error
            return False
        self.profile_image = image
        self.errors.pop("profileImage", None)
        return True

    def build_payload(self) -> Dict[str, Any]:
        payload = dict(self.values)
        payload["preferredLocationId"] = _as_id(payload["preferredLocationId"])
        payload["programmingSkills"] = [_as_id(skill) for skill in payload["programmingSkills"]]
        return payload

    def submit(
        self,
        session: SessionContext,
        users: UserService,
        today: Optional[date] = None,
    ) -> FormOutcome:
        """
        Validate the payload and PATCH the profile.

        Args:
            session: The visitor's session; supplies the user id and token
            users: Client used for the PATCH
            today: Reference date for the age rule (defaults to today)

        Returns:
            A full-page navigation to the profile on success, to the landing
            page when the session has expired, otherwise a failed outcome
            with ``errors`` populated
        """
        self.is_loading = True
        self.errors = {}
        try:
            user_id = session.user_id
            if session.user is None or user_id is None:
                raise ApiError("User data not found", 401, "/user/register")

            payload = self.build_payload()
            context = profile_context(
                location_ids=[location.id for location in self.locations],
                skill_ids=[skill.id for skill in self.skills],
                today=today,
            )
            data, errors = validate_form(CompleteProfileInput, payload, context=context)
            if data is None:
                self.errors = errors
                return FormOutcome(ok=False)

            update = ProfileUpdate(
                full_name=data.full_name,
                date_of_birth=data.date_of_birth,
                resume_summary=data.resume_summary,
                preferred_location_id=data.preferred_location_id,
                programming_skills=list(data.programming_skills),
                profile_image=self.profile_image,
            )
            profile = users.update_user_profile(user_id, update).unwrap()

            return FormOutcome(
                ok=True,
                navigate_to=PROFILE_PAGE,
                full_page=True,
                session_update=SessionUpdate(
                    token=session.access_token, user=profile, registered=True
                ),
            )
        except ApiError as exc:
            if exc.status == 401:
                logger.info("Session expired while completing profile")
                return FormOutcome(
                    ok=False,
                    navigate_to=LANDING_PAGE,
                    full_page=True,
                    session_update=SessionUpdate.cleared(),
                )
            self.errors = {"fullName": exc.message or REGISTRATION_FAILED}
            return FormOutcome(ok=False)
        except Exception:
            logger.exception("Profile completion failed unexpectedly")
            self.errors = {"fullName": UNEXPECTED_ERROR}
            return FormOutcome(ok=False)
        finally:
            self.is_loading = False

    def view(self) -> Dict[str, Any]:
        return {
            "values": self.build_payload(),
            "profileImage": self.profile_image.name if self.profile_image else None,
            "errors": dict(self.errors),
            "isLoading": self.is_loading,
            "optionsLoaded": self.options_loaded,
            "optionWarnings": list(self.option_warnings),
            "locations": [location.to_dict() for location in self.locations],
            "skills": [skill.to_dict() for skill in self.skills],
        }
