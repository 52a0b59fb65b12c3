"""Controller behind the sign-in form on the landing screen."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mediadesk.forms.outcome import FormOutcome, SessionUpdate
from mediadesk.forms.schemas import LoginInput, validate_form
from mediadesk.services.api_client import ApiError
from mediadesk.services.auth_service import AuthService
from mediadesk.utils.session import SessionWriteError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred"


def is_profile_complete(user: Optional[Dict[str, Any]]) -> bool:
    """Whether a user snapshot already holds a completed profile."""
    if not user:
        return False
    if "isRegistered" in user:
        return bool(user["isRegistered"])
    return bool(user.get("fullName")) and bool(user.get("preferredLocation"))


def landing_target(registered: bool) -> str:
    return "/user" if registered else "/user/register"


class LoginFormController:

    def __init__(self) -> None:
        self.values: Dict[str, str] = {"email": "", "password": ""}
        self.errors: Dict[str, str] = {}
        self.banner = ""

    def change(self, field: str, value: Any) -> None:
        if field not in self.values:
            raise KeyError(field)
        self.values[field] = "" if value is None else str(value)
        self.errors.pop(field, None)

    def submit(self, auth: AuthService) -> FormOutcome:
        self.banner = ""
        self.errors = {}
        data, errors = validate_form(LoginInput, self.values)
        if data is None:
            self.errors = errors
            return FormOutcome(ok=False)

        try:
            signed_in = auth.login(data.email, data.password).unwrap()
            token = signed_in.get("access_token")
            if not token:
                raise SessionWriteError("Login response carried no access token.")
        except ApiError as exc:
            self.banner = exc.message or UNEXPECTED_ERROR
            return FormOutcome(ok=False)
        except Exception:
            logger.exception("Login failed unexpectedly")
            self.banner = UNEXPECTED_ERROR
            return FormOutcome(ok=False)

        user = signed_in.get("user")
        registered = is_profile_complete(user)
        return FormOutcome(
            ok=True,
            navigate_to=landing_target(registered),
            session_update=SessionUpdate(token=token, user=user, registered=registered),
        )

    def view(self) -> Dict[str, Any]:
        return {
            "values": {"email": self.values["email"]},
            "errors": dict(self.errors),
            "banner": self.banner or None,
        }
