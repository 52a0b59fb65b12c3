"""Controller behind the account registration form."""

from __future__ import annotations

import logging
from typing import Any, Dict

from mediadesk.forms.outcome import FormOutcome, SessionUpdate
from mediadesk.forms.schemas import RegisterInput, validate_form
from mediadesk.services.api_client import ApiError
from mediadesk.services.auth_service import AuthService
from mediadesk.utils.session import SessionWriteError

logger = logging.getLogger(__name__)

REGISTER_FIELDS = ("email", "password", "confirmPassword")
UNEXPECTED_ERROR = "An unexpected error occurred"
AFTER_REGISTER_PAGE = "/user/media"


class RegisterFormController:
    """Holds the registration fields, their errors and the form-level banner."""

    def __init__(self) -> None:
        self.values: Dict[str, str] = {name: "" for name in REGISTER_FIELDS}
        self.errors: Dict[str, str] = {}
        self.banner = ""
        self.is_loading = False

    def change(self, field: str, value: Any) -> None:
        """Update one field and drop its error, as the visitor types."""
        if field not in REGISTER_FIELDS:
            raise KeyError(field)
        self.values[field] = "" if value is None else str(value)
        self.errors.pop(field, None)

    def submit(self, auth: AuthService) -> FormOutcome:
        """Validate, then register; the backend is only called for valid input."""
        self.is_loading = True
        self.banner = ""
        self.errors = {}
        try:
            data, errors = validate_form(
                RegisterInput, self.values, context={"password": self.values["password"]}
            )
            if data is None:
                self.errors = errors
                return FormOutcome(ok=False)

            created = auth.register(data.email, data.password).unwrap()
            token = created.get("access_token")
            if not token:
                raise SessionWriteError("Registration response carried no access token.")

            return FormOutcome(
                ok=True,
                navigate_to=AFTER_REGISTER_PAGE,
                session_update=SessionUpdate(token=token, user=created.get("user"), registered=False),
            )
        except ApiError as exc:
            self.banner = exc.message or UNEXPECTED_ERROR
            return FormOutcome(ok=False)
        except Exception:
            logger.exception("Registration failed unexpectedly")
            self.banner = UNEXPECTED_ERROR
            return FormOutcome(ok=False)
        finally:
            self.is_loading = False

    def view(self) -> Dict[str, Any]:
        return {
            "values": {"email": self.values["email"]},
            "errors": dict(self.errors),
            "banner": self.banner or None,
            "isLoading": self.is_loading,
        }
