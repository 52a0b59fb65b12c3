"""Validation schemas for the registration and complete-profile forms."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

PASSWORD_MIN_LENGTH = 8
FULL_NAME_MIN_LENGTH = 2
RESUME_SUMMARY_MIN_LENGTH = 5
MINIMUM_AGE = 18

ModelT = TypeVar("ModelT", bound=BaseModel)


def _context(info: ValidationInfo) -> Dict[str, Any]:
    return info.context or {}


def check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("email", "Please enter a valid email address")
    return value


class RegisterInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str
    confirm_password: str = Field(alias="confirmPassword")

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return check_email(value)

    @field_validator("password")
    @classmethod
    def password_length(cls, value: str) -> str:
        if len(value) < PASSWORD_MIN_LENGTH:
            raise PydanticCustomError(
                "password_length",
                "Password must be at least {min_length} characters",
                {"min_length": PASSWORD_MIN_LENGTH},
            )
        return value

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info: ValidationInfo) -> str:
        # Compare against the raw password so a mismatch is reported even
        # when the password itself failed its own rule.
        password = _context(info).get("password", info.data.get("password"))
        if value != password:
            raise PydanticCustomError("password_mismatch", "Passwords don't match")
        return value


class CompleteProfileInput(BaseModel):
    """Profile fields; option lists and "today" arrive through the validation context."""

    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(alias="fullName")
    date_of_birth: str = Field(alias="dateOfBirth")
    resume_summary: str = Field(alias="resumeSummary")
    preferred_location_id: int = Field(alias="preferredLocationId")
    programming_skills: List[int] = Field(alias="programmingSkills")

    @field_validator("full_name")
    @classmethod
    def full_name_length(cls, value: str) -> str:
        if len(value) < FULL_NAME_MIN_LENGTH:
            raise PydanticCustomError("full_name", "Full name must be at least 2 characters")
        return value

    @field_validator("date_of_birth")
    @classmethod
    def old_enough(cls, value: str, info: ValidationInfo) -> str:
        today: date = _context(info).get("today") or date.today()
        if calendar_age(value, today) < MINIMUM_AGE:
            raise PydanticCustomError("age", "You must be at least 18 years old")
        return value

    @field_validator("resume_summary")
    @classmethod
    def summary_length(cls, value: str) -> str:
        if len(value) < RESUME_SUMMARY_MIN_LENGTH:
            raise PydanticCustomError(
                "resume_summary", "Resume summary must be at least 5 characters"
            )
        return value

    @field_validator("preferred_location_id")
    @classmethod
    def known_location(cls, value: int, info: ValidationInfo) -> int:
        location_ids = _context(info).get("location_ids") or ()
        if value < 1 or (location_ids and value not in location_ids):
            raise PydanticCustomError("location", "Please select a location")
        return value

    @field_validator("programming_skills")
    @classmethod
    def skills_selected(cls, value: List[int], info: ValidationInfo) -> List[int]:
        if len(value) < 1:
            raise PydanticCustomError("skills", "Select at least one skill")
        skill_ids = _context(info).get("skill_ids") or ()
        if skill_ids and any(skill not in skill_ids for skill in value):
            raise PydanticCustomError("skills", "Select skills from the list")
        return value


def calendar_age(date_of_birth: str, today: date) -> int:
    """Age by calendar-year subtraction; -1 when the date cannot be parsed."""
    try:
        born = date.fromisoformat(date_of_birth.strip()[:10])
    except (AttributeError, ValueError):
        return -1
    return today.year - born.year


def profile_context(
    location_ids: Iterable[int] = (),
    skill_ids: Iterable[int] = (),
    today: Optional[date] = None,
) -> Dict[str, Any]:
    return {
        "location_ids": frozenset(location_ids),
        "skill_ids": frozenset(skill_ids),
        "today": today,
    }


def _field_aliases(model: Type[BaseModel]) -> Dict[str, str]:
    return {name: info.alias or name for name, info in model.model_fields.items()}


def field_errors(exc: ValidationError, model: Type[BaseModel]) -> Dict[str, str]:
    """Map a validation error to one message per form field (first wins)."""
    aliases = _field_aliases(model)
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("form",)
        field = aliases.get(str(loc[0]), str(loc[0]))
        errors.setdefault(field, error.get("msg", "Invalid value"))
    return errors


def validate_form(
    model: Type[ModelT],
    values: Mapping[str, Any],
    context: Optional[Dict[str, Any]] = None,
) -> Tuple[Optional[ModelT], Dict[str, str]]:
    """Validate ``values`` against ``model``.

    Returns:
        ``(instance, {})`` when valid, otherwise ``(None, field_errors)``
    """
    try:
        return model.model_validate(dict(values), context=context), {}
    except ValidationError as exc:
        return None, field_errors(exc, model)


class LoginInput(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def email_format(cls, value: str) -> str:
        return check_email(value)

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("password_required", "Password is required")
        return value
