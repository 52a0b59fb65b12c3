"""Data models shared by the API clients and the screen controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


@dataclass
class Envelope:
    """The fixed JSON wrapper every backend response arrives in."""
    success: bool
    status_code: int
    message: str = ""
    path: str = ""
    timestamp: str = ""
    data: Any = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], http_status: int) -> "Envelope":
        return cls(
            success=bool(payload.get("success", False)),
            status_code=_to_int(payload.get("statusCode"), http_status),
            message=str(payload.get("message") or ""),
            path=str(payload.get("path") or ""),
            timestamp=str(payload.get("timestamp") or ""),
            data=payload.get("data"),
        )


@dataclass
class Tag:
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tag":
        return cls(id=_to_int(data.get("id")), name=str(data.get("name", "")))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Option:
    """A reference option (preferred location or programming skill)."""
    id: int
    name: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        # Locations come back as locationName, skills as name.
        name = data.get("name") or data.get("locationName") or ""
        return cls(id=_to_int(data.get("id")), name=str(name))

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class Profile:
    """Typed view over the cached user snapshot."""
    id: int
    email: str = ""
    full_name: str = ""
    date_of_birth: str = ""
    preferred_location: Optional[Option] = None
    resume_summary: str = ""
    programming_skills: List[Option] = field(default_factory=list)
    profile_image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        location = data.get("preferredLocation")
        skills = data.get("programmingSkills")
        return cls(
            id=_to_int(data.get("id")),
            email=data.get("email") or "",
            full_name=data.get("fullName") or "",
            date_of_birth=data.get("dateOfBirth") or "",
            preferred_location=Option.from_dict(location) if isinstance(location, dict) else None,
            resume_summary=data.get("resumeSummary") or "",
            programming_skills=[
                Option.from_dict(skill) for skill in skills if isinstance(skill, dict)
            ] if isinstance(skills, list) else [],
            profile_image=data.get("profileImage") or None,
        )


@dataclass
class MediaRecord:
    """Server-owned media row, projected read-only on the client."""
    id: int
    owner_id: int
    storage_path: str
    display_name: str
    mime_category: str
    extension: str
    view_count: int
    byte_size: int
    original_name: str
    created_at: str
    updated_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaRecord":
        # The backend sends counters and sizes as strings.
        return cls(
            id=_to_int(data.get("id")),
            owner_id=_to_int(data.get("user_id")),
            storage_path=str(data.get("file_path", "")),
            display_name=str(data.get("file_name", "")),
            mime_category=str(data.get("file_type", "")),
            extension=str(data.get("file_extension", "")),
            view_count=_to_int(data.get("number_of_views")),
            byte_size=_to_int(data.get("file_size")),
            original_name=str(data.get("original_name", "")),
            created_at=str(data.get("created_at", "")),
            updated_at=str(data.get("updated_at", "")),
        )


@dataclass
class FilePayload:
    """A file picked or dropped by the visitor, before any filtering."""
    name: str
    mime_type: str
    content: bytes = b""

    @property
    def size(self) -> int:
        return len(self.content)

    def as_multipart(self, field_name: str):
        return (field_name, (self.name, self.content, self.mime_type))
