"""Backend API clients, one per resource family."""

from . import api_client, auth_service, media_service, options_service, tag_service, user_service

__all__ = [
    "api_client",
    "auth_service",
    "media_service",
    "options_service",
    "tag_service",
    "user_service",
]
