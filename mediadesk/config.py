"""Environment-driven configuration for the front-end application."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

BATCH_ALL_OR_NOTHING = "all_or_nothing"
BATCH_PARTIAL = "partial"


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class AppConfig:
    """Settings shared by the API clients, the session store and the routes."""

    api_url: str = "http://localhost:4000/api"
    media_url: str = "http://localhost:4000/uploads"
    public_url: str = "http://localhost:4000"
    environment: str = "development"
    secret_key: str = "dev-secret-key"
    # None disables the request timeout.
    api_timeout_sec: Optional[float] = None
    upload_batch_semantics: str = BATCH_ALL_OR_NOTHING
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create config from environment variables."""
        semantics = os.getenv("UPLOAD_BATCH_SEMANTICS", BATCH_ALL_OR_NOTHING).strip().lower()
        if semantics not in (BATCH_ALL_OR_NOTHING, BATCH_PARTIAL):
            raise ValueError(f"Unsupported UPLOAD_BATCH_SEMANTICS value: {semantics!r}")

        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            api_url=os.getenv("API_URL", "http://localhost:4000/api").rstrip("/"),
            media_url=os.getenv("MEDIA_URL", "http://localhost:4000/uploads").rstrip("/"),
            public_url=os.getenv("PUBLIC_URL", "http://localhost:4000").rstrip("/"),
            environment=os.getenv("APP_ENV", "development").strip().lower(),
            secret_key=os.getenv("SECRET_KEY", "dev-secret-key"),
            api_timeout_sec=_optional_float(os.getenv("API_TIMEOUT_SEC")),
            upload_batch_semantics=semantics,
            cors_origins=origins or ["*"],
        )


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: Optional[AppConfig]) -> None:
    """Replace (or reset, with None) the global config instance."""
    global _config
    _config = config
