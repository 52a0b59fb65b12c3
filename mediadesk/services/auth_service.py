"""Client for the account endpoints: registration and sign-in."""

from __future__ import annotations

from typing import Any, Dict

from mediadesk.services.api_client import ApiResult, BackendClient

AUTH_PATH = "/api/auth"


def _token_and_user(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        return {"access_token": None, "user": None}
    user = data.get("user")
    return {
        "access_token": data.get("access_token"),
        "user": user if isinstance(user, dict) else None,
    }


class AuthService(BackendClient):
    """Unauthenticated calls that create a session."""

    def register(self, email: str, password: str) -> ApiResult[Dict[str, Any]]:
        """
        Create an account.

        Args:
            email: The new account's email address
            password: The chosen password

        Returns:
            A result holding ``access_token`` and the ``user`` snapshot
        """
        result = self._post(
            "/auth/register",
            resource_path=f"{AUTH_PATH}/register",
            authenticated=False,
            json={"email": email, "password": password},
        )
        return result.map(_token_and_user)

    def login(self, email: str, password: str) -> ApiResult[Dict[str, Any]]:
        """Sign in with existing credentials; same payload shape as :meth:`register`."""
        result = self._post(
            "/auth/login",
            resource_path=f"{AUTH_PATH}/login",
            authenticated=False,
            json={"email": email, "password": password},
        )
        return result.map(_token_and_user)
