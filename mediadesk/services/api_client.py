"""Shared HTTP plumbing for every backend resource client."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

import requests

from mediadesk.config import AppConfig, get_config
from mediadesk.models import Envelope
from mediadesk.utils.session import SessionContext

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

KIND_UNAUTHENTICATED = "unauthenticated"
KIND_API = "api"
KIND_NETWORK = "network"

NOT_AUTHENTICATED_MESSAGE = "Not authenticated"
NETWORK_ERROR_MESSAGE = "Network error"


@dataclass(frozen=True)
class ApiFailure:
    """Why a backend call did not produce data."""
    kind: str
    status: int
    path: str
    message: str


class ApiError(Exception):
    """API error with status code, resource path and message."""

    def __init__(self, message: str, status: int, path: str, kind: str = KIND_API):
        self.message = message
        self.status = status
        self.path = path
        self.kind = kind
        super().__init__(message)

    @classmethod
    def from_failure(cls, failure: ApiFailure) -> "ApiError":
        return cls(failure.message, failure.status, failure.path, failure.kind)

    def to_failure(self) -> ApiFailure:
        return ApiFailure(kind=self.kind, status=self.status, path=self.path, message=self.message)


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Outcome of one backend call: either data or an :class:`ApiFailure`."""
    ok: bool
    data: Optional[T] = None
    message: str = ""
    error: Optional[ApiFailure] = None

    @classmethod
    def success(cls, data: T, message: str = "") -> "ApiResult[T]":
        return cls(ok=True, data=data, message=message)

    @classmethod
    def failure(cls, kind: str, status: int, path: str, message: str) -> "ApiResult[T]":
        return cls(ok=False, error=ApiFailure(kind=kind, status=status, path=path, message=message))

    def unwrap(self) -> T:
        """Return the data or raise the failure as an :class:`ApiError`."""
        if self.error is not None:
            raise ApiError.from_failure(self.error)
        return self.data  # type: ignore[return-value]

    def map(self, fn: Callable[[T], U]) -> "ApiResult[U]":
        if not self.ok:
            return ApiResult(ok=False, error=self.error, message=self.message)
        return ApiResult(ok=True, data=fn(self.data), message=self.message)  # type: ignore[arg-type]


FileField = Tuple[str, Tuple[str, bytes, str]]


class BackendClient:
    """Synchronous HTTP client for one family of backend resources."""

    def __init__(
        self,
        session: SessionContext,
        config: Optional[AppConfig] = None,
        http: Optional[requests.Session] = None,
    ):
        self.session = session
        self.config = config or get_config()
        self.base_url = self.config.api_url.rstrip("/")
        self.timeout = self.config.api_timeout_sec
        self.http = http or requests.Session()

    def _url(self, endpoint: str) -> str:
        """Build full URL from an endpoint path."""
        return f"{self.base_url}{endpoint}"

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        resource_path: str,
        authenticated: bool = True,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[List[FileField]] = None,
    ) -> ApiResult[Any]:
        """Issue one request and decode the response envelope.

        Args:
            method: HTTP verb
            endpoint: Path below the configured API base URL
            resource_path: Fixed path reported when the call fails before the
                backend could name one (missing token, network failure)
            authenticated: Whether a bearer token is required

        Returns:
            The envelope data on success, otherwise a failure describing
            the missing token, the backend's error or the network problem
        """
        headers: Dict[str, str] = {}
        if authenticated:
            token = self.session.access_token
            if not token:
                return ApiResult.failure(
                    KIND_UNAUTHENTICATED, 401, resource_path, NOT_AUTHENTICATED_MESSAGE
                )
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.http.request(
                method=method,
                url=self._url(endpoint),
                headers=headers,
                params=params,
                json=json,
                data=data,
                files=files,
                timeout=self.timeout,
            )
            payload = response.json()
        except (requests.RequestException, ValueError):
            logger.exception("%s %s failed before a response envelope was read", method, endpoint)
            return ApiResult.failure(KIND_NETWORK, 500, resource_path, NETWORK_ERROR_MESSAGE)

        if not isinstance(payload, dict):
            logger.error("%s %s returned a non-object body", method, endpoint)
            return ApiResult.failure(KIND_NETWORK, 500, resource_path, NETWORK_ERROR_MESSAGE)

        envelope = Envelope.from_dict(payload, response.status_code)
        if not response.ok or not envelope.success:
            logger.info(
                "%s %s rejected with %s: %s",
                method, endpoint, envelope.status_code, envelope.message,
            )
            return ApiResult.failure(
                KIND_API,
                envelope.status_code,
                envelope.path or resource_path,
                envelope.message or ("" if response.ok else response.reason or ""),
            )

        return ApiResult.success(envelope.data, envelope.message)

    def _get(self, endpoint: str, *, resource_path: str, **kwargs: Any) -> ApiResult[Any]:
        return self._request("GET", endpoint, resource_path=resource_path, **kwargs)

    def _post(self, endpoint: str, *, resource_path: str, **kwargs: Any) -> ApiResult[Any]:
        return self._request("POST", endpoint, resource_path=resource_path, **kwargs)

    def _patch(self, endpoint: str, *, resource_path: str, **kwargs: Any) -> ApiResult[Any]:
        return self._request("PATCH", endpoint, resource_path=resource_path, **kwargs)

    def _delete(self, endpoint: str, *, resource_path: str, **kwargs: Any) -> ApiResult[Any]:
        return self._request("DELETE", endpoint, resource_path=resource_path, **kwargs)
