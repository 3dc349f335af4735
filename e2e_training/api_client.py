"""HTTP helpers for the API testing suites.

Wraps httpx with the conveniences the suites use everywhere: relative URLs
resolved against the active JSON API, response timing, opt-out status
checking and small schema/header validators.

Usage:
    with ApiClient() as api:
        response = api.api_read("/posts", {"_limit": 5})
        assert response.status == 200
        validate_schema(response.body[0], POST_SCHEMA)

    with ApiClient() as api:
        api.authenticate("eve.holt@reqres.in", "cityslicka")
        profile = api.request("GET", api.auth_url("/users/2"))
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from e2e_training.env_config import E2ESettings, settings as default_settings

logger = logging.getLogger(__name__)

TYPE_CHECKS = {
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "string": lambda v: isinstance(v, str),
    "boolean": lambda v: isinstance(v, bool),
    "object": lambda v: isinstance(v, dict),
    "array": lambda v: isinstance(v, list),
    "null": lambda v: v is None,
}


@dataclass
class ApiResponse:
    """Status, parsed body, headers and duration of one request."""

    status: int
    body: Any
    headers: Dict[str, str]
    duration_ms: float
    url: str
    method: str

    @classmethod
    def from_httpx(cls, response: httpx.Response, duration_ms: float) -> ApiResponse:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        return cls(
            status=response.status_code,
            body=body,
            headers={k.lower(): v for k, v in response.headers.items()},
            duration_ms=duration_ms,
            url=str(response.request.url),
            method=response.request.method,
        )

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400

    def __repr__(self) -> str:
        return f"<ApiResponse {self.method} {self.url} status={self.status} {self.duration_ms:.0f}ms>"


class ApiStatusError(Exception):
    """Raised for a non-2xx/3xx status when status checking is on."""

    def __init__(self, response: ApiResponse) -> None:
        self.response = response
        super().__init__(
            f"{response.method} {response.url} failed with status code {response.status}: {response.body!r}"
        )


class ApiClient:
    """Synchronous client for the JSON and auth APIs of the active environment.

    Args:
        config: Settings to resolve URLs and timeouts from (default: singleton)
        transport: Optional httpx transport (e.g. WSGITransport in tests)
    """

    def __init__(
        self,
        config: Optional[E2ESettings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = config or default_settings
        self.auth_token: Optional[str] = None
        self._client = httpx.Client(
            timeout=self.settings.timeout / 1000,
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    def __enter__(self) -> ApiClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ---- URL helpers ------------------------------------------------------------
    def url(self, path: str) -> str:
        return self.settings.api_url(path)

    def auth_url(self, path: str) -> str:
        return self.settings.auth_url(path)

    # ---- core request -----------------------------------------------------------
    def request(
        self,
        method: str,
        url: str,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        fail_on_status_code: bool = True,
        timeout: Optional[float] = None,
    ) -> ApiResponse:
        """Send a request and return an ApiResponse.

        Args:
            timeout: Seconds; defaults to the active profile timeout
        """
        merged_headers: Dict[str, str] = {}
        if self.auth_token:
            merged_headers["Authorization"] = f"Bearer {self.auth_token}"
        if headers:
            merged_headers.update(headers)

        target = self.url(url)
        logger.info("%s %s", method.upper(), target)
        started = time.perf_counter()
        response = self._client.request(
            method.upper(),
            target,
            json=json,
            params=params,
            headers=merged_headers,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        duration_ms = (time.perf_counter() - started) * 1000
        result = ApiResponse.from_httpx(response, duration_ms)
        logger.info("Status: %s (%.0fms)", result.status, duration_ms)

        if fail_on_status_code and not result.ok:
            raise ApiStatusError(result)
        return result

    # ---- CRUD helpers -----------------------------------------------------------
    def api_create(self, url: str, body: Any, **kwargs: Any) -> ApiResponse:
        return self.request("POST", url, json=body, **kwargs)

    def api_read(self, url: str, params: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> ApiResponse:
        return self.request("GET", url, params=params, **kwargs)

    def api_update(self, url: str, body: Any, **kwargs: Any) -> ApiResponse:
        return self.request("PUT", url, json=body, **kwargs)

    def api_patch(self, url: str, body: Any, **kwargs: Any) -> ApiResponse:
        return self.request("PATCH", url, json=body, **kwargs)

    def api_delete(self, url: str, **kwargs: Any) -> ApiResponse:
        return self.request("DELETE", url, **kwargs)

    # ---- validated helpers ------------------------------------------------------
    def api_get_and_validate(self, url: str, expected_status: int = 200) -> ApiResponse:
        response = self.request("GET", url, fail_on_status_code=False)
        if response.status != expected_status:
            raise AssertionError(
                f"GET {response.url}: expected status {expected_status}, got {response.status}"
            )
        return response

    def api_post_and_validate(self, url: str, body: Any, expected_status: int = 201) -> ApiResponse:
        response = self.request("POST", url, json=body, fail_on_status_code=False)
        if response.status != expected_status:
            raise AssertionError(
                f"POST {response.url}: expected status {expected_status}, got {response.status}"
            )
        return response

    # ---- authentication ---------------------------------------------------------
    def authenticate(self, email: str, password: str) -> str:
        """Log in against the auth API and keep the bearer token."""
        response = self.request(
            "POST",
            self.auth_url("/login"),
            json={"email": email, "password": password},
            headers={"x-api-key": self.settings.auth_api_key},
        )
        token = response.body.get("token") if isinstance(response.body, dict) else None
        if not token:
            raise ApiStatusError(response)
        self.auth_token = token
        logger.info("Authenticated as %s", email)
        return token

    def health_check(self, path: str = "/users/1") -> bool:
        """True when the API answers below 500."""
        try:
            response = self.request("GET", path, fail_on_status_code=False)
        except httpx.HTTPError as exc:
            logger.warning("Health check failed: %s", exc)
            return False
        return response.status < 500


def validate_schema(body: Mapping[str, Any], schema: Mapping[str, Any]) -> None:
    """Check required fields and JSON types.

    schema = {"requiredFields": ["id", ...], "types": {"id": "number", ...}}
    """
    if not isinstance(body, Mapping):
        raise AssertionError(f"Expected an object, got {type(body).__name__}")
    for field in schema.get("requiredFields", []):
        if field not in body:
            raise AssertionError(f"Missing field: {field}")
    for field, expected in schema.get("types", {}).items():
        check = TYPE_CHECKS.get(expected)
        if check is None:
            raise ValueError(f"Unknown schema type {expected!r} for field {field!r}")
        if field in body and not check(body[field]):
            raise AssertionError(
                f"Field {field!r} should be {expected}, got {type(body[field]).__name__}"
            )


def validate_headers(response: ApiResponse, expected: Mapping[str, str]) -> None:
    """Each expected header must exist and contain the given substring."""
    for name, fragment in expected.items():
        value = response.headers.get(name.lower())
        if value is None:
            raise AssertionError(f"Missing header: {name}")
        if fragment not in value:
            raise AssertionError(f"Header {name!r}={value!r} does not contain {fragment!r}")
