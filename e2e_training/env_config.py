"""Environment configuration for the end-to-end training suites.

The active environment is selected with E2E_ENV:
- development: routes every suite to the local demo site (mock_enabled)
- qa (default): public practice site and public REST APIs
- staging / production: same targets with longer timeouts and more retries

Usage:
    E2E_ENV=production pytest e2e_training/specs
    e2e-run --env production
"""
from __future__ import annotations

import os
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional
from urllib.parse import urljoin

DEFAULT_ENVIRONMENT = "qa"

ENV_ALIASES = {
    "dev": "development",
    "prod": "production",
    "stage": "staging",
}

PRACTICE_SITE_URL = "https://the-internet.herokuapp.com"
JSON_API_URL = "https://jsonplaceholder.typicode.com"
AUTH_API_URL = "https://reqres.in/api"

REPO_ROOT = Path(__file__).resolve().parents[1]


@dataclass
class EnvironmentProfile:
    """Concrete set of hosts and runner knobs for one environment."""

    name: str
    base_url: str
    api_base_url: str
    auth_api_url: str
    mock_enabled: bool
    debug_mode: bool
    retries: int
    timeout: int  # milliseconds

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000


ENVIRONMENTS: Dict[str, EnvironmentProfile] = {
    "development": EnvironmentProfile(
        name="development",
        base_url=PRACTICE_SITE_URL,
        api_base_url=JSON_API_URL,
        auth_api_url=AUTH_API_URL,
        mock_enabled=True,
        debug_mode=True,
        retries=0,
        timeout=8000,
    ),
    "qa": EnvironmentProfile(
        name="qa",
        base_url=PRACTICE_SITE_URL,
        api_base_url=JSON_API_URL,
        auth_api_url=AUTH_API_URL,
        mock_enabled=False,
        debug_mode=True,
        retries=1,
        timeout=10000,
    ),
    "staging": EnvironmentProfile(
        name="staging",
        base_url=PRACTICE_SITE_URL,
        api_base_url=JSON_API_URL,
        auth_api_url=AUTH_API_URL,
        mock_enabled=False,
        debug_mode=False,
        retries=1,
        timeout=12000,
    ),
    "production": EnvironmentProfile(
        name="production",
        base_url=PRACTICE_SITE_URL,
        api_base_url=JSON_API_URL,
        auth_api_url=AUTH_API_URL,
        mock_enabled=False,
        debug_mode=False,
        retries=2,
        timeout=15000,
    ),
}


def resolve_environment_name(name: Optional[str]) -> str:
    """Map an E2E_ENV value to a known environment name.

    Unknown names fall back to qa, matching how the runner treats a typo in
    CI: the suite still runs, against the safest target.
    """
    if not name:
        return DEFAULT_ENVIRONMENT
    key = ENV_ALIASES.get(name.strip().lower(), name.strip().lower())
    if key not in ENVIRONMENTS:
        print(f"[CONFIG] WARNING: unknown environment {name!r}, using {DEFAULT_ENVIRONMENT}")
        return DEFAULT_ENVIRONMENT
    return key


def get_profile(name: Optional[str] = None) -> EnvironmentProfile:
    """Return a copy of the profile for `name` (or E2E_ENV)."""
    if name is None:
        name = os.getenv("E2E_ENV")
    return deepcopy(ENVIRONMENTS[resolve_environment_name(name)])


def _env_flag(environ: Mapping[str, str], key: str, default: str) -> bool:
    return environ.get(key, default).strip().lower() in {"1", "true", "yes"}


class E2ESettings:
    """Settings shared by fixtures, commands and the runner.

    The profile comes from E2E_ENV; individual values can be overridden
    with E2E_BASE_URL, E2E_API_BASE_URL, E2E_AUTH_API_URL, E2E_TIMEOUT and
    E2E_RETRIES.
    """

    viewport_width = 1280
    viewport_height = 800

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        self._environ = environ
        self._load()

    def _load(self) -> None:
        environ = os.environ if self._environ is None else self._environ

        profile = get_profile(environ.get("E2E_ENV") or DEFAULT_ENVIRONMENT)
        profile.base_url = environ.get("E2E_BASE_URL") or profile.base_url
        profile.api_base_url = environ.get("E2E_API_BASE_URL") or profile.api_base_url
        profile.auth_api_url = environ.get("E2E_AUTH_API_URL") or profile.auth_api_url
        if environ.get("E2E_TIMEOUT"):
            profile.timeout = int(environ["E2E_TIMEOUT"])
        if environ.get("E2E_RETRIES"):
            profile.retries = int(environ["E2E_RETRIES"])

        self.playwright_headless: bool = _env_flag(environ, "PLAYWRIGHT_HEADLESS", "true")
        self.browser_type: str = environ.get("E2E_BROWSER", "chromium")
        self.record_video: bool = _env_flag(environ, "E2E_VIDEO", "0")
        self.auth_api_key: str = environ.get("E2E_AUTH_API_KEY", "reqres-free-v1")

        artifacts = Path(environ.get("E2E_ARTIFACTS_DIR") or REPO_ROOT / "artifacts")
        self.artifacts_dir: Path = artifacts
        self.downloads_folder: Path = artifacts / "downloads"
        self.screenshots_folder: Path = artifacts / "screenshots"
        self.videos_folder: Path = artifacts / "videos"
        self.reports_folder: Path = artifacts / "reports"
        self.auth_state_folder: Path = artifacts / "auth-states"

        self._base: EnvironmentProfile = profile
        self._active: EnvironmentProfile = profile

    def reload(self) -> None:
        """Re-read the process environment (after the runner sets E2E_ENV)."""
        self._load()

    # ---- active profile helpers -------------------------------------------------
    @property
    def profile(self) -> EnvironmentProfile:
        return self._active

    @property
    def environment(self) -> str:
        return self._active.name

    @property
    def base_url(self) -> str:
        return self._active.base_url

    @property
    def api_base_url(self) -> str:
        return self._active.api_base_url

    @property
    def auth_api_url(self) -> str:
        return self._active.auth_api_url

    @property
    def mock_enabled(self) -> bool:
        return self._active.mock_enabled

    @property
    def debug_mode(self) -> bool:
        return self._active.debug_mode

    @property
    def retries(self) -> int:
        return self._active.retries

    @property
    def timeout(self) -> int:
        return self._active.timeout

    @property
    def env(self) -> Dict[str, object]:
        """Values exposed to suites as environment variables."""
        return {
            "environment": self._active.name,
            "apiUrl": self._active.api_base_url,
            "apiBaseUrl": self._active.api_base_url,
            "authApiUrl": self._active.auth_api_url,
            "mockEnabled": self._active.mock_enabled,
            "debugMode": self._active.debug_mode,
        }

    # ---- profile orchestration --------------------------------------------------
    def demo_profile(self, demo_url: str) -> EnvironmentProfile:
        """Active profile re-pointed at a running demo site."""
        root = demo_url.rstrip("/")
        return replace(
            self._base,
            base_url=root,
            api_base_url=f"{root}/json-api",
            auth_api_url=f"{root}/auth-api",
        )

    @contextmanager
    def use_profile(self, profile: EnvironmentProfile) -> Iterator[EnvironmentProfile]:
        """Temporarily switch the active profile.

        The profile is deep-copied so in-test mutations never leak into the
        next test.
        """
        previous = self._active
        self._active = deepcopy(profile)
        try:
            yield self._active
        finally:
            self._active = previous

    # ---- utility helpers --------------------------------------------------------
    def url(self, path: str) -> str:
        """Return an absolute URL on the practice site."""
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def api_url(self, path: str) -> str:
        """Return an absolute URL on the JSON API."""
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.api_base_url.rstrip("/") + "/", path.lstrip("/"))

    def auth_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.auth_api_url.rstrip("/") + "/", path.lstrip("/"))

    def ensure_artifact_dirs(self) -> None:
        for folder in (
            self.downloads_folder,
            self.screenshots_folder,
            self.videos_folder,
            self.reports_folder,
            self.auth_state_folder,
        ):
            folder.mkdir(parents=True, exist_ok=True)


# Singleton instance - initialized on first import
settings = E2ESettings()
print(f"[CONFIG] Environment: {settings.environment}")
