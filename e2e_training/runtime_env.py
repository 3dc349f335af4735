"""Runtime environment variables for the suites.

Values are looked up in this order:
1. OS environment variable E2E_<name> (CI secrets land here)
2. e2e.env.json at the repository root (override path with E2E_ENV_FILE)
3. the active settings `env` mapping (environment, apiBaseUrl, ...)
4. the caller's default
"""

from __future__ import annotations

import json
import os
from copy import deepcopy
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from e2e_training.env_config import REPO_ROOT, settings

ENV_PREFIX = "E2E_"


class MissingEnvironmentError(RuntimeError):
    """Raised when a suite needs variables that are not configured."""

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(f"Required environment variables are not set: {', '.join(names)}")


def env_file_path() -> Path:
    return Path(os.environ.get("E2E_ENV_FILE") or REPO_ROOT / "e2e.env.json")


@lru_cache(maxsize=4)
def _load_env_file(path: str) -> Dict[str, Any]:
    env_file = Path(path)
    if not env_file.exists():
        return {}
    return json.loads(env_file.read_text(encoding="utf-8"))


def clear_cache() -> None:
    _load_env_file.cache_clear()


def get_env_variable(name: str, default: Any = None) -> Any:
    """Return a runtime variable, or `default` when it is not set anywhere."""
    from_os = os.environ.get(f"{ENV_PREFIX}{name}")
    if from_os is not None:
        return from_os

    values = _load_env_file(str(env_file_path()))
    if name in values:
        return deepcopy(values[name])

    if name in settings.env:
        return settings.env[name]

    return default


def feature_flags() -> Dict[str, bool]:
    flags = get_env_variable("featureFlags", {})
    if isinstance(flags, str):
        flags = json.loads(flags)
    return dict(flags or {})


def check_feature_flag(name: str) -> bool:
    return bool(feature_flags().get(name, False))


def require_env(*names: str) -> Dict[str, Any]:
    """Return the requested variables, raising if any is missing."""
    values: Dict[str, Optional[Any]] = {name: get_env_variable(name) for name in names}
    missing = [name for name, value in values.items() if value in (None, "")]
    if missing:
        raise MissingEnvironmentError(missing)
    return values
