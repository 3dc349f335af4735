"""Static JSON test data loaded by suites at run time.

Fixture files live in fixtures/ at the repository root (override with
E2E_FIXTURES_DIR). Records are loaded fresh on every call so one test can
never see another test's mutations.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from e2e_training.env_config import REPO_ROOT


class FixtureNotFoundError(FileNotFoundError):
    """Raised when a fixture file does not exist."""


class FixtureKeyError(KeyError):
    """Raised when a fixture record lacks a requested key."""

    def __init__(self, fixture: str, path: str) -> None:
        self.fixture = fixture
        self.path = path
        super().__init__(f"Key {path!r} not found in fixture {fixture!r}")

    def __str__(self) -> str:
        return self.args[0]


class FixtureData(dict):
    """A loaded fixture that remembers its name for error messages."""

    def __init__(self, name: str, data: dict[str, Any]) -> None:
        super().__init__(data)
        self.name = name

    def get_path(self, path: str) -> Any:
        return fixture_value(self, path)


def fixtures_dir() -> Path:
    return Path(os.environ.get("E2E_FIXTURES_DIR") or REPO_ROOT / "fixtures")


def fixture_path(name: str) -> Path:
    """Absolute path of a fixture asset such as an upload sample."""
    path = fixtures_dir() / name
    if not path.exists():
        raise FixtureNotFoundError(f"Fixture file not found: {path}")
    return path


def load_fixture(name: str) -> FixtureData:
    """Load fixtures/<name>.json."""
    filename = name if name.endswith(".json") else f"{name}.json"
    path = fixtures_dir() / filename
    if not path.exists():
        raise FixtureNotFoundError(f"Fixture file not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    return FixtureData(Path(filename).stem, data)


def fixture_value(data: dict[str, Any], path: str) -> Any:
    """Walk a dotted key path, e.g. ``users.admin.username``."""
    fixture = getattr(data, "name", "<inline>")
    current: Any = data
    for part in path.split("."):
        if isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        elif isinstance(current, dict) and part in current:
            current = current[part]
        else:
            raise FixtureKeyError(fixture, path)
    return current
