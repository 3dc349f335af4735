"""Fixtures for the package's own tests.

Everything here runs against the local demo site, whatever E2E_ENV says, and
writes artifacts into the test's tmp_path. Browser tests are skipped when no
Playwright browser is installed.
"""
import pytest
import pytest_asyncio

from e2e_training.demo_site import reset_demo_state
from e2e_training.env_config import settings
from e2e_training.playwright_client import PlaywrightClient


@pytest.fixture(autouse=True)
def artifacts(tmp_path, monkeypatch):
    """Per-test artifact folders."""
    monkeypatch.setattr(settings, "artifacts_dir", tmp_path)
    monkeypatch.setattr(settings, "downloads_folder", tmp_path / "downloads")
    monkeypatch.setattr(settings, "screenshots_folder", tmp_path / "screenshots")
    monkeypatch.setattr(settings, "videos_folder", tmp_path / "videos")
    monkeypatch.setattr(settings, "reports_folder", tmp_path / "reports")
    monkeypatch.setattr(settings, "auth_state_folder", tmp_path / "auth-states")
    return tmp_path


@pytest.fixture(autouse=True)
def active_environment(demo_server):
    """Point every URL at the demo site."""
    reset_demo_state()
    with settings.use_profile(settings.demo_profile(demo_server.url)) as profile:
        yield profile


@pytest_asyncio.fixture()
async def playwright_client():
    client = PlaywrightClient(headless=True)
    try:
        await client.connect()
    except Exception as exc:
        pytest.skip(f"Playwright browser not available: {exc}")
    yield client
    await client.close()
