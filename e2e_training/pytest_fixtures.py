"""pytest plugin with the fixtures and hooks shared by every suite.

Loaded from the repository conftest.py and by e2e-run (``-p``).

Setup and teardown that the suites need on every test live here as
fixtures: a fresh browser page per test, per-test network intercepts that
are removed on teardown, an API client, a clean downloads folder and a
failure screenshot.
"""
from __future__ import annotations

import logging
import re

import pytest
import pytest_asyncio

from e2e_training.api_client import ApiClient
from e2e_training.browser import Browser, ToolError
from e2e_training.demo_site import DemoSiteServer, reset_demo_state
from e2e_training.env_config import settings
from e2e_training.file_tasks import clear_downloads_folder
from e2e_training.fixtures import load_fixture
from e2e_training.network_mocks import NetworkMocker
from e2e_training.pages.login_page import LoginPage
from e2e_training.playwright_client import PlaywrightClient

logger = logging.getLogger(__name__)

MARKERS = {
    "smoke": "fast checks that the site and APIs are up",
    "regression": "full behavioural coverage",
    "api": "HTTP API tests (no browser)",
    "ui": "browser tests",
}


def pytest_configure(config):
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")
    if settings.debug_mode:
        logging.getLogger("e2e_training").setLevel(logging.DEBUG)


def pytest_report_header(config):
    return [
        f"e2e environment: {settings.environment} (mock={settings.mock_enabled}, debug={settings.debug_mode})",
        f"e2e base url: {settings.base_url}",
        f"e2e browser: {settings.browser_type} (headless={settings.playwright_headless})",
    ]


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Keep each phase report on the item so fixtures can see failures in teardown."""
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)


def _failed(node) -> bool:
    rep = getattr(node, "rep_call", None)
    return bool(rep and rep.failed)


# ============================================================================
# Environment
# ============================================================================

@pytest.fixture(scope="session")
def demo_server():
    """Local copy of the practice site and APIs on a free port."""
    server = DemoSiteServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture(autouse=True)
def active_environment(request):
    """Point every URL at the demo site when the profile has mocking enabled."""
    if not settings.mock_enabled:
        yield settings.profile
        return
    server = request.getfixturevalue("demo_server")
    reset_demo_state()
    with settings.use_profile(settings.demo_profile(server.url)) as profile:
        yield profile


# ============================================================================
# Browser
# ============================================================================

@pytest_asyncio.fixture()
async def playwright_client():
    """Create a Playwright client instance."""
    async with PlaywrightClient(headless=settings.playwright_headless) as client:
        yield client


@pytest_asyncio.fixture()
async def browser(request, playwright_client):
    """Create a Browser instance; a screenshot is saved when the test fails."""
    browser = Browser(playwright_client.page)
    await browser.reset()
    yield browser
    if _failed(request.node):
        name = re.sub(r"[^A-Za-z0-9_.-]+", "_", request.node.nodeid)
        try:
            path = await browser.screenshot(f"FAILED-{name}")
            logger.info("Failure screenshot: %s", path)
        except ToolError as exc:
            logger.warning("Could not capture failure screenshot: %s", exc)


@pytest_asyncio.fixture()
async def login_page(browser):
    return LoginPage(browser)


@pytest_asyncio.fixture()
async def network(browser):
    """Intercepts for the current page, removed after the test."""
    mocker = NetworkMocker(browser.page)
    yield mocker
    await mocker.clear()


# ============================================================================
# API, files and data
# ============================================================================

@pytest.fixture()
def api_client():
    with ApiClient() as client:
        yield client


@pytest.fixture()
def downloads_dir():
    """Empty downloads folder for the test."""
    clear_downloads_folder()
    return settings.downloads_folder


@pytest.fixture()
def load_data():
    """The fixture loader: load_data("login_credentials")."""
    return load_fixture
