"""Reusable commands shared by the training suites.

Every command takes the Browser wrapper first so suites read like a
sequence of steps:

    await commands.login(browser, "standard")
    await commands.verify_login_success(browser)
    await commands.take_screenshot_with_label(browser, "after-login")
"""
from __future__ import annotations

import json
import logging
import random
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, TypeVar

import anyio
from playwright.async_api import expect

from e2e_training.api_client import ApiClient
from e2e_training.browser import Browser, ToolError
from e2e_training.env_config import settings
from e2e_training.fixtures import fixture_path, fixture_value, load_fixture
from e2e_training.network_mocks import Interception, NetworkMocker

logger = logging.getLogger(__name__)

T = TypeVar("T")

LOGIN_PATH = "/login"
SECURE_PATH = "/secure"
FLASH = "#flash"


def _login_page_data() -> Dict[str, Any]:
    return fixture_value(load_fixture("custom_command_data"), "loginPage")


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def login(browser: Browser, user_type: str = "standard") -> Dict[str, Any]:
    """Log in through the form with a user from custom_command_data.

    Raises FixtureKeyError for an unknown user type.
    """
    data = load_fixture("custom_command_data")
    user = fixture_value(data, f"users.{user_type}")
    selectors = fixture_value(data, "loginPage.selectors")

    logger.info("Logging in as %s user: %s", user_type, user["username"])
    await browser.goto(fixture_value(data, "loginPage.url"))
    await browser.fill(selectors["usernameInput"], user["username"])
    await browser.fill(selectors["passwordInput"], user["password"])
    await browser.click(selectors["submitButton"])
    return user


async def verify_login_success(browser: Browser) -> None:
    page_data = _login_page_data()
    await expect(browser.page).to_have_url(re.compile(re.escape(page_data["successUrlFragment"])))
    message = browser.locator(page_data["selectors"]["successMessage"])
    await expect(message).to_be_visible()
    await expect(message).to_contain_text(page_data["messages"]["success"])


async def verify_login_error(browser: Browser, expected_message: Optional[str] = None) -> None:
    page_data = _login_page_data()
    await expect(browser.page).to_have_url(re.compile(re.escape(page_data["url"])))
    message = browser.locator(page_data["selectors"]["errorMessage"])
    await expect(message).to_be_visible()
    if expected_message:
        await expect(message).to_contain_text(expected_message)


async def api_login(
    browser: Browser,
    email: Optional[str] = None,
    password: Optional[str] = None,
    storage_key: str = "authToken",
) -> str:
    """Authenticate against the auth API and store the token in localStorage."""
    credentials = load_fixture("api_test_data").get_path("authCredentials")
    email = email or credentials["email"]
    password = password or credentials["password"]

    def _authenticate() -> str:
        with ApiClient() as api:
            return api.authenticate(email, password)

    token = await anyio.to_thread.run_sync(_authenticate)
    if not browser.page.url.startswith("http"):
        await browser.goto("/")
    await browser.evaluate(
        "([key, value]) => window.localStorage.setItem(key, value)",
        [storage_key, token],
    )
    logger.info("Stored API token in localStorage[%s]", storage_key)
    return token


async def login_to_heroku_app(browser: Browser, username: str, password: str) -> None:
    await browser.goto(LOGIN_PATH)
    await browser.fill("#username", username)
    await browser.fill("#password", password)
    await browser.click("button[type='submit']")


async def logout_from_heroku_app(browser: Browser) -> None:
    messages = load_fixture("login_credentials")["messages"]
    await browser.click("a[href='/logout']")
    await expect(browser.page).to_have_url(re.compile(LOGIN_PATH))
    await expect(browser.locator(FLASH)).to_contain_text(messages["logoutSuccess"])


async def login_with_role(browser: Browser, role: str) -> Dict[str, Any]:
    """Log in with the account mapped to `role` in login_credentials.roles."""
    account = fixture_value(load_fixture("login_credentials"), f"roles.{role}")
    logger.info("Logging in with role: %s", role)
    await login_to_heroku_app(browser, account["username"], account["password"])
    return account


async def verify_login_outcome(browser: Browser, expect_success: bool, message: Optional[str] = None) -> None:
    if expect_success:
        await expect(browser.page).to_have_url(re.compile(SECURE_PATH))
        await expect(browser.locator("#flash.success")).to_be_visible()
    else:
        await expect(browser.page).to_have_url(re.compile(LOGIN_PATH))
        await expect(browser.locator("#flash.error")).to_be_visible()
    if message:
        await expect(browser.locator(FLASH)).to_contain_text(message)


def auth_state_file(name: str) -> Path:
    return settings.auth_state_folder / f"{settings.environment}_{name}_auth_state.json"


def clear_session(name: str) -> None:
    state_file = auth_state_file(name)
    if state_file.exists():
        state_file.unlink()
        logger.info("Cleared auth state: %s", state_file)


async def session_login(browser: Browser, name: str, username: str, password: str) -> bool:
    """Log in once per session name and restore the saved cookies afterwards.

    The saved state is validated by opening the secure page; an expired
    state is discarded and a fresh login is performed.

    Returns:
        True when a saved session was reused
    """
    state_file = auth_state_file(name)
    context = browser.page.context

    if state_file.exists():
        state = json.loads(state_file.read_text(encoding="utf-8"))
        if state.get("cookies"):
            await context.add_cookies(state["cookies"])
        await browser.goto(SECURE_PATH)
        if SECURE_PATH in browser.page.url:
            logger.info("Using saved session %r", name)
            return True
        logger.warning("Saved session %r is no longer valid, logging in again", name)
        clear_session(name)

    await login_to_heroku_app(browser, username, password)
    await verify_login_outcome(browser, expect_success=True)
    state_file.parent.mkdir(parents=True, exist_ok=True)
    await context.storage_state(path=str(state_file))
    logger.info("Saved session %r to %s", name, state_file)
    return False


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------

async def fill_form(browser: Browser, fields: Mapping[str, str]) -> None:
    for selector, value in fields.items():
        await browser.clear(selector)
        await browser.fill(selector, value)


async def should_be_visible_and_contain(browser: Browser, selector: str, text: str) -> None:
    element = browser.locator(selector).first
    await expect(element).to_be_visible()
    await expect(element).to_contain_text(text)


async def type_and_verify(browser: Browser, selector: str, text: str) -> None:
    await browser.clear(selector)
    await browser.type_text(selector, text)
    await expect(browser.locator(selector).first).to_have_value(text)


async def click_and_wait(
    browser: Browser,
    selector: str,
    network: Optional[NetworkMocker] = None,
    alias: Optional[str] = None,
    timeout: float = 10.0,
) -> Optional[Interception]:
    """Click, then wait for the aliased request or for the page to settle."""
    await browser.click(selector)
    if network is not None and alias:
        return await network.wait(alias, timeout=timeout)
    await browser.page.wait_for_load_state("domcontentloaded")
    return None


async def force_click(browser: Browser, selector: str) -> None:
    await browser.click(selector, force=True)


async def check_link(browser: Browser, selector: str, expected_href: str) -> str:
    element = browser.locator(selector).first
    await expect(element).to_be_visible()
    href = await browser.get_attribute(selector, "href")
    if expected_href not in href:
        raise AssertionError(f"Link {selector} points to {href!r}, expected {expected_href!r}")
    return href


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------

async def take_screenshot_with_label(browser: Browser, label: str, selector: Optional[str] = None) -> str:
    """Screenshot the page (or one element) with a timestamped file name."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    safe_label = re.sub(r"[^A-Za-z0-9_-]+", "-", label).strip("-")
    name = f"{safe_label}_{timestamp}"
    if selector is None:
        return await browser.screenshot(name)

    settings.screenshots_folder.mkdir(parents=True, exist_ok=True)
    path = settings.screenshots_folder / f"{name}.png"
    try:
        await browser.locator(selector).first.screenshot(path=str(path))
    except Exception as exc:
        raise ToolError(name="take_screenshot_with_label", payload={"selector": selector}, message=str(exc))
    return str(path)


async def clear_all_data(browser: Browser) -> None:
    await browser.clear_storage()
    logger.info("Cleared cookies, localStorage and sessionStorage")


def log_test_info(test_name: str, **details: Any) -> None:
    logger.info("Test: %s | environment=%s | %s", test_name, settings.environment, details or "")


async def wait_for_element_to_disappear(browser: Browser, selector: str, timeout: int = 10000) -> None:
    await browser.wait_for_hidden(selector, timeout=timeout)


def get_random_item(items: Sequence[T]) -> T:
    if not items:
        raise ValueError("Cannot pick a random item from an empty sequence")
    return random.choice(items)


def log_environment_info() -> Dict[str, object]:
    info = dict(settings.env)
    info["baseUrl"] = settings.base_url
    info["timeout"] = settings.timeout
    info["retries"] = settings.retries
    for key, value in info.items():
        logger.info("%s: %s", key, value)
    return info


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

async def upload_file(browser: Browser, selector: str, fixture_name: str) -> Path:
    path = fixture_path(fixture_name)
    try:
        await browser.locator(selector).first.set_input_files(str(path))
    except Exception as exc:
        raise ToolError(name="upload_file", payload={"selector": selector, "file": str(path)}, message=str(exc))
    logger.info("Attached %s to %s", path.name, selector)
    return path


async def download_file(browser: Browser, selector: str, downloads_dir: Optional[Path] = None) -> Path:
    """Click a download link and save the file into the downloads folder."""
    target_dir = Path(downloads_dir or settings.downloads_folder)
    target_dir.mkdir(parents=True, exist_ok=True)
    async with browser.page.expect_download() as download_info:
        await browser.locator(selector).first.click()
    download = await download_info.value
    path = target_dir / download.suggested_filename
    await download.save_as(str(path))
    logger.info("Downloaded %s", path)
    return path
