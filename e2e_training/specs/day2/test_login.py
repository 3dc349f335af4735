"""
Login form actions on the practice site.

Covers the basic browser actions (visit, fill, type, clear, click, press),
value/attribute/focus checks, reload and history navigation, viewport
changes and screenshots. Test data comes from fixtures/login_credentials.json.

Run with: e2e-run --spec e2e_training/specs/day2/test_login.py
"""
import logging
import re

import pytest
import pytest_asyncio
from playwright.async_api import expect

from e2e_training.env_config import settings
from e2e_training.fixtures import load_fixture

pytestmark = [pytest.mark.asyncio, pytest.mark.ui, pytest.mark.smoke]

logger = logging.getLogger(__name__)

USERNAME = "#username"
PASSWORD = "#password"
SUBMIT = "button[type='submit']"
FLASH = "#flash"


@pytest.fixture(scope="module")
def login_data():
    return load_fixture("login_credentials")


@pytest_asyncio.fixture()
async def on_login_page(browser):
    """Open the login page with a desktop viewport; clear state afterwards."""
    await browser.set_viewport(1280, 800)
    await browser.goto("/login")
    await expect(browser.page).to_have_url(re.compile("/login"))
    await expect(browser.page).to_have_title(re.compile("The Internet"))
    yield browser
    await browser.clear_storage()


async def test_login_with_valid_credentials(on_login_page, login_data):
    browser = on_login_page
    user = login_data["validUser"]

    username = browser.locator(USERNAME)
    await expect(username).to_be_visible()
    await browser.fill(USERNAME, user["username"])
    await expect(username).to_have_value(user["username"])

    password = browser.locator(PASSWORD)
    await expect(password).to_be_visible()
    await browser.fill(PASSWORD, user["password"])
    await expect(password).to_have_value(user["password"])

    submit = browser.locator(SUBMIT)
    await expect(submit).to_be_visible()
    await expect(submit).to_be_enabled()
    await browser.click(SUBMIT)

    await expect(browser.page).to_have_url(re.compile("/secure"))
    await expect(browser.page.get_by_text(user["expectedMessage"])).to_be_visible()
    await browser.screenshot("TC001-successful-login")


@pytest.mark.parametrize("record", ["invalidUser", "invalidPassword"])
async def test_login_with_invalid_credentials_shows_error(on_login_page, login_data, record):
    browser = on_login_page
    user = login_data[record]

    await browser.fill(USERNAME, "leftover")
    await browser.clear(USERNAME)
    await expect(browser.locator(USERNAME)).to_have_value("")

    await browser.fill(USERNAME, user["username"])
    await browser.fill(PASSWORD, user["password"])
    await browser.click(SUBMIT)

    flash = browser.locator(FLASH)
    await expect(flash).to_be_visible()
    await expect(flash).to_have_class(re.compile("error"))
    await expect(flash).to_contain_text(user["expectedMessage"])
    await expect(browser.page).to_have_url(re.compile("/login"))


async def test_login_with_empty_credentials(on_login_page, login_data):
    browser = on_login_page
    await browser.click(SUBMIT)
    await expect(browser.locator(f"{FLASH}.error")).to_be_visible()
    await expect(browser.locator(FLASH)).to_contain_text(login_data["emptyCredentials"]["expectedMessage"])
    await browser.screenshot("TC004-empty-credentials-error")


async def test_focus_value_and_attributes(on_login_page):
    browser = on_login_page
    username = browser.locator(USERNAME)

    await username.focus()
    await expect(username).to_be_focused()

    await browser.fill(USERNAME, "testuser")
    await username.blur()
    value = await browser.value(USERNAME)
    logger.info("Current input value: %s", value)
    assert value == "testuser"

    assert await browser.get_attribute(USERNAME, "id") == "username"
    assert await browser.get_attribute(USERNAME, "type") == "text"
    assert await browser.evaluate("() => document.querySelector('#username').id") == "username"


async def test_keyboard_editing_and_navigation(on_login_page, login_data):
    browser = on_login_page
    user = login_data["validUser"]

    await browser.type_text(USERNAME, "wrongtext")
    await browser.press(USERNAME, "ControlOrMeta+a")
    await browser.press(USERNAME, "Backspace")
    await expect(browser.locator(USERNAME)).to_have_value("")

    await browser.type_text(USERNAME, user["username"])
    await browser.press(USERNAME, "Tab")
    await expect(browser.locator(PASSWORD)).to_be_focused()

    await browser.type_text(PASSWORD, user["password"])
    await browser.press(PASSWORD, "Enter")
    await expect(browser.page.get_by_text(user["expectedMessage"])).to_be_visible()


async def test_reload_and_history_navigation(on_login_page):
    browser = on_login_page
    await browser.fill(USERNAME, "testuser")
    await browser.fill(PASSWORD, "testpass")

    await browser.reload()
    await expect(browser.locator(USERNAME)).to_be_visible()

    await browser.goto(settings.url("/"))
    await browser.go_back()
    await expect(browser.page).to_have_url(re.compile("/login"))
    await browser.go_forward()
    assert not (await browser.url()).endswith("/login")


@pytest.mark.parametrize(
    "label,width,height",
    [("mobile", 375, 667), ("tablet", 768, 1024), ("desktop", 1920, 1080)],
)
async def test_login_form_visible_on_viewport(on_login_page, label, width, height):
    browser = on_login_page
    await browser.set_viewport(width, height)
    await expect(browser.locator(USERNAME)).to_be_visible()
    await expect(browser.locator(SUBMIT)).to_be_visible()
    await browser.screenshot(f"TC008-{label}-view")
