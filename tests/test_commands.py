"""Shared commands and the Browser wrapper against the demo site."""
import json
import re

import pytest
from playwright.async_api import expect

from e2e_training import commands
from e2e_training.browser import ToolError
from e2e_training.demo_site import REQRES_TOKEN
from e2e_training.env_config import settings
from e2e_training.fixtures import FixtureKeyError

pytestmark = pytest.mark.asyncio


async def test_goto_resolves_relative_path(browser, demo_server):
    result = await browser.goto("/login")
    assert result["status"] == 200
    assert result["url"] == f"{demo_server.url}/login"
    assert await browser.title() == "The Internet"


async def test_wrapper_errors_are_tool_errors(browser):
    await browser.goto("/login")
    with pytest.raises(ToolError) as excinfo:
        await browser.wait_for_visible("#missing", timeout=200)
    assert excinfo.value.payload["selector"] == "#missing"


async def test_login_and_verify(browser):
    user = await commands.login(browser, "standard")
    assert user["username"] == "tomsmith"
    await commands.verify_login_success(browser)


async def test_login_unknown_user_type(browser):
    with pytest.raises(FixtureKeyError):
        await commands.login(browser, "superuser")


async def test_invalid_login_error(browser):
    await commands.login(browser, "invalid")
    await commands.verify_login_error(browser, "Your username is invalid!")


async def test_login_with_role_and_outcome(browser):
    await commands.login_with_role(browser, "guest")
    await commands.verify_login_outcome(browser, expect_success=False, message="Your username is invalid!")


async def test_logout(browser):
    await commands.login_to_heroku_app(browser, "tomsmith", "SuperSecretPassword!")
    await commands.logout_from_heroku_app(browser)


async def test_api_login_stores_token(browser):
    token = await commands.api_login(browser)
    assert token == REQRES_TOKEN
    stored = await browser.evaluate("() => window.localStorage.getItem('authToken')")
    assert stored == REQRES_TOKEN


async def test_session_login_saves_and_reuses(browser):
    assert await commands.session_login(browser, "unit", "tomsmith", "SuperSecretPassword!") is False
    state = json.loads(commands.auth_state_file("unit").read_text(encoding="utf-8"))
    assert state["cookies"]

    await browser.clear_storage()
    assert await commands.session_login(browser, "unit", "tomsmith", "SuperSecretPassword!") is True
    await expect(browser.page).to_have_url(re.compile("/secure"))


async def test_session_login_discards_invalid_state(browser):
    path = commands.auth_state_file("stale")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"cookies": [], "origins": []}), encoding="utf-8")
    assert await commands.session_login(browser, "stale", "tomsmith", "SuperSecretPassword!") is False
    assert path.exists()


def test_auth_state_file_is_per_environment():
    path = commands.auth_state_file("admin")
    assert path.parent == settings.auth_state_folder
    assert path.name == f"{settings.environment}_admin_auth_state.json"
    commands.clear_session("admin")


async def test_form_helpers(browser):
    await browser.goto("/login")
    await commands.fill_form(browser, {"#username": "abc", "#password": "def"})
    await expect(browser.locator("#password")).to_have_value("def")
    await commands.type_and_verify(browser, "#username", "typed")
    await commands.should_be_visible_and_contain(browser, "h2", "Login Page")
    href = await commands.check_link(browser, "#forgot-password", "/forgot_password")
    assert href == "/forgot_password"


async def test_check_link_mismatch(browser):
    await browser.goto("/login")
    with pytest.raises(AssertionError):
        await commands.check_link(browser, "#forgot-password", "/elsewhere")


async def test_force_click_and_click_and_wait(browser):
    await browser.goto("/checkboxes")
    await commands.force_click(browser, "#checkboxes input >> nth=0")
    await expect(browser.locator("#checkboxes input").first).to_be_checked()
    await browser.goto("/")
    assert await commands.click_and_wait(browser, "a[href='/login']") is None
    await expect(browser.page).to_have_url(re.compile("/login"))


async def test_screenshots(browser):
    await browser.goto("/login")
    page_shot = await commands.take_screenshot_with_label(browser, "login page!")
    element_shot = await commands.take_screenshot_with_label(browser, "form", selector="#login")
    assert re.search(r"login-page_\d{8}_\d{6}\.png$", page_shot)
    assert settings.screenshots_folder.joinpath(element_shot.split("/")[-1]).exists()


async def test_clear_all_data(browser):
    await commands.login_to_heroku_app(browser, "tomsmith", "SuperSecretPassword!")
    await browser.evaluate("() => window.localStorage.setItem('k', 'v')")
    await commands.clear_all_data(browser)
    assert await browser.evaluate("() => window.localStorage.length") == 0
    assert await browser.page.context.cookies() == []


async def test_wait_for_element_to_disappear(browser):
    await browser.goto("/dynamic_loading/2?delay=300")
    await browser.click("#start button")
    await commands.wait_for_element_to_disappear(browser, "#loading", timeout=5000)
    await expect(browser.locator("#finish")).to_have_text("Hello World!")


async def test_upload_and_download(browser):
    await browser.goto("/upload")
    path = await commands.upload_file(browser, "#file-upload", "sample.txt")
    await browser.click("#file-submit")
    await expect(browser.locator("#uploaded-files")).to_have_text(path.name)

    await browser.goto("/download")
    saved = await commands.download_file(browser, "a[href='/download/sample.txt']")
    assert saved.parent == settings.downloads_folder
    assert saved.read_bytes() == path.read_bytes()


async def test_upload_missing_input(browser):
    await browser.goto("/login")
    with pytest.raises(ToolError):
        await commands.upload_file(browser, "#no-such-input", "sample.txt")


def test_get_random_item():
    assert commands.get_random_item(["only"]) == "only"
    assert commands.get_random_item([1, 2, 3]) in (1, 2, 3)
    with pytest.raises(ValueError):
        commands.get_random_item([])


def test_log_helpers(caplog):
    caplog.set_level("INFO", logger="e2e_training.commands")
    commands.log_test_info("my test", step=1)
    info = commands.log_environment_info()
    assert info["baseUrl"] == settings.base_url
    assert info["environment"] == settings.environment
    assert "my test" in caplog.text
