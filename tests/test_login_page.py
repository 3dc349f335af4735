"""LoginPage page object against the demo site."""
import pytest
from playwright.async_api import expect

from e2e_training.browser import ToolError
from e2e_training.pages.login_page import LoginPage
from e2e_training.runtime_env import MissingEnvironmentError

pytestmark = pytest.mark.asyncio


async def test_methods_return_page(login_page):
    assert await login_page.visit() is login_page
    assert await login_page.wait_for_page_load() is login_page
    assert await login_page.enter_username("u") is login_page


async def test_login_success_and_logout(login_page):
    await login_page.visit()
    await login_page.login("tomsmith", "SuperSecretPassword!")
    await login_page.verify_login_success()
    await login_page.logout()
    await login_page.verify_logout_success()


async def test_invalid_login(login_page):
    await login_page.visit()
    await login_page.login("tomsmith", "nope")
    await login_page.verify_error_displayed()
    await login_page.verify_error_message("Your password is invalid!")
    await login_page.verify_on_login_page()


async def test_login_with_fixture(login_page):
    await login_page.visit()
    await login_page.login_with_fixture()
    await login_page.verify_redirect_to("/secure")


async def test_login_with_env(login_page, monkeypatch):
    monkeypatch.setenv("E2E_LOGIN_USERNAME", "tomsmith")
    monkeypatch.setenv("E2E_LOGIN_PASSWORD", "SuperSecretPassword!")
    await login_page.visit()
    await login_page.login_with_env()
    await login_page.verify_login_success()


async def test_login_with_env_missing(login_page, monkeypatch):
    monkeypatch.delenv("E2E_LOGIN_USERNAME", raising=False)
    monkeypatch.delenv("E2E_LOGIN_PASSWORD", raising=False)
    await login_page.visit()
    with pytest.raises(MissingEnvironmentError):
        await login_page.login_with_env()


async def test_remember_me(login_page):
    await login_page.visit()
    await login_page.check_remember_me()
    await expect(login_page.browser.locator("#remember-me")).to_be_checked()
    await login_page.uncheck_remember_me()
    await expect(login_page.browser.locator("#remember-me")).not_to_be_checked()
    await login_page.login_with_remember_me("tomsmith", "SuperSecretPassword!")
    await login_page.verify_login_success()


async def test_forgot_password_link(login_page):
    await login_page.visit()
    await login_page.click_forgot_password()
    await login_page.verify_redirect_to("/forgot_password")


async def test_clear_form(login_page):
    await login_page.visit()
    await login_page.enter_username("someone")
    await login_page.enter_password("secret")
    await login_page.clear_form()
    await expect(login_page.browser.locator("#username")).to_have_value("")
    await expect(login_page.browser.locator("#password")).to_have_value("")


async def test_visit_with_base_url(login_page, demo_server):
    await login_page.visit_with_base_url(f"{demo_server.url}/")
    await login_page.verify_on_login_page()


async def test_missing_element_raises(browser):
    page = LoginPage(browser)
    await browser.goto("/checkboxes")
    with pytest.raises(ToolError) as excinfo:
        await page.enter_username("x")
    assert excinfo.value.payload["element"] == "username"


async def test_screenshot_name(login_page):
    await login_page.visit()
    path = await login_page.take_screenshot("form")
    assert path.endswith(".png")
    assert "login-page-form-" in path
