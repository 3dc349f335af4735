"""Page object for the form-authentication login page.

Each element has an ordered list of selectors; the first one present on the
page wins, so the same page object works against small markup differences
between the live practice site and the local demo site.

Actions and checks return the page object:

    page = LoginPage(browser)
    await page.visit()
    await page.login("tomsmith", "SuperSecretPassword!")
    await page.verify_login_success()
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from playwright.async_api import expect

from e2e_training.browser import Browser, ToolError
from e2e_training.env_config import settings
from e2e_training.fixtures import fixture_value, load_fixture
from e2e_training.runtime_env import require_env

logger = logging.getLogger(__name__)

SELECTORS: Dict[str, List[str]] = {
    "username": ["#username", "input[name='username']", "[data-testid='username']"],
    "password": ["#password", "input[name='password']", "[data-testid='password']"],
    "login_button": ["button[type='submit']", "#login button", "input[type='submit']"],
    "remember_me": ["#remember-me", "input[name='remember']"],
    "forgot_password": ["#forgot-password", "a[href*='forgot']"],
    "flash": ["#flash", "[data-testid='flash']", ".flash"],
    "success_message": ["#flash.success", ".flash.success"],
    "error_message": ["#flash.error", ".flash.error"],
    "logout_button": ["a[href='/logout']", "[data-testid='logout']"],
    "heading": ["h2", "[data-testid='page-heading']"],
}


class LoginPage:
    """The /login page and the secure area it leads to."""

    path = "/login"
    secure_path = "/secure"

    def __init__(self, browser: Browser) -> None:
        self.browser = browser

    async def _selector(self, element: str) -> str:
        """Return the first candidate selector present on the page."""
        candidates = SELECTORS[element]
        for candidate in candidates:
            if await self.browser.locator(candidate).count() > 0:
                return candidate
        raise ToolError(
            name="login_page",
            payload={"element": element, "candidates": candidates},
            message=f"No selector matched element {element!r}",
        )

    # ---- navigation -------------------------------------------------------------
    async def visit(self) -> LoginPage:
        await self.browser.goto(self.path)
        return self

    async def visit_with_base_url(self, base_url: str) -> LoginPage:
        await self.browser.goto(f"{base_url.rstrip('/')}{self.path}")
        return self

    async def wait_for_page_load(self) -> LoginPage:
        await self.browser.page.wait_for_load_state("load")
        await expect(self.browser.locator(await self._selector("username"))).to_be_visible()
        return self

    # ---- form actions -----------------------------------------------------------
    async def enter_username(self, username: str) -> LoginPage:
        selector = await self._selector("username")
        await self.browser.clear(selector)
        if username:
            await self.browser.fill(selector, username)
        return self

    async def enter_password(self, password: str) -> LoginPage:
        selector = await self._selector("password")
        await self.browser.clear(selector)
        if password:
            await self.browser.fill(selector, password)
        return self

    async def click_login_button(self) -> LoginPage:
        await self.browser.click(await self._selector("login_button"))
        return self

    async def check_remember_me(self) -> LoginPage:
        await self.browser.check(await self._selector("remember_me"))
        return self

    async def uncheck_remember_me(self) -> LoginPage:
        await self.browser.uncheck(await self._selector("remember_me"))
        return self

    async def click_forgot_password(self) -> LoginPage:
        await self.browser.click(await self._selector("forgot_password"))
        return self

    async def clear_form(self) -> LoginPage:
        await self.browser.clear(await self._selector("username"))
        await self.browser.clear(await self._selector("password"))
        return self

    async def logout(self) -> LoginPage:
        await self.browser.click(await self._selector("logout_button"))
        return self

    # ---- composite flows --------------------------------------------------------
    async def login(self, username: str, password: str) -> LoginPage:
        logger.info("Logging in as %s", username or "<empty>")
        await self.enter_username(username)
        await self.enter_password(password)
        return await self.click_login_button()

    async def login_with_remember_me(self, username: str, password: str) -> LoginPage:
        await self.enter_username(username)
        await self.enter_password(password)
        await self.check_remember_me()
        return await self.click_login_button()

    async def login_with_fixture(self, user_type: str = "validUser") -> LoginPage:
        """Log in with a record from login_credentials.json.

        Raises FixtureKeyError when the record does not exist.
        """
        user = fixture_value(load_fixture("login_credentials"), user_type)
        return await self.login(user["username"], user["password"])

    async def login_with_env(self) -> LoginPage:
        """Log in with LOGIN_USERNAME / LOGIN_PASSWORD runtime variables."""
        values = require_env("LOGIN_USERNAME", "LOGIN_PASSWORD")
        return await self.login(values["LOGIN_USERNAME"], values["LOGIN_PASSWORD"])

    # ---- verifications ----------------------------------------------------------
    async def verify_login_success(self, message: Optional[str] = None) -> LoginPage:
        await self.verify_redirect_to(self.secure_path)
        flash = self.browser.locator(await self._selector("success_message"))
        await expect(flash).to_be_visible()
        await expect(flash).to_contain_text(message or "You logged into a secure area!")
        await expect(self.browser.locator(await self._selector("logout_button"))).to_be_visible()
        return self

    async def verify_redirect_to(self, path: str) -> LoginPage:
        await expect(self.browser.page).to_have_url(re.compile(re.escape(path)))
        return self

    async def verify_error_message(self, message: str) -> LoginPage:
        flash = self.browser.locator(await self._selector("error_message"))
        await expect(flash).to_be_visible()
        await expect(flash).to_contain_text(message)
        return self

    async def verify_error_displayed(self) -> LoginPage:
        await expect(self.browser.locator(await self._selector("error_message"))).to_be_visible()
        return self

    async def verify_on_login_page(self) -> LoginPage:
        await self.verify_redirect_to(self.path)
        await expect(self.browser.locator(await self._selector("username"))).to_be_visible()
        await expect(self.browser.locator(await self._selector("password"))).to_be_visible()
        await expect(self.browser.locator(await self._selector("login_button"))).to_be_visible()
        return self

    async def verify_logout_success(self) -> LoginPage:
        await self.verify_on_login_page()
        flash = self.browser.locator(await self._selector("flash"))
        await expect(flash).to_contain_text("You logged out of the secure area!")
        return self

    async def take_screenshot(self, name: str) -> str:
        return await self.browser.screenshot(f"login-page-{name}-{settings.environment}")
