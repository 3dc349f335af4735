"""
Reusable commands from e2e_training.commands.

One command replaces the same five lines repeated across tests, keeps the
selectors in one fixture file and logs what it did.
"""
import pytest
from playwright.async_api import expect

from e2e_training import commands
from e2e_training.fixtures import FixtureKeyError, load_fixture

pytestmark = [pytest.mark.asyncio, pytest.mark.regression]


@pytest.fixture(scope="module")
def command_data():
    return load_fixture("custom_command_data")


class TestReusableLogin:

    async def test_login_command(self, browser):
        user = await commands.login(browser)
        assert user["role"] == "standard"
        await commands.verify_login_success(browser)

    @pytest.mark.parametrize("user_type", ["standard", "admin"])
    async def test_login_with_each_user(self, browser, user_type):
        await commands.login(browser, user_type)
        await commands.verify_login_success(browser)

    async def test_invalid_user_shows_error(self, browser, command_data):
        await commands.login(browser, "invalid")
        await commands.verify_login_error(browser, command_data["loginPage"]["messages"]["invalidUsername"])

    async def test_unknown_user_type_raises(self, browser):
        with pytest.raises(FixtureKeyError):
            await commands.login(browser, "superuser")

    async def test_login_and_logout(self, browser):
        await commands.login_to_heroku_app(browser, "tomsmith", "SuperSecretPassword!")
        await commands.verify_login_outcome(browser, expect_success=True)
        await commands.logout_from_heroku_app(browser)


class TestElementHelpers:

    async def test_fill_form(self, browser, command_data):
        selectors = command_data["loginPage"]["selectors"]
        await browser.goto(command_data["loginPage"]["url"])
        await commands.fill_form(browser, {
            selectors["usernameInput"]: "form-user",
            selectors["passwordInput"]: "form-pass",
        })
        await expect(browser.locator(selectors["usernameInput"])).to_have_value("form-user")
        await expect(browser.locator(selectors["passwordInput"])).to_have_value("form-pass")

    async def test_type_and_verify(self, browser):
        await browser.goto("/login")
        await commands.type_and_verify(browser, "#username", "typed slowly")

    async def test_should_be_visible_and_contain(self, browser):
        await browser.goto("/login")
        await commands.should_be_visible_and_contain(browser, "h2", "Login Page")

    async def test_force_click_and_check_link(self, browser, command_data):
        await commands.login(browser)
        await commands.check_link(browser, command_data["loginPage"]["selectors"]["logoutButton"], "/logout")
        await commands.force_click(browser, command_data["loginPage"]["selectors"]["logoutButton"])
        await expect(browser.locator("#flash")).to_contain_text("You logged out")


class TestUtilities:

    async def test_screenshot_with_label(self, browser):
        await browser.goto("/login")
        page_path = await commands.take_screenshot_with_label(browser, "login page")
        element_path = await commands.take_screenshot_with_label(browser, "login form", "#login")
        assert page_path.endswith(".png")
        assert "login-form" in element_path

    async def test_clear_all_data(self, browser):
        await browser.goto("/login")
        await browser.evaluate("() => window.localStorage.setItem('token', 'abc')")
        await commands.clear_all_data(browser)
        assert await browser.evaluate("() => window.localStorage.length") == 0

    async def test_random_item_and_info_logging(self, browser, command_data):
        user_type = commands.get_random_item(list(command_data["users"]))
        assert user_type in command_data["users"]
        commands.log_test_info("random user", user_type=user_type)
        info = commands.log_environment_info()
        assert info["baseUrl"].startswith("http")


class TestApiCommands:

    async def test_get_and_validate(self, api_client, command_data):
        response = api_client.api_get_and_validate(command_data["apiEndpoints"]["users"])
        assert len(response.body) > 0

    async def test_post_and_validate(self, api_client, command_data):
        response = api_client.api_post_and_validate(
            command_data["apiEndpoints"]["posts"],
            {"title": "Custom command post", "body": "Created via helper", "userId": 1},
        )
        assert response.body["title"] == "Custom command post"
