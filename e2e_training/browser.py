"""Thin wrapper around direct Playwright for ergonomic assertions."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

import anyio
from playwright.async_api import Locator, Page, TimeoutError as PlaywrightTimeout

from e2e_training.env_config import settings

logger = logging.getLogger(__name__)


@dataclass
class ToolError(Exception):
    """Raised when a browser operation fails."""

    name: str
    payload: Dict[str, Any]
    message: str

    def __str__(self) -> str:  # pragma: no cover - human readable helper
        return f"{self.name} failed ({self.message}) with payload={self.payload}"


class Browser:
    """Convenience wrapper over direct Playwright with ergonomic API."""

    def __init__(self, page: Page) -> None:
        self._page = page
        self.current_url: str | None = None
        self.current_title: str | None = None

    @property
    def page(self) -> Page:
        return self._page

    async def _update_state(self) -> None:
        self.current_url = self._page.url
        self.current_title = await self._page.title()

    async def reset(self) -> Dict[str, Any]:
        """Navigate to about:blank (reset state)."""
        await self._page.goto("about:blank")
        await self._update_state()
        return {"url": self.current_url, "title": self.current_title}

    async def goto(self, url: str, wait_until: str = "networkidle", timeout: int | None = None) -> Dict[str, Any]:
        """Navigate to URL (relative paths resolve against the practice site).

        "networkidle" can time out on pages with long-polling connections, so
        a timeout is retried once with "domcontentloaded".
        """
        target = settings.url(url)
        timeout = settings.timeout if timeout is None else timeout
        try:
            response = await self._page.goto(target, wait_until=wait_until, timeout=timeout)
            await self._update_state()
            return {"url": self.current_url, "title": self.current_title, "status": response.status if response else None}
        except PlaywrightTimeout as exc:
            if wait_until == "networkidle":
                logger.debug("networkidle timed out for %s, retrying with domcontentloaded", target)
                try:
                    response = await self._page.goto(target, wait_until="domcontentloaded", timeout=timeout)
                    await self._update_state()
                    return {"url": self.current_url, "title": self.current_title, "status": response.status if response else None}
                except PlaywrightTimeout:
                    pass
            raise ToolError(name="goto", payload={"url": target, "wait_until": wait_until}, message=str(exc))

    def locator(self, selector: str) -> Locator:
        return self._page.locator(selector)

    async def fill(self, selector: str, value: str) -> Dict[str, Any]:
        try:
            await self._page.locator(selector).first.fill(value)
            return {"selector": selector, "value": value}
        except Exception as exc:
            raise ToolError(name="fill", payload={"selector": selector, "value": value}, message=str(exc))

    async def type_text(self, selector: str, text: str, delay: float = 0) -> Dict[str, Any]:
        """Type key by key, firing keyboard events like a user would."""
        try:
            await self._page.locator(selector).first.press_sequentially(text, delay=delay)
            return {"selector": selector, "value": text}
        except Exception as exc:
            raise ToolError(name="type_text", payload={"selector": selector}, message=str(exc))

    async def clear(self, selector: str) -> Dict[str, Any]:
        try:
            await self._page.locator(selector).first.clear()
            return {"selector": selector}
        except Exception as exc:
            raise ToolError(name="clear", payload={"selector": selector}, message=str(exc))

    async def click(self, selector: str, force: bool = False, press_enter: bool | None = None) -> Dict[str, Any]:
        try:
            await self._page.locator(selector).first.click(force=force)
            if press_enter:
                await self._page.keyboard.press("Enter")
            await self._update_state()
            return {"selector": selector, "url": self.current_url}
        except Exception as exc:
            raise ToolError(name="click", payload={"selector": selector, "force": force}, message=str(exc))

    async def press(self, selector: str, key: str) -> Dict[str, Any]:
        try:
            await self._page.locator(selector).first.press(key)
            await self._update_state()
            return {"selector": selector, "key": key}
        except Exception as exc:
            raise ToolError(name="press", payload={"selector": selector, "key": key}, message=str(exc))

    async def select(self, selector: str, value: str | list[str]) -> Dict[str, Any]:
        try:
            values = [value] if isinstance(value, str) else value
            await self._page.select_option(selector, values)
            return {"selector": selector, "value": value}
        except Exception as exc:
            raise ToolError(name="select", payload={"selector": selector, "value": value}, message=str(exc))

    async def check(self, selector: str) -> Dict[str, Any]:
        try:
            await self._page.locator(selector).first.check()
            return {"selector": selector}
        except Exception as exc:
            raise ToolError(name="check", payload={"selector": selector}, message=str(exc))

    async def uncheck(self, selector: str) -> Dict[str, Any]:
        try:
            await self._page.locator(selector).first.uncheck()
            return {"selector": selector}
        except Exception as exc:
            raise ToolError(name="uncheck", payload={"selector": selector}, message=str(exc))

    async def text(self, selector: str) -> str:
        """Get text content of element."""
        try:
            text = await self._page.text_content(selector, timeout=5000)
            return text or ""
        except Exception as exc:
            raise ToolError(name="text", payload={"selector": selector}, message=str(exc))

    async def value(self, selector: str) -> str:
        try:
            return await self._page.locator(selector).first.input_value(timeout=5000)
        except Exception as exc:
            raise ToolError(name="value", payload={"selector": selector}, message=str(exc))

    async def get_attribute(self, selector: str, attribute: str) -> str:
        try:
            value = await self._page.get_attribute(selector, attribute, timeout=5000)
            return value or ""
        except Exception as exc:
            raise ToolError(name="get_attribute", payload={"selector": selector, "attribute": attribute}, message=str(exc))

    async def is_visible(self, selector: str) -> bool:
        return await self._page.locator(selector).first.is_visible()

    async def wait_for_visible(self, selector: str, timeout: int | None = None) -> None:
        try:
            await self._page.locator(selector).first.wait_for(state="visible", timeout=timeout)
        except PlaywrightTimeout as exc:
            raise ToolError(name="wait_for_visible", payload={"selector": selector, "timeout": timeout}, message=str(exc))

    async def wait_for_hidden(self, selector: str, timeout: int | None = None) -> None:
        """Wait until no element matches the selector or it is hidden."""
        try:
            await self._page.locator(selector).first.wait_for(state="hidden", timeout=timeout)
        except PlaywrightTimeout as exc:
            raise ToolError(name="wait_for_hidden", payload={"selector": selector, "timeout": timeout}, message=str(exc))

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        try:
            return await self._page.evaluate(script, arg)
        except Exception as exc:
            raise ToolError(name="evaluate", payload={"script": script}, message=str(exc))

    async def screenshot(self, name: str, full_page: bool = True) -> str:
        """Save a PNG into the screenshots folder (or to `name` if it is a path)."""
        try:
            if name.endswith(".png"):
                path = name
            else:
                settings.screenshots_folder.mkdir(parents=True, exist_ok=True)
                path = str(settings.screenshots_folder / f"{name}.png")
            await self._page.screenshot(path=path, type="png", full_page=full_page)
            return path
        except Exception as exc:
            raise ToolError(name="screenshot", payload={"name": name}, message=str(exc))

    async def wait_for_text(self, selector: str, expected: str, timeout: float = 3.0, interval: float = 0.25) -> str:
        """Poll for text content until it contains the expected substring."""
        deadline = anyio.current_time() + timeout
        last_error: ToolError | None = None

        while anyio.current_time() <= deadline:
            try:
                content = await self.text(selector)
            except ToolError as exc:
                content = ""
                last_error = exc
            if expected in content:
                return content
            await anyio.sleep(interval)

        if last_error:
            raise AssertionError(
                f"Timed out waiting for '{expected}' in selector '{selector}'. Last error: {last_error}"
            ) from last_error
        raise AssertionError(f"Timed out waiting for '{expected}' in selector '{selector}'")

    async def expect_substring(self, selector: str, expected: str) -> str:
        content = await self.text(selector)
        if expected not in content:
            raise AssertionError(f"'{expected}' not found in '{content}'")
        return content

    async def reload(self) -> None:
        await self._page.reload()
        await self._update_state()

    async def go_back(self) -> None:
        await self._page.go_back()
        await self._update_state()

    async def go_forward(self) -> None:
        await self._page.go_forward()
        await self._update_state()

    async def set_viewport(self, width: int | None = None, height: int | None = None) -> None:
        await self._page.set_viewport_size({
            "width": width or settings.viewport_width,
            "height": height or settings.viewport_height,
        })

    async def clear_storage(self) -> None:
        """Clear cookies, localStorage and sessionStorage."""
        await self._page.context.clear_cookies()
        if self._page.url.startswith("http"):
            await self._page.evaluate("() => { window.localStorage.clear(); window.sessionStorage.clear(); }")

    async def url(self) -> str:
        await self._update_state()
        return self.current_url or ""

    async def title(self) -> str:
        await self._update_state()
        return self.current_title or ""

