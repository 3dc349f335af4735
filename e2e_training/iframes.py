"""Helpers for content inside iframes (the TinyMCE editor page)."""
from __future__ import annotations

import logging

from playwright.async_api import Locator

from e2e_training.browser import Browser, ToolError

logger = logging.getLogger(__name__)


async def get_iframe_body(browser: Browser, iframe_selector: str, timeout: int | None = None) -> Locator:
    """Wait for the iframe to load and return a locator over its body."""
    await browser.wait_for_visible(iframe_selector, timeout=timeout)
    body = browser.page.frame_locator(iframe_selector).locator("body")
    try:
        await body.wait_for(state="attached", timeout=timeout)
    except Exception as exc:
        raise ToolError(name="get_iframe_body", payload={"iframe": iframe_selector}, message=str(exc))
    return body


async def get_iframe_text(browser: Browser, iframe_selector: str) -> str:
    body = await get_iframe_body(browser, iframe_selector)
    return (await body.inner_text()).strip()


async def type_in_tiny_mce(browser: Browser, iframe_selector: str, text: str, clear: bool = True) -> Locator:
    """Type into a contenteditable editor body.

    With clear=True the existing content is replaced; otherwise the text is
    typed key by key after the current content.
    """
    body = await get_iframe_body(browser, iframe_selector)
    if clear:
        await body.fill(text)
    else:
        await body.click()
        await body.press("End")
        await body.press_sequentially(text)
    logger.info("Typed %d characters into %s", len(text), iframe_selector)
    return body
