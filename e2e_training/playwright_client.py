"""
Direct Playwright Client
========================

Launches Playwright in-process with the settings of the active environment:
viewport, default timeout, downloads and optional video recording.

Usage:
    async with PlaywrightClient() as client:
        await client.page.goto("https://the-internet.herokuapp.com/login")
        await client.page.fill("#username", "tomsmith")
"""

import logging
import os
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from e2e_training.env_config import settings

logger = logging.getLogger(__name__)

BROWSER_TYPES = ("chromium", "firefox", "webkit")


class PlaywrightClient:
    """
    Playwright client owning one browser, one default context and one page.

    Example:
        async with PlaywrightClient() as client:
            await client.page.goto("https://example.com")
    """

    def __init__(
        self,
        browser_type: Optional[str] = None,
        headless: Optional[bool] = None,
        timeout: Optional[int] = None,
        storage_state_path: Optional[str] = None,
        record_video: Optional[bool] = None,
    ):
        """
        Args:
            browser_type: chromium, firefox or webkit (default: E2E_BROWSER)
            headless: Run headless (default: PLAYWRIGHT_HEADLESS)
            timeout: Default timeout in milliseconds (default: active profile)
            storage_state_path: Saved cookies/localStorage to start from
            record_video: Record a video per page (default: E2E_VIDEO)
        """
        self.browser_type = browser_type or settings.browser_type
        if self.browser_type not in BROWSER_TYPES:
            raise ValueError(f"Unsupported browser type: {self.browser_type}")
        self.headless = settings.playwright_headless if headless is None else headless
        self.timeout = settings.timeout if timeout is None else timeout
        self.storage_state_path = storage_state_path
        self.record_video = settings.record_video if record_video is None else record_video

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _context_options(self) -> dict:
        options = {
            "viewport": {"width": settings.viewport_width, "height": settings.viewport_height},
            "accept_downloads": True,
        }
        if self.record_video:
            settings.videos_folder.mkdir(parents=True, exist_ok=True)
            options["record_video_dir"] = str(settings.videos_folder)

        storage_state_path = self.storage_state_path
        if storage_state_path and not os.path.exists(storage_state_path):
            print(f"[CONFIG] WARNING: storage_state_path does not exist, ignoring: {storage_state_path}")
            storage_state_path = None
        if storage_state_path:
            options["storage_state"] = storage_state_path
        return options

    async def connect(self):
        """Launch the browser and open the default context and page."""
        self._playwright = await async_playwright().start()
        try:
            launcher = getattr(self._playwright, self.browser_type)
            self._browser = await launcher.launch(headless=self.headless)
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

        self._context = await self._browser.new_context(**self._context_options())
        self._context.set_default_timeout(self.timeout)
        self._page = await self._context.new_page()
        logger.debug("Launched %s (headless=%s, timeout=%sms)", self.browser_type, self.headless, self.timeout)

    async def close(self):
        """Close all connections and cleanup resources."""
        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Client not connected or page not created")
        return self._page

