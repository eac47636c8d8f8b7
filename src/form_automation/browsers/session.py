"""
Browser Session

Owns the Playwright driver, one Chromium browser and the contexts opened on it.
A run uses a single session and a single page.
"""

import logging
from typing import Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from ..errors import BrowserLaunchError


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

LAUNCH_ARGS = [
    '--disable-blink-features=AutomationControlled',
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
]


class BrowserManager:
    """Manages a Playwright browser instance."""

    def __init__(self, headless: bool = True, user_agent: Optional[str] = None):
        self.headless = headless
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: list[BrowserContext] = []

    async def start(self):
        """Start the browser. Launch failures raise BrowserLaunchError."""
        if self._browser is not None:
            return
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
            )
        except Exception as e:
            await self.stop()
            raise BrowserLaunchError(f"Browser failed to launch: {e}") from e

    async def stop(self):
        """Close every context, the browser and the driver. Safe to call twice."""
        contexts, self._contexts = self._contexts, []
        for context in contexts:
            try:
                await context.close()
            except Exception as e:
                logger.warning("Failed to close browser context: %s", e)
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

    async def new_context(self) -> BrowserContext:
        """Create a new browser context."""
        await self.start()
        context = await self._browser.new_context(
            user_agent=self.user_agent,
            viewport={'width': 1920, 'height': 1080},
            locale='en-US',
        )
        self._contexts.append(context)
        return context

    async def new_page(self) -> Page:
        """Open a page in a fresh context."""
        context = await self.new_context()
        return await context.new_page()
