"""
Tests for BrowserManager.

The Playwright driver is mocked; no browser is launched.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from form_automation.browsers import session
from form_automation.browsers.session import BrowserManager, LAUNCH_ARGS
from form_automation.errors import BrowserLaunchError


@pytest.fixture
def driver(monkeypatch):
    context = MagicMock()
    context.new_page = AsyncMock(return_value=MagicMock(name="page"))
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    driver = MagicMock()
    driver.chromium.launch = AsyncMock(return_value=browser)
    driver.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=driver)
    monkeypatch.setattr(session, "async_playwright", lambda: starter)

    driver.browser = browser
    driver.context = context
    return driver


class TestBrowserManager:
    """Tests for browser lifecycle."""

    def test_launches_chromium(self, driver):
        """Should launch headless Chromium with the sandbox flags."""
        asyncio.run(BrowserManager().start())

        driver.chromium.launch.assert_awaited_once_with(headless=True, args=LAUNCH_ARGS)

    def test_launch_failure(self, driver):
        """Should raise BrowserLaunchError and release the driver."""
        driver.chromium.launch.side_effect = RuntimeError("Executable doesn't exist")

        with pytest.raises(BrowserLaunchError, match="Executable doesn't exist"):
            asyncio.run(BrowserManager().start())

        driver.stop.assert_awaited_once()

    def test_new_page_and_stop(self, driver):
        """Should close contexts, browser and driver on stop."""
        async def scenario():
            manager = BrowserManager()
            await manager.new_page()
            await manager.stop()
            await manager.stop()

        asyncio.run(scenario())

        driver.context.close.assert_awaited_once()
        driver.browser.close.assert_awaited_once()
        driver.stop.assert_awaited_once()
