"""
Challenge Detection

Checks a loaded page for anti-automation challenge widgets. Detection only;
challenges are never solved.
"""

from typing import Sequence

from playwright.async_api import Page


DEFAULT_CHALLENGE_MARKERS = (
    "iframe[src*='recaptcha']",
    ".g-recaptcha",
    "iframe[src*='hcaptcha']",
    ".cf-turnstile",
)


class ChallengeDetector:
    """Looks for known challenge markers on a page, in order."""

    def __init__(self, markers: Sequence[str] = DEFAULT_CHALLENGE_MARKERS):
        self.markers = tuple(markers)

    async def detect(self, page: Page) -> bool:
        """Return True on the first marker present on the page."""
        for selector in self.markers:
            if await page.query_selector(selector) is not None:
                return True
        return False
