"""
Form Filler

Writes a record onto the target form using the configured selector map, then
triggers submission.
"""

import logging
from collections.abc import Mapping

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

from ..config import DEFAULT_POST_SUBMIT_TIMEOUT_MS


logger = logging.getLogger(__name__)

SUBMIT_KEY = "submit"

# Direct value assignment; no key events are simulated.
SET_VALUE_JS = """
(element, value) => {
    if (element.tagName === 'SELECT') {
        const option = Array.from(element.options).find(
            opt => opt.value === value || opt.text === value
        );
        if (!option) return false;
        option.selected = true;
        return true;
    }
    element.value = value;
    return true;
}
"""


class FormFiller:
    """Best-effort form filler driven by a field -> selector map."""

    async def fill(self, page: Page, record: Mapping[str, str], selectors: Mapping[str, str]) -> list[str]:
        """
        Fill every field that has both a selector and a non-empty value.

        Fields whose element is missing from the page, and select controls with
        no matching option, are skipped without error. Returns the keys that
        were written.
        """
        filled: list[str] = []

        for key, selector in selectors.items():
            if key == SUBMIT_KEY or not selector:
                continue
            value = record.get(key)
            if not value:
                continue

            element = await page.query_selector(selector)
            if element is None:
                continue

            if await element.evaluate(SET_VALUE_JS, value):
                filled.append(key)

        return filled

    async def submit(
        self,
        page: Page,
        selectors: Mapping[str, str],
        timeout_ms: int = DEFAULT_POST_SUBMIT_TIMEOUT_MS,
    ) -> None:
        """
        Click the submit control and wait briefly for a navigation.

        Some targets submit in-page without navigating, so a navigation timeout
        is logged and ignored. Failures of the click itself propagate.
        """
        clicked = False
        try:
            async with page.expect_navigation(wait_until="networkidle", timeout=timeout_ms):
                await page.click(selectors[SUBMIT_KEY])
                clicked = True
        except PlaywrightTimeoutError:
            if not clicked:
                raise
            logger.info("Navigation timeout after submit.")
