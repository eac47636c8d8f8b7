"""
Shared fixtures and scripted browser fakes.

The fakes stand in for Playwright pages so the pipeline can be exercised
without launching a browser.
"""

from typing import Optional

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from form_automation.browsers import DEFAULT_CHALLENGE_MARKERS
from form_automation.errors import BrowserLaunchError
from form_automation.services import RunLedger, SiteConfigProvider, SubmissionOrchestrator
from form_automation.storage import InMemoryDocumentStore


TARGET_URL = "https://t.example/form"
THANKS_URL = "https://t.example/thanks"


class FakeElement:
    """A form control that applies value writes like the page script does."""

    def __init__(self, page: "FakePage", selector: str, tag: str = "INPUT", options: Optional[list[tuple[str, str]]] = None):
        self.page = page
        self.selector = selector
        self.tag = tag
        self.options = options or []
        self.value = ""

    async def evaluate(self, script: str, value: str) -> bool:
        if self.tag == "SELECT":
            for option_value, option_text in self.options:
                if option_value == value or option_text == value:
                    self.value = option_value
                    self.page.mutations.append((self.selector, option_value))
                    return True
            return False
        self.value = value
        self.page.mutations.append((self.selector, value))
        return True


class _Navigation:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            return False
        if self.page.navigates_on_submit:
            self.page.url = THANKS_URL
            return False
        raise PlaywrightTimeoutError("Timeout 5000ms exceeded.")


class FakePage:
    """Scripted page: counts loads and records every interaction."""

    def __init__(self):
        self.url = "about:blank"
        self.elements: dict[str, FakeElement] = {}
        self.loads = 0
        self.captcha_loads: set[int] = set()
        self.goto_errors: dict[int, Exception] = {}
        self.click_errors: dict[int, Exception] = {}
        self.navigates_on_submit = True
        self.queries: list[str] = []
        self.clicks: list[str] = []
        self.mutations: list[tuple[str, str]] = []
        self.navigation_timeouts: list[int] = []

    def add_element(self, selector: str, tag: str = "INPUT", options=None) -> FakeElement:
        element = FakeElement(self, selector, tag, options)
        self.elements[selector] = element
        return element

    async def goto(self, url: str, wait_until: Optional[str] = None):
        self.loads += 1
        if self.loads in self.goto_errors:
            raise self.goto_errors[self.loads]
        self.url = url
        for element in self.elements.values():
            element.value = ""

    async def query_selector(self, selector: str):
        self.queries.append(selector)
        if selector in DEFAULT_CHALLENGE_MARKERS:
            return object() if self.loads in self.captcha_loads else None
        return self.elements.get(selector)

    async def click(self, selector: str):
        self.clicks.append(selector)
        if self.loads in self.click_errors:
            raise self.click_errors[self.loads]
        if selector not in self.elements:
            raise PlaywrightTimeoutError(f"Timeout waiting for selector {selector}")

    def expect_navigation(self, wait_until: Optional[str] = None, timeout: Optional[float] = None):
        self.navigation_timeouts.append(timeout)
        return _Navigation(self)


class FakeBrowser:
    """Stands in for BrowserManager."""

    def __init__(self, page: FakePage, fail_launch: bool = False):
        self.page = page
        self.fail_launch = fail_launch
        self.started = False
        self.stopped = 0

    async def start(self):
        if self.fail_launch:
            raise BrowserLaunchError("Browser failed to launch: no display")
        self.started = True

    async def new_page(self) -> FakePage:
        return self.page

    async def stop(self):
        self.stopped += 1


class RecordingSleep:
    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float):
        self.calls.append(seconds)


# ============ Fixtures ============

@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def site_mapping():
    return {
        "targetUrl": TARGET_URL,
        "selectors": {"name": "#n", "submit": "#s"},
        "delayMs": 0,
    }


@pytest.fixture
def configured_store(store, site_mapping):
    store.set("config", "siteMapping", site_mapping)
    return store


@pytest.fixture
def page():
    page = FakePage()
    page.add_element("#n")
    page.add_element("#s", tag="BUTTON")
    return page


@pytest.fixture
def browser(page):
    return FakeBrowser(page)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def ledger(configured_store):
    return RunLedger(configured_store)


@pytest.fixture
def orchestrator(ledger, configured_store, browser, sleep):
    return SubmissionOrchestrator(
        ledger,
        SiteConfigProvider(configured_store),
        browser_factory=lambda: browser,
        sleep=sleep,
    )
