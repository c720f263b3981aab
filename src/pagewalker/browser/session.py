"""Thin adapter over Playwright's sync API for a single logical page."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from playwright.sync_api import Browser, ElementHandle, Page, Playwright, sync_playwright

from .profile import LaunchProfile

logger = logging.getLogger(__name__)


class BrowserSession:
    """Owns one Chromium browser, one context and one page.

    Only the primitives the traversal needs are exposed. The session is not
    thread-safe and must be driven from the thread that launched it.
    """

    def __init__(self, playwright: Playwright, browser: Browser, page: Page):
        self._playwright = playwright
        self._browser = browser
        self.page = page
        self._closed = False

    @classmethod
    def launch(cls, profile: LaunchProfile) -> "BrowserSession":
        playwright = sync_playwright().start()
        try:
            browser = playwright.chromium.launch(
                headless=profile.headless,
                slow_mo=profile.slow_mo,
                args=list(profile.args),
            )
            width, height = profile.viewport
            context = browser.new_context(
                viewport={"width": width, "height": height},
                locale=profile.locale,
                user_agent=profile.user_agent,
                extra_http_headers=profile.headers,
            )
            context.add_init_script(profile.init_script)
            page = context.new_page()
        except Exception:
            playwright.stop()
            raise

        logger.info("Browser launched (headless=%s)", profile.headless)
        return cls(playwright, browser, page)

    @property
    def current_url(self) -> str:
        return self.page.url

    def navigate(self, url: str, *, wait_until: str = "domcontentloaded", timeout_ms: int = 60000) -> None:
        self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    def wait_for_element(self, selector: str, timeout_ms: int = 5000) -> None:
        self.page.wait_for_selector(selector, timeout=timeout_ms)

    def wait_for_url(self, predicate: Callable[[str], bool], timeout_ms: int) -> None:
        self.page.wait_for_url(predicate, timeout=timeout_ms)

    def click(self, selector: str, timeout_ms: int = 5000) -> None:
        self.wait_for_element(selector, timeout_ms)
        self.page.click(selector, timeout=timeout_ms)
        logger.debug("Clicked: %s", selector)

    def type(self, selector: str, text: str, delay_ms: float = 30) -> None:
        self.wait_for_element(selector)
        field = self.page.locator(selector).first
        field.focus()
        field.press_sequentially(text, delay=delay_ms)

    def query_all(self, selector: str) -> list[ElementHandle]:
        return self.page.query_selector_all(selector)

    def evaluate(self, expression: str, arg: Optional[Any] = None) -> Any:
        return self.page.evaluate(expression, arg)

    def content(self) -> str:
        return self.page.content()

    def screenshot(self, path: Path) -> None:
        self.page.screenshot(path=str(path), full_page=True)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._browser.close()
        finally:
            self._playwright.stop()
        logger.info("Browser closed")
