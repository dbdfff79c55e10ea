# armory_scout/browser/playwright_driver.py
"""
Playwright implementation of the browser interface.

One Playwright runtime is started per process; every :meth:`launch` starts a
separate Chromium so requests never share cookies, cache or pages.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List, Optional

from playwright.async_api import (
    Browser,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    Route,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from armory_scout.browser.base import (
    BrowserDriver,
    BrowserError,
    BrowserPage,
    BrowserSession,
    BrowserTimeout,
    DomNode,
    LaunchOptions,
    PageOptions,
)
from armory_scout.logger import get_logger

__all__ = ["PlaywrightDriver"]

logger = get_logger("browser")

_ATTRIBUTES_JS = "node => Object.fromEntries(Array.from(node.attributes, a => [a.name, a.value]))"


def _ms(seconds: float) -> float:
    return seconds * 1000


class _PlaywrightNode(DomNode):
    def __init__(self, handle: ElementHandle) -> None:
        self._handle = handle

    async def attributes(self) -> Dict[str, str]:
        try:
            return await self._handle.evaluate(_ATTRIBUTES_JS)
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc

    async def first_descendant(self, selector: str) -> Optional[DomNode]:
        try:
            handle = await self._handle.query_selector(selector)
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc
        return _PlaywrightNode(handle) if handle is not None else None


class _PlaywrightPage(BrowserPage):
    def __init__(self, page: Page) -> None:
        self._page = page

    async def goto(self, url: str, *, timeout: float, wait_until: str = "domcontentloaded") -> None:
        try:
            await self._page.goto(url, timeout=_ms(timeout), wait_until=wait_until)
        except PlaywrightTimeout as exc:
            raise BrowserTimeout(str(exc)) from exc
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc

    async def wait_for_selector(self, selector: str, *, timeout: float) -> None:
        try:
            await self._page.wait_for_selector(selector, timeout=_ms(timeout))
        except PlaywrightTimeout as exc:
            raise BrowserTimeout(str(exc)) from exc
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc

    async def title(self) -> str:
        try:
            return await self._page.title()
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc

    async def query_all(self, selector: str) -> List[DomNode]:
        try:
            handles = await self._page.query_selector_all(selector)
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc
        return [_PlaywrightNode(h) for h in handles]

    async def close(self) -> None:
        try:
            await self._page.close()
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc


def _route_blocker(blocked: FrozenSet[str]):
    """Route handler that aborts requests of the blocked resource types."""

    async def handler(route: Route) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    return handler


class _PlaywrightSession(BrowserSession):
    def __init__(self, browser: Browser, ignore_https_errors: bool = False) -> None:
        self._browser = browser
        self._ignore_https_errors = ignore_https_errors

    async def new_page(self, options: PageOptions) -> BrowserPage:
        width, height = options.viewport
        try:
            context = await self._browser.new_context(
                user_agent=options.user_agent,
                locale=options.locale,
                viewport={"width": width, "height": height},
                extra_http_headers=options.extra_headers or None,
                ignore_https_errors=self._ignore_https_errors,
            )
            page = await context.new_page()
            if options.blocked_resources:
                await page.route("**/*", _route_blocker(frozenset(options.blocked_resources)))
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc
        return _PlaywrightPage(page)

    async def close(self) -> None:
        # closing the browser also closes its contexts and pages
        try:
            await self._browser.close()
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc


class PlaywrightDriver(BrowserDriver):
    """Launches a fresh Chromium per session from a process-wide Playwright runtime."""

    def __init__(self, runtime_factory=async_playwright) -> None:
        self._runtime_factory = runtime_factory
        self._playwright: Optional[Playwright] = None

    async def start(self) -> None:
        await self._runtime()

    async def stop(self) -> None:
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            logger.info("Playwright runtime stopped")

    async def _runtime(self) -> Playwright:
        if self._playwright is None:
            self._playwright = await self._runtime_factory().start()
            logger.info("Playwright runtime started")
        return self._playwright

    async def launch(self, options: LaunchOptions) -> BrowserSession:
        playwright = await self._runtime()
        try:
            browser = await playwright.chromium.launch(
                headless=options.headless,
                args=list(options.args),
                executable_path=options.executable_path,
            )
        except PlaywrightError as exc:
            raise BrowserError(f"browser launch failed: {exc}") from exc
        logger.debug("Chromium launched (headless=%s)", options.headless)
        return _PlaywrightSession(browser, options.ignore_https_errors)
