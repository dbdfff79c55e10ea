# armory_scout/browser/memory.py
"""
In-memory browser backed by BeautifulSoup.

Serves static HTML snapshots keyed by URL. It renders nothing and runs no
scripts, which is enough for offline extraction of saved profile pages and
for exercising the fetcher without a real Chromium.
"""
from __future__ import annotations

import asyncio
from typing import Dict, List, Mapping, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

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

__all__ = ["MemoryDriver", "MemorySession", "MemoryPage", "SoupNode"]


def _attr_value(value: object) -> str:
    # multi-valued attributes (class, rel, ...) come back as lists
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


class SoupNode(DomNode):
    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    async def attributes(self) -> Dict[str, str]:
        return {name: _attr_value(value) for name, value in self.tag.attrs.items()}

    async def first_descendant(self, selector: str) -> Optional[DomNode]:
        found = self.tag.select_one(selector)
        return SoupNode(found) if found is not None else None


class MemoryPage(BrowserPage):
    """A page whose document is parsed from a stored HTML string."""

    def __init__(
        self,
        pages: Mapping[str, str],
        *,
        navigation_delay: float = 0.0,
        options: Optional[PageOptions] = None,
    ) -> None:
        self._pages = pages
        self._navigation_delay = navigation_delay
        self.options = options
        self.url: Optional[str] = None
        self.waited: List[str] = []
        self.closed = False
        self._soup: Optional[BeautifulSoup] = None

    @classmethod
    def from_html(cls, html: str, url: str = "about:blank") -> MemoryPage:
        page = cls({url: html})
        page._load(url)
        return page

    def _load(self, url: str) -> None:
        self.url = url
        self._soup = BeautifulSoup(self._pages[url], "html.parser")

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            raise BrowserError("no document loaded")
        return self._soup

    async def goto(self, url: str, *, timeout: float, wait_until: str = "domcontentloaded") -> None:
        if self._navigation_delay >= timeout:
            await asyncio.sleep(timeout)
            raise BrowserTimeout(f"Timeout {timeout:.1f}s exceeded navigating to {url}")
        if self._navigation_delay:
            await asyncio.sleep(self._navigation_delay)
        if url not in self._pages:
            raise BrowserError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self._load(url)

    async def wait_for_selector(self, selector: str, *, timeout: float) -> None:
        self.waited.append(selector)
        if self.soup.select_one(selector) is not None:
            return
        await asyncio.sleep(timeout)
        raise BrowserTimeout(f"Timeout {timeout:.1f}s exceeded waiting for {selector!r}")

    async def title(self) -> str:
        tag = self.soup.find("title")
        return tag.get_text(strip=True) if tag else ""

    async def query_all(self, selector: str) -> List[DomNode]:
        return [SoupNode(tag) for tag in self.soup.select(selector)]

    async def close(self) -> None:
        self.closed = True


class MemorySession(BrowserSession):
    def __init__(self, driver: MemoryDriver) -> None:
        self._driver = driver
        self.pages: List[MemoryPage] = []
        self.close_calls = 0

    async def new_page(self, options: PageOptions) -> BrowserPage:
        page = MemoryPage(
            self._driver.pages, navigation_delay=self._driver.navigation_delay, options=options
        )
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_calls += 1
        for page in self.pages:
            await page.close()


class MemoryDriver(BrowserDriver):
    """Driver over a ``url -> html`` mapping; records every session it launches."""

    def __init__(self, pages: Optional[Mapping[str, str]] = None, *, navigation_delay: float = 0.0) -> None:
        self.pages: Dict[str, str] = dict(pages or {})
        self.navigation_delay = navigation_delay
        self.sessions: List[MemorySession] = []
        self.launch_options: List[LaunchOptions] = []

    async def launch(self, options: LaunchOptions) -> BrowserSession:
        self.launch_options.append(options)
        session = MemorySession(self)
        self.sessions.append(session)
        return session

    @property
    def open_sessions(self) -> int:
        return sum(1 for s in self.sessions if s.close_calls == 0)
