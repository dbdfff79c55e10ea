# armory_scout/browser/base.py
"""
Narrow browser-automation interface used by the fetcher and extractor.

A driver launches one isolated session per request; a session opens pages;
a page navigates, waits for selectors and exposes its DOM as :class:`DomNode`
objects. Implementations translate their own errors into :class:`BrowserError`
and :class:`BrowserTimeout`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


class BrowserError(Exception):
    """Navigation or DOM evaluation failed inside the browser."""


class BrowserTimeout(BrowserError):
    """A navigation or wait exceeded its bound."""


@dataclass(frozen=True, slots=True)
class LaunchOptions:
    headless: bool = True
    args: Tuple[str, ...] = ()
    executable_path: Optional[str] = None
    ignore_https_errors: bool = False


@dataclass(frozen=True, slots=True)
class PageOptions:
    user_agent: str
    locale: str = "en-US"
    viewport: Tuple[int, int] = (1024, 768)
    extra_headers: Dict[str, str] = field(default_factory=dict)
    blocked_resources: Tuple[str, ...] = ()


class DomNode(ABC):
    @abstractmethod
    async def attributes(self) -> Dict[str, str]:
        """All attributes of the node as a flat name -> value mapping."""

    @abstractmethod
    async def first_descendant(self, selector: str) -> Optional[DomNode]:
        """First descendant matching *selector* in document order, if any."""


class BrowserPage(ABC):
    @abstractmethod
    async def goto(self, url: str, *, timeout: float, wait_until: str = "domcontentloaded") -> None:
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, *, timeout: float) -> None:
        ...

    @abstractmethod
    async def title(self) -> str:
        ...

    @abstractmethod
    async def query_all(self, selector: str) -> List[DomNode]:
        """Nodes matching *selector* in document order; empty when none match."""

    @abstractmethod
    async def close(self) -> None:
        ...


class BrowserSession(ABC):
    @abstractmethod
    async def new_page(self, options: PageOptions) -> BrowserPage:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class BrowserDriver(ABC):
    """Factory for browser sessions; started and stopped with the process."""

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    @abstractmethod
    async def launch(self, options: LaunchOptions) -> BrowserSession:
        ...

    async def __aenter__(self) -> BrowserDriver:
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
