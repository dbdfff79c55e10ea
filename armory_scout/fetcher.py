# armory_scout/fetcher.py
"""
Fetcher: loads a character profile in a fresh browser session.

Usage::

    async with fetcher.fetch("Frostbite") as rendered:
        result = await extractor.extract(rendered.page)

The session is closed when the ``async with`` block exits, whatever the
outcome (success, FetchFailure, errors raised inside the block, cancellation).
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional, Sequence, Set
from urllib.parse import quote

from armory_scout.browser.base import (
    BrowserDriver,
    BrowserError,
    BrowserPage,
    BrowserSession,
    BrowserTimeout,
    LaunchOptions,
    PageOptions,
)
from armory_scout.browser.launch import launch_options_for
from armory_scout.config import ServiceConfig
from armory_scout.errors import FetchFailure, FetchFailureReason
from armory_scout.logger import get_logger

__all__ = ["Fetcher", "FetchState", "RenderedPage", "CHALLENGE_PHRASES", "is_challenge_title"]

logger = get_logger("fetcher")

# lower-case title fragments of known bot-check interstitials
CHALLENGE_PHRASES: Sequence[str] = (
    "just a moment",
    "attention required",
    "verify you are human",
    "are you a human",
    "checking your browser",
    "ddos-guard",
)


def is_challenge_title(title: str, phrases: Sequence[str] = CHALLENGE_PHRASES) -> bool:
    lowered = title.lower()
    return any(p in lowered for p in phrases)


class FetchState(str, Enum):
    IDLE = "idle"
    SESSION_OPENED = "session_opened"
    NAVIGATION_REQUESTED = "navigation_requested"
    READY = "ready"
    CHALLENGE_DETECTED = "challenge_detected"
    TIMED_OUT = "timed_out"
    NAV_ERROR = "nav_error"


@dataclass(slots=True)
class RenderedPage:
    """A profile page that passed the challenge check and the readiness wait."""

    character: str
    url: str
    title: str
    page: BrowserPage


class Fetcher:
    """Drives one browser session per call to :meth:`fetch`."""

    def __init__(
        self,
        driver: BrowserDriver,
        config: ServiceConfig,
        launch_options: Optional[LaunchOptions] = None,
        grace: float = 2.0,
    ) -> None:
        self.driver = driver
        self.config = config
        self.launch_options = launch_options or launch_options_for(config)
        # slack on top of the driver's own timeout before the hard bound fires
        self.grace = grace
        self._closing: Set[asyncio.Future] = set()
        self.page_options = PageOptions(
            user_agent=config.user_agent,
            locale=config.locale,
            viewport=(config.viewport_width, config.viewport_height),
            extra_headers={"Accept-Language": f"{config.locale},en;q=0.9"},
            blocked_resources=tuple(config.blocked_resources),
        )

    def character_url(self, character: str) -> str:
        base = str(self.config.base_url).rstrip("/")
        return f"{base}/{quote(character.strip(), safe='')}/{quote(self.config.realm, safe='')}/summary"

    @asynccontextmanager
    async def fetch(self, character: str) -> AsyncIterator[RenderedPage]:
        url = self.character_url(character)
        self._transition(url, FetchState.IDLE)
        session = await self._open_session(url)
        try:
            yield await self._load(session, character, url)
        finally:
            await self._release(session, url)

    async def _open_session(self, url: str) -> BrowserSession:
        launch = asyncio.ensure_future(self.driver.launch(self.launch_options))
        try:
            session = await asyncio.shield(launch)
        except asyncio.CancelledError:
            # the launch keeps running; a browser that still comes up gets closed
            launch.add_done_callback(lambda task: self._discard_late_session(task, url))
            raise
        except BrowserError as exc:
            self._transition(url, FetchState.NAV_ERROR)
            raise FetchFailure(FetchFailureReason.NAVIGATION_ERROR, str(exc)) from exc
        self._transition(url, FetchState.SESSION_OPENED)
        return session

    async def _load(self, session: BrowserSession, character: str, url: str) -> RenderedPage:
        nav_timeout = self.config.navigation_timeout
        ready_timeout = self.config.readiness_timeout
        try:
            page = await session.new_page(self.page_options)
            self._transition(url, FetchState.NAVIGATION_REQUESTED)
            await asyncio.wait_for(
                page.goto(url, timeout=nav_timeout, wait_until="domcontentloaded"),
                timeout=nav_timeout + self.grace,
            )
            title = await page.title()
            if is_challenge_title(title):
                self._transition(url, FetchState.CHALLENGE_DETECTED)
                raise FetchFailure(FetchFailureReason.CHALLENGE_DETECTED, f"challenge page: {title!r}")
            await asyncio.wait_for(
                page.wait_for_selector(self.config.readiness_selector, timeout=ready_timeout),
                timeout=ready_timeout + self.grace,
            )
        except (BrowserTimeout, asyncio.TimeoutError) as exc:
            self._transition(url, FetchState.TIMED_OUT)
            raise FetchFailure(FetchFailureReason.TIMEOUT, str(exc) or "navigation timed out") from exc
        except BrowserError as exc:
            self._transition(url, FetchState.NAV_ERROR)
            raise FetchFailure(FetchFailureReason.NAVIGATION_ERROR, str(exc)) from exc

        self._transition(url, FetchState.READY)
        return RenderedPage(character=character, url=url, title=title, page=page)

    def _discard_late_session(self, launch: asyncio.Future, url: str) -> None:
        if launch.cancelled() or launch.exception() is not None:
            return
        logger.info("Closing session launched after cancellation for %s", url)
        closing = asyncio.ensure_future(self._release(launch.result(), url))
        self._closing.add(closing)
        closing.add_done_callback(self._closing.discard)

    async def _release(self, session: BrowserSession, url: str) -> None:
        try:
            await session.close()
        except Exception:
            # a failed close must not mask the outcome of the fetch
            logger.exception("Failed to close browser session for %s", url)
        else:
            logger.debug("Session closed for %s", url)

    @staticmethod
    def _transition(url: str, state: FetchState) -> None:
        logger.debug("%s -> %s", url, state.value)
