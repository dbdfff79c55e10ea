# armory_scout/extractor.py
"""
Extraction of equipped item links from a rendered armory profile.

Each zone selector matches the item ``<a>`` nodes of one equipment column.
Every link becomes one flat record: its own attributes overlaid with those of
its first ``<img>`` descendant.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional

from armory_scout.browser.base import BrowserError, BrowserPage, DomNode
from armory_scout.browser.memory import MemoryPage
from armory_scout.config import DEFAULT_ZONES
from armory_scout.errors import ExtractFailure, ExtractFailureReason
from armory_scout.logger import get_logger
from armory_scout.models import ZONE_NAMES, AttributeRecord, ScrapeResult, merge_attributes

__all__ = ["Extractor", "extract_html"]

logger = get_logger("extractor")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Extractor:
    """Turns a loaded page into a :class:`ScrapeResult`."""

    def __init__(
        self,
        zones: Optional[Mapping[str, str]] = None,
        image_selector: str = "img",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.zones: Dict[str, str] = dict(zones or DEFAULT_ZONES)
        missing = [name for name in ZONE_NAMES if name not in self.zones]
        if missing:
            raise ValueError(f"missing zone selectors: {', '.join(missing)}")
        self.image_selector = image_selector
        self._clock = clock

    async def extract(self, page: BrowserPage) -> ScrapeResult:
        """
        Collect the records of all three zones.

        A zone with no matching links yields an empty list. Errors raised by the
        page while querying become ``ExtractFailure(EVALUATION_ERROR)``.
        """
        collected: Dict[str, List[AttributeRecord]] = {}
        for name in ZONE_NAMES:
            selector = self.zones[name]
            try:
                collected[name] = await self._extract_zone(page, selector)
            except BrowserError as exc:
                logger.warning("Zone %s (%s) could not be evaluated: %s", name, selector, exc)
                raise ExtractFailure(ExtractFailureReason.EVALUATION_ERROR, str(exc)) from exc

        result = ScrapeResult(
            left=tuple(collected["left"]),
            right=tuple(collected["right"]),
            bottom=tuple(collected["bottom"]),
            scraped_at=self._clock(),
        )
        logger.debug(
            "Extracted %d/%d/%d records",
            len(result.left), len(result.right), len(result.bottom),
        )
        return result

    async def _extract_zone(self, page: BrowserPage, selector: str) -> List[AttributeRecord]:
        return [await self._record(node) for node in await page.query_all(selector)]

    async def _record(self, link: DomNode) -> AttributeRecord:
        image = await link.first_descendant(self.image_selector)
        image_attrs = await image.attributes() if image is not None else None
        return merge_attributes(await link.attributes(), image_attrs)


async def extract_html(
    html: str,
    zones: Optional[Mapping[str, str]] = None,
    image_selector: str = "img",
) -> ScrapeResult:
    """Extract records from a saved HTML snapshot, without a browser."""
    extractor = Extractor(zones, image_selector=image_selector)
    return await extractor.extract(MemoryPage.from_html(html))
