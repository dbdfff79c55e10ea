# armory_scout/models.py
"""
Data models for scraped armory profiles.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

AttributeRecord = Dict[str, str]

ZONE_NAMES: Tuple[str, ...] = ("left", "right", "bottom")


def merge_attributes(
    link: Mapping[str, str], image: Optional[Mapping[str, str]] = None
) -> AttributeRecord:
    """Flatten a link node and its first image into one record; image keys win."""
    return {**link, **(image or {})}


@dataclass(frozen=True, slots=True)
class ScrapeResult:
    """Equipped item records of one character, per zone, in document order."""

    left: Tuple[AttributeRecord, ...] = ()
    right: Tuple[AttributeRecord, ...] = ()
    bottom: Tuple[AttributeRecord, ...] = ()
    scraped_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape served by the HTTP API."""
        return {
            "left": [dict(r) for r in self.left],
            "right": [dict(r) for r in self.right],
            "bottom": [dict(r) for r in self.bottom],
            "scrapedAt": self.scraped_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Cached payload and the cache-clock reading taken when it was stored."""

    payload: ScrapeResult
    inserted_at: float
