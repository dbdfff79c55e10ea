# File: tests/armory_pages.py
"""HTML snapshots and helpers shared by the test modules."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Mapping

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
ARMORY = "https://armory.warmane.com/character"


def profile_url(character: str, realm: str = "Icecrown") -> str:
    return f"{ARMORY}/{character}/{realm}/summary"


def _link(record: Mapping[str, Mapping[str, str]]) -> str:
    """Render ``{"a": {...}, "img": {...}}`` as an item link with an optional icon."""
    a_attrs = "".join(f' {k}="{v}"' for k, v in record.get("a", {}).items())
    img = record.get("img")
    inner = "<img" + "".join(f' {k}="{v}"' for k, v in img.items()) + ">" if img is not None else "?"
    return f"<a{a_attrs}>{inner}</a>"


def _zone(css_class: str, links: Iterable[Mapping[str, Mapping[str, str]]]) -> str:
    items = "".join(f"<div>{_link(r)}</div>" for r in links)
    return f'<div class="{css_class}"><div>{items}</div></div>'


def profile_page(left=(), right=(), bottom=(), title: str = "Frostbite @ Icecrown - Warmane Armory") -> str:
    """Minimal armory profile: three equipment columns of ``div > div > a`` items."""
    return (
        f"<html><head><title>{title}</title></head><body>"
        f"{_zone('item-left', left)}{_zone('item-right', right)}{_zone('item-bottom', bottom)}"
        "</body></html>"
    )


CHALLENGE_PAGE = "<html><head><title>Just a moment...</title></head><body>Checking</body></html>"

FROSTBITE_PAGE = profile_page(left=[{"a": {"href": "/item/1"}, "img": {"icon": "ring.png"}}])


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
