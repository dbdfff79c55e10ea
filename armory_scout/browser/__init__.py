# File: armory_scout/browser/__init__.py
"""armory_scout.browser: browser-automation interface and its drivers."""

from .base import (
    BrowserDriver,
    BrowserError,
    BrowserPage,
    BrowserSession,
    BrowserTimeout,
    DomNode,
    LaunchOptions,
    PageOptions,
)
from .memory import MemoryDriver, MemoryPage

__all__ = [
    "BrowserDriver",
    "BrowserError",
    "BrowserPage",
    "BrowserSession",
    "BrowserTimeout",
    "DomNode",
    "LaunchOptions",
    "PageOptions",
    "MemoryDriver",
    "MemoryPage",
]
