# File: tests/conftest.py
from __future__ import annotations

from typing import Dict

import pytest

from armory_scout.browser.memory import MemoryDriver
from armory_scout.config import ServiceConfig
from armory_pages import CHALLENGE_PAGE, FROSTBITE_PAGE, FakeClock, profile_url


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def config() -> ServiceConfig:
    """Config with short timeouts so failure paths finish quickly."""
    return ServiceConfig(navigation_timeout=0.3, readiness_timeout=0.1)


@pytest.fixture()
def pages() -> Dict[str, str]:
    return {
        profile_url("Frostbite"): FROSTBITE_PAGE,
        profile_url("Gated"): CHALLENGE_PAGE,
        profile_url("Empty"): "<html><head><title>Empty</title></head><body></body></html>",
    }


@pytest.fixture()
def memory_driver(pages) -> MemoryDriver:
    return MemoryDriver(pages)
