# armory_scout/errors.py
"""
Failure taxonomy for the fetch/extract/cache pipeline.

Fetch and extraction failures are raised by the fetcher and extractor and
recovered only at the service boundary, where they become HTTP replies.
"""
from __future__ import annotations

from enum import Enum


class ArmoryScoutError(Exception):
    """Base class for every error raised by ArmoryScout itself."""


class FetchFailureReason(str, Enum):
    TIMEOUT = "timeout"
    CHALLENGE_DETECTED = "challenge_detected"
    NAVIGATION_ERROR = "navigation_error"


class ExtractFailureReason(str, Enum):
    EVALUATION_ERROR = "evaluation_error"


class FetchFailure(ArmoryScoutError):
    """The profile page could not be loaded or rendered."""

    def __init__(self, reason: FetchFailureReason, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class ExtractFailure(ArmoryScoutError):
    """The page loaded but its item zones could not be evaluated."""

    def __init__(self, reason: ExtractFailureReason, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


class CacheStoreError(ArmoryScoutError):
    """Invalid cache store usage (bad construction parameters, empty keys)."""


__all__ = [
    "ArmoryScoutError",
    "FetchFailureReason",
    "ExtractFailureReason",
    "FetchFailure",
    "ExtractFailure",
    "CacheStoreError",
]
