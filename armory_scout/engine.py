# File: armory_scout/engine.py
"""armory_scout.engine: Orchestration layer: кэш, загрузка страницы и извлечение предметов."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from armory_scout.cache import CacheStore, normalize_key
from armory_scout.errors import CacheStoreError, ExtractFailure, FetchFailure
from armory_scout.extractor import Extractor
from armory_scout.fetcher import Fetcher
from armory_scout.logger import logger
from armory_scout.models import ScrapeResult

__all__ = ["ScrapeEngine", "ScrapeLookup", "Reply", "INTERNAL_ERROR"]

INTERNAL_ERROR = "Internal server error"


@dataclass(frozen=True, slots=True)
class ScrapeLookup:
    """Результат запроса: данные и признак попадания в кэш."""

    result: ScrapeResult
    cached: bool


@dataclass(frozen=True, slots=True)
class Reply:
    """HTTP-независимый ответ: статус, JSON-тело и признак кэша."""

    status: int
    body: Dict[str, Any] = field(default_factory=dict)
    cached: bool = False


class ScrapeEngine:
    """Фасад для HTTP-сервера, CLI и тестов: кэш -> загрузка -> извлечение -> кэш."""

    def __init__(self, store: CacheStore, fetcher: Fetcher, extractor: Extractor) -> None:
        """Инициализирует Engine с явными ссылками на кэш, загрузчик и экстрактор."""
        self.store = store
        self.fetcher = fetcher
        self.extractor = extractor

    async def scrape(self, character: str) -> ScrapeLookup:
        """
        Возвращает свежую запись из кэша или выполняет ровно одну загрузку.

        FetchFailure и ExtractFailure пробрасываются вызывающему и никогда не кэшируются.
        Сессия браузера закрывается до возврата из метода.
        """
        key = normalize_key(character)
        entry = self.store.get(key)
        if entry is not None:
            logger.info("Cache hit for %s", key)
            return ScrapeLookup(entry.payload, cached=True)

        logger.info("Cache miss for %s, scraping", key)
        async with self.fetcher.fetch(character) as rendered:
            result = await self.extractor.extract(rendered.page)
        self.store.put(key, result)
        logger.info(
            "Scraped %s: %d/%d/%d items (cache size %d)",
            key, len(result.left), len(result.right), len(result.bottom), len(self.store),
        )
        return ScrapeLookup(result, cached=False)

    async def handle(self, character: str) -> Reply:
        """Преобразует исход scrape() в статус и тело ответа."""
        try:
            lookup = await self.scrape(character)
        except CacheStoreError as exc:
            return Reply(400, {"error": str(exc)})
        except FetchFailure as exc:
            logger.error("Fetch failed for %s: %s", character, exc)
            return Reply(500, {"error": str(exc)})
        except ExtractFailure as exc:
            logger.error("Extraction failed for %s: %s", character, exc)
            return Reply(400, {"error": str(exc)})
        except Exception:
            logger.exception("Unexpected error while scraping %s", character)
            return Reply(500, {"error": INTERNAL_ERROR})
        return Reply(200, lookup.result.to_dict(), cached=lookup.cached)

    def status(self) -> Dict[str, Any]:
        """Данные для GET /."""
        return {
            "message": "ok",
            "cacheSize": len(self.store),
            "cacheCapacity": self.store.capacity,
        }
