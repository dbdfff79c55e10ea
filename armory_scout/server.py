# File: armory_scout/server.py
"""armory_scout.server: HTTP-интерфейс сервиса на aiohttp.

Маршруты:
  GET /                  статус и размер кэша
  GET /api/{character}   предметы персонажа (из кэша или свежая загрузка)
"""
from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, Optional

from aiohttp import web

from armory_scout.browser.base import BrowserDriver
from armory_scout.cache import CacheStore, CacheSweeper
from armory_scout.config import ServiceConfig
from armory_scout.engine import ScrapeEngine
from armory_scout.extractor import Extractor
from armory_scout.fetcher import Fetcher
from armory_scout.logger import logger

__all__ = ["create_app", "run", "ENGINE_KEY", "SWEEPER_KEY", "CORS_HEADERS"]

ENGINE_KEY = web.AppKey("engine", ScrapeEngine)
SWEEPER_KEY = web.AppKey("sweeper", CacheSweeper)
DRIVER_KEY = web.AppKey("driver", BrowserDriver)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version, Authorization"
    ),
}

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def cors_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    """Разрешает кросс-доменные запросы; preflight OPTIONS отвечает 200 без тела."""
    if request.method == "OPTIONS":
        response: web.StreamResponse = web.Response(status=200)
    else:
        try:
            response = await handler(request)
        except web.HTTPException as exc:
            response = web.Response(
                status=exc.status, reason=exc.reason, text=exc.text, headers=exc.headers
            )
    response.headers.update(CORS_HEADERS)
    return response


async def handle_status(request: web.Request) -> web.Response:
    return web.json_response(request.app[ENGINE_KEY].status())


async def handle_character(request: web.Request) -> web.Response:
    character = request.match_info["character"]
    reply = await request.app[ENGINE_KEY].handle(character)
    response = web.json_response(reply.body, status=reply.status)
    if reply.status == 200:
        response.headers["X-Cache"] = "HIT" if reply.cached else "MISS"
    return response


def _lifecycle(driver: BrowserDriver, sweeper: CacheSweeper):
    async def ctx(app: web.Application) -> AsyncIterator[None]:
        await driver.start()
        sweeper.start()
        logger.info("Service started")
        try:
            yield
        finally:
            await sweeper.stop()
            await driver.stop()
            logger.info("Service stopped")

    return ctx


def create_app(config: ServiceConfig, driver: Optional[BrowserDriver] = None) -> web.Application:
    """Собирает приложение: кэш, загрузчик, экстрактор и фоновая очистка кэша."""
    if driver is None:
        from armory_scout.browser.playwright_driver import PlaywrightDriver

        driver = PlaywrightDriver()

    store = CacheStore(capacity=config.cache_capacity, ttl=config.cache_ttl)
    fetcher = Fetcher(driver, config)
    extractor = Extractor(config.zones, image_selector=config.image_selector)
    engine = ScrapeEngine(store, fetcher, extractor)
    sweeper = CacheSweeper(store, interval=config.sweep_interval)

    app = web.Application(middlewares=[cors_middleware])
    app[ENGINE_KEY] = engine
    app[SWEEPER_KEY] = sweeper
    app[DRIVER_KEY] = driver
    app.router.add_get("/", handle_status)
    app.router.add_get("/api/{character}", handle_character)
    app.cleanup_ctx.append(_lifecycle(driver, sweeper))
    return app


def run(config: ServiceConfig) -> None:
    """Запускает HTTP-сервер до остановки процесса."""
    logger.info("Starting server on %s:%d", config.host, config.port)
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)
