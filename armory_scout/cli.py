# === FILE: armory_scout/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска ArmoryScout через командную строку.

Команды:
  serve      Запустить HTTP-сервис (GET / и GET /api/<character>)
  scrape     Однократно загрузить профиль персонажа и вывести/сохранить JSON
  extract    Извлечь предметы из сохранённой HTML-страницы без браузера
  config     Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию ArmoryScout

Пример:
  armory-scout scrape Frostbite --pretty
"""
import asyncio
import sys
from pathlib import Path

import click

from armory_scout import __version__
from armory_scout.browser.base import BrowserDriver
from armory_scout.cache import CacheStore
from armory_scout.config import ServiceConfig, apply_env, load_config
from armory_scout.engine import ScrapeEngine
from armory_scout.errors import ArmoryScoutError
from armory_scout.extractor import Extractor, extract_html
from armory_scout.fetcher import Fetcher
from armory_scout.logger import DEFAULT_FORMAT, init_logging
from armory_scout.models import ScrapeResult
from armory_scout.report.json_report import dump_json, render_json
from armory_scout.server import run

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _playwright_driver() -> BrowserDriver:
    from armory_scout.browser.playwright_driver import PlaywrightDriver

    return PlaywrightDriver()


async def scrape_character(cfg: ServiceConfig, character: str) -> ScrapeResult:
    """Одна загрузка без кэша между запусками: собственный драйвер и хранилище."""
    async with _playwright_driver() as driver:
        engine = ScrapeEngine(
            CacheStore(capacity=cfg.cache_capacity, ttl=cfg.cache_ttl),
            Fetcher(driver, cfg),
            Extractor(cfg.zones, image_selector=cfg.image_selector),
        )
        lookup = await engine.scrape(character)
    return lookup.result


def _emit(result: ScrapeResult, json_output, pretty: bool) -> None:
    if json_output:
        path = render_json(result, json_output)
        click.echo(f'JSON saved to {path}')
    else:
        click.echo(dump_json(result, pretty=pretty))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='ArmoryScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд ArmoryScout CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = apply_env(load_config(config_path))
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес (override host)')
@click.option('--port', '-p', type=int, default=None, help='Порт (override port/PORT)')
@click.pass_context
def serve(ctx, host, port):
    """Запустить HTTP-сервис."""
    cfg: ServiceConfig = ctx.obj['config']
    overrides = {k: v for k, v in (('host', host), ('port', port)) if v is not None}
    if overrides:
        try:
            cfg = ServiceConfig(**{**cfg.model_dump(mode='json'), **overrides})
        except Exception as e:
            print_error(f'Некорректные параметры сервера: {e}')
    run(cfg)


@cli.command('scrape', context_settings=CONTEXT_SETTINGS)
@click.argument('character')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON в файл'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def scrape(ctx, character, json_output, pretty):
    """Загрузить профиль CHARACTER и вывести предметы."""
    cfg = ctx.obj['config']
    try:
        result = asyncio.run(scrape_character(cfg, character))
    except ArmoryScoutError as e:
        print_error(f'Не удалось получить {character}: {e}')
    except Exception as e:
        print_error(f'Ошибка при загрузке: {e}')
    _emit(result, json_output, pretty)


@cli.command('extract', context_settings=CONTEXT_SETTINGS)
@click.argument('html_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON в файл'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def extract(ctx, html_file, json_output, pretty):
    """Извлечь предметы из сохранённой страницы HTML_FILE."""
    cfg = ctx.obj['config']
    html = html_file.read_text(encoding='utf-8', errors='replace')
    try:
        result = asyncio.run(extract_html(html, cfg.zones, image_selector=cfg.image_selector))
    except ArmoryScoutError as e:
        print_error(f'Ошибка извлечения: {e}')
    _emit(result, json_output, pretty)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в формате JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == '__main__':
    cli()
