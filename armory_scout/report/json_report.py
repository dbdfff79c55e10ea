# armory_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта ArmoryScout.

Сериализация объекта ScrapeResult в строку или файл в том же виде, что отдаёт HTTP API.
"""
import json
from pathlib import Path

from armory_scout.models import ScrapeResult


def dump_json(result: ScrapeResult, *, pretty: bool = False) -> str:
    """Возвращает JSON-представление результата (отступ 2 при pretty)."""
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def render_json(result: ScrapeResult, output_path: Path | str) -> Path:
    """
    Сохраняет результат в формате JSON по указанному пути.

    :param result: объект ScrapeResult с предметами персонажа
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from armory_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/frostbite.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

    return output
