# File: armory_scout/report/__init__.py
"""armory_scout.report: сохранение результатов извлечения в файлы (используется CLI)."""

from .json_report import dump_json, render_json

__all__ = ["render_json", "dump_json"]
