# === FILE: armory_scout/config.py ===
"""
Модуль для загрузки и валидации конфигурации сервиса ArmoryScout.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
    model_validator,
)

DEFAULT_ZONES: Dict[str, str] = {
    "left": ".item-left div div a",
    "right": ".item-right div div a",
    "bottom": ".item-bottom div div a",
}

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# Переменные окружения, которые учитывает apply_env()
ENV_PORT = "PORT"
ENV_SERVERLESS = "AWS_LAMBDA_FUNCTION_VERSION"
ENV_CHROMIUM = "CHROMIUM_EXECUTABLE"


class ServiceConfig(BaseModel):
    """Конфигурация одного процесса сервиса."""
    model_config = ConfigDict(extra="forbid", frozen=True, validate_default=True)

    host: str = Field("0.0.0.0", min_length=1, description="Адрес для HTTP-сервера.")
    port: int = Field(3000, ge=1, le=65535, description="Порт HTTP-сервера.")

    base_url: HttpUrl = Field(
        "https://armory.warmane.com/character", description="Префикс URL профиля персонажа."
    )
    realm: str = Field("Icecrown", min_length=1, description="Игровой мир в URL профиля.")

    navigation_timeout: float = Field(18.0, gt=0, le=60, description="Таймаут навигации (секунд).")
    readiness_timeout: float = Field(18.0, gt=0, le=60, description="Таймаут ожидания селектора (секунд).")
    readiness_selector: str = Field(DEFAULT_ZONES["left"], min_length=1)
    zones: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ZONES))
    image_selector: str = Field("img", min_length=1)

    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    locale: str = Field("en-US", min_length=2)
    viewport_width: int = Field(1024, ge=320)
    viewport_height: int = Field(768, ge=240)
    blocked_resources: tuple[str, ...] = ("image", "stylesheet", "font", "media")

    cache_capacity: int = Field(50, ge=1, description="Максимум записей в кэше.")
    cache_ttl: float = Field(300.0, gt=0, description="Время жизни записи кэша (секунд).")
    sweep_interval: float = Field(60.0, gt=0, description="Период фоновой очистки кэша (секунд).")

    serverless: bool = Field(False, description="Облегчённый Chromium для serverless-окружения.")
    chromium_executable: Optional[str] = None
    headless: bool = True

    @field_validator("base_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("zones")
    def _check_zones(cls, v: Dict[str, str]) -> Dict[str, str]:
        missing = [name for name in DEFAULT_ZONES if name not in v]
        if missing:
            raise ValueError(f"zones must define selectors for: {', '.join(missing)}")
        empty = [name for name, selector in v.items() if not selector.strip()]
        if empty:
            raise ValueError(f"empty selector for zone(s): {', '.join(empty)}")
        return v

    @model_validator(mode="after")
    def _check_serverless_browser(self) -> ServiceConfig:
        if self.serverless and not self.chromium_executable:
            raise ValueError("serverless mode requires chromium_executable")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ServiceConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ServiceConfig.
    Без пути использует configs/default.yaml, а если его нет, то значения по умолчанию.
    Явно указанный, но отсутствующий файл: FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return ServiceConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    try:
        return ServiceConfig(**data)
    except ValidationError:
        raise


def apply_env(config: ServiceConfig, environ: Mapping[str, str] | None = None) -> ServiceConfig:
    """Накладывает переменные окружения (PORT, AWS_LAMBDA_FUNCTION_VERSION, CHROMIUM_EXECUTABLE)."""
    env = os.environ if environ is None else environ
    update: dict[str, Any] = {}
    if env.get(ENV_PORT):
        update["port"] = env[ENV_PORT]
    if env.get(ENV_CHROMIUM):
        update["chromium_executable"] = env[ENV_CHROMIUM]
    if env.get(ENV_SERVERLESS):
        update["serverless"] = True
    if not update:
        return config
    # model_copy() skips validation, so rebuild through the constructor
    return ServiceConfig(**{**config.model_dump(mode="json"), **update})


__all__ = ["ServiceConfig", "load_config", "apply_env", "DEFAULT_ZONES", "DEFAULT_USER_AGENT"]
