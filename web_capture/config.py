# === FILE: web_capture/config.py ===
"""
Модуль для загрузки и валидации конфигурации web_capture.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Optional, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class StaticFetchConfig(BaseModel):
    """Параметры статической загрузки (один HTTP GET)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    timeout: float = Field(15.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    accept_language: str = Field("tr-TR,tr;q=0.9,en-US;q=0.8", description="Заголовок Accept-Language.")
    referer: str = Field("https://www.google.com/", description="Заголовок Referer.")
    min_delay: float = Field(2.0, ge=0, description="Минимальная пауза между запросами к одному хосту.")
    random_delay: float = Field(1.0, ge=0, description="Верхняя граница случайной добавки к паузе.")


class RenderConfig(BaseModel):
    """Параметры захвата через браузер."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    deadline: float = Field(120.0, gt=0, description="Жесткий дедлайн всей последовательности (секунд).")
    teardown_grace: float = Field(
        5.0, gt=0, description="Сколько ждать закрытия браузера после дедлайна или отмены (секунд)."
    )
    viewport_width: int = Field(1920, ge=1)
    viewport_height: int = Field(1080, ge=1)
    headless: bool = Field(True, description="False – настоящее окно за пределами экрана.")
    ready_selector: str = Field("body", min_length=1)
    settle_range: Tuple[int, int] = Field((3, 5), description="Пауза после загрузки, секунд (мин, макс).")
    scroll_settle_range: Tuple[int, int] = Field((2, 4), description="Пауза после прокрутки, секунд (мин, макс).")
    screenshot_format: Literal["jpeg", "png"] = "jpeg"
    screenshot_quality: int = Field(90, ge=0, le=100, description="Качество сжатия (только jpeg).")
    user_agent: Optional[str] = Field(None, description="Переопределить User-Agent браузера.")

    @field_validator("settle_range", "scroll_settle_range")
    @classmethod
    def _check_range(cls, v: Tuple[int, int]) -> Tuple[int, int]:
        low, high = v
        if low < 0 or high < low:
            raise ValueError(f"invalid delay range {v}")
        return v

    @property
    def screenshot_extension(self) -> str:
        return "jpg" if self.screenshot_format == "jpeg" else "png"


class CaptureConfig(BaseModel):
    """Конфигурация одного запуска захвата."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    output_dir: Path = Field(Path("outputs"), description="Базовая директория результатов.")
    concurrent: bool = Field(False, description="Запускать обе стратегии одновременно.")
    atomic_writes: bool = Field(
        False, description="Писать артефакты браузера через временные файлы."
    )
    static: StaticFetchConfig = Field(default_factory=StaticFetchConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)


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


def load_config(path: Union[str, Path, None]) -> CaptureConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CaptureConfig.
    Без пути берёт configs/default.yaml, а если его нет – значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CaptureConfig()
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

    return CaptureConfig(**data)


__all__ = [
    "CaptureConfig",
    "StaticFetchConfig",
    "RenderConfig",
    "load_config",
]
