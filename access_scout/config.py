# access_scout/config.py
"""
Конфигурация AccessScout: схема ScannerConfig (Pydantic) и загрузка из YAML/JSON
с переопределениями из окружения.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PAGE_CEILING = 50

DEFAULT_AXE_TAGS = (
    "wcag2a",
    "wcag2aa",
    "wcag21a",
    "wcag21aa",
    "wcag22a",
    "wcag22aa",
    "best-practice",
)

DEFAULT_BROWSER_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)


class ScannerConfig(BaseModel):
    """Конфигурация процесса сканирования (браузер, аудит, ИИ, сервер)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    # обход
    max_pages: int = Field(
        MAX_PAGE_CEILING, ge=1, le=MAX_PAGE_CEILING, description="Бюджет страниц по умолчанию."
    )
    navigation_timeout: float = Field(30.0, gt=0, description="Таймаут навигации (секунд).")

    # браузер
    headless: bool = True
    viewport_width: int = Field(1280, ge=320)
    viewport_height: int = Field(800, ge=240)
    browser_args: List[str] = Field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))

    # аудит
    axe_script_url: str = Field(
        "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.0/axe.min.js",
        min_length=1,
        description="URL сборки axe-core, внедряемой в страницу.",
    )
    axe_tags: List[str] = Field(default_factory=lambda: list(DEFAULT_AXE_TAGS))

    # отбор важных страниц и оценка
    max_snapshots: int = Field(10, ge=0, description="Лимит снимков страниц на скан.")
    importance_violation_threshold: int = Field(5, ge=1)
    violation_penalty: int = Field(5, ge=0, description="Штраф за одно нарушение в оценке.")

    # ИИ
    ai_model: str = Field("claude-sonnet-4-20250514", min_length=1)
    ai_api_key: Optional[str] = Field(None, repr=False)
    explanation_delay: float = Field(0.5, ge=0, description="Пауза между вызовами объяснений.")
    analysis_delay: float = Field(1.0, ge=0, description="Пауза между вызовами анализа страниц.")
    explanation_max_tokens: int = Field(1024, ge=1)
    analysis_max_tokens: int = Field(2048, ge=1)
    content_text_chars: int = Field(3000, ge=0)

    # сервер и логирование
    host: str = "0.0.0.0"
    port: int = Field(3000, ge=1, le=65535)
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("axe_tags")
    def _tags_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("axe_tags must contain at least one tag")
        return v

    @field_validator("log_level", mode="before")
    def _upper_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


DEFAULT_CONFIG_PATH = Path("configs") / "default.yaml"

_ENV_API_KEY = "ANTHROPIC_API_KEY"
_ENV_PORT = "PORT"


def _parse_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML: {exc}") from exc


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON: {exc}") from exc


_PARSERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
    ".json": _parse_json,
}


def read_config_file(path: Path) -> Dict[str, Any]:
    """Содержимое файла конфигурации как словарь (пустой файл → ``{}``)."""
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise ValueError(f"Неподдерживаемый формат конфига: {path.suffix or path.name}")
    data = parser(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"{path}: ожидался mapping на верхнем уровне, получено {type(data).__name__}")
    return data


def _with_env(data: Mapping[str, Any]) -> Dict[str, Any]:
    """ANTHROPIC_API_KEY заполняет ключ, только если его нет в файле; PORT всегда перекрывает порт."""
    merged = dict(data)
    api_key = os.environ.get(_ENV_API_KEY)
    if api_key and not merged.get("ai_api_key"):
        merged["ai_api_key"] = api_key
    if os.environ.get(_ENV_PORT):
        merged["port"] = os.environ[_ENV_PORT]
    return merged


def load_config(path: Union[str, Path, None] = None) -> ScannerConfig:
    """
    Возвращает проверенный ScannerConfig.

    Без *path* читается configs/default.yaml, а если его нет, берутся
    значения по умолчанию. Явно указанный, но отсутствующий файл даёт
    FileNotFoundError; ошибки схемы поднимаются как pydantic.ValidationError.
    """
    if path is None:
        data = read_config_file(DEFAULT_CONFIG_PATH) if DEFAULT_CONFIG_PATH.is_file() else {}
    else:
        source = Path(path).expanduser()
        if not source.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(source))
        data = read_config_file(source)
    return ScannerConfig(**_with_env(data))


__all__ = ["ScannerConfig", "load_config", "read_config_file", "MAX_PAGE_CEILING", "DEFAULT_AXE_TAGS"]
