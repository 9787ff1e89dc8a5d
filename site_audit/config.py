# === FILE: site_audit/config.py ===
"""
Модуль для загрузки и валидации конфигурации аудита SiteAudit.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)

from site_audit.errors import ConfigError
from site_audit.routes import KEY_ROUTES, PARITY_ROUTES, ParityRoute


class AuditConfig(BaseModel):
    """Конфигурация для одного запуска аудита."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Корень проверяемого сайта (reference).")
    compare_base: Optional[HttpUrl] = Field(
        None, description="Второй сайт (candidate) для сравнения UI; включает parity-режим."
    )
    sitemap_path: str = Field("/sitemap.xml", min_length=1, description="Путь к корневому sitemap.")
    limit: Optional[int] = Field(None, ge=1, description="Макс. число URL для обхода.")
    concurrency: int = Field(5, ge=1, le=64, description="Одновременных запросов, не больше.")
    timeout: float = Field(15.0, gt=0, description="Таймаут на один запрос (секунд).")
    retry_times: int = Field(1, ge=0, le=1, description="Повторов при таймауте или сетевой ошибке.")
    retry_backoff: float = Field(0.5, ge=0, description="Пауза перед повтором (секунд).")
    deadline: Optional[float] = Field(None, gt=0, description="Лимит на весь запуск (секунд).")
    user_agent: str = Field(
        "SiteAuditBot/1.0 (+technical-seo-audit)", min_length=1, description="Заголовок User-Agent."
    )
    verification_meta: str = Field(
        "google-site-verification", min_length=1, description="meta name тега верификации."
    )
    analytics_id: Optional[str] = Field(None, description="Идентификатор аналитики (G-XXXX).")
    max_sitemap_depth: int = Field(3, ge=0, description="Глубина вложенных sitemap index.")
    key_routes: List[str] = Field(
        default_factory=lambda: list(KEY_ROUTES), description="Резервный список путей."
    )
    parity_routes: List[ParityRoute] = Field(
        default_factory=lambda: list(PARITY_ROUTES), description="Экраны для сравнения UI."
    )
    report_dir: Path = Field(Path("reports"), description="Папка для отчётов.")
    markdown_report: str = Field("site-audit.md", min_length=1)
    json_report: str = Field("site-audit.json", min_length=1)
    warning_sample_size: int = Field(25, ge=0, description="Сколько предупреждений показать в Markdown.")

    @field_validator("key_routes")
    def _check_key_routes(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("key_routes не может быть пустым")
        bad = [r for r in v if not r.startswith("/")]
        if bad:
            raise ValueError(f"пути должны начинаться с '/': {bad}")
        return v

    @field_validator("sitemap_path")
    def _check_sitemap_path(cls, v: str) -> str:
        return v if v.startswith("/") else "/" + v

    @property
    def site_root(self) -> str:
        """base_url без завершающего слеша."""
        return str(self.base_url).rstrip("/")

    @property
    def compare_root(self) -> Optional[str]:
        return str(self.compare_base).rstrip("/") if self.compare_base else None

    @property
    def markdown_path(self) -> Path:
        return self.report_dir / self.markdown_report

    @property
    def json_path(self) -> Path:
        return self.report_dir / self.json_report


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def _read_file(path_obj: Path) -> dict[str, Any]:
    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ConfigError(f"Неподдерживаемый формат конфига: {suffix}")


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> AuditConfig:
    """
    Читает YAML или JSON, накладывает overrides (значения None игнорируются)
    и возвращает проверенный объект AuditConfig.

    Без path используется configs/default.yaml, если он есть; иначе только overrides.
    Ошибки схемы пробрасываются как pydantic.ValidationError.
    """
    data: Dict[str, Any] = {}
    if path is None:
        if _DEFAULT_CFG.is_file():
            data = _read_file(_DEFAULT_CFG)
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise ConfigError(f"Файл конфигурации не найден: {path_obj}")
        data = _read_file(path_obj)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return AuditConfig(**data)
