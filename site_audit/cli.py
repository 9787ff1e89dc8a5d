# === FILE: site_audit/cli.py ===
"""
Точка входа для запуска аудита SiteAudit через командную строку.

Команды:
  run        Полный аудит: sitemap -> обход -> (сравнение экранов) -> отчёты
  inventory  Только инвентарь URL из sitemap
  config     Показать итоговую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Дополнительный файл для логов (консоль пишет в stderr)
  --log-format FORMAT Формат логирования

Коды выхода:
  0  проблем нет
  1  критическая проблема или неудачная загрузка страницы
  2  ошибка использования или конфигурации

Пример:
  site-audit run --base-url https://example.com --compare-base http://localhost:3000 --limit 200
"""
import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
from pydantic import ValidationError

from site_audit import __version__
from site_audit.config import AuditConfig, load_config
from site_audit.engine import Engine
from site_audit.errors import ConfigError
from site_audit.logger import init_logging
from site_audit.report import write_reports
from site_audit.report.json_report import entry_to_dict

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])
USAGE_ERROR = 2


def print_error(message: str, code: int = USAGE_ERROR):
    click.secho(message, fg="red", err=True)
    sys.exit(code)


def _load(ctx: click.Context, **overrides: Any) -> AuditConfig:
    try:
        return load_config(ctx.obj["config_path"], **overrides)
    except (ConfigError, ValidationError) as e:
        print_error(f"Ошибка загрузки конфигурации: {e}")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-v", message="SiteAudit, version %(version)s")
@click.option(
    "--config", "-c", "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Путь к файлу конфигурации YAML или JSON.",
)
@click.option(
    "--log-level", "log_level",
    default="INFO", show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Уровень логирования",
)
@click.option(
    "--log-file", "log_file",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Дополнительный файл логов (консольный вывод идёт в stderr)",
)
@click.option(
    "--log-format", "log_format",
    default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    show_default=True,
    help="Строка формата для логов",
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Технический SEO-аудит сайта и сравнение UI двух окружений."""
    init_logging(level=log_level, log_file=log_file, log_format=log_format)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command("run", context_settings=CONTEXT_SETTINGS)
@click.option("--base-url", "base_url", default=None, help="Корень проверяемого сайта.")
@click.option("--compare-base", "compare_base", default=None, help="Второй сайт для сравнения UI.")
@click.option("--limit", "-l", "limit", type=click.IntRange(min=1), default=None,
              help="Макс. число URL для обхода.")
@click.option("--concurrency", type=click.IntRange(min=1), default=None,
              help="Одновременных запросов, не больше.")
@click.option("--timeout", type=float, default=None, help="Таймаут одного запроса (секунд).")
@click.option("--deadline", type=float, default=None, help="Лимит на весь запуск (секунд).")
@click.option("--report-dir", "report_dir", default=None,
              type=click.Path(file_okay=False, path_type=Path), help="Папка для отчётов.")
@click.pass_context
def run(ctx, base_url, compare_base, limit, concurrency, timeout, deadline, report_dir):
    """Запустить аудит и записать Markdown- и JSON-отчёты."""
    cfg = _load(
        ctx,
        base_url=base_url,
        compare_base=compare_base,
        limit=limit,
        concurrency=concurrency,
        timeout=timeout,
        deadline=deadline,
        report_dir=report_dir,
    )
    click.echo(f"Auditing {cfg.site_root}" + (f" against {cfg.compare_root}" if cfg.compare_root else ""))
    report = Engine(cfg).start()
    md_path, json_path = write_reports(report, cfg)

    s = report.summary
    click.echo(f"Markdown report: {md_path}")
    click.echo(f"JSON report: {json_path}")
    line = (
        f"{s.total} URLs: {s.ok} ok, {s.warned} warned, {s.failed} failed, "
        f"{s.not_crawled} not crawled, {s.critical} critical"
    )
    if s.screens:
        line += f"; {s.screens} screens, {s.screen_regressions} regressions"
    if s.urls_missing_on_candidate is not None:
        line += f"; {s.urls_missing_on_candidate} URLs missing on candidate"
    click.secho(line, fg="red" if report.exit_code else "green")
    sys.exit(report.exit_code)


@cli.command("inventory", context_settings=CONTEXT_SETTINGS)
@click.option("--base-url", "base_url", default=None, help="Корень сайта.")
@click.option(
    "--json", "-j", "json_output",
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help="Сохранить инвентарь в JSON-файл",
)
@click.option("--pretty", is_flag=True, help="Преформатировать JSON-вывод (отступ 2)")
@click.pass_context
def inventory(ctx, base_url, json_output: Optional[Path], pretty):
    """Собрать инвентарь URL из sitemap и вывести его."""
    cfg = _load(ctx, base_url=base_url)
    inv = Engine(cfg).start_inventory()

    sources: dict[str, int] = {}
    for entry in inv.entries:
        sources[entry.source] = sources.get(entry.source, 0) + 1
    data = {
        "base_url": inv.base_url,
        "source": inv.source,
        "total": len(inv),
        "counts": inv.counts,
        "sources": sources,
        "warnings": inv.warnings,
        "skipped_sitemaps": inv.skipped_sitemaps,
        "entries": [entry_to_dict(e) for e in inv.entries],
    }
    indent = 2 if pretty else None
    text = json.dumps(data, ensure_ascii=False, indent=indent)

    if not json_output:
        click.echo(text)
        return
    json_output.parent.mkdir(parents=True, exist_ok=True)
    json_output.write_text(text, encoding="utf-8")
    click.echo(f"Inventory: {json_output} ({len(inv)} URLs)")


@cli.command("config", context_settings=CONTEXT_SETTINGS)
@click.option("--base-url", "base_url", default=None, help="Переопределить base_url.")
@click.pass_context
def show_config(ctx, base_url):
    """Показать текущую конфигурацию в JSON."""
    cfg = _load(ctx, base_url=base_url)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
