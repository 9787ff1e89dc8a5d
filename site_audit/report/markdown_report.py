# File: site_audit/report/markdown_report.py
"""site_audit.report.markdown_report: Генерация Markdown-отчёта с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader

from site_audit.aggregator import AuditReport

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "report.md.j2"
# строк в разделе сравнения инвентарей
MISSING_PER_CATEGORY = 50
EXTRA_SHOWN = 20


def _md_cell(value: Any) -> str:
    """Экранирует '|' и переводы строк для ячейки таблицы."""
    return str(value).replace("|", "\\|").replace("\n", " ")


def build_environment(template_dir: Union[Path, str] = TEMPLATE_DIR) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["cell"] = _md_cell
    return env


def render_markdown_text(report: AuditReport, warning_sample_size: int = 25) -> str:
    template = build_environment().get_template(TEMPLATE_NAME)
    sample = report.warning_sample(warning_sample_size)
    return template.render(
        report=report,
        summary=report.summary,
        critical=report.critical_results,
        failed=report.failed_results,
        not_crawled=report.not_crawled_results,
        sample=sample,
        sample_size=warning_sample_size,
        screens=report.screens_by_status,
        diff=report.inventory_diff,
        missing_cap=MISSING_PER_CATEGORY,
        extra_cap=EXTRA_SHOWN,
        inventory=report.inventory,
    )


def render_markdown(
    report: AuditReport,
    output_path: Union[Path, str],
    warning_sample_size: Optional[int] = None,
) -> Path:
    """Рендерит Markdown-отчёт и сохраняет его по указанному пути.

    Порядок разделов: сводная таблица, критические проблемы, неудачные загрузки,
    не обойдённые URL, выборка предупреждений, сравнение экранов, сравнение
    инвентарей (только в режиме сравнения), инвентарь.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    size = 25 if warning_sample_size is None else warning_sample_size
    output_path.write_text(render_markdown_text(report, size), encoding="utf-8")
    return output_path
