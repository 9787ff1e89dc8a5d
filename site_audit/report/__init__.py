# File: site_audit/report/__init__.py
"""site_audit.report: Запись Markdown- и JSON-отчётов, используемая CLI и тестами."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

from site_audit.aggregator import AuditReport
from site_audit.config import AuditConfig
from site_audit.logger import logger
from site_audit.report.json_report import render_json
from site_audit.report.markdown_report import render_markdown


def write_reports(report: AuditReport, config: AuditConfig) -> Tuple[Path, Path]:
    """Пишет оба отчёта по фиксированным путям в ``config.report_dir`` (с перезаписью)."""
    md_path = render_markdown(report, config.markdown_path, config.warning_sample_size)
    json_path = render_json(report, config.json_path)
    logger.info("Reports written: %s, %s", md_path, json_path)
    return md_path, json_path


__all__ = ["render_json", "render_markdown", "write_reports"]
