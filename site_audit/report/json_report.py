# site_audit/report/json_report.py

"""
Генерация JSON-отчёта для проекта SiteAudit.

Полный структурированный дамп AuditReport, включая эвристическую оценку позиции
для каждой страницы (помечена как эвристика).
"""
import json
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from site_audit.aggregator import AuditReport
from site_audit.models import CrawlResult, InventoryDiff, UrlEntry
from site_audit.ranking import HEURISTIC_LABEL, estimate_position, relevance_score


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def entry_to_dict(entry: UrlEntry) -> dict[str, Any]:
    return {
        "url": entry.url,
        "normalized_path": entry.normalized_path,
        "category": entry.category.value,
        "last_modified": entry.last_modified.isoformat() if entry.last_modified else None,
        "priority": entry.priority,
        "change_frequency": entry.change_frequency,
        "source": entry.source,
    }


def _result_to_dict(result: CrawlResult) -> dict[str, Any]:
    data = asdict(result)
    data.pop("findings")
    data["findings"] = [
        {"message": f.message, "severity": f.severity.value} for f in result.findings
    ]
    score = relevance_score(result)
    data["position_estimate"] = {
        "relevance_score": score,
        "estimated_position": estimate_position(score),
        "label": HEURISTIC_LABEL,
    }
    return data


def _diff_to_dict(diff: InventoryDiff | None) -> dict[str, Any] | None:
    if diff is None:
        return None
    return {
        "reference_total": diff.reference_total,
        "candidate_total": diff.candidate_total,
        "missing": [entry_to_dict(e) for e in diff.missing],
        "extra": [entry_to_dict(e) for e in diff.extra],
        "changed": diff.changed,
        "by_category": diff.by_category,
    }


def report_to_dict(report: AuditReport) -> dict[str, Any]:
    """AuditReport -> словарь, готовый к json.dump."""
    screens = []
    for screen in report.screens:
        item = asdict(screen)
        item["status"] = screen.status
        screens.append(item)
    return {
        "generated_at": report.generated_at.isoformat(),
        "base_url": report.base_url,
        "compare_base": report.compare_base,
        "interrupted": report.interrupted,
        "exit_code": report.exit_code,
        "summary": asdict(report.summary),
        "warnings": report.warnings,
        "inventory": {
            "source": report.inventory.source,
            "total": len(report.inventory),
            "counts": report.inventory.counts,
            "skipped_sitemaps": report.inventory.skipped_sitemaps,
            "entries": [entry_to_dict(e) for e in report.inventory.entries],
        },
        "results": [_result_to_dict(r) for r in report.results],
        "screens": screens,
        "inventory_diff": _diff_to_dict(report.inventory_diff),
    }


def render_json(report: AuditReport, output_path: Path | str) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути (файл перезаписывается).

    :param report: объект AuditReport
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open("w", encoding="utf-8") as f:
        json.dump(report_to_dict(report), f, ensure_ascii=False, indent=2, default=_default)

    return output
