# File: site_audit/aggregator.py
"""site_audit.aggregator: Сведение результатов обхода и сравнения экранов в один отчёт."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from statistics import mean
from typing import Iterable, List, Optional

from site_audit.models import CrawlResult, InventoryDiff, ScreenScore, Severity, UrlInventory

__all__ = ["AuditSummary", "AuditReport", "aggregate"]


@dataclass(slots=True)
class AuditSummary:
    """Счётчики для таблицы в начале отчёта.

    ``ok``, ``warned``, ``failed`` и ``not_crawled`` не пересекаются и в сумме дают
    ``total``; ``critical`` считается отдельно (страницы из ``warned`` и ``failed``).
    """

    total: int = 0
    ok: int = 0
    warned: int = 0
    failed: int = 0
    not_crawled: int = 0
    critical: int = 0
    screens: int = 0
    screen_regressions: int = 0
    screen_improvements: int = 0
    screen_parity: int = 0
    mean_reference_score: Optional[float] = None
    mean_candidate_score: Optional[float] = None
    urls_missing_on_candidate: Optional[int] = None
    urls_extra_on_candidate: Optional[int] = None


@dataclass(slots=True)
class AuditReport:
    """Полный результат одного запуска."""

    base_url: str
    inventory: UrlInventory
    results: List[CrawlResult] = field(default_factory=list)
    screens: List[ScreenScore] = field(default_factory=list)
    summary: AuditSummary = field(default_factory=AuditSummary)
    compare_base: Optional[str] = None
    interrupted: bool = False
    warnings: List[str] = field(default_factory=list)
    inventory_diff: Optional[InventoryDiff] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def exit_code(self) -> int:
        """1 при критической проблеме или неудачной загрузке, иначе 0."""
        return 1 if self.summary.critical or self.summary.failed else 0

    @property
    def critical_results(self) -> List[CrawlResult]:
        return [r for r in self.results if r.is_critical and not r.fetch_failed]

    @property
    def failed_results(self) -> List[CrawlResult]:
        return [r for r in self.results if r.fetch_failed]

    @property
    def not_crawled_results(self) -> List[CrawlResult]:
        return [r for r in self.results if not r.crawled]

    def warning_sample(self, size: int) -> List[tuple[CrawlResult, str, Severity]]:
        """Некритичные проблемы страниц: сначала error, затем warning; не больше *size*."""
        rows = [
            (result, finding.message, finding.severity)
            for result in self.results
            if result.ok
            for finding in result.findings
            if finding.severity in (Severity.ERROR, Severity.WARNING)
        ]
        rows.sort(key=lambda row: 0 if row[2] is Severity.ERROR else 1)
        return rows[:size]

    @property
    def screens_by_status(self) -> List[ScreenScore]:
        """Экраны с регрессиями первыми, затем улучшения, затем паритет."""
        order = {"regression": 0, "improvement": 1, "parity": 2}
        return sorted(self.screens, key=lambda s: (order[s.status], s.route))


def _summarize(results: List[CrawlResult], screens: List[ScreenScore]) -> AuditSummary:
    # ok + warned + failed + not_crawled == total; critical overlaps warned and failed
    summary = AuditSummary(total=len(results), screens=len(screens))
    for result in results:
        if not result.crawled:
            summary.not_crawled += 1
            continue
        if result.fetch_failed:
            summary.failed += 1
        elif result.is_clean:
            summary.ok += 1
        elif result.is_warned:
            summary.warned += 1
        if result.is_critical:
            summary.critical += 1
    for screen in screens:
        if screen.status == "regression":
            summary.screen_regressions += 1
        elif screen.status == "improvement":
            summary.screen_improvements += 1
        else:
            summary.screen_parity += 1
    if screens:
        summary.mean_reference_score = round(mean(s.overall.reference for s in screens), 2)
        summary.mean_candidate_score = round(mean(s.overall.candidate for s in screens), 2)
    return summary


def aggregate(
    inventory: UrlInventory,
    crawl_results: Iterable[CrawlResult],
    screens: Iterable[ScreenScore] = (),
    interrupted: bool = False,
    compare_base: Optional[str] = None,
    warnings: Iterable[str] = (),
    inventory_diff: Optional[InventoryDiff] = None,
) -> AuditReport:
    """Собирает :class:`AuditReport`; порядок не зависит от порядка завершения задач."""
    results = sorted(crawl_results, key=lambda r: (r.normalized_path, r.url))
    screen_list = sorted(screens, key=lambda s: s.route)
    summary = _summarize(results, screen_list)
    if inventory_diff is not None:
        summary.urls_missing_on_candidate = len(inventory_diff.missing)
        summary.urls_extra_on_candidate = len(inventory_diff.extra)
    return AuditReport(
        base_url=inventory.base_url,
        inventory=inventory,
        results=results,
        screens=screen_list,
        summary=summary,
        compare_base=compare_base,
        interrupted=interrupted,
        warnings=[*inventory.warnings, *warnings],
        inventory_diff=inventory_diff,
    )
