# File: site_audit/parity.py
"""site_audit.parity: Снимки структурных метрик одних и тех же экранов на двух сайтах.

Каждая пара (экран, сторона) - отдельная задача общего пула, поэтому открыто не
больше ``concurrency`` соединений. Сбой одной стороны не убирает экран из отчёта:
сторона получает нулевой :class:`MetricsBag` и текст ошибки.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from site_audit.config import AuditConfig
from site_audit.crawler.fetcher import Fetcher
from site_audit.crawler.pool import run_bounded
from site_audit.errors import ConfigError, NetworkError, ParseError
from site_audit.logger import logger
from site_audit.models import MetricsBag, ScreenSnapshot, UrlInventory
from site_audit.parser.metrics import extract_metrics
from site_audit.routes import ParityRoute
from site_audit.urls import join_url

__all__ = ["REFERENCE", "CANDIDATE", "resolve_parity_routes", "ParitySnapshotCollector"]

REFERENCE = "reference"
CANDIDATE = "candidate"
NOT_FETCHED = "not fetched"


@dataclass(slots=True)
class _SideCapture:
    metrics: MetricsBag
    status: int
    error: Optional[str] = None


def _dynamic_prefix(route: str) -> str:
    return route.split("[", 1)[0]


def resolve_parity_routes(
    routes: Iterable[ParityRoute], inventory: Optional[UrlInventory]
) -> Tuple[List[ParityRoute], List[str]]:
    """Подставляет в ``[slug]``-маршруты первый подходящий путь из инвентаря.

    Returns:
        (маршруты для сравнения, предупреждения о пропущенных маршрутах)
    """
    resolved: List[ParityRoute] = []
    warnings: List[str] = []
    paths = [e.normalized_path for e in inventory.entries] if inventory is not None else []
    for route in routes:
        if not route.is_dynamic:
            resolved.append(route)
            continue
        prefix = _dynamic_prefix(route.route)
        match = next((p for p in paths if p.startswith(prefix) and len(p) > len(prefix)), None)
        if match is None:
            message = f"Parity route {route.route} ({route.name}) skipped: no inventory URL under {prefix}"
            logger.warning(message)
            warnings.append(message)
            continue
        resolved.append(ParityRoute(route=match, name=route.name))
    return resolved, warnings


class ParitySnapshotCollector:
    """Снимает :class:`MetricsBag` с reference- и candidate-сайта для каждого экрана."""

    def __init__(
        self,
        fetcher: Fetcher,
        config: AuditConfig,
        reference_base: Optional[str] = None,
        candidate_base: Optional[str] = None,
    ) -> None:
        self.fetcher = fetcher
        self.config = config
        self.reference_base = reference_base or config.site_root
        candidate = candidate_base or config.compare_root
        if candidate is None:
            raise ConfigError("parity mode needs compare_base")
        self.candidate_base = candidate

    def url_for(self, route: ParityRoute, side: str) -> str:
        base = self.reference_base if side == REFERENCE else self.candidate_base
        return join_url(base, route.route)

    async def _capture(self, job: Tuple[ParityRoute, str]) -> _SideCapture:
        route, side = job
        url = self.url_for(route, side)
        try:
            fetched = await self.fetcher.fetch(url)
        except NetworkError as exc:
            return _SideCapture(MetricsBag(), 0, f"Network error: {exc.reason}")
        if not fetched.ok:
            return _SideCapture(MetricsBag(), fetched.status, f"HTTP {fetched.status}")
        try:
            metrics = extract_metrics(fetched.text)
        except ParseError as exc:
            return _SideCapture(MetricsBag(), fetched.status, f"Unparsable HTML: {exc.reason}")
        return _SideCapture(metrics, fetched.status)

    async def collect(
        self,
        routes: Iterable[ParityRoute],
        deadline: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> List[ScreenSnapshot]:
        """Собирает снимки всех *routes*; порядок результата совпадает с порядком routes."""
        routes = list(routes)
        jobs = [(route, side) for route in routes for side in (REFERENCE, CANDIDATE)]
        logger.info("Capturing %d parity screen(s) on two sites", len(routes))
        run = await run_bounded(
            jobs,
            self._capture,
            concurrency=self.config.concurrency,
            deadline=deadline,
            stop_event=stop_event,
        )
        captured: Dict[Tuple[str, str], _SideCapture] = {
            (route.route, side): capture for (route, side), capture in run.results
        }
        missing = _SideCapture(MetricsBag(), 0, NOT_FETCHED)

        snapshots: List[ScreenSnapshot] = []
        for route in routes:
            ref = captured.get((route.route, REFERENCE), missing)
            cand = captured.get((route.route, CANDIDATE), missing)
            for side, capture in ((REFERENCE, ref), (CANDIDATE, cand)):
                if capture.error:
                    logger.warning("Parity %s %s: %s", side, route.route, capture.error)
            snapshots.append(
                ScreenSnapshot(
                    route=route.route,
                    name=route.name,
                    reference_url=self.url_for(route, REFERENCE),
                    candidate_url=self.url_for(route, CANDIDATE),
                    reference_metrics=ref.metrics,
                    candidate_metrics=cand.metrics,
                    reference_status=ref.status,
                    candidate_status=cand.status,
                    reference_error=ref.error,
                    candidate_error=cand.error,
                )
            )
        return snapshots
