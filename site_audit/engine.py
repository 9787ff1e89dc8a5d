# File: site_audit/engine.py
"""site_audit.engine: Orchestration layer: инвентарь, обход, сравнение экранов, агрегация."""

from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import Any, List, Optional, Union

from site_audit.aggregator import AuditReport, aggregate
from site_audit.auditor import PageAuditor
from site_audit.config import AuditConfig, load_config
from site_audit.crawler.fetcher import Fetcher, build_session
from site_audit.inventory_diff import diff_inventories
from site_audit.logger import logger
from site_audit.models import InventoryDiff, ScreenScore, UrlInventory
from site_audit.parity import ParitySnapshotCollector, resolve_parity_routes
from site_audit.resolver import SitemapResolver, select_for_crawl
from site_audit.scoring import score_screen

__all__ = ["Engine"]

_STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Engine:
    """Фасад для CLI и тестов: один запуск аудита от sitemap до AuditReport."""

    @staticmethod
    def load_config(path: Union[str, Path, None], **overrides: Any) -> AuditConfig:
        """Загружает конфиг из YAML/JSON и накладывает overrides из CLI."""
        return load_config(path, **overrides)

    def __init__(self, config: AuditConfig) -> None:
        self.config = config

    def start(self) -> AuditReport:
        """Запускает event loop; SIGINT/SIGTERM останавливают обход, отчёт всё равно строится."""
        logger.info("Starting audit of %s", self.config.site_root)
        return asyncio.run(self._run_with_signals())

    def start_inventory(self) -> UrlInventory:
        return asyncio.run(self.inventory())

    async def _run_with_signals(self) -> AuditReport:
        loop = asyncio.get_running_loop()
        stop_event = asyncio.Event()
        installed: List[signal.Signals] = []
        for sig in _STOP_SIGNALS:
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except (NotImplementedError, RuntimeError) as exc:
                logger.debug("Signal handler for %s not installed: %s", sig.name, exc)
                continue
            installed.append(sig)
        try:
            return await self.run(stop_event)
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)

    async def inventory(self) -> UrlInventory:
        """Только этап sitemap: инвентарь публичных URL."""
        async with build_session(self.config) as session:
            fetcher = Fetcher(session, self.config)
            return await SitemapResolver(fetcher, self.config).resolve(deadline=self.config.deadline)

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> AuditReport:
        """Полный запуск в уже работающем loop; ``deadline`` общий для всех этапов."""
        stop_event = stop_event or asyncio.Event()
        loop = asyncio.get_running_loop()
        end = None if self.config.deadline is None else loop.time() + self.config.deadline

        def remaining() -> Optional[float]:
            return None if end is None else max(0.0, end - loop.time())

        warnings: List[str] = []
        screens: List[ScreenScore] = []
        inventory_diff: Optional[InventoryDiff] = None
        async with build_session(self.config) as session:
            fetcher = Fetcher(session, self.config)

            inventory = await SitemapResolver(fetcher, self.config).resolve(
                deadline=remaining(), stop_event=stop_event
            )
            selected = select_for_crawl(inventory.entries, self.config.limit)
            if self.config.limit is not None and len(selected) < len(inventory):
                logger.info("Crawl limited to %d of %d URL(s)", len(selected), len(inventory))

            audit = await PageAuditor(fetcher, self.config).audit_all(
                selected, deadline=remaining(), stop_event=stop_event
            )
            interrupted = audit.interrupted or stop_event.is_set()

            if self.config.compare_root is not None:
                if interrupted:
                    warnings.append("Parity comparison skipped: run interrupted")
                    logger.warning("Parity comparison skipped: run interrupted")
                else:
                    inventory_diff = await self._compare_inventories(
                        fetcher, inventory, warnings, remaining(), stop_event
                    )
                    routes, route_warnings = resolve_parity_routes(self.config.parity_routes, inventory)
                    warnings.extend(route_warnings)
                    snapshots = await ParitySnapshotCollector(fetcher, self.config).collect(
                        routes, deadline=remaining(), stop_event=stop_event
                    )
                    screens = [score_screen(snapshot) for snapshot in snapshots]
                    interrupted = stop_event.is_set()

        report = aggregate(
            inventory,
            audit.results,
            screens,
            interrupted=interrupted,
            compare_base=self.config.compare_root,
            warnings=warnings,
            inventory_diff=inventory_diff,
        )
        logger.info(
            "Audit finished: %d URL(s), %d critical, %d failed, %d not crawled",
            report.summary.total,
            report.summary.critical,
            report.summary.failed,
            report.summary.not_crawled,
        )
        return report

    async def _compare_inventories(
        self,
        fetcher: Fetcher,
        inventory: UrlInventory,
        warnings: List[str],
        deadline: Optional[float],
        stop_event: asyncio.Event,
    ) -> Optional[InventoryDiff]:
        """Sitemap кандидата против инвентаря эталона; ``None``, если сравнивать нечего."""
        if inventory.source != "sitemap":
            warnings.append("Inventory diff skipped: reference sitemap unavailable")
            return None
        candidate = await SitemapResolver(fetcher, self.config).resolve(
            base_url=self.config.compare_root, deadline=deadline, stop_event=stop_event
        )
        warnings.extend(f"Candidate: {warning}" for warning in candidate.warnings)
        if candidate.source != "sitemap":
            warnings.append("Inventory diff skipped: candidate sitemap unavailable")
            logger.warning("Inventory diff skipped: candidate sitemap unavailable")
            return None
        return diff_inventories(inventory, candidate)
