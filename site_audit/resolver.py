# File: site_audit/resolver.py
"""site_audit.resolver: Восстановление списка публичных URL из дерева sitemap.

Корневой документ берётся по ``{base}{sitemap_path}``. Дочерние sitemap индекса
загружаются через общий пул (не больше ``concurrency`` запросов сразу), вложенные
индексы обходятся до ``max_sitemap_depth``. Если корень недоступен или не дал ни
одного URL, инвентарь строится из ``key_routes``.
"""

from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional, Tuple

from site_audit.config import AuditConfig
from site_audit.crawler.fetcher import Fetcher
from site_audit.crawler.pool import run_bounded
from site_audit.errors import AuditError, NetworkError
from site_audit.logger import logger
from site_audit.models import UrlEntry, UrlInventory
from site_audit.parser.sitemap_parser import (
    SitemapDocument,
    SitemapIndex,
    SitemapRef,
    SitemapUrl,
    UrlSet,
    parse_sitemap,
)
from site_audit.urls import categorize, join_url, normalize

__all__ = ["SitemapResolver", "select_for_crawl", "fallback_inventory"]

_Outcome = Tuple[Optional[SitemapDocument], Optional[str]]


def _is_newer(candidate: UrlEntry, existing: UrlEntry) -> bool:
    """Заменяет ли *candidate* уже собранную запись с тем же путём."""
    if candidate.last_modified is None:
        return False
    if existing.last_modified is None:
        return True
    return candidate.last_modified > existing.last_modified


def _entry_from_sitemap(url: SitemapUrl) -> UrlEntry:
    return UrlEntry(
        url=url.loc,
        normalized_path=normalize(url.loc),
        category=categorize(url.loc),
        last_modified=url.last_modified,
        priority=url.priority,
        change_frequency=url.change_frequency,
        source="sitemap",
    )


def fallback_inventory(base_url: str, routes: Iterable[str], warnings: List[str]) -> UrlInventory:
    """Инвентарь из списка ключевых путей (без дубликатов, по порядку)."""
    entries: Dict[str, UrlEntry] = {}
    for route in routes:
        url = join_url(base_url, route)
        key = normalize(url)
        entries.setdefault(
            key,
            UrlEntry(url=url, normalized_path=key, category=categorize(url), source="fallback"),
        )
    return UrlInventory(
        base_url=base_url,
        source="fallback",
        entries=sorted(entries.values(), key=lambda e: e.normalized_path),
        warnings=list(warnings),
    )


def select_for_crawl(entries: Iterable[UrlEntry], limit: Optional[int] = None) -> List[UrlEntry]:
    """Порядок обхода: сначала высокий ``priority`` (без priority - в конце), затем путь."""
    ordered = sorted(
        entries,
        key=lambda e: (e.priority is None, -(e.priority or 0.0), e.normalized_path),
    )
    return ordered if limit is None else ordered[:limit]


class SitemapResolver:
    """Загружает дерево sitemap и собирает из него :class:`UrlInventory`."""

    def __init__(self, fetcher: Fetcher, config: AuditConfig) -> None:
        self.fetcher = fetcher
        self.config = config

    async def _load(self, url: str) -> SitemapDocument:
        result = await self.fetcher.fetch(url)
        if not result.ok:
            raise NetworkError(url, f"HTTP {result.status}")
        return parse_sitemap(result.body, source=url)

    async def _try_load(self, url: str) -> _Outcome:
        try:
            return await self._load(url), None
        except AuditError as exc:
            return None, str(exc)

    async def _load_child(self, ref: SitemapRef) -> _Outcome:
        return await self._try_load(ref.loc)

    async def resolve(
        self,
        base_url: Optional[str] = None,
        deadline: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> UrlInventory:
        """
        Строит инвентарь сайта *base_url* (по умолчанию ``config.base_url``).

        *deadline* - сколько секунд осталось на этот этап. Ошибки дочерних sitemap
        не прерывают работу: документ пропускается и попадает в ``skipped_sitemaps``.
        """
        base = (base_url or self.config.site_root).rstrip("/")
        root_url = join_url(base, self.config.sitemap_path)
        loop = asyncio.get_running_loop()
        end = None if deadline is None else loop.time() + deadline

        def remaining() -> Optional[float]:
            return None if end is None else max(0.0, end - loop.time())

        logger.info("Resolving sitemap %s", root_url)
        # one-item pool run: the stop event and the deadline abandon the fetch mid-flight
        run = await run_bounded(
            [root_url],
            self._try_load,
            concurrency=1,
            deadline=remaining(),
            stop_event=stop_event,
        )
        if not run.results:
            if stop_event is not None and stop_event.is_set():
                return self._fallback(base, f"Sitemap {root_url} not loaded: run interrupted")
            return self._fallback(base, f"Sitemap {root_url} not loaded before the deadline")
        root, error = run.results[0][1]
        if root is None:
            return self._fallback(base, f"Sitemap {root_url} unavailable ({error})")

        collected: Dict[str, UrlEntry] = {}
        skipped: List[str] = []
        warnings: List[str] = []
        visited = {root_url}
        sitemaps_read = 1

        self._collect(root, collected)
        level = self._unvisited(root.sitemaps, visited) if isinstance(root, SitemapIndex) else []
        depth = 1
        while level:
            if depth > self.config.max_sitemap_depth:
                for ref in level:
                    skipped.append(ref.loc)
                warnings.append(
                    f"{len(level)} nested sitemap(s) deeper than {self.config.max_sitemap_depth} skipped"
                )
                break
            run = await run_bounded(
                level,
                self._load_child,
                concurrency=self.config.concurrency,
                deadline=remaining(),
                stop_event=stop_event,
            )
            outcomes = {ref.loc: outcome for ref, outcome in run.results}
            next_level: List[SitemapRef] = []
            # порядок документов индекса, а не порядок завершения
            for ref in level:
                if ref.loc not in outcomes:
                    skipped.append(ref.loc)
                    logger.warning("Sitemap %s not loaded: deadline or interrupt", ref.loc)
                    continue
                doc, error = outcomes[ref.loc]
                if doc is None:
                    skipped.append(ref.loc)
                    logger.warning("Sitemap skipped: %s", error)
                    continue
                sitemaps_read += 1
                self._collect(doc, collected)
                if isinstance(doc, SitemapIndex):
                    next_level.extend(self._unvisited(doc.sitemaps, visited))
            if run.interrupted:
                warnings.append("Sitemap resolution interrupted; inventory may be incomplete")
                break
            level = next_level
            depth += 1

        if skipped:
            warnings.append(f"{len(skipped)} sitemap(s) skipped")
        if not collected:
            return self._fallback(base, f"Sitemap {root_url} yielded no URLs", warnings, skipped)

        inventory = UrlInventory(
            base_url=base,
            source="sitemap",
            entries=sorted(collected.values(), key=lambda e: e.normalized_path),
            warnings=warnings,
            skipped_sitemaps=skipped,
        )
        logger.info(
            "Sitemap resolved: %d URLs from %d document(s), %d skipped",
            len(inventory), sitemaps_read, len(skipped),
        )
        return inventory

    @staticmethod
    def _unvisited(refs: Iterable[SitemapRef], visited: set) -> List[SitemapRef]:
        fresh: List[SitemapRef] = []
        for ref in refs:
            if ref.loc in visited:
                continue
            visited.add(ref.loc)
            fresh.append(ref)
        return fresh

    @staticmethod
    def _collect(doc: SitemapDocument, collected: Dict[str, UrlEntry]) -> None:
        if not isinstance(doc, UrlSet):
            return
        for url in doc.urls:
            entry = _entry_from_sitemap(url)
            existing = collected.get(entry.normalized_path)
            if existing is None or _is_newer(entry, existing):
                collected[entry.normalized_path] = entry

    def _fallback(
        self,
        base: str,
        reason: str,
        warnings: Optional[List[str]] = None,
        skipped: Optional[List[str]] = None,
    ) -> UrlInventory:
        logger.warning("%s; falling back to %d key routes", reason, len(self.config.key_routes))
        inventory = fallback_inventory(
            base, self.config.key_routes, [*(warnings or []), f"{reason}; using key routes"]
        )
        inventory.skipped_sitemaps = list(skipped or [])
        return inventory
