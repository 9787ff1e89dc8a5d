# site_audit/auditor.py
"""
Page auditor: fetches inventory URLs and validates their technical-SEO signals.

:func:`evaluate_page` is pure and works on markup only; :class:`PageAuditor` adds
the HTTP layer and turns transport failures and non-2xx answers into critical
findings instead of exceptions.
"""
from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from site_audit.config import AuditConfig
from site_audit.crawler.fetcher import Fetcher
from site_audit.crawler.pool import run_bounded
from site_audit.errors import NetworkError, ParseError
from site_audit.logger import logger
from site_audit.models import CrawlChecks, CrawlResult, Finding, Severity, UrlEntry
from site_audit.parser.html_parser import parse_html
from site_audit.urls import canonical_form

__all__ = [
    "TITLE_MIN",
    "TITLE_MAX",
    "DESCRIPTION_MIN",
    "DESCRIPTION_MAX",
    "AuditRun",
    "PageAuditor",
    "evaluate_page",
]

TITLE_MIN = 10
TITLE_MAX = 60
DESCRIPTION_MIN = 120
DESCRIPTION_MAX = 160

_GA4_ID_RE = re.compile(r"\bG-[A-Z0-9]{6,}\b")
_GTAG_LOADER = "googletagmanager.com/gtag/js"


def _has_analytics(html: str, analytics_id: Optional[str]) -> bool:
    if analytics_id:
        return analytics_id in html
    return _GTAG_LOADER in html or _GA4_ID_RE.search(html) is not None


def evaluate_page(
    url: str,
    html: str,
    verification_meta: str = "google-site-verification",
    analytics_id: Optional[str] = None,
) -> Tuple[CrawlChecks, List[Finding]]:
    """Run every page check on *html* served at *url*.

    Each check is independent; a missing signal becomes a :class:`Finding`, never
    an exception. Markup without any element yields a single warning.
    """
    checks = CrawlChecks()
    findings: List[Finding] = []
    try:
        page = parse_html(html, url)
    except ParseError as exc:
        return checks, [Finding(f"Unparsable HTML: {exc.reason}", Severity.WARNING)]

    # canonical
    checks.canonical_url = page.canonical
    if page.canonical is None:
        findings.append(Finding("Canonical missing", Severity.WARNING))
    else:
        checks.canonical_self_referential = canonical_form(page.canonical) == canonical_form(url)
        if not checks.canonical_self_referential:
            findings.append(
                Finding(f"Canonical not self-referential: {page.canonical}", Severity.WARNING)
            )

    # title
    checks.title = page.title
    checks.title_length = len(page.title or "")
    if page.title is None:
        findings.append(Finding("Title missing", Severity.ERROR))
    elif checks.title_length < TITLE_MIN:
        findings.append(Finding(f"Title too short ({checks.title_length} chars)", Severity.ERROR))
    elif checks.title_length > TITLE_MAX:
        findings.append(Finding(f"Title too long ({checks.title_length} chars)", Severity.WARNING))

    # meta description
    checks.meta_description = page.meta_description
    checks.meta_description_length = len(page.meta_description or "")
    length = checks.meta_description_length
    if page.meta_description is None:
        findings.append(Finding("Meta description missing", Severity.ERROR))
    elif length < DESCRIPTION_MIN:
        findings.append(Finding(f"Meta description too short ({length} chars)", Severity.ERROR))
    elif length > DESCRIPTION_MAX:
        findings.append(Finding(f"Meta description too long ({length} chars)", Severity.WARNING))

    # verification and analytics
    checks.verification_tag_present = bool(page.meta.get(verification_meta.lower()))
    if not checks.verification_tag_present:
        findings.append(Finding(f"Verification tag missing ({verification_meta})", Severity.CRITICAL))
    checks.analytics_tag_present = _has_analytics(html, analytics_id)
    if not checks.analytics_tag_present:
        findings.append(Finding("Analytics tag missing", Severity.INFO))

    # indexability
    checks.noindex_present = page.noindex
    if page.noindex:
        findings.append(Finding("noindex directive present", Severity.CRITICAL))

    # structured data
    checks.structured_data_count = page.structured_data_count
    checks.structured_data_present = page.structured_data_count > 0
    if not checks.structured_data_present:
        findings.append(Finding("Structured data missing", Severity.WARNING))
    if page.invalid_json_ld_blocks:
        findings.append(
            Finding(f"Invalid JSON-LD block(s): {page.invalid_json_ld_blocks}", Severity.WARNING)
        )

    checks.hreflang_languages = list(page.hreflangs)
    checks.hreflang_present = bool(page.hreflangs)
    if page.hreflangs:
        findings.append(Finding(f"hreflang alternates: {', '.join(page.hreflangs)}", Severity.INFO))

    return checks, findings


@dataclass(slots=True)
class AuditRun:
    """Results of one crawl phase, sorted by ``normalized_path``."""

    results: List[CrawlResult] = field(default_factory=list)
    interrupted: bool = False

    @property
    def not_crawled(self) -> List[CrawlResult]:
        return [r for r in self.results if not r.crawled]


class PageAuditor:
    """Audit inventory URLs through a shared :class:`Fetcher`."""

    def __init__(self, fetcher: Fetcher, config: AuditConfig) -> None:
        self.fetcher = fetcher
        self.config = config

    async def audit(self, url: str) -> CrawlResult:
        """GET *url* and validate it. Never raises for network or HTTP failures."""
        try:
            fetched = await self.fetcher.fetch(url)
        except NetworkError as exc:
            return CrawlResult.from_findings(
                url, 0, False, [Finding(f"Network error: {exc.reason}", Severity.CRITICAL)]
            )
        if not fetched.ok:
            logger.warning("HTTP %d for %s", fetched.status, url)
            return CrawlResult.from_findings(
                url,
                fetched.status,
                False,
                [Finding(f"HTTP {fetched.status}", Severity.CRITICAL)],
                elapsed_ms=fetched.elapsed_ms,
            )

        checks, findings = evaluate_page(
            url, fetched.text, self.config.verification_meta, self.config.analytics_id
        )
        result = CrawlResult.from_findings(
            url, fetched.status, True, findings, checks, elapsed_ms=fetched.elapsed_ms
        )
        logger.debug("Audited %s: %d issue(s)", url, len(result.issues))
        return result

    async def audit_all(
        self,
        entries: Iterable[UrlEntry],
        deadline: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
    ) -> AuditRun:
        """Audit *entries* in the bounded pool; unfinished URLs become ``not crawled``."""
        urls = [entry.url for entry in entries]
        logger.info("Crawling %d URL(s) with concurrency %d", len(urls), self.config.concurrency)
        run = await run_bounded(
            urls,
            self.audit,
            concurrency=self.config.concurrency,
            deadline=deadline,
            stop_event=stop_event,
        )
        results = [result for _, result in run.results]
        results.extend(CrawlResult.not_crawled(url) for url in run.unresolved)
        results.sort(key=lambda r: (r.normalized_path, r.url))
        if run.unresolved:
            logger.warning("%d URL(s) not crawled", len(run.unresolved))
        return AuditRun(results=results, interrupted=run.interrupted)
