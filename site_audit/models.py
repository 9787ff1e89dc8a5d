# File: site_audit/models.py
"""site_audit.models: In-memory records produced during one audit run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from site_audit.urls import UrlCategory, normalize

__all__ = [
    "UrlEntry",
    "UrlInventory",
    "InventoryDiff",
    "Severity",
    "Finding",
    "CrawlChecks",
    "CrawlResult",
    "MetricsBag",
    "ScreenSnapshot",
    "ComponentScore",
    "OverallScore",
    "ScreenScore",
    "NOT_CRAWLED",
]

NOT_CRAWLED = "not crawled"


# --------------------------------------------------------------------------- #
# URL inventory                                                               #
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class UrlEntry:
    """One public URL discovered from the sitemap tree (or the key-route fallback)."""

    url: str
    normalized_path: str
    category: UrlCategory
    last_modified: Optional[datetime] = None
    priority: Optional[float] = None
    change_frequency: Optional[str] = None
    source: str = "sitemap"


@dataclass(slots=True)
class UrlInventory:
    """Deduplicated, categorised URL set of one site."""

    base_url: str
    source: str
    entries: List[UrlEntry] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped_sitemaps: List[str] = field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for entry in self.entries:
            counts[entry.category.value] = counts.get(entry.category.value, 0) + 1
        return dict(sorted(counts.items()))

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(slots=True)
class InventoryDiff:
    """URL inventories of the reference and candidate sites compared by path."""

    reference_total: int
    candidate_total: int
    missing: List[UrlEntry] = field(default_factory=list)
    extra: List[UrlEntry] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)
    by_category: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @property
    def missing_by_category(self) -> Dict[str, List[UrlEntry]]:
        groups: Dict[str, List[UrlEntry]] = {}
        for entry in self.missing:
            groups.setdefault(entry.category.value, []).append(entry)
        return groups


# --------------------------------------------------------------------------- #
# Page audit                                                                  #
# --------------------------------------------------------------------------- #


class Severity(str, Enum):
    """How a finding affects the run: only CRITICAL gates the exit status."""

    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(slots=True, frozen=True)
class Finding:
    message: str
    severity: Severity


@dataclass(slots=True)
class CrawlChecks:
    """Technical-SEO signals read from one page."""

    canonical_url: Optional[str] = None
    canonical_self_referential: bool = False
    title: Optional[str] = None
    title_length: int = 0
    meta_description: Optional[str] = None
    meta_description_length: int = 0
    verification_tag_present: bool = False
    analytics_tag_present: bool = False
    noindex_present: bool = False
    structured_data_present: bool = False
    structured_data_count: int = 0
    hreflang_present: bool = False
    hreflang_languages: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CrawlResult:
    """Outcome of auditing one URL.

    ``issues`` lists every warning and critical message, ``critical_issues`` the
    subset that gates the exit status and ``notes`` informational findings.
    """

    url: str
    normalized_path: str
    http_status: int
    ok: bool
    crawled: bool = True
    issues: List[str] = field(default_factory=list)
    critical_issues: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    checks: CrawlChecks = field(default_factory=CrawlChecks)
    elapsed_ms: Optional[int] = None
    findings: List[Finding] = field(default_factory=list, repr=False)

    @classmethod
    def from_findings(
        cls,
        url: str,
        http_status: int,
        ok: bool,
        findings: List[Finding],
        checks: Optional[CrawlChecks] = None,
        elapsed_ms: Optional[int] = None,
    ) -> CrawlResult:
        result = cls(
            url=url,
            normalized_path=normalize(url),
            http_status=http_status,
            ok=ok,
            checks=checks or CrawlChecks(),
            elapsed_ms=elapsed_ms,
            findings=list(findings),
        )
        for finding in findings:
            if finding.severity is Severity.INFO:
                result.notes.append(finding.message)
                continue
            result.issues.append(finding.message)
            if finding.severity is Severity.CRITICAL:
                result.critical_issues.append(finding.message)
        return result

    @classmethod
    def not_crawled(cls, url: str) -> CrawlResult:
        return cls(
            url=url,
            normalized_path=normalize(url),
            http_status=0,
            ok=False,
            crawled=False,
            issues=[NOT_CRAWLED],
        )

    @property
    def is_critical(self) -> bool:
        return bool(self.critical_issues)

    @property
    def fetch_failed(self) -> bool:
        return self.crawled and not self.ok

    @property
    def is_warned(self) -> bool:
        """Fetched fine but has at least one issue, critical ones included."""
        return self.ok and bool(self.issues)

    @property
    def is_clean(self) -> bool:
        return self.ok and not self.issues


# --------------------------------------------------------------------------- #
# UI parity                                                                   #
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class MetricsBag:
    """Structural signals of one rendered page. ``MetricsBag()`` is the zeroed bag."""

    has_hero: bool = False
    h1_present: bool = False
    h1_text: str = ""
    has_gallery: bool = False
    has_price_block: bool = False
    has_cta: bool = False
    has_listing_grid: bool = False
    has_filters: bool = False
    has_breadcrumbs: bool = False
    trust_signal_count: int = 0
    conversion_widget_count: int = 0


@dataclass(slots=True)
class ScreenSnapshot:
    """Metrics of the same route captured on the reference and candidate sites."""

    route: str
    name: str
    reference_url: str
    candidate_url: str
    reference_metrics: MetricsBag = field(default_factory=MetricsBag)
    candidate_metrics: MetricsBag = field(default_factory=MetricsBag)
    reference_status: int = 0
    candidate_status: int = 0
    reference_error: Optional[str] = None
    candidate_error: Optional[str] = None


@dataclass(slots=True)
class ComponentScore:
    component: str
    reference_score: int
    candidate_score: int
    difference: int
    notes: List[str] = field(default_factory=list)


@dataclass(slots=True)
class OverallScore:
    reference: int
    candidate: int
    difference: int


@dataclass(slots=True)
class ScreenScore:
    route: str
    name: str
    page_type: str
    overall: OverallScore
    components: List[ComponentScore] = field(default_factory=list)
    regressions: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        if self.overall.difference < 0:
            return "regression"
        if self.overall.difference > 0:
            return "improvement"
        return "parity"
