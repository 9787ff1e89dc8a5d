# site_audit/ranking.py
"""
Heuristic search-position estimate of an audited page.

This is not a ranking model: it only condenses the audit findings of one page into
a 0..100 number and a coarse position bucket. Reports label it as a heuristic.
"""
from __future__ import annotations

from site_audit.models import CrawlResult, Severity

__all__ = ["HEURISTIC_LABEL", "relevance_score", "estimate_position"]

HEURISTIC_LABEL = "heuristic estimate, not a ranking measurement"

_PENALTY = {
    Severity.CRITICAL: 25,
    Severity.ERROR: 10,
    Severity.WARNING: 5,
    Severity.INFO: 0,
}
_FETCH_FAILURE_PENALTY = 30

_BUCKETS = ((80, "1-3"), (60, "4-10"), (40, "11-20"))


def relevance_score(result: CrawlResult) -> int:
    """100 minus a fixed penalty per finding; a failed fetch costs extra."""
    if not result.crawled:
        return 0
    value = 100
    if not result.ok:
        value -= _FETCH_FAILURE_PENALTY
    value -= sum(_PENALTY[f.severity] for f in result.findings)
    return max(0, min(100, value))


def estimate_position(score: int) -> str:
    for threshold, bucket in _BUCKETS:
        if score >= threshold:
            return bucket
    return "20+"
