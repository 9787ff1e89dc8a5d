# File: tests/test_report.py
"""Aggregation, exit status and the Markdown/JSON writers."""
from __future__ import annotations

import json

from site_audit.aggregator import aggregate
from site_audit.models import (
    CrawlResult,
    Finding,
    MetricsBag,
    ScreenSnapshot,
    Severity,
    UrlEntry,
    UrlInventory,
)
from site_audit.ranking import HEURISTIC_LABEL, estimate_position, relevance_score
from site_audit.report import write_reports
from site_audit.report.json_report import render_json
from site_audit.report.markdown_report import render_markdown_text
from site_audit.scoring import score_screen
from site_audit.urls import UrlCategory

BASE = "https://example.com"


def inventory(*paths: str) -> UrlInventory:
    return UrlInventory(
        base_url=BASE,
        source="sitemap",
        entries=[
            UrlEntry(url=f"{BASE}{p}", normalized_path=p, category=UrlCategory.STATIC) for p in paths
        ],
    )


def clean(path: str) -> CrawlResult:
    return CrawlResult.from_findings(f"{BASE}{path}", 200, True, [Finding("Analytics tag missing", Severity.INFO)])


def warned(path: str) -> CrawlResult:
    return CrawlResult.from_findings(
        f"{BASE}{path}",
        200,
        True,
        [Finding("Canonical missing", Severity.WARNING), Finding("Title too short (5 chars)", Severity.ERROR)],
    )


def noindex(path: str) -> CrawlResult:
    return CrawlResult.from_findings(
        f"{BASE}{path}", 200, True, [Finding("noindex directive present", Severity.CRITICAL)]
    )


def http_500(path: str) -> CrawlResult:
    return CrawlResult.from_findings(f"{BASE}{path}", 500, False, [Finding("HTTP 500", Severity.CRITICAL)])


def regression_screen():
    return score_screen(
        ScreenSnapshot(
            route="/",
            name="Homepage",
            reference_url=f"{BASE}/",
            candidate_url="http://localhost:3000/",
            reference_metrics=MetricsBag(has_hero=True, h1_present=True),
            candidate_metrics=MetricsBag(h1_present=True),
        )
    )


def parity_screen():
    return score_screen(
        ScreenSnapshot(route="/blog", name="Blog Listing", reference_url="", candidate_url="")
    )


def test_summary_counts_and_exit_code():
    results = [clean("/a"), warned("/b"), noindex("/c"), http_500("/d"), CrawlResult.not_crawled(f"{BASE}/e")]
    report = aggregate(inventory("/a", "/b", "/c", "/d", "/e"), reversed(results), [parity_screen(), regression_screen()])
    s = report.summary
    # the 200 noindex page counts as warned; critical overlaps warned and failed
    assert (s.total, s.ok, s.warned, s.failed, s.not_crawled, s.critical) == (5, 1, 2, 1, 1, 2)
    assert s.ok + s.warned + s.failed + s.not_crawled == s.total
    assert (s.screens, s.screen_regressions, s.screen_parity) == (2, 1, 1)
    assert s.mean_reference_score == 2.0
    assert report.exit_code == 1
    assert [r.normalized_path for r in report.results] == ["/a", "/b", "/c", "/d", "/e"]
    assert [s.route for s in report.screens] == ["/", "/blog"]


def test_exit_code_ignores_regressions_and_not_crawled():
    report = aggregate(
        inventory("/a", "/b"),
        [clean("/a"), warned("/b"), CrawlResult.not_crawled(f"{BASE}/c")],
        [regression_screen()],
        interrupted=True,
    )
    assert report.exit_code == 0
    assert report.summary.mean_candidate_score is not None


def test_no_screens_means_no_means():
    report = aggregate(inventory("/a"), [clean("/a")])
    assert report.summary.mean_reference_score is None
    assert report.exit_code == 0


def test_warning_sample_puts_errors_first():
    report = aggregate(inventory("/b"), [warned("/b")])
    rows = report.warning_sample(10)
    assert [sev for _, _, sev in rows] == [Severity.ERROR, Severity.WARNING]
    assert report.warning_sample(1)[0][1] == "Title too short (5 chars)"


def test_markdown_sections_in_triage_order():
    report = aggregate(
        inventory("/a", "/b", "/c", "/d"),
        [clean("/a"), warned("/b"), noindex("/c"), http_500("/d"), CrawlResult.not_crawled(f"{BASE}/e")],
        [parity_screen(), regression_screen()],
        compare_base="http://localhost:3000",
    )
    text = render_markdown_text(report, warning_sample_size=5)
    headings = [
        "## Summary",
        "## Critical issues (1)",
        "## Failed URLs (1)",
        "## Not crawled (1)",
        "## Warnings (first 5)",
        "## UI parity",
        "## Inventory",
    ]
    positions = [text.index(h) for h in headings]
    assert positions == sorted(positions)
    assert "noindex directive present" in text
    assert f"`{BASE}/e`" in text
    # regressions listed before parity rows
    assert text.index("| Homepage |") < text.index("| Blog Listing |")
    assert "regression: Hero section missing" in text
    assert "**Exit status:** 1" in text


def test_json_report(tmp_path):
    report = aggregate(inventory("/a", "/c"), [clean("/a"), noindex("/c")], [regression_screen()])
    path = render_json(report, tmp_path / "out" / "audit.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["exit_code"] == 1
    assert data["summary"]["critical"] == 1
    assert data["inventory"]["counts"] == {"static": 2}
    first = data["results"][0]
    assert first["normalized_path"] == "/a"
    assert first["notes"] == ["Analytics tag missing"]
    assert first["position_estimate"]["label"] == HEURISTIC_LABEL
    assert first["position_estimate"]["estimated_position"] == "1-3"
    assert data["results"][1]["findings"] == [{"message": "noindex directive present", "severity": "critical"}]
    assert data["screens"][0]["status"] == "regression"


def test_write_reports_overwrites(make_config):
    config = make_config(BASE)
    report = aggregate(inventory("/a"), [clean("/a")])
    md_path, json_path = write_reports(report, config)
    md_path.write_text("stale", encoding="utf-8")
    md_again, _ = write_reports(report, config)
    assert md_again == md_path == config.markdown_path
    assert json_path == config.json_path
    assert md_path.read_text(encoding="utf-8").startswith("# Site audit report")


def test_position_heuristic():
    assert relevance_score(clean("/a")) == 100
    assert relevance_score(warned("/b")) == 85
    assert relevance_score(http_500("/d")) == 45
    assert relevance_score(CrawlResult.not_crawled(f"{BASE}/e")) == 0
    assert [estimate_position(v) for v in (100, 80, 79, 60, 45, 39)] == ["1-3", "1-3", "4-10", "4-10", "11-20", "20+"]
