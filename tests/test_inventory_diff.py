# File: tests/test_inventory_diff.py
"""Reference vs candidate URL inventories and how the reports show the diff."""
from __future__ import annotations

import json

from site_audit.aggregator import aggregate
from site_audit.inventory_diff import diff_inventories
from site_audit.models import CrawlResult, UrlEntry, UrlInventory
from site_audit.report.json_report import render_json
from site_audit.report.markdown_report import MISSING_PER_CATEGORY, render_markdown_text
from site_audit.urls import categorize, normalize

REF = "https://example.com"
CAND = "http://localhost:3000"


def inventory_of(base: str, *paths: str, priority: dict[str, float] | None = None) -> UrlInventory:
    priority = priority or {}
    entries = [
        UrlEntry(
            url=f"{base}{p}",
            normalized_path=normalize(p),
            category=categorize(p),
            priority=priority.get(p),
        )
        for p in sorted(paths)
    ]
    return UrlInventory(base_url=base, source="sitemap", entries=entries)


def test_missing_extra_and_counts():
    reference = inventory_of(
        REF, "/", "/satilik", "/ilan/ev-1", "/ilan/ev-2", "/blog/a",
        priority={"/ilan/ev-2": 0.9, "/blog/a": 0.5},
    )
    candidate = inventory_of(CAND, "/", "/satilik", "/ilan/ev-1", "/yeni-sayfa")

    diff = diff_inventories(reference, candidate)

    assert (diff.reference_total, diff.candidate_total) == (5, 4)
    # highest priority first
    assert [e.normalized_path for e in diff.missing] == ["/ilan/ev-2", "/blog/a"]
    assert [e.normalized_path for e in diff.extra] == ["/yeni-sayfa"]
    assert diff.by_category == {
        "blog": {"missing": 1, "extra": 0},
        "listing": {"missing": 1, "extra": 0},
        "static": {"missing": 0, "extra": 1},
    }
    assert diff.changed == ["No blog URLs on candidate, 1 on reference"]
    assert list(diff.missing_by_category) == ["listing", "blog"]


def test_paths_compare_after_normalization():
    reference = inventory_of(REF, "/Blog/Yazi/", "/iletisim")
    candidate = inventory_of(CAND, "/blog/yazi", "/iletisim/")
    diff = diff_inventories(reference, candidate)
    assert diff.missing == [] and diff.extra == [] and diff.changed == []
    assert diff.by_category == {}


def test_diff_in_reports_is_advisory(tmp_path):
    reference = inventory_of(REF, "/", "/blog/a", "/haberler/b")
    candidate = inventory_of(CAND, "/", "/yeni")
    diff = diff_inventories(reference, candidate)
    report = aggregate(
        reference,
        [CrawlResult.from_findings(f"{REF}/", 200, True, [])],
        compare_base=CAND,
        inventory_diff=diff,
    )
    assert report.exit_code == 0
    assert report.summary.urls_missing_on_candidate == 2
    assert report.summary.urls_extra_on_candidate == 1

    text = render_markdown_text(report)
    assert text.index("## UI parity") < text.index("## URL inventory diff") < text.index("## Inventory")
    assert "| URLs missing on candidate | 2 |" in text
    assert "### Missing: blog (1)" in text
    assert "`/haberler/b`" in text
    assert "No news URLs on candidate, 1 on reference" in text
    assert "### Extra on candidate (1)" in text

    data = json.loads(render_json(report, tmp_path / "audit.json").read_text(encoding="utf-8"))
    assert [e["normalized_path"] for e in data["inventory_diff"]["missing"]] == ["/blog/a", "/haberler/b"]
    assert data["inventory_diff"]["extra"][0]["url"] == f"{CAND}/yeni"
    assert data["summary"]["urls_missing_on_candidate"] == 2


def test_long_missing_group_is_capped():
    paths = [f"/ilan/ev-{i:03d}" for i in range(MISSING_PER_CATEGORY + 5)]
    reference = inventory_of(REF, "/", *paths)
    candidate = inventory_of(CAND, "/")
    report = aggregate(reference, [], inventory_diff=diff_inventories(reference, candidate))
    text = render_markdown_text(report)
    assert f"### Missing: listing ({MISSING_PER_CATEGORY + 5})" in text
    assert "... and 5 more" in text
    assert "`/ilan/ev-054`" not in text


def test_no_diff_section_without_compare_mode():
    reference = inventory_of(REF, "/")
    text = render_markdown_text(aggregate(reference, []))
    assert "## URL inventory diff" not in text
    assert "URLs missing on candidate" not in text
