# File: tests/test_scoring.py
import itertools

import pytest

from site_audit.models import MetricsBag, ScreenSnapshot
from site_audit.scoring import (
    COMPONENT_RUBRICS,
    PAGE_COMPONENTS,
    PAGE_RUBRICS,
    PageType,
    infer_page_type,
    score,
    score_component,
    score_screen,
)

FULL = MetricsBag(
    has_hero=True,
    h1_present=True,
    h1_text="Baslik",
    has_gallery=True,
    has_price_block=True,
    has_cta=True,
    has_listing_grid=True,
    has_filters=True,
    has_breadcrumbs=True,
    trust_signal_count=6,
    conversion_widget_count=4,
)


@pytest.mark.parametrize(
    "route,expected",
    [
        ("/ilan/deniz-manzarali-daire", PageType.DETAIL),
        ("/ilan", PageType.GENERIC),
        ("/ilan/a/b", PageType.GENERIC),
        ("/satilik", PageType.LISTING),
        ("/satilik-daire", PageType.LISTING),
        ("/kiralik/karasu", PageType.LISTING),
        ("/arama?q=ev", PageType.LISTING),
        ("/blog", PageType.CONTENT),
        ("/blog/karasu-rehberi", PageType.CONTENT),
        ("/haberler", PageType.CONTENT),
        ("/rehberler/x", PageType.CONTENT),
        ("/", PageType.GENERIC),
        ("/iletisim", PageType.GENERIC),
        ("/karasu-satilik-ev", PageType.GENERIC),
        ("/mahalle/yali", PageType.GENERIC),
    ],
)
def test_infer_page_type(route, expected):
    assert infer_page_type(route) is expected


def test_full_bag_scores_ten_everywhere():
    for rubric in itertools.chain(PAGE_RUBRICS.values(), COMPONENT_RUBRICS.values()):
        assert score(rubric, FULL) == 10


def test_rubrics_sum_to_ten():
    for rubric in itertools.chain(PAGE_RUBRICS.values(), COMPONENT_RUBRICS.values()):
        assert sum(item.points for item in rubric) == 10


def test_zero_bag_scores_zero():
    for rubric in itertools.chain(PAGE_RUBRICS.values(), COMPONENT_RUBRICS.values()):
        assert score(rubric, MetricsBag()) == 0


@pytest.mark.parametrize("flags", list(itertools.product([False, True], repeat=4)))
@pytest.mark.parametrize("trust,conversion", [(0, 0), (1, 1), (2, 3), (5, 0), (100, 100)])
def test_score_is_bounded_int(flags, trust, conversion):
    hero, h1, grid, crumbs = flags
    bag = MetricsBag(
        has_hero=hero,
        h1_present=h1,
        has_listing_grid=grid,
        has_breadcrumbs=crumbs,
        trust_signal_count=trust,
        conversion_widget_count=conversion,
    )
    for rubric in itertools.chain(PAGE_RUBRICS.values(), COMPONENT_RUBRICS.values()):
        value = score(rubric, bag)
        assert isinstance(value, int)
        assert 0 <= value <= 10


def test_detail_rubric_values():
    bag = MetricsBag(h1_present=True, has_gallery=True, trust_signal_count=1)
    assert score(PAGE_RUBRICS[PageType.DETAIL], bag) == 4
    bag.trust_signal_count = 2
    assert score(PAGE_RUBRICS[PageType.DETAIL], bag) == 5


def test_score_component_notes():
    ref = MetricsBag(has_breadcrumbs=True)
    cand = MetricsBag(h1_present=True)
    component = score_component("navigation", COMPONENT_RUBRICS["navigation"], ref, cand)
    assert (component.reference_score, component.candidate_score, component.difference) == (5, 5, 0)
    assert component.notes == ["breadcrumbs: missing on candidate", "h1: added on candidate"]


def test_page_components():
    assert PAGE_COMPONENTS[PageType.DETAIL] == ("media", "conversion", "trust_signals", "navigation")
    assert "filters" in PAGE_COMPONENTS[PageType.LISTING]


def snapshot(route, ref, cand, **kwargs):
    return ScreenSnapshot(
        route=route,
        name=route,
        reference_url=f"https://prod{route}",
        candidate_url=f"http://local{route}",
        reference_metrics=ref,
        candidate_metrics=cand,
        **kwargs,
    )


def test_score_screen_regression():
    cand = MetricsBag(has_hero=True, h1_present=True, has_cta=True, trust_signal_count=1)
    screen = score_screen(snapshot("/", FULL, cand))
    assert screen.page_type == "generic"
    assert screen.overall.reference == 10
    assert screen.overall.candidate == 7
    assert screen.overall.difference == -3
    assert screen.status == "regression"
    assert "Overall score 10 -> 7" in screen.regressions
    assert "Breadcrumbs missing" in screen.regressions
    assert "Fewer trust signals (1 vs 6)" in screen.regressions
    assert [c.component for c in screen.components] == list(PAGE_COMPONENTS[PageType.GENERIC])


def test_score_screen_parity_and_improvement():
    same = score_screen(snapshot("/blog", FULL, FULL))
    assert same.status == "parity"
    assert same.regressions == [] and same.improvements == []

    better = score_screen(snapshot("/blog", MetricsBag(), MetricsBag(h1_present=True)))
    assert better.status == "improvement"
    assert "H1 heading added" in better.improvements


def test_failed_sides_are_named():
    cand_failed = score_screen(
        snapshot("/arama", FULL, MetricsBag(), candidate_error="HTTP 500", candidate_status=500)
    )
    assert cand_failed.overall.candidate == 0
    assert cand_failed.regressions[0] == "Candidate unavailable: HTTP 500"

    ref_failed = score_screen(snapshot("/arama", MetricsBag(), FULL, reference_error="Network error: timeout"))
    assert ref_failed.improvements[0] == "Reference unavailable: Network error: timeout"
