# site_audit/scoring.py
"""
Component scorer: turns two :class:`MetricsBag` snapshots into 0..10 scores.

Rubrics are declarative tuples of ``(label, predicate, points)``; a score is the
sum of the satisfied items clamped to ``[0, 10]``. Nothing here sees HTML.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Tuple

from site_audit.models import ComponentScore, MetricsBag, OverallScore, ScreenScore, ScreenSnapshot

__all__ = [
    "PageType",
    "RubricItem",
    "Rubric",
    "PAGE_RUBRICS",
    "COMPONENT_RUBRICS",
    "PAGE_COMPONENTS",
    "infer_page_type",
    "score",
    "score_component",
    "score_screen",
]

MAX_SCORE = 10


class PageType(str, Enum):
    DETAIL = "detail"
    LISTING = "listing-filter"
    CONTENT = "content"
    GENERIC = "generic"


class RubricItem(NamedTuple):
    label: str
    predicate: Callable[[MetricsBag], bool]
    points: int


Rubric = Tuple[RubricItem, ...]

_PAGE_TYPE_RULES: Tuple[Tuple[re.Pattern, PageType], ...] = (
    (re.compile(r"^/ilan/[^/]+$"), PageType.DETAIL),
    (re.compile(r"^/(satilik|kiralik|arama)[^/]*(/|$)"), PageType.LISTING),
    (re.compile(r"^/(blog|haberler|rehber|rehberler)(/|$)"), PageType.CONTENT),
)


_H1 = ("h1", lambda m: m.h1_present)
_HERO = ("hero", lambda m: m.has_hero)
_CTA = ("cta", lambda m: m.has_cta)
_CRUMBS = ("breadcrumbs", lambda m: m.has_breadcrumbs)
_GALLERY = ("gallery", lambda m: m.has_gallery)
_PRICE = ("price block", lambda m: m.has_price_block)
_GRID = ("listing grid", lambda m: m.has_listing_grid)
_FILTERS = ("filters", lambda m: m.has_filters)


def _trust_at_least(n: int) -> Tuple[str, Callable[[MetricsBag], bool]]:
    return f"trust signals >= {n}", lambda m: m.trust_signal_count >= n


def _conversion_at_least(n: int) -> Tuple[str, Callable[[MetricsBag], bool]]:
    return f"conversion widgets >= {n}", lambda m: m.conversion_widget_count >= n


def _rubric(*items: Tuple[Tuple[str, Callable[[MetricsBag], bool]], int]) -> Rubric:
    return tuple(RubricItem(label, predicate, points) for (label, predicate), points in items)


PAGE_RUBRICS: Dict[PageType, Rubric] = {
    PageType.DETAIL: _rubric(
        (_H1, 2), (_GALLERY, 2), (_PRICE, 2), (_CTA, 1), (_CRUMBS, 1),
        (_trust_at_least(2), 1), (_conversion_at_least(1), 1),
    ),
    PageType.LISTING: _rubric(
        (_H1, 2), (_GRID, 3), (_FILTERS, 2), (_CRUMBS, 1), (_CTA, 1), (_trust_at_least(1), 1),
    ),
    PageType.CONTENT: _rubric(
        (_H1, 3), (_HERO, 2), (_CRUMBS, 2), (_CTA, 1),
        (_trust_at_least(1), 1), (_conversion_at_least(1), 1),
    ),
    PageType.GENERIC: _rubric(
        (_H1, 2), (_HERO, 2), (_CTA, 2), (_CRUMBS, 1),
        (_trust_at_least(1), 1), (_trust_at_least(3), 1), (_conversion_at_least(1), 1),
    ),
}

COMPONENT_RUBRICS: Dict[str, Rubric] = {
    "listing_card": _rubric((_GRID, 4), (_PRICE, 3), (_CTA, 2), (_trust_at_least(1), 1)),
    "filters": _rubric((_FILTERS, 6), (_GRID, 2), (_H1, 2)),
    "media": _rubric((_GALLERY, 6), (_HERO, 2), (_PRICE, 2)),
    "trust_signals": _rubric((_trust_at_least(1), 4), (_trust_at_least(3), 3), (_trust_at_least(5), 3)),
    "conversion": _rubric((_CTA, 4), (_conversion_at_least(1), 3), (_conversion_at_least(3), 3)),
    "navigation": _rubric((_CRUMBS, 5), (_H1, 5)),
}

PAGE_COMPONENTS: Dict[PageType, Tuple[str, ...]] = {
    PageType.DETAIL: ("media", "conversion", "trust_signals", "navigation"),
    PageType.LISTING: ("listing_card", "filters", "conversion", "trust_signals", "navigation"),
    PageType.CONTENT: ("navigation", "conversion", "trust_signals"),
    PageType.GENERIC: ("listing_card", "conversion", "trust_signals", "navigation"),
}


def infer_page_type(route: str) -> PageType:
    """Classify a route path by its shape only."""
    path = route.split("?", 1)[0].lower() or "/"
    for pattern, page_type in _PAGE_TYPE_RULES:
        if pattern.search(path):
            return page_type
    return PageType.GENERIC


def _satisfied(rubric: Rubric, metrics: MetricsBag) -> List[RubricItem]:
    return [item for item in rubric if item.predicate(metrics)]


def score(rubric: Rubric, metrics: MetricsBag) -> int:
    """Sum of satisfied items, clamped to ``[0, 10]``."""
    total = sum(item.points for item in _satisfied(rubric, metrics))
    return max(0, min(MAX_SCORE, total))


def score_component(
    name: str, rubric: Rubric, reference: MetricsBag, candidate: MetricsBag
) -> ComponentScore:
    """Score one component on both sides; notes name items present on one side only."""
    ref_labels = {item.label for item in _satisfied(rubric, reference)}
    cand_labels = {item.label for item in _satisfied(rubric, candidate)}
    notes: List[str] = []
    for item in rubric:
        if item.label in ref_labels and item.label not in cand_labels:
            notes.append(f"{item.label}: missing on candidate")
        elif item.label in cand_labels and item.label not in ref_labels:
            notes.append(f"{item.label}: added on candidate")
    ref_score = score(rubric, reference)
    cand_score = score(rubric, candidate)
    return ComponentScore(
        component=name,
        reference_score=ref_score,
        candidate_score=cand_score,
        difference=cand_score - ref_score,
        notes=notes,
    )


def _signal_changes(ref: MetricsBag, cand: MetricsBag) -> Tuple[List[str], List[str]]:
    regressions: List[str] = []
    improvements: List[str] = []
    flags = (
        ("Hero section", ref.has_hero, cand.has_hero),
        ("H1 heading", ref.h1_present, cand.h1_present),
        ("Breadcrumbs", ref.has_breadcrumbs, cand.has_breadcrumbs),
    )
    for label, before, after in flags:
        if before and not after:
            regressions.append(f"{label} missing")
        elif after and not before:
            improvements.append(f"{label} added")
    counters = (
        ("trust signals", ref.trust_signal_count, cand.trust_signal_count),
        ("conversion widgets", ref.conversion_widget_count, cand.conversion_widget_count),
    )
    for label, before, after in counters:
        if after < before:
            regressions.append(f"Fewer {label} ({after} vs {before})")
        elif after > before:
            improvements.append(f"More {label} ({after} vs {before})")
    return regressions, improvements


def score_screen(snapshot: ScreenSnapshot) -> ScreenScore:
    """Overall and per-component scores of one screen, with regression notes."""
    page_type = infer_page_type(snapshot.route)
    ref, cand = snapshot.reference_metrics, snapshot.candidate_metrics

    overall_ref = score(PAGE_RUBRICS[page_type], ref)
    overall_cand = score(PAGE_RUBRICS[page_type], cand)
    overall = OverallScore(
        reference=overall_ref, candidate=overall_cand, difference=overall_cand - overall_ref
    )
    components = [
        score_component(name, COMPONENT_RUBRICS[name], ref, cand) for name in PAGE_COMPONENTS[page_type]
    ]

    regressions: List[str] = []
    improvements: List[str] = []
    if snapshot.candidate_error:
        regressions.append(f"Candidate unavailable: {snapshot.candidate_error}")
    if snapshot.reference_error:
        improvements.append(f"Reference unavailable: {snapshot.reference_error}")
    if overall.difference < 0:
        regressions.append(f"Overall score {overall_ref} -> {overall_cand}")
    elif overall.difference > 0:
        improvements.append(f"Overall score {overall_ref} -> {overall_cand}")
    for component in components:
        line = f"{component.component}: {component.reference_score} -> {component.candidate_score}"
        if component.difference < 0:
            regressions.append(line)
        elif component.difference > 0:
            improvements.append(line)

    signal_regressions, signal_improvements = _signal_changes(ref, cand)
    regressions.extend(signal_regressions)
    improvements.extend(signal_improvements)

    return ScreenScore(
        route=snapshot.route,
        name=snapshot.name,
        page_type=page_type.value,
        overall=overall,
        components=components,
        regressions=regressions,
        improvements=improvements,
    )
