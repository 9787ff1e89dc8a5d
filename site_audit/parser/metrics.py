# site_audit/parser/metrics.py
"""
Structural metrics of a rendered page, read with CSS selectors.

Each boolean metric is "at least one element matches"; the two counters count the
distinct matching elements, so a ``tel:`` link that is both a trust signal and a
conversion widget is counted once per counter.
"""
from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup

from site_audit.models import MetricsBag
from site_audit.parser.html_parser import make_soup

__all__ = ["SELECTORS", "extract_metrics"]

SELECTORS: dict[str, str] = {
    "hero": 'section.hero, .hero, [class*="hero"], header + section',
    "cta": (
        'button[class*="cta"], a[class*="cta"], .cta-button, '
        '[href*="whatsapp"], [href*="tel:"]'
    ),
    "listing_grid": '[class*="grid"], [class*="listing"], .listings-grid, [class*="property"]',
    "filters": '[class*="filter" i], form[class*="search"], .filters',
    "breadcrumbs": '[class*="breadcrumb"], nav[aria-label*="breadcrumb" i], .breadcrumbs',
    "price": '[class*="price" i], .price-block, [data-price]',
    "gallery": '[class*="gallery" i], .image-gallery, [class*="carousel"]',
    "trust": (
        '[href*="tel:"], [href*="mailto:"], address, [class*="address"], [class*="badge"], '
        '[class*="certification"], [class*="rating"], [class*="trust"]'
    ),
    "conversion": (
        '[href*="whatsapp"], [href*="tel:"], [class*="contact-form"], '
        '[class*="inquiry"], button[class*="contact"]'
    ),
}


def _has(soup: BeautifulSoup, key: str) -> bool:
    return soup.select_one(SELECTORS[key]) is not None


def _count(soup: BeautifulSoup, key: str) -> int:
    # select() already returns each element once even if several selectors match
    return len(soup.select(SELECTORS[key]))


def extract_metrics(html: str, soup: Optional[BeautifulSoup] = None) -> MetricsBag:
    """Read a :class:`MetricsBag` from *html*.

    Raises ParseError (from :func:`make_soup`) when the document has no markup.
    """
    soup = soup if soup is not None else make_soup(html)
    h1 = soup.find("h1")
    return MetricsBag(
        has_hero=_has(soup, "hero"),
        h1_present=h1 is not None,
        h1_text=" ".join(h1.get_text(" ").split()) if h1 is not None else "",
        has_gallery=_has(soup, "gallery"),
        has_price_block=_has(soup, "price"),
        has_cta=_has(soup, "cta"),
        has_listing_grid=_has(soup, "listing_grid"),
        has_filters=_has(soup, "filters"),
        has_breadcrumbs=_has(soup, "breadcrumbs"),
        trust_signal_count=_count(soup, "trust"),
        conversion_widget_count=_count(soup, "conversion"),
    )
