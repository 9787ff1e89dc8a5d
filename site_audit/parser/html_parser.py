# === FILE: site_audit/parser/html_parser.py ===
"""HTML parsing utilities for SiteAudit.

:func:`parse_html` reads the head-level technical-SEO signals of a rendered page
into a :class:`ParsedPage`. Tag lookups go through BeautifulSoup's CSS selector
API, so attribute order, quoting and whitespace do not matter.

The parser never raises for a missing or malformed fragment: the corresponding
field is simply left empty. Only a document that yields no markup at all raises
:class:`~site_audit.errors.ParseError`.
"""
from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_audit.errors import ParseError

__all__: Sequence[str] = ("ParsedPage", "make_soup", "parse_html")

_ROBOTS_META_NAMES = ("robots", "googlebot")


@dataclass(slots=True)
class ParsedPage:
    """Technical-SEO view of an HTML page."""

    url: str
    title: Optional[str] = None
    meta_description: Optional[str] = None
    canonical: Optional[str] = None
    robots_directives: list[str] = field(default_factory=list)
    meta: dict[str, str] = field(default_factory=dict)
    json_ld_blocks: int = 0
    invalid_json_ld_blocks: int = 0
    microdata_items: int = 0
    hreflangs: list[str] = field(default_factory=list)

    @property
    def noindex(self) -> bool:
        return "noindex" in self.robots_directives or "none" in self.robots_directives

    @property
    def structured_data_count(self) -> int:
        return self.json_ld_blocks + self.microdata_items


def make_soup(html: str, source: str = "<html>") -> BeautifulSoup:
    """Build the soup; a document without any element is a ParseError."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.find(True) is None:
        raise ParseError(source, "no HTML elements found")
    return soup


def _attr(tag: Optional[Tag], name: str) -> Optional[str]:
    if tag is None:
        return None
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _meta_by_name(soup: BeautifulSoup) -> dict[str, str]:
    meta: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        name = _attr(tag, "name") or _attr(tag, "property")
        content = _attr(tag, "content")
        if name and content is not None:
            meta.setdefault(name.lower(), content)
    return meta


def _count_json_ld(soup: BeautifulSoup) -> tuple[int, int]:
    valid = invalid = 0
    for script in soup.select('script[type="application/ld+json" i]'):
        payload = script.string or script.get_text()
        try:
            data = json.loads(payload)
        except ValueError:
            invalid += 1
            continue
        if data:
            valid += 1
    return valid, invalid


def parse_html(html: str, url: str = "", soup: Optional[BeautifulSoup] = None) -> ParsedPage:
    """Parse *html* fetched from *url* into a :class:`ParsedPage`.

    Parameters
    ----------
    html
        Document markup.
    url
        Requested URL; relative canonical links are resolved against it.
    soup
        Already built soup for *html*, to avoid parsing twice.
    """
    soup = soup if soup is not None else make_soup(html, url or "<html>")
    page = ParsedPage(url=url)

    title_tag = soup.find("title")
    if title_tag is not None:
        page.title = title_tag.get_text(strip=True) or None

    page.meta = _meta_by_name(soup)
    page.meta_description = page.meta.get("description") or None

    for name in _ROBOTS_META_NAMES:
        content = page.meta.get(name, "")
        page.robots_directives.extend(
            d.strip().lower() for d in content.split(",") if d.strip()
        )

    href = _attr(soup.select_one('link[rel~="canonical" i]'), "href")
    if href:
        page.canonical = urljoin(url, href) if url else href

    page.json_ld_blocks, page.invalid_json_ld_blocks = _count_json_ld(soup)
    page.microdata_items = len(soup.select("[itemtype]"))

    for link in soup.select('link[rel~="alternate" i][hreflang]'):
        lang = _attr(link, "hreflang")
        if lang and lang not in page.hreflangs:
            page.hreflangs.append(lang)

    return page
