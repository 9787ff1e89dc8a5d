# File: site_audit/parser/sitemap_parser.py
"""site_audit.parser.sitemap_parser: Разбор sitemap.xml в типизированные документы.

Корневой ``<sitemapindex>`` даёт :class:`SitemapIndex`, ``<urlset>`` даёт
:class:`UrlSet`; всё остальное - :class:`~site_audit.errors.ParseError`.
"""

from __future__ import annotations

import gzip
import zlib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from lxml import etree

from site_audit.errors import ParseError

__all__ = [
    "SitemapRef",
    "SitemapUrl",
    "SitemapIndex",
    "UrlSet",
    "SitemapDocument",
    "parse_sitemap",
    "parse_lastmod",
]

_GZIP_MAGIC = b"\x1f\x8b"


@dataclass(slots=True, frozen=True)
class SitemapRef:
    """Ссылка на дочерний sitemap внутри индекса."""

    loc: str
    last_modified: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class SitemapUrl:
    """Одна запись ``<url>`` из urlset."""

    loc: str
    last_modified: Optional[datetime] = None
    change_frequency: Optional[str] = None
    priority: Optional[float] = None


@dataclass(slots=True)
class SitemapIndex:
    sitemaps: List[SitemapRef] = field(default_factory=list)


@dataclass(slots=True)
class UrlSet:
    urls: List[SitemapUrl] = field(default_factory=list)


SitemapDocument = Union[SitemapIndex, UrlSet]


def parse_lastmod(value: Optional[str]) -> Optional[datetime]:
    """W3C datetime (или просто дата) -> aware datetime в UTC; мусор -> None."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _parse_priority(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value.strip())
    except ValueError:
        return None


def _child_text(node: etree._Element, name: str) -> Optional[str]:
    child = node.find(f"{{*}}{name}")
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def parse_sitemap(content: Union[bytes, str], source: str = "<sitemap>") -> SitemapDocument:
    """Разбирает sitemap (XML или gzip) и возвращает SitemapIndex либо UrlSet.

    Args:
        content: тело ответа.
        source: URL документа, для сообщений об ошибке.

    Raises:
        ParseError: документ пустой, не XML или корень не sitemapindex/urlset.
    """
    raw = content.encode("utf-8") if isinstance(content, str) else content
    if raw.startswith(_GZIP_MAGIC):
        try:
            raw = gzip.decompress(raw)
        except (OSError, EOFError, zlib.error) as exc:
            raise ParseError(source, f"broken gzip: {exc}") from exc
    if not raw.strip():
        raise ParseError(source, "empty document")

    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(raw, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ParseError(source, f"invalid XML: {exc}") from exc
    if root is None:
        raise ParseError(source, "invalid XML")

    tag = etree.QName(root).localname.lower()
    if tag == "sitemapindex":
        refs = [
            SitemapRef(loc=loc, last_modified=parse_lastmod(_child_text(node, "lastmod")))
            for node in root.findall("{*}sitemap")
            if (loc := _child_text(node, "loc"))
        ]
        return SitemapIndex(sitemaps=refs)
    if tag == "urlset":
        urls = [
            SitemapUrl(
                loc=loc,
                last_modified=parse_lastmod(_child_text(node, "lastmod")),
                change_frequency=_child_text(node, "changefreq"),
                priority=_parse_priority(_child_text(node, "priority")),
            )
            for node in root.findall("{*}url")
            if (loc := _child_text(node, "loc"))
        ]
        return UrlSet(urls=urls)
    raise ParseError(source, f"unexpected root element <{tag}>")
