# File: site_audit/urls.py
"""site_audit.urls: URL normalisation and content-type categorisation."""

from __future__ import annotations

import re
import string
from enum import Enum
from typing import Sequence, Tuple
from urllib.parse import urljoin, urlsplit, urlunsplit

__all__: Sequence[str] = (
    "UrlCategory",
    "CATEGORY_RULES",
    "normalize",
    "categorize",
    "canonical_form",
    "join_url",
)

_HTTP_SCHEMES = ("http", "https")
_MULTI_SLASH_RE = re.compile(r"/{2,}")
_PATH_TAIL = "/" + string.whitespace


class UrlCategory(str, Enum):
    """Content type of a public URL, derived from its path."""

    STATIC = "static"
    BLOG = "blog"
    NEWS = "news"
    LISTING = "listing"
    NEIGHBORHOOD = "neighborhood"
    PROPERTY_TYPE = "propertyType"
    UNKNOWN = "unknown"


#: Ordered ``(path prefix, category)`` rules; the first match wins.
CATEGORY_RULES: Tuple[Tuple[str, UrlCategory], ...] = (
    ("/blog/", UrlCategory.BLOG),
    ("/haberler/", UrlCategory.NEWS),
    ("/ilan/", UrlCategory.LISTING),
    ("/mahalle/", UrlCategory.NEIGHBORHOOD),
    ("/tip/", UrlCategory.PROPERTY_TYPE),
)


def normalize(raw_url: str) -> str:
    """Return the comparison key of *raw_url*.

    Scheme, host, query and fragment are dropped, repeated slashes collapsed, the
    result lowercased and trailing slashes or whitespace removed unless the path
    is ``/``. ``normalize(normalize(u)) == normalize(u)``.
    """
    path = _MULTI_SLASH_RE.sub("/", urlsplit(raw_url.strip()).path)
    if not path.startswith("/"):
        path = "/" + path
    path = path.lower()
    if path != "/":
        path = path.rstrip(_PATH_TAIL) or "/"
    return path


def categorize(
    raw_url: str,
    rules: Sequence[Tuple[str, UrlCategory]] = CATEGORY_RULES,
) -> UrlCategory:
    """Map *raw_url* to a :class:`UrlCategory` using the ordered *rules*."""
    scheme = urlsplit(raw_url.strip()).scheme.lower()
    if scheme and scheme not in _HTTP_SCHEMES:
        return UrlCategory.UNKNOWN
    # trailing slash keeps "/blog" (the index) out of the "/blog/" detail rule
    path = normalize(raw_url)
    key = path if path.endswith("/") else path + "/"
    for prefix, category in rules:
        if key.startswith(prefix) and key != prefix:
            return category
    return UrlCategory.STATIC


def canonical_form(url: str) -> str:
    """Scheme and host lowercased, no query or fragment, no trailing slash."""
    parts = urlsplit(url.strip())
    path = _MULTI_SLASH_RE.sub("/", parts.path or "/")
    if path != "/":
        path = path.rstrip("/") or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, "", ""))


def join_url(base: str, path: str) -> str:
    """Join a site root and an absolute path, e.g. ``("http://h/", "/a") -> "http://h/a"``."""
    return urljoin(base.rstrip("/") + "/", path.lstrip("/"))
