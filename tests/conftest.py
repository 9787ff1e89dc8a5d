# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import pytest
from aiohttp import web
from aiohttp.test_utils import unused_port as _unused_port

from site_audit.config import AuditConfig

#: 45 characters
TITLE = "Karasu Satilik Daire Ilanlari | Karasu Emlak."
_SENTENCE = "Karasu ve Kocaali bolgesinde satilik ve kiralik daire, villa ve arsa ilanlari. "
#: 140 characters
DESCRIPTION = (_SENTENCE * 2)[:139] + "."


def page_html(
    url: str,
    *,
    title: str | None = TITLE,
    description: str | None = DESCRIPTION,
    canonical: str | None = "self",
    verification: bool = True,
    robots: str | None = None,
    json_ld: str | None = '{"@context": "https://schema.org", "@type": "RealEstateAgent"}',
    body: str = "<h1>Karasu</h1>",
    extra_head: str = "",
) -> str:
    """Build a page; the defaults give a page without any issue."""
    head = []
    if title is not None:
        head.append(f"<title>{title}</title>")
    if description is not None:
        head.append(f'<meta name="description" content="{description}">')
    if canonical is not None:
        href = url if canonical == "self" else canonical
        head.append(f'<link rel="canonical" href="{href}">')
    if verification:
        head.append('<meta name="google-site-verification" content="abc123">')
    if robots is not None:
        head.append(f'<meta name="robots" content="{robots}">')
    if json_ld is not None:
        head.append(f'<script type="application/ld+json">{json_ld}</script>')
    head.append(extra_head)
    return f"<!doctype html><html><head>{''.join(head)}</head><body>{body}</body></html>"


def urlset(*locs: str, lastmod: dict[str, str] | None = None) -> str:
    lastmod = lastmod or {}
    items = []
    for loc in locs:
        stamp = f"<lastmod>{lastmod[loc]}</lastmod>" if loc in lastmod else ""
        items.append(f"<url><loc>{loc}</loc>{stamp}</url>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + "".join(items)
        + "</urlset>"
    )


def sitemap_index(*locs: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        + "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
        + "</sitemapindex>"
    )


async def serve_app(app: web.Application) -> AsyncIterator[str]:
    """Start *app* on a free port, yield its base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    host, port = runner.addresses[0][:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


@pytest.fixture()
def make_config(tmp_path) -> Callable[..., AuditConfig]:
    """Factory for a fast test configuration; keyword arguments override fields."""

    def _make(base_url: str = "http://127.0.0.1:9", **overrides) -> AuditConfig:
        data = dict(
            base_url=base_url,
            timeout=2.0,
            retry_times=0,
            retry_backoff=0,
            user_agent="TestAgent/1.0",
            report_dir=tmp_path / "reports",
        )
        data.update(overrides)
        return AuditConfig(**data)

    return _make


@pytest.fixture()
def unused_port() -> int:
    """A free local port nothing listens on."""
    return _unused_port()
