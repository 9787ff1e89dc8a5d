# File: site_audit/routes.py
"""site_audit.routes: Built-in route lists.

``KEY_ROUTES`` stand in for the sitemap when it cannot be read: the listing and
content indexes plus one sample listing detail and sample articles, so every page
type still gets audited. ``PARITY_ROUTES`` is
the curated set of screens compared between the reference and candidate sites;
``[...]`` segments are filled from the URL inventory at run time.
"""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict

__all__ = ["ParityRoute", "KEY_ROUTES", "PARITY_ROUTES"]


class ParityRoute(BaseModel):
    """One screen of the UI parity checklist."""

    model_config = ConfigDict(frozen=True)

    route: str
    name: str

    @property
    def is_dynamic(self) -> bool:
        return "[" in self.route


KEY_ROUTES: Tuple[str, ...] = (
    "/",
    "/satilik",
    "/kiralik",
    "/arama",
    "/karasu",
    "/kocaali",
    "/karasu/mahalleler",
    "/karasu-satilik-ev",
    "/ilan/karasu-satilik-daire",
    "/blog",
    "/haberler",
    "/blog/ramazan-2026-karasu-rehberi",
    "/haberler/karasu-emlak",
    "/rehber",
    "/sss",
    "/hakkimizda",
    "/iletisim",
)

PARITY_ROUTES: Tuple[ParityRoute, ...] = (
    ParityRoute(route="/", name="Homepage"),
    ParityRoute(route="/satilik", name="Satılık Listings"),
    ParityRoute(route="/ilan/[slug]", name="Listing Detail"),
    ParityRoute(route="/mahalle/[slug]", name="Neighborhood Page"),
    ParityRoute(route="/blog", name="Blog Listing"),
    ParityRoute(route="/blog/[slug]", name="Blog Detail"),
    ParityRoute(route="/arama", name="Search"),
    ParityRoute(route="/iletisim", name="Contact"),
)
