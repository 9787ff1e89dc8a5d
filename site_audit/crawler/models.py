# site_audit/crawler/models.py
"""
Data models for the SiteAudit HTTP layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class FetchResult:
    """Raw response of one GET: status, body bytes and decoding hints."""

    url: str
    status: int
    body: bytes
    final_url: str = ""
    content_type: str = ""
    charset: Optional[str] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            # unknown charset label in Content-Type
            return self.body.decode("utf-8", errors="replace")
