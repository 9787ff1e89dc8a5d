# File: site_audit/errors.py
"""site_audit.errors: Exception taxonomy of the audit pipeline.

Only configuration problems stop a run. Network and parse errors are raised by the
low-level helpers and converted into result data by their callers.
"""

from __future__ import annotations

__all__ = ["AuditError", "NetworkError", "ParseError", "ConfigError"]


class AuditError(Exception):
    """Base class for all SiteAudit errors."""


class NetworkError(AuditError):
    """Timeout, refused connection or DNS failure after the retry budget is spent.

    Also raised for a non-2xx answer where a document is required (sitemaps).
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}")


class ParseError(AuditError):
    """A sitemap or HTML document could not be read."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"{source}: {reason}")


class ConfigError(AuditError):
    """Configuration file is missing, unreadable or not a mapping."""
