# site_audit/crawler/fetcher.py
"""
Fetcher module: handles HTTP requests with a per-request timeout and a bounded retry.
"""
from __future__ import annotations

import asyncio
import time

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector

from site_audit.config import AuditConfig
from site_audit.crawler.models import FetchResult
from site_audit.errors import NetworkError
from site_audit.logger import logger

__all__ = ["Fetcher", "build_session"]


def build_session(config: AuditConfig) -> ClientSession:
    """Create the single HTTP client of a run; the caller owns and closes it."""
    return ClientSession(
        timeout=ClientTimeout(total=config.timeout),
        headers={"User-Agent": config.user_agent},
        connector=TCPConnector(limit=config.concurrency),
        raise_for_status=False,
    )


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout"
    return str(exc) or type(exc).__name__


class Fetcher:
    """GETs a URL; status codes are returned as data, transport failures retried."""

    def __init__(self, session: ClientSession, config: AuditConfig) -> None:
        self.session = session
        self.config = config
        self._timeout = ClientTimeout(total=config.timeout)

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch *url* once, retrying up to ``retry_times`` on timeout or client error.

        Raises NetworkError when every attempt failed.
        """
        attempts = 0
        while True:
            start = time.monotonic()
            try:
                async with self.session.get(url, timeout=self._timeout, allow_redirects=True) as resp:
                    body = await resp.read()
                    return FetchResult(
                        url=url,
                        status=resp.status,
                        body=body,
                        final_url=str(resp.url),
                        content_type=resp.headers.get("Content-Type", "").split(";", 1)[0].lower(),
                        charset=resp.charset,
                        elapsed_ms=int((time.monotonic() - start) * 1000),
                    )
            except (ClientError, asyncio.TimeoutError) as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.warning("Failed %s: %s", url, _describe(exc))
                    raise NetworkError(url, _describe(exc)) from exc
                logger.debug(
                    "Retry %d/%d for %s after %.2f s: %s",
                    attempts, self.config.retry_times, url, self.config.retry_backoff, _describe(exc),
                )
                if self.config.retry_backoff:
                    await asyncio.sleep(self.config.retry_backoff)
