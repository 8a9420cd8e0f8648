"""HTTP document fetching for the external results site.

One GET per call, no retries: the caller decides whether to retry or degrade.
Failures are raised as :class:`FetchError` subclasses so callers can tell a
non-2xx answer from a network level problem.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Optional, Protocol

import aiohttp

if TYPE_CHECKING:  # pragma: no cover
    from regiosync.core.config import Settings
    from regiosync.monitoring.prometheus_metrics import SyncMetrics


class FetchError(RuntimeError):
    """Base class for transport failures of a single fetch."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class HttpStatusError(FetchError):
    """The site answered with a non-2xx status."""

    def __init__(self, url: str, status: int, retry_after: Optional[float] = None):
        super().__init__(url, f"HTTP {status}")
        self.status = status
        self.retry_after = retry_after


class TransportError(FetchError):
    """DNS failure, refused/reset connection, timeout and friends."""


class SupportsPenalty(Protocol):
    def penalize(self, seconds: float) -> None: ...


def build_headers(user_agent: str, accept: str) -> dict[str, str]:
    return {"User-Agent": user_agent, "Accept": accept}


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        return max(float(value.strip()), 0.0)
    except ValueError:
        # HTTP-date form is rare on this site; fall back to the configured backoff
        return None


class DocumentFetcher:
    """Fetches raw markup with a fixed identifying header set."""

    def __init__(
        self,
        *,
        user_agent: str,
        accept: str = "text/html,application/xhtml+xml",
        timeout: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
        rate_limiter: Optional[SupportsPenalty] = None,
        rate_limit_backoff: float = 60.0,
        metrics: Optional["SyncMetrics"] = None,
    ):
        self.headers = build_headers(user_agent, accept)
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.rate_limiter = rate_limiter
        self.rate_limit_backoff = rate_limit_backoff
        self.metrics = metrics
        self.session = session
        self._owns_session = session is None
        self.logger = logging.getLogger("http.fetcher")

    @classmethod
    def from_settings(cls, cfg: "Settings", **kwargs) -> "DocumentFetcher":
        return cls(
            user_agent=cfg.scraping_user_agent,
            accept=cfg.scraping_accept,
            timeout=cfg.scraping_timeout,
            rate_limit_backoff=cfg.scraping_rate_limit_backoff_seconds,
            **kwargs,
        )

    async def initialize(self) -> None:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                headers=self.headers,
                timeout=self.timeout,
                connector=aiohttp.TCPConnector(limit=10),
            )
            self._owns_session = True

    async def cleanup(self) -> None:
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()

    async def __aenter__(self) -> "DocumentFetcher":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.cleanup()

    async def fetch(self, url: str, *, page: str = "page") -> str:
        """GET *url* and return the body text.

        Raises:
            HttpStatusError: non-2xx response.
            TransportError: the request did not complete.
        """
        await self.initialize()
        started = time.perf_counter()
        status_label = "transport_error"
        try:
            async with self.session.get(url, headers=self.headers, timeout=self.timeout) as response:
                status_label = str(response.status)
                if not 200 <= response.status < 300:
                    retry_after = _parse_retry_after(response.headers.get("Retry-After"))
                    if response.status == 429 and self.rate_limiter is not None:
                        penalty = retry_after if retry_after is not None else self.rate_limit_backoff
                        self.logger.warning(f"Rate limited by {url}; backing off {penalty:.0f}s")
                        self.rate_limiter.penalize(penalty)
                    raise HttpStatusError(url, response.status, retry_after)
                # undecodable bytes -> U+FFFD
                return await response.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(url, f"{type(e).__name__}: {e}" if str(e) else type(e).__name__) from e
        finally:
            if self.metrics is not None:
                self.metrics.record_fetch(page, status_label, time.perf_counter() - started)


__all__ = [
    "DocumentFetcher",
    "FetchError",
    "HttpStatusError",
    "TransportError",
    "build_headers",
]
