"""Cached, throttled, retrying page fetcher.

The Fetcher sits between the crawl logic and the network:

1. A cache hit returns immediately, with no delay and no network call.
2. A cache miss makes up to ``max_attempts`` network attempts. Every attempt
   is preceded by a fixed ``request_delay`` that throttles new load on the
   site. Between failed attempts the Fetcher sleeps ``backoff_base * attempt``.
3. The first successful body is written to the cache and returned. When the
   attempts are exhausted a FetchError carrying the last underlying error is
   raised.

An optional CircuitBreaker short-circuits attempts while the host looks
unreachable.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from tutorscout.common.exceptions import (
    CircuitOpenError,
    FetchError,
    TransientException,
)
from tutorscout.common.request_manager import AsyncRequestManager
from tutorscout.common.response_cache import ResponseCache
from tutorscout.config import CrawlConfig
from tutorscout.driver.circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)

# Failures that count as a failed attempt and are retried.
RETRYABLE_ERRORS = (TransientException, httpx.HTTPError)


class Fetcher:
    """Fetch URLs through the response cache with retry and backoff.

    Example::

        fetcher = Fetcher(ResponseCache(cache_dir), request_manager, config)
        html = await fetcher.fetch(url)
    """

    def __init__(
        self,
        cache: ResponseCache,
        request_manager: AsyncRequestManager,
        config: CrawlConfig,
        breaker: CircuitBreaker | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the fetcher.

        Args:
            cache: Response cache consulted before any network call.
            request_manager: Performs single GET attempts.
            config: Supplies max_attempts, request_delay and backoff_base.
            breaker: Optional circuit breaker shared by all fetches.
            sleep: Awaitable sleep used for throttling and backoff.
        """
        self.cache = cache
        self.request_manager = request_manager
        self.max_attempts = config.max_attempts
        self.request_delay = config.request_delay
        self.backoff_base = config.backoff_base
        self.breaker = breaker
        self._sleep = sleep
        self.network_requests = 0

    async def fetch(self, url: str) -> str:
        """Return the body for *url*, from cache or network.

        Raises:
            FetchError: If every network attempt failed.
            CircuitOpenError: If the circuit breaker is open.
        """
        cached = await self.cache.get(url)
        if cached is not None:
            logger.info(f"Serving from cache: {url}")
            return cached

        logger.info(f"Fetching from network: {url}")
        last_error: BaseException | None = None
        for attempt in range(1, self.max_attempts + 1):
            if self.breaker is not None and not self.breaker.allow_request():
                raise CircuitOpenError(url, self.breaker.retry_after())

            try:
                await self._sleep(self.request_delay)
                self.network_requests += 1
                body = await self.request_manager.get(url)
            except RETRYABLE_ERRORS as e:
                last_error = e
                if self.breaker is not None:
                    self.breaker.record_failure()
                logger.warning(
                    f"Error fetching {url} "
                    f"(attempt {attempt}/{self.max_attempts}): {e}"
                )
                if attempt == self.max_attempts:
                    raise FetchError(url, attempt, e) from e
                await self._sleep(self.backoff_base * attempt)
                continue
            except BaseException:
                # Neither success nor failure; free a half-open trial slot.
                if self.breaker is not None:
                    self.breaker.release_trial()
                raise

            if self.breaker is not None:
                self.breaker.record_success()
            await self.cache.put(url, body)
            logger.info(f"Saved to cache: {url}")
            return body

        # max_attempts >= 1 is enforced by CrawlConfig
        raise FetchError(url, self.max_attempts, last_error)
