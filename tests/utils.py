"""Test utilities shared by the tutorscout tests.

This module provides in-memory stand-ins for the network and the clock so
the Fetcher, breaker and orchestrator can be tested without real sleeps.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from tutorscout.common.exceptions import HTMLResponseAssumptionException
from tutorscout.common.response_cache import ResponseCache
from tutorscout.config import CrawlConfig
from tutorscout.driver.fetcher import Fetcher


class FakeRequestManager:
    """In-memory request manager replaying canned pages.

    Each URL in *pages* answers with its body after first failing
    ``failures[url]`` times. A failure is the exception in ``errors[url]``,
    or an HTTP 500 HTMLResponseAssumptionException by default. Unknown URLs
    answer 404.

    Attributes:
        calls: Every URL requested, in order.
    """

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        failures: dict[str, int] | None = None,
        errors: dict[str, BaseException] | None = None,
    ) -> None:
        self.pages = dict(pages or {})
        self.failures = dict(failures or {})
        self.errors = dict(errors or {})
        self.calls: list[str] = []
        self.closed = False

    async def get(self, url: str) -> str:
        self.calls.append(url)
        if self.failures.get(url, 0) > 0:
            self.failures[url] -= 1
            raise self.errors.get(
                url, HTMLResponseAssumptionException(500, [200], url)
            )
        if url not in self.pages:
            raise HTMLResponseAssumptionException(404, [200], url)
        return self.pages[url]

    async def close(self) -> None:
        self.closed = True


def recording_sleep() -> tuple[
    Callable[[float], Awaitable[None]], list[float]
]:
    """Create an async sleep replacement that records requested delays.

    Returns:
        A tuple of (sleep_function, delays_list).

    Example:
        sleep, delays = recording_sleep()
        fetcher = Fetcher(cache, manager, config, sleep=sleep)
        await fetcher.fetch(url)
        assert delays == [2.0]
    """
    delays: list[float] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    return sleep, delays


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_fetcher(
    config: CrawlConfig, request_manager: Any, **kwargs: Any
) -> Fetcher:
    """Build a Fetcher over a ready cache directory from *config*."""
    cache = ResponseCache(config.cache_dir)
    cache.ensure_directory()
    return Fetcher(cache, request_manager, config, **kwargs)


def collect_pairs_async() -> tuple[
    Callable[..., Awaitable[None]], list[tuple[Any, list[Any]]]
]:
    """Create an on_pair_complete callback that collects its arguments.

    Returns:
        A tuple of (async_callback_function, calls_list).
    """
    calls: list[tuple[Any, list[Any]]] = []

    async def callback(pair: Any, records: list[Any]) -> None:
        calls.append((pair, records))

    return callback, calls
