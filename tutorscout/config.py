"""Crawl configuration.

All knobs for a run are collected into one immutable CrawlConfig that is
passed into the Orchestrator at startup. The defaults reproduce the
tutorfinder.com.au crawl: five capital cities, ten senior-school subjects,
50 concurrent profile fetches, three attempts per URL with a 2 second
throttle and a 5 second linear backoff.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

DEFAULT_BASE_URL = "https://www.tutorfinder.com.au"

LOCATIONS: tuple[str, ...] = (
    "melbourne",
    "sydney",
    "brisbane",
    "perth",
    "adelaide",
)

SUBJECTS: tuple[str, ...] = (
    "biology",
    "chemistry",
    "economics",
    "english",
    "english-language",
    "english-literature",
    "general-maths",
    "maths-methods",
    "maths-specialist",
    "physics",
)


@dataclass(frozen=True)
class CrawlConfig:
    """Immutable settings for a single crawl.

    Attributes:
        base_url: Scheme and host every request path is resolved against.
        locations: Region slugs, iterated as the outer loop.
        subjects: Subject slugs, iterated as the inner loop.
        cache_dir: Directory holding one cached HTML file per URL.
        output_path: Destination CSV file, overwritten on every run.
        concurrency: Maximum number of profile extractions in flight.
        max_attempts: Network attempts per URL before giving up.
        request_delay: Seconds to wait before every network attempt.
        backoff_base: Seconds multiplied by the attempt number between retries.
        request_timeout: Transport timeout in seconds. None means no timeout.
        breaker_threshold: Consecutive network failures that trip the circuit
            breaker. 0 disables the breaker.
        breaker_cooldown: Seconds the breaker stays open once tripped.
    """

    base_url: str = DEFAULT_BASE_URL
    locations: tuple[str, ...] = LOCATIONS
    subjects: tuple[str, ...] = SUBJECTS
    cache_dir: Path = Path("html_cache")
    output_path: Path = Path("tutor_data.csv")
    concurrency: int = 50
    max_attempts: int = 3
    request_delay: float = 2.0
    backoff_base: float = 5.0
    request_timeout: float | None = None
    breaker_threshold: int = 10
    breaker_cooldown: float = 60.0

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(
                f"concurrency must be at least 1, got {self.concurrency}"
            )
        if self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be at least 1, got {self.max_attempts}"
            )
        for name in ("request_delay", "backoff_base", "breaker_cooldown"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.breaker_threshold < 0:
            raise ValueError("breaker_threshold must not be negative")
        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive or None")

    def with_overrides(self, **overrides: Any) -> CrawlConfig:
        """Return a copy with the given fields replaced.

        Values of None are ignored so CLI options that were not supplied fall
        back to the current setting. Sequences are normalised to tuples and
        paths to Path objects.
        """
        changes: dict[str, Any] = {
            key: value for key, value in overrides.items() if value is not None
        }
        for key in ("locations", "subjects"):
            if key in changes:
                changes[key] = tuple(changes[key])
        for key in ("cache_dir", "output_path"):
            if key in changes:
                changes[key] = Path(changes[key])
        if "base_url" in changes:
            changes["base_url"] = changes["base_url"].rstrip("/")
        return replace(self, **changes)
