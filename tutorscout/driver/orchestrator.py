"""Orchestrator: drive the crawl over every FilterPair and write the output.

FilterPairs are processed strictly one after another, location-major. For
each pair the ListingCrawler collects profile links, then one
ProfileExtractor call per link is scheduled through the ConcurrencyLimiter
and the whole batch is awaited. Successful records are stamped with the
pair's capitalized location and subject and appended in link order. Once
every pair is done the accumulated records are handed to the writer in a
single batch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from pathlib import Path

from tutorscout.common.exceptions import WriteError
from tutorscout.common.request_manager import AsyncRequestManager
from tutorscout.common.response_cache import ResponseCache
from tutorscout.config import CrawlConfig
from tutorscout.data_types import FilterPair, TutorRecord
from tutorscout.driver.circuit_breaker import CircuitBreaker
from tutorscout.driver.fetcher import Fetcher
from tutorscout.driver.limiter import ConcurrencyLimiter
from tutorscout.output import write_records_csv
from tutorscout.scraper.listing import ListingCrawler
from tutorscout.scraper.profile import ProfileExtractor

logger = logging.getLogger(__name__)

RecordWriter = Callable[[list[TutorRecord], Path], int]


def filter_pairs(config: CrawlConfig) -> Iterator[FilterPair]:
    """Yield every FilterPair of *config*, location-major."""
    for location in config.locations:
        for subject in config.subjects:
            yield FilterPair(location, subject)


class Orchestrator:
    """Run the full crawl described by a CrawlConfig.

    Example usage::

        orchestrator = Orchestrator(CrawlConfig())
        records = await orchestrator.run()
    """

    def __init__(
        self,
        config: CrawlConfig,
        request_manager: AsyncRequestManager | None = None,
        writer: RecordWriter = write_records_csv,
        on_pair_complete: Callable[
            [FilterPair, list[TutorRecord]], Awaitable[None]
        ]
        | None = None,
    ) -> None:
        """Initialize the orchestrator and its components.

        Args:
            config: Crawl settings.
            request_manager: AsyncRequestManager for HTTP requests. If None,
                one is created from the config and closed when the run ends.
            writer: Called once with all records and the output path;
                returns the number of rows written.
            on_pair_complete: Optional async callback invoked after each
                FilterPair with the records it produced.
        """
        self.config = config

        if request_manager is not None:
            self.request_manager = request_manager
            self._owns_request_manager = False
        else:
            self.request_manager = AsyncRequestManager(
                timeout=config.request_timeout
            )
            self._owns_request_manager = True

        self.cache = ResponseCache(config.cache_dir)
        self.breaker = (
            CircuitBreaker(config.breaker_threshold, config.breaker_cooldown)
            if config.breaker_threshold > 0
            else None
        )
        self.fetcher = Fetcher(
            self.cache, self.request_manager, config, breaker=self.breaker
        )
        self.crawler = ListingCrawler(self.fetcher, config.base_url)
        self.extractor = ProfileExtractor(self.fetcher, config.base_url)
        self.limiter = ConcurrencyLimiter(config.concurrency)
        self.writer = writer
        self.on_pair_complete = on_pair_complete

        self.rows_written: int | None = None
        self.write_error: WriteError | None = None

    def pairs(self) -> Iterator[FilterPair]:
        """Yield every FilterPair, location-major."""
        return filter_pairs(self.config)

    async def process_pair(self, pair: FilterPair) -> list[TutorRecord]:
        """Crawl and extract one FilterPair, returning its stamped records."""
        logger.info(
            f"Starting scraping for Location: {pair.location}, "
            f"Subject: {pair.subject}"
        )
        links = await self.crawler.crawl(pair)
        logger.info(
            f"Found {len(links)} tutor links for {pair.location}, {pair.subject}"
        )

        results = await asyncio.gather(
            *(
                self.limiter.schedule(self.extractor.extract, link)
                for link in links
            )
        )
        return [record.stamped(pair) for record in results if record is not None]

    async def run(self) -> list[TutorRecord]:
        """Crawl every FilterPair, write the output and return the records.

        Raises:
            CacheUnavailableError: If the cache directory is not writable.
        """
        records: list[TutorRecord] = []
        try:
            self.cache.ensure_directory()
            for pair in self.pairs():
                pair_records = await self.process_pair(pair)
                records.extend(pair_records)
                if self.on_pair_complete:
                    await self.on_pair_complete(pair, pair_records)
        finally:
            if self._owns_request_manager:
                await self.request_manager.close()

        await self.write(records)
        return records

    async def write(self, records: list[TutorRecord]) -> None:
        """Hand *records* to the writer; failures are logged, not retried."""
        path = self.config.output_path
        logger.info(f"Writing {len(records)} records to {path}...")
        try:
            self.rows_written = await asyncio.to_thread(
                self.writer, records, path
            )
        except Exception as e:
            error = e if isinstance(e, WriteError) else WriteError(str(path))
            self.write_error = error
            logger.error(f"Error writing CSV file: {error}", exc_info=e)
            return
        logger.info(f"CSV file written successfully: {path}")
