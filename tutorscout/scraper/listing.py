"""Listing crawler: paginate a filtered search and collect profile links.

For one FilterPair the crawler walks ``/regions/{location}/{subject}/?Page=n``
starting at page 1. Each page contributes the ``data-href`` of every
clickable result row. Pagination ends when a page has no rows, when the
pagination control has no link to the following page, or when a page cannot
be fetched or parsed; in the last case the links gathered so far are kept.
"""

from __future__ import annotations

import logging

from tutorscout.common.exceptions import CrawlPageError
from tutorscout.common.lxml_page_element import LxmlPageElement
from tutorscout.data_types import FilterPair
from tutorscout.driver.fetcher import Fetcher

logger = logging.getLogger(__name__)

RESULT_ROW_SELECTOR = "table.tf-table tbody tr.clickable-row"
PAGE_LINK_SELECTOR = "ul.pagination a.page-link"


def listing_url(base_url: str, pair: FilterPair, page: int) -> str:
    """Build the URL of result page *page* for *pair*."""
    return (
        f"{base_url.rstrip('/')}/regions/{pair.location}/{pair.subject}/"
        f"?Page={page}"
    )


def listing_links(page: LxmlPageElement) -> list[str]:
    """Return the detail links of every clickable result row on *page*."""
    rows = page.query_css(RESULT_ROW_SELECTOR, "result rows", min_count=0)
    links: list[str] = []
    for row in rows:
        href = row.get_attribute("data-href")
        if href:
            links.append(href)
    return links


def has_page_link(page: LxmlPageElement, page_number: int) -> bool:
    """Return True if the pagination control mentions *page_number*."""
    wanted = str(page_number)
    return any(
        wanted in anchor.text_content()
        for anchor in page.query_css(
            PAGE_LINK_SELECTOR, "pagination links", min_count=0
        )
    )


class ListingCrawler:
    """Collect profile links for a FilterPair across all result pages."""

    def __init__(self, fetcher: Fetcher, base_url: str) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")

    def listing_url(self, pair: FilterPair, page: int) -> str:
        return listing_url(self.base_url, pair, page)

    async def _scrape_page(
        self, pair: FilterPair, page_number: int
    ) -> tuple[list[str], bool]:
        """Return (links on the page, whether a next-page link exists).

        Raises:
            CrawlPageError: If the page cannot be fetched, cached or parsed.
                The original exception is chained as ``__cause__``.
        """
        url = self.listing_url(pair, page_number)
        try:
            body = await self.fetcher.fetch(url)
            page = LxmlPageElement.from_html(body, url)
            return listing_links(page), has_page_link(page, page_number + 1)
        except Exception as e:
            raise CrawlPageError(
                url, pair.location, pair.subject, page_number
            ) from e

    async def crawl(self, pair: FilterPair) -> list[str]:
        """Return every profile link listed for *pair*, in page order."""
        all_links: list[str] = []
        page_number = 1
        has_next = True

        while has_next:
            logger.info(
                f"Scraping search results for {pair.location}, "
                f"{pair.subject}, page {page_number}: "
                f"{self.listing_url(pair, page_number)}"
            )
            try:
                links, next_exists = await self._scrape_page(pair, page_number)
            except CrawlPageError as e:
                cause = e.__cause__
                logger.error(
                    f"{e.message}: {type(cause).__name__}: {cause}"
                )
                break

            if not links:
                break

            all_links.extend(links)
            has_next = next_exists
            page_number += 1

        return all_links
