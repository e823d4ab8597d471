"""Profile extractor: turn a tutor detail page into a TutorRecord.

Field sources on a profile page:

- ``name``: the first ``h1`` inside ``.tf-profile-header``.
- Experience, Qualifications, Rates, Gender, Registered: the text between the
  matching ``h3`` heading inside ``.tf-profile`` and the next ``h3`` (or the
  ``tf-submit-container`` block).
- ``contact_info``: every ``span.c_link``, one per line. The first one with
  an ``@`` is the email; the first one that looks like an Australian phone
  number, with whitespace removed, is the mobile.

Missing sections produce empty strings. Any failure while fetching or parsing
a page is logged and yields no record.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from urllib.parse import urljoin

from tutorscout.common.exceptions import ExtractionError
from tutorscout.common.lxml_page_element import LxmlPageElement
from tutorscout.data_types import NOT_AVAILABLE, TutorRecord
from tutorscout.driver.fetcher import Fetcher

logger = logging.getLogger(__name__)

SECTION_LABELS: dict[str, str] = {
    "experience": "Experience",
    "qualifications": "Qualifications",
    "rates": "Rates",
    "gender": "Gender",
    "registered": "Registered",
}

SECTION_STOP_CLASSES = ("tf-submit-container",)

# Landline with optional area code, e.g. "(03) 9999 8888", or mobile
# "0412 345 678".
PHONE_RE = re.compile(
    r"(?:(?:\(0[2-8]\)|0[2-8])?\s?\d{4}\s?\d{4}|04\d{2}\s?\d{3}\s?\d{3})"
)
UPDATED_NOTE_RE = re.compile(r"\(updated profile on \d{2}-\w{3}-\d{4}\)")
WHITESPACE_RE = re.compile(r"\s")


def clean_registered(raw: str) -> str:
    """Strip the "(updated profile on DD-Mon-YYYY)" note from a registration.

    >>> clean_registered("12-Mar-2019 (updated profile on 05-Jan-2024)")
    '12-Mar-2019'
    """
    cleaned = UPDATED_NOTE_RE.sub("", raw, count=1)
    cleaned = cleaned.removesuffix(")")
    return cleaned.strip()


def find_email(contacts: Iterable[str]) -> str:
    """Return the first contact containing "@", or "N/A"."""
    for contact in contacts:
        if "@" in contact:
            return contact
    return NOT_AVAILABLE


def find_phone(contacts: Iterable[str]) -> str:
    """Return the first phone-like contact with whitespace removed, or "N/A"."""
    for contact in contacts:
        if PHONE_RE.search(contact):
            return WHITESPACE_RE.sub("", contact)
    return NOT_AVAILABLE


def section_text(section: LxmlPageElement | None, label: str) -> str:
    """Return the cleaned text under the *label* heading of *section*."""
    if section is None:
        return ""
    return section.heading_section_text(
        label, heading_tag="h3", stop_classes=SECTION_STOP_CLASSES
    )


def parse_profile(page: LxmlPageElement, link: str) -> TutorRecord:
    """Extract a TutorRecord from a parsed profile page.

    Args:
        page: The parsed detail page.
        link: The link the page was discovered under, stored verbatim.
    """
    headings = page.query_css(
        ".tf-profile-header h1", "profile name heading", min_count=0
    )
    name = headings[0].text_content().strip() if headings else ""

    sections = page.query_css(".tf-profile", "profile section", min_count=0)
    section = sections[0] if sections else None
    fields = {
        field: section_text(section, label)
        for field, label in SECTION_LABELS.items()
    }
    fields["registered"] = clean_registered(fields["registered"])

    contacts = [
        span.text_content().strip()
        for span in page.query_css("span.c_link", "contact links", min_count=0)
    ]

    return TutorRecord(
        link=link,
        name=name,
        contact_info="\n".join(contacts),
        email_extract=find_email(contacts),
        mobile_extract=find_phone(contacts),
        **fields,
    )


class ProfileExtractor:
    """Fetch and parse tutor detail pages."""

    def __init__(self, fetcher: Fetcher, base_url: str) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/") + "/"

    def profile_url(self, link: str) -> str:
        """Resolve a (possibly relative) listing link against the base URL."""
        return urljoin(self.base_url, link)

    async def _extract(self, url: str, link: str) -> TutorRecord:
        try:
            body = await self.fetcher.fetch(url)
            page = LxmlPageElement.from_html(body, url)
            return parse_profile(page, link)
        except Exception as e:
            raise ExtractionError(url) from e

    async def extract(self, link: str) -> TutorRecord | None:
        """Return the record for *link*, or None if extraction failed."""
        url = self.profile_url(link)
        logger.info(f"Scraping tutor profile: {url}")
        try:
            return await self._extract(url, link)
        except ExtractionError as e:
            cause = e.__cause__
            logger.error(
                f"{e.message} {url}: {type(cause).__name__}: {cause}"
            )
            return None
