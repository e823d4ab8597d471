"""Data types shared by the crawler, extractor, orchestrator and writer.

FilterPair names one (location, subject) combination of the crawl. TutorRecord
is the structured result of one successfully extracted profile page; it is a
frozen Pydantic model, so the orchestrator stamps filter values onto a copy
rather than mutating the extractor's output.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

NOT_AVAILABLE = "N/A"

# Field name -> CSV column title, in output order.
CSV_COLUMNS: dict[str, str] = {
    "link": "Link",
    "name": "Name",
    "contact_info": "Contact Info",
    "experience": "Experience",
    "qualifications": "Qualifications",
    "rates": "Rates",
    "gender": "Gender",
    "registered": "Registered",
    "location": "Location",
    "subject": "Subject",
    "email_extract": "email_extract",
    "mobile_extract": "mobile_extract",
}


def capitalize_first(value: str) -> str:
    """Upper-case the first character, leaving the rest untouched.

    Unlike str.capitalize() this does not lower-case the remainder, so
    "maths-methods" becomes "Maths-methods".
    """
    if not value:
        return ""
    return value[0].upper() + value[1:]


@dataclass(frozen=True)
class FilterPair:
    """One (location, subject) combination driving a crawl-and-extract phase.

    Attributes:
        location: Region slug, e.g. "melbourne".
        subject: Subject slug, e.g. "maths-methods".
    """

    location: str
    subject: str

    def label(self) -> tuple[str, str]:
        """Return the capitalized (location, subject) written to the output."""
        return capitalize_first(self.location), capitalize_first(self.subject)

    def __str__(self) -> str:
        return f"{self.location}/{self.subject}"


class TutorRecord(BaseModel):
    """A tutor profile extracted from a detail page.

    Every field is text. ``location`` and ``subject`` are left blank by the
    extractor and set from the FilterPair by :meth:`stamped`.
    """

    model_config = ConfigDict(frozen=True)

    link: str = Field(..., description="Detail page link as discovered")
    name: str = Field("", description="Primary heading of the profile")
    contact_info: str = Field(
        "", description="Contact link texts, newline separated"
    )
    experience: str = ""
    qualifications: str = ""
    rates: str = ""
    gender: str = ""
    registered: str = Field(
        "", description="Registration date with update note removed"
    )
    location: str = ""
    subject: str = ""
    email_extract: str = NOT_AVAILABLE
    mobile_extract: str = NOT_AVAILABLE

    def stamped(self, pair: FilterPair) -> TutorRecord:
        """Return a copy annotated with the FilterPair that discovered it."""
        location, subject = pair.label()
        return self.model_copy(
            update={"location": location, "subject": subject}
        )

    def as_row(self) -> dict[str, str]:
        """Return the record keyed by CSV column title."""
        data = self.model_dump()
        return {title: data[field] for field, title in CSV_COLUMNS.items()}
