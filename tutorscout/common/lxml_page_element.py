"""LxmlPageElement: the page interface used by the crawler and extractor.

LxmlPageElement wraps CheckedHtmlElement and adds the conveniences the
tutor pages need: text and attribute access, and header-anchored section
text (the content that sits between a labelled heading and the next
heading).
"""

from __future__ import annotations

from collections.abc import Iterable

from lxml import html
from lxml.html import HtmlElement

from tutorscout.common.checked_html import CheckedHtmlElement


class LxmlPageElement:
    """Page element wrapping CheckedHtmlElement.

    Attributes:
        _element: The underlying CheckedHtmlElement.
    """

    def __init__(self, element: CheckedHtmlElement):
        self._element = element

    @classmethod
    def from_html(cls, text: str, url: str = "") -> LxmlPageElement:
        """Parse an HTML document into a page element.

        Args:
            text: The document source.
            url: The page URL, reported in selector errors.

        Raises:
            lxml.etree.ParserError: If *text* is empty or not parseable.
            ValueError: If *text* is a str carrying an XML encoding
                declaration.
        """
        root = html.fromstring(text)
        return cls(CheckedHtmlElement(root, url))

    def query_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[LxmlPageElement]:
        """Query elements by CSS selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        checked_elements = self._element.checked_css(
            selector, description, min_count, max_count
        )
        return [LxmlPageElement(elem) for elem in checked_elements]

    def text_content(self) -> str:
        """Visible text content of the element and its descendants."""
        return self._element.text_content()

    def get_attribute(self, name: str) -> str | None:
        """Return an attribute value, or None if it doesn't exist."""
        return self._element.get(name)

    def heading_section_text(
        self,
        label: str,
        heading_tag: str = "h3",
        stop_classes: Iterable[str] = (),
    ) -> str:
        """Return the text between the heading labelled *label* and the next one.

        The first ``heading_tag`` descendant whose stripped text equals
        *label* (case-insensitively) anchors the section. Text is then
        collected in document order, descending into following elements and
        climbing out of the heading's ancestors, until the next
        ``heading_tag``, an element carrying one of *stop_classes*, or the
        end of this element. Comments contribute nothing but their tail.

        Returns:
            The stripped section text, or "" when no heading matches.
        """
        wanted = label.strip().lower()
        stops = frozenset(stop_classes)
        root: HtmlElement = self._element.element

        for heading in root.iter(heading_tag):
            if heading.text_content().strip().lower() == wanted:
                break
        else:
            return ""

        parts: list[str] = []
        node = heading
        while node is not root:
            parts.append(node.tail or "")
            for sibling in node.itersiblings():
                if _collect_text(sibling, heading_tag, stops, parts):
                    return "".join(parts).strip()
            node = node.getparent()
        return "".join(parts).strip()


def _has_stop_class(element: HtmlElement, stops: frozenset[str]) -> bool:
    return bool(stops.intersection(element.classes))


def _collect_text(
    element: HtmlElement,
    heading_tag: str,
    stops: frozenset[str],
    parts: list[str],
) -> bool:
    """Append *element*'s text to *parts* up to the first boundary.

    Returns:
        True if a boundary was reached and collection must stop.
    """
    if not isinstance(element.tag, str):
        parts.append(element.tail or "")
        return False
    if element.tag == heading_tag or _has_stop_class(element, stops):
        return True
    parts.append(element.text or "")
    for child in element:
        if _collect_text(child, heading_tag, stops, parts):
            return True
    parts.append(element.tail or "")
    return False
