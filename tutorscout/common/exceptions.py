"""Exception types for crawl errors.

Two families live here. Transient exceptions describe transport failures that
might resolve on retry; the Fetcher retries them. Pipeline errors
(TutorScoutError subclasses) describe a unit of work that has given up: a URL
that could not be fetched, a listing page that ended pagination early, a
profile that produced no record, or an output file that could not be written.
"""

from typing import Any


class TutorScoutError(Exception):
    """Base class for pipeline errors.

    Every pipeline error is tied to the URL (or path) of the unit of work that
    failed, plus optional context that is rendered into the message.
    """

    def __init__(
        self,
        message: str,
        url: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the failure.
            url: The URL (or file path) of the failed unit of work.
            context: Optional dict of additional context.
        """
        self.message = message
        self.url = url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        parts.append(f"URL: {self.url}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class FetchError(TutorScoutError):
    """Raised when a URL could not be fetched after exhausting retries.

    Attributes:
        attempts: Number of network attempts that were made.
        last_error: The underlying error from the final attempt.
    """

    def __init__(
        self,
        url: str,
        attempts: int,
        last_error: BaseException | None = None,
        message: str | None = None,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        context: dict[str, Any] = {"attempts": attempts}
        if last_error is not None:
            context["last_error"] = f"{type(last_error).__name__}: {last_error}"
        super().__init__(
            message or f"Failed to fetch after {attempts} attempt(s)",
            url,
            context,
        )


class CircuitOpenError(FetchError):
    """Raised instead of a network call while the circuit breaker is open.

    Attributes:
        retry_after: Seconds until the breaker lets a trial request through.
    """

    def __init__(self, url: str, retry_after: float) -> None:
        self.retry_after = retry_after
        super().__init__(
            url,
            attempts=0,
            message=(
                "Circuit open, fetch short-circuited "
                f"(retry in {retry_after:.1f}s)"
            ),
        )


class CrawlPageError(TutorScoutError):
    """Raised when a listing page could not be fetched or parsed.

    Caught by the Listing Crawler, which stops paginating the current
    FilterPair and keeps the links collected so far.
    """

    def __init__(
        self, url: str, location: str, subject: str, page: int
    ) -> None:
        self.location = location
        self.subject = subject
        self.page = page
        super().__init__(
            f"Failed to scrape search results for {location}, {subject}, "
            f"page {page}",
            url,
            {"location": location, "subject": subject, "page": page},
        )


class ExtractionError(TutorScoutError):
    """Raised when a profile page could not be fetched or parsed."""

    def __init__(self, url: str) -> None:
        super().__init__("Failed to scrape tutor profile", url)


class WriteError(TutorScoutError):
    """Raised when the final CSV batch could not be written."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("Failed to write output file", path)


class CacheUnavailableError(TutorScoutError):
    """Raised when the response cache directory cannot be created or written.

    This is the only fatal error: without a writable cache the run aborts.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("Response cache directory is not writable", path)


class HTMLStructuralAssumptionException(Exception):
    """Raised when HTML structure doesn't match expectations.

    Checked queries raise this when a selector returns fewer (or more)
    elements than required, which usually means the site's markup changed.

    Attributes:
        selector: The XPath or CSS selector that was used.
        selector_type: Type of selector ("xpath" or "css").
        description: What was being selected.
        expected_min: Minimum number of results expected.
        expected_max: Maximum number of results expected (None = unlimited).
        actual_count: Number of results found.
        request_url: The URL of the page being parsed.
    """

    def __init__(
        self,
        selector: str,
        selector_type: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        request_url: str,
    ) -> None:
        self.selector = selector
        self.selector_type = selector_type
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count
        self.request_url = request_url

        if expected_max is None:
            expected_str = f"at least {expected_min}"
        elif expected_min == expected_max:
            expected_str = f"exactly {expected_min}"
        else:
            expected_str = f"between {expected_min} and {expected_max}"

        self.message = (
            f"HTML structure mismatch: Expected {expected_str} "
            f"elements for '{description}', but found {actual_count} "
            f"({selector_type}: {selector}, URL: {request_url})"
        )
        super().__init__(self.message)


# =============================================================================
# Transient Exceptions
# =============================================================================


class TransientException(Exception):
    """Base class for transient errors that might resolve on retry.

    Transient exceptions represent temporary failures like network issues,
    unexpected status codes, or timeouts. The Fetcher is responsible for
    retry logic and strategy.
    """

    pass


class HTMLResponseAssumptionException(TransientException):
    """Raised when HTTP response has unexpected status code.

    Attributes:
        status_code: The actual HTTP status code received.
        expected_codes: List of status codes that were expected.
        url: The URL that returned the unexpected status.
        message: Human-readable error message.
    """

    def __init__(
        self,
        status_code: int,
        expected_codes: list[int],
        url: str,
    ) -> None:
        self.status_code = status_code
        self.expected_codes = expected_codes
        self.url = url

        expected_str = ", ".join(str(code) for code in expected_codes)
        self.message = (
            f"HTTP {status_code} from {url} (expected one of: {expected_str})"
        )
        super().__init__(self.message)


class RequestTimeoutException(TransientException):
    """Raised when a request times out.

    Attributes:
        url: The URL that timed out.
        timeout_seconds: The timeout duration in seconds.
        message: Human-readable error message.
    """

    def __init__(self, url: str, timeout_seconds: float | None) -> None:
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.message = f"Request to {url} timed out after {timeout_seconds}s"
        super().__init__(self.message)
