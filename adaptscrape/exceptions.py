"""Custom exceptions for adaptscrape."""


class AdaptScrapeError(Exception):
    """Base class for all adaptscrape exceptions."""

    pass


class BotDetectionError(AdaptScrapeError):
    """Raised when bot detection is triggered."""

    def __init__(self, url: str, status_code: int, indicators: list[str]):
        """Initialize bot detection error.

        Args:
            url: URL where bot detection was triggered
            status_code: HTTP status code received
            indicators: List of bot detection indicators found

        """
        self.url = url
        self.status_code = status_code
        self.indicators = indicators
        super().__init__(f'Bot detection triggered on {url} (status={status_code}): {", ".join(indicators)}')


class FetchError(AdaptScrapeError):
    """Raised when no fetch strategy could produce usable content."""

    def __init__(self, url: str, message: str):
        """Initialize fetch error.

        Args:
            url: URL that could not be fetched
            message: Last underlying error message

        """
        self.url = url
        self.message = message
        super().__init__(f'Failed to fetch {url}: {message}')


class TransientBrowserError(FetchError):
    """Raised when the browser disconnects in a way worth retrying."""

    pass


class LLMGenerationError(AdaptScrapeError):
    """Raised when LLM generation fails."""

    pass


class StructureDetectionError(AdaptScrapeError):
    """Raised when an AI structure proposal cannot be parsed."""

    pass
