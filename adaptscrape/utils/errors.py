"""Error-logging sink for scraping failures."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import logfire

ERROR_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ('network', ('timeout', 'timed out', 'connection', 'network', 'name resolution', 'refused')),
    ('browser', ('browser', 'playwright', 'frame', 'navigation', 'target closed')),
    ('ai', ('llm', 'model', 'rate limit', 'api key', 'openai', 'groq', 'gemini')),
    ('auth', ('unauthorized', 'forbidden', '401', '403')),
    ('parsing', ('parse', 'syntax', 'malformed', 'invalid')),
)


def infer_error_type(error: BaseException) -> str:
    """Classify an exception by keywords in its type name and message.

    Args:
        error: The exception to classify

    Returns:
        One of 'network', 'browser', 'ai', 'auth', 'parsing' or 'unknown'

    """
    text = f'{type(error).__name__} {error}'.lower()
    for error_type, keywords in ERROR_TYPE_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return error_type
    return 'unknown'


@dataclass
class ErrorRecord:
    """One recorded scraping failure."""

    error: str
    error_type: str
    context: str
    url: str | None = None
    method: str | None = None
    step: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ErrorLogger:
    """Records failures to logfire and the stdlib logger, and keeps them in memory.

    Attributes:
        records: Every error recorded by this instance, oldest first
        logger: Logger instance for file logs

    """

    def __init__(self):
        """Initialize an empty error log."""
        self.records: list[ErrorRecord] = []
        self.logger = logging.getLogger(__name__)

    def log_error(
        self,
        error: BaseException,
        context: str,
        url: str | None = None,
        method: str | None = None,
        step: str | None = None,
        **metadata: Any,
    ) -> ErrorRecord:
        """Record a failure.

        Args:
            error: The exception that was raised
            context: Short description of the operation that failed
            url: URL being processed, if any
            method: Fetch method in use ('http' or 'browser'), if known
            step: Pipeline step that failed, if known
            **metadata: Extra key/value pairs stored with the record

        Returns:
            The stored ErrorRecord

        """
        record = ErrorRecord(
            error=str(error),
            error_type=infer_error_type(error),
            context=context,
            url=url,
            method=method,
            step=step,
            metadata=metadata,
        )
        self.records.append(record)

        self.logger.error(f'[{context}] {record.error_type.upper()}: {record.error} (url={url}, step={step})')
        logfire.error(
            'Scraping error',
            context=context,
            error=record.error,
            error_type=record.error_type,
            url=url,
            method=method,
            step=step,
            **metadata,
        )
        return record

    def clear(self) -> None:
        """Drop all stored records."""
        self.records.clear()
