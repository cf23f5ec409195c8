"""Plain HTTP fetcher with realistic browser headers."""

import logging
import random
import time

import requests

from adaptscrape.core.fetcher.base import ContentAnalyzer, HTMLFetcher
from adaptscrape.exceptions import BotDetectionError
from adaptscrape.models.results import FetchResult
from adaptscrape.utils.headers import HeaderGenerator

HTTP_TIMEOUT_SECONDS = 12


class SimpleFetcher(HTMLFetcher):
    """HTTP fetcher with header rotation and polite request pacing.

    Attributes:
        timeout: Request timeout in seconds
        min_delay: Minimum delay between requests in seconds
        max_delay: Maximum delay between requests in seconds
        session: Requests session used for connection pooling
        last_request_time: Timestamp of the last request

    """

    def __init__(
        self,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        min_delay: float = 0.5,
        max_delay: float = 2.0,
        session: requests.Session | None = None,
    ):
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds. Defaults to 12.
            min_delay: Minimum pause between requests. 0 disables pacing.
            max_delay: Maximum pause between requests
            session: Requests session to reuse. Defaults to None (creates a new session).

        """
        self.timeout = timeout
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.session = session or requests.Session()
        self.last_request_time = 0.0
        self.logger = logging.getLogger(__name__)

    def _apply_request_delay(self) -> None:
        """Sleep so consecutive requests are spaced out."""
        if self.min_delay > 0:
            elapsed = time.time() - self.last_request_time
            delay_needed = random.uniform(self.min_delay, self.max_delay)
            if elapsed < delay_needed:
                time.sleep(delay_needed - elapsed)

        self.last_request_time = time.time()

    def fetch(self, url: str) -> FetchResult:
        """Fetch a page with a single GET, following HTTP redirects.

        Args:
            url: URL to fetch

        Returns:
            FetchResult; html is None and block_reason is set on failure

        Raises:
            BotDetectionError: If the response is a block page

        """
        start_time = time.time()
        self._apply_request_delay()

        try:
            response = self.session.get(
                url, headers=HeaderGenerator.generate_headers(), timeout=self.timeout, allow_redirects=True
            )
            status_code = response.status_code
            html = response.text

            if not html or len(html) < 100:
                return FetchResult(
                    url=url,
                    html=None,
                    status_code=status_code,
                    final_url=response.url,
                    is_blocked=True,
                    block_reason='Response too short or empty',
                    fetch_time=time.time() - start_time,
                )

            is_blocked, indicators = self._check_for_bot_detection(html, status_code)
            if is_blocked:
                raise BotDetectionError(url, status_code, indicators)

            if status_code >= 400:
                return FetchResult(
                    url=url,
                    html=None,
                    status_code=status_code,
                    final_url=response.url,
                    block_reason=f'HTTP {status_code}',
                    fetch_time=time.time() - start_time,
                )

            return FetchResult(
                url=url,
                html=html,
                status_code=status_code,
                final_url=response.url,
                fetch_time=time.time() - start_time,
                metadata=ContentAnalyzer.analyze(html),
            )

        except BotDetectionError:
            raise

        except Exception as e:
            self.logger.debug(f'HTTP fetch failed for {url}: {e}')
            return FetchResult(url=url, html=None, block_reason=str(e), fetch_time=time.time() - start_time)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self):
        """Close the underlying session."""
        self.session.close()
