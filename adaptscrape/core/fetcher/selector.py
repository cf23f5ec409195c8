"""Chooses between plain HTTP and a headless browser for each page."""

import logging
import re

import logfire
from tenacity import RetryError

from adaptscrape.core.fetcher.base import HTMLFetcher
from adaptscrape.core.fetcher.playwright import BROWSER_TIMEOUT_MS, PlaywrightFetcher
from adaptscrape.core.fetcher.simple import HTTP_TIMEOUT_SECONDS, SimpleFetcher
from adaptscrape.exceptions import BotDetectionError, FetchError, TransientBrowserError
from adaptscrape.models.results import BrowserFetchOptions, FetchedContent, FetchMethod, FetchResult
from adaptscrape.retry import get_retryer, log_retry

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 1000
SUBSTANTIAL_CONTENT_BYTES = 50_000
VERY_FEW_LINKS = 5
FEW_LINKS = 10
BROWSER_MAX_ATTEMPTS = 2
BROWSER_RETRY_WAIT_SECONDS = 2.0

TRANSIENT_BROWSER_ERRORS = (
    'frame detached',
    'protocol error',
    'connection closed',
    'target closed',
    'browser disconnected',
    'browser has been closed',
    'execution context was destroyed',
)

STRONG_HTMX_MARKERS = (
    'hx-get=',
    'hx-post=',
    'hx-trigger=',
    'data-hx-get=',
    'data-hx-post=',
    'htmx.min.js',
    'htmx.js',
    'unpkg.com/htmx',
)
DYNAMIC_LOADING_MARKERS = (
    'load-more',
    'lazy-load',
    'infinite-scroll',
    'ajax-load',
    'data-react-root',
    'ng-app=',
    'v-app',
    '@click=',
)
CONTENT_LOADING_MARKERS = (
    'content-skeleton',
    'article-skeleton',
    'loading-spinner',
    'posts-loading',
    'articles-loading',
    'content-placeholder',
)
SPA_MARKERS = ('react-root', 'ng-app', 'vue-app', '__next', 'nuxt')
EMPTY_CONTAINER_MARKERS = ('articles-container', 'posts-container', 'content-container')
LOADING_STATE_MARKERS = ('loading', 'spinner', 'skeleton')

_ANCHOR = re.compile(r'<a[^>]*href[^>]*>', re.IGNORECASE)


def is_transient_browser_error(message: str | None) -> bool:
    """Whether a browser error message describes a disconnect worth retrying."""
    if not message:
        return False
    lowered = message.lower()
    return any(marker in lowered for marker in TRANSIENT_BROWSER_ERRORS)


def detect_dynamic_content_needs(html: str, url: str = '') -> bool:
    """Decide whether a listing page's links are probably loaded by JavaScript.

    Strong signals (HTMX markers, very few anchors, empty containers showing
    a loading state) are enough on their own. Weak signals only count in
    combination, and are ignored entirely for pages over 50,000 characters.

    Args:
        html: HTML returned by the plain HTTP fetch
        url: Page URL, used for logging only

    Returns:
        True if a browser render is likely to find more content

    """
    html_lower = html.lower()
    link_count = len(_ANCHOR.findall(html))

    has_strong_htmx = any(marker in html_lower for marker in STRONG_HTMX_MARKERS)
    has_very_few_links = link_count < VERY_FEW_LINKS
    has_empty_containers = any(marker in html_lower for marker in EMPTY_CONTAINER_MARKERS) and any(
        marker in html_lower for marker in LOADING_STATE_MARKERS
    )
    strong = has_strong_htmx or has_very_few_links or has_empty_containers

    if len(html) >= SUBSTANTIAL_CONTENT_BYTES:
        needs_dynamic = strong
    else:
        has_dynamic_loading = any(marker in html_lower for marker in DYNAMIC_LOADING_MARKERS)
        has_content_loading = any(marker in html_lower for marker in CONTENT_LOADING_MARKERS)
        has_spa = any(marker in html_lower for marker in SPA_MARKERS)
        has_few_links = link_count < FEW_LINKS
        needs_dynamic = (
            strong
            or (has_spa and (has_few_links or has_content_loading))
            or (has_dynamic_loading and has_content_loading)
        )

    if needs_dynamic:
        logger.info(
            f'Dynamic content detected for {url or "page"}: htmx={has_strong_htmx}, '
            f'links={link_count}, empty_containers={has_empty_containers}'
        )
    return needs_dynamic


class MethodSelector:
    """Fetches a page over HTTP first and escalates to a browser when needed.

    Attributes:
        http_fetcher: Fetcher used for the first, cheap attempt
        browser_fetcher: Fetcher used for escalation
        browser_timeout: Browser navigation timeout in milliseconds
        browser_attempts: Maximum browser attempts for transient failures
        retry_wait: Fixed wait between browser attempts in seconds

    """

    def __init__(
        self,
        http_fetcher: HTMLFetcher | None = None,
        browser_fetcher: PlaywrightFetcher | None = None,
        http_timeout: float = HTTP_TIMEOUT_SECONDS,
        browser_timeout: int = BROWSER_TIMEOUT_MS,
        browser_attempts: int = BROWSER_MAX_ATTEMPTS,
        retry_wait: float = BROWSER_RETRY_WAIT_SECONDS,
    ):
        """Initialize the selector.

        Args:
            http_fetcher: HTTP fetcher. Defaults to SimpleFetcher.
            browser_fetcher: Browser fetcher. Defaults to PlaywrightFetcher.
            http_timeout: Timeout for the default HTTP fetcher in seconds
            browser_timeout: Browser navigation timeout in milliseconds
            browser_attempts: Maximum browser attempts. Defaults to 2.
            retry_wait: Seconds between browser attempts. Defaults to 2.0.

        """
        self.http_fetcher = http_fetcher or SimpleFetcher(timeout=http_timeout)
        self.browser_fetcher = browser_fetcher or PlaywrightFetcher(timeout=browser_timeout)
        self.browser_timeout = browser_timeout
        self.browser_attempts = browser_attempts
        self.retry_wait = retry_wait

    def get_content(self, url: str, is_article: bool = False) -> FetchedContent:
        """Fetch a page with the cheapest method that yields usable HTML.

        Args:
            url: URL to fetch
            is_article: Whether the page is a single article (skips the
                dynamic-content check used for listing pages)

        Returns:
            FetchedContent tagged with the method that produced it

        Raises:
            FetchError: If both HTTP and every browser attempt failed

        """
        with logfire.span('get_content', url=url, is_article=is_article):
            http_result, http_error = self._fetch_http(url)

            if http_result is not None and len(http_result.html or '') > MIN_CONTENT_LENGTH:
                html = http_result.html or ''
                target = http_result.final_url or url
                logger.info(f'HTTP fetch of {url} succeeded ({len(html)} chars)')

                escalation = None
                if http_result.metadata.requires_js:
                    escalation = 'requires_javascript'
                elif (
                    not is_article
                    and len(html) < SUBSTANTIAL_CONTENT_BYTES
                    and detect_dynamic_content_needs(html, target)
                ):
                    escalation = 'dynamic_content'

                if escalation:
                    try:
                        return self._fetch_browser(target, is_article, escalation_reason=escalation)
                    except FetchError as e:
                        logger.warning(f'Browser escalation failed for {url}, keeping HTTP result: {e.message}')
                        return self._from_http(url, http_result, diagnostic=f'browser escalation failed: {e.message}')

                return self._from_http(url, http_result)

            if http_result is not None:
                reason = f'insufficient content ({len(http_result.html or "")} chars)'
            else:
                reason = http_error or 'http failed'
            logger.info(f'HTTP fetch of {url} unusable ({reason}), escalating to browser')
            return self._fetch_browser(url, is_article, escalation_reason=reason)

    def _fetch_http(self, url: str) -> tuple[FetchResult | None, str | None]:
        """Run the HTTP fetcher, mapping every failure to (None, reason)."""
        try:
            result = self.http_fetcher.fetch(url)
        except BotDetectionError as e:
            logfire.warn('HTTP fetch blocked', url=url, indicators=e.indicators)
            return None, str(e)

        if result.success:
            return result, None
        return None, result.block_reason or 'empty response'

    def _fetch_browser(self, url: str, is_article: bool, escalation_reason: str) -> FetchedContent:
        """Fetch with the browser, retrying transient disconnects with a fixed wait."""
        options = BrowserFetchOptions(
            timeout=self.browser_timeout,
            is_article_page=is_article,
            handle_htmx=not is_article,
            scroll_to_load=not is_article,
            protection_bypass=True,
        )
        retryer = get_retryer(
            max_attempts=self.browser_attempts,
            wait_min=self.retry_wait,
            wait_max=self.retry_wait,
            exceptions=(TransientBrowserError,),
            log_callback=log_retry,
        )

        attempts = 0
        try:
            for attempt in retryer:
                with attempt:
                    attempts += 1
                    result = self._browser_attempt(url, options)
        except RetryError as e:
            last = e.last_attempt.exception()
            raise FetchError(url, str(last) if last else 'browser retries exhausted') from e
        except FetchError as e:
            logfire.error('Browser fetch failed', url=url, attempts=attempts, error=e.message)
            raise FetchError(url, e.message) from e

        logfire.info('Browser fetch succeeded', url=url, attempts=attempts, reason=escalation_reason)
        return FetchedContent(
            url=url,
            html=result.html or '',
            method=FetchMethod.BROWSER,
            status_code=result.status_code,
            final_url=result.final_url,
            browser_attempts=attempts,
            escalation_reason=escalation_reason,
        )

    def _browser_attempt(self, url: str, options: BrowserFetchOptions) -> FetchResult:
        try:
            result = self.browser_fetcher.fetch(url, options)
        except BotDetectionError as e:
            raise FetchError(url, str(e)) from e
        except ImportError as e:
            raise FetchError(url, str(e)) from e

        if result.success:
            return result

        reason = result.block_reason or 'empty browser response'
        if is_transient_browser_error(reason):
            logger.warning(f'Transient browser error for {url}: {reason}')
            raise TransientBrowserError(url, reason)
        raise FetchError(url, reason)

    def _from_http(self, url: str, result: FetchResult, diagnostic: str | None = None) -> FetchedContent:
        return FetchedContent(
            url=url,
            html=result.html or '',
            method=FetchMethod.HTTP,
            status_code=result.status_code,
            final_url=result.final_url,
            diagnostic=diagnostic,
        )
