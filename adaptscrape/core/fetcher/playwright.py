"""Playwright-based fetcher using a real browser."""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from adaptscrape.core.fetcher.base import ContentAnalyzer, HTMLFetcher
from adaptscrape.core.fetcher.htmx import load_htmx_content, page_has_htmx
from adaptscrape.exceptions import BotDetectionError
from adaptscrape.models.results import BrowserFetchOptions, FetchResult
from adaptscrape.utils.headers import HeaderGenerator, UserAgentRotator

BROWSER_TIMEOUT_MS = 60_000
HUMAN_PAUSE_MS = 1000
CHALLENGE_WAIT_MS = 15_000
SCROLL_STEPS = 3
SCROLL_PAUSE_MS = 1000

LAUNCH_ARGS = ['--disable-blink-features=AutomationControlled', '--no-sandbox']
VIEWPORT = {'width': 1920, 'height': 1080}

CHALLENGE_TITLES = ('just a moment', 'checking your browser', 'attention required', 'please wait')

# Hides the most common automation fingerprints from page scripts
STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
"""

CHALLENGE_CLEARED_SCRIPT = """
() => {
    const title = document.title.toLowerCase();
    return !['just a moment', 'checking your browser', 'attention required', 'please wait']
        .some(marker => title.includes(marker));
}
"""


def _sync_playwright():
    try:
        from playwright.sync_api import sync_playwright
    except ImportError as err:
        raise ImportError(
            'Playwright not installed. Install with: uv add playwright && playwright install chromium'
        ) from err
    return sync_playwright


class PlaywrightFetcher(HTMLFetcher):
    """Fetcher that renders pages in headless Chromium.

    Slower than plain HTTP, but runs JavaScript, waits out challenge pages,
    and can trigger lazy or HTMX-loaded content.
    """

    def __init__(self, timeout: int = BROWSER_TIMEOUT_MS, headless: bool = True):
        """Initialize Playwright fetcher.

        Args:
            timeout: Page load timeout in milliseconds
            headless: Run browser in headless mode

        """
        self.timeout = timeout
        self.headless = headless
        self.logger = logging.getLogger(__name__)

    @contextmanager
    def open_page(self, url: str | None = None, timeout: int | None = None) -> Iterator[Any]:
        """Open a stealth-configured page, optionally navigated to a URL.

        The browser is closed when the context exits.

        Args:
            url: URL to navigate to before yielding. Defaults to None (blank page).
            timeout: Navigation timeout in milliseconds. Defaults to the fetcher timeout.

        Yields:
            A Playwright Page

        """
        timeout = timeout or self.timeout

        with _sync_playwright()() as p:
            browser = p.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
            try:
                context = browser.new_context(
                    user_agent=UserAgentRotator.get_chromium(),
                    viewport=VIEWPORT,
                    locale='en-US',
                    extra_http_headers=HeaderGenerator.browser_context_headers(),
                )
                context.add_init_script(STEALTH_SCRIPT)
                page = context.new_page()
                page.set_default_timeout(timeout)

                if url:
                    page.goto(url, wait_until='networkidle', timeout=timeout)

                yield page
            finally:
                browser.close()

    def fetch(self, url: str, options: BrowserFetchOptions | None = None) -> FetchResult:
        """Fetch HTML with a real browser.

        Args:
            url: URL to fetch
            options: Browser options. Defaults to the fetcher timeout with
                protection bypass on.

        Returns:
            FetchResult; html is None and block_reason holds the browser
            error message on failure

        Raises:
            BotDetectionError: If the rendered page is still a block page
            ImportError: If Playwright is not installed

        """
        options = options or BrowserFetchOptions(timeout=self.timeout)
        start_time = time.time()

        try:
            with self.open_page() as page:
                response = page.goto(url, wait_until='networkidle', timeout=options.timeout)

                if options.protection_bypass:
                    self._wait_out_challenge(page)
                if options.scroll_to_load:
                    self._scroll(page)
                if options.handle_htmx and page_has_htmx(page):
                    load_htmx_content(page)

                html = page.content()
                final_url = page.url
                status_code = response.status if response else None

            is_blocked, indicators = self._check_for_bot_detection(html, status_code or 200)
            if is_blocked:
                raise BotDetectionError(url, status_code or 0, indicators)

            return FetchResult(
                url=url,
                html=html,
                status_code=status_code,
                final_url=final_url,
                fetch_time=time.time() - start_time,
                metadata=ContentAnalyzer.analyze(html),
            )

        except (BotDetectionError, ImportError):
            raise

        except Exception as e:
            self.logger.debug(f'Browser fetch failed for {url}: {e}')
            return FetchResult(url=url, html=None, block_reason=str(e), fetch_time=time.time() - start_time)

    def _wait_out_challenge(self, page: Any) -> None:
        """Give an interstitial challenge page time to clear itself."""
        title = page.title().lower()
        if any(marker in title for marker in CHALLENGE_TITLES):
            self.logger.info(f'Challenge page detected ({title!r}), waiting for it to clear')
            try:
                page.wait_for_function(CHALLENGE_CLEARED_SCRIPT, timeout=CHALLENGE_WAIT_MS)
                page.wait_for_load_state('networkidle')
            except Exception as e:
                self.logger.warning(f'Challenge did not clear: {e}')

        page.wait_for_timeout(HUMAN_PAUSE_MS)

    def _scroll(self, page: Any) -> None:
        """Scroll to the bottom a few times to trigger lazy loading."""
        for _ in range(SCROLL_STEPS):
            page.evaluate('() => window.scrollTo(0, document.body.scrollHeight)')
            page.wait_for_timeout(SCROLL_PAUSE_MS)
        page.evaluate('() => window.scrollTo(0, 0)')
