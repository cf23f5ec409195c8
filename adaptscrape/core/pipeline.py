"""Unified article and source scraping pipeline."""

import logging
from dataclasses import replace

import logfire
from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

from adaptscrape.core.discovery import StructureDetector, is_valid_config
from adaptscrape.core.extraction import ContentExtractor, DateExtractor, LinkExtractor
from adaptscrape.core.fetcher import MethodSelector, load_htmx_content, page_has_htmx
from adaptscrape.core.fetcher.htmx import HTMX_LOAD_WAIT_MS
from adaptscrape.core.reanalysis import AIReanalyzer
from adaptscrape.core.redirects import RedirectResolver
from adaptscrape.core.validation import validate_content
from adaptscrape.exceptions import FetchError
from adaptscrape.llm_config import LLMConfig
from adaptscrape.models import (
    ArticleContent,
    FetchedContent,
    FetchMethod,
    RedirectOptions,
    ScrapingConfig,
    SourceScrapingOptions,
)
from adaptscrape.utils.debug import DebugManager
from adaptscrape.utils.errors import ErrorLogger

MIN_SOURCE_LINKS = 10
MAX_VALIDATION_FACTOR = 0.5

# Extraction tiers that get the fetch method prepended, e.g. 'http_selectors'
SELECTOR_TIERS = ('selectors', 'selector_variations', 'class_pattern', 'fallback_selectors', 'body_fallback')

THEME = Theme(
    {
        'info': 'dim cyan',
        'warning': 'magenta',
        'danger': 'bold red',
        'success': 'bold green',
        'step': 'bold blue',
    }
)


class UnifiedScraper:
    """Scrapes articles and listing pages with adaptive fetching and extraction.

    Every collaborator can be injected; anything not given is built with
    defaults, sharing one themed console.

    Attributes:
        console: Rich console instance for formatted output
        method_selector: Chooses HTTP or browser fetching per page
        structure_detector: Finds and caches per-domain selectors
        extractor: Pulls article fields with the selectors
        reanalyzer: Second pass for weak extractions
        date_extractor: Publish date fallback
        link_extractor: Article link collection for listing pages
        redirect_resolver: Optional redirect resolution before fetching
        error_logger: Sink for pipeline failures
        debug: Writes debug snapshots when debug mode is on
        logger: Logger instance for detailed run tracking

    """

    def __init__(
        self,
        llm_config: LLMConfig | None = None,
        method_selector: MethodSelector | None = None,
        structure_detector: StructureDetector | None = None,
        extractor: ContentExtractor | None = None,
        reanalyzer: AIReanalyzer | None = None,
        date_extractor: DateExtractor | None = None,
        link_extractor: LinkExtractor | None = None,
        redirect_resolver: RedirectResolver | None = None,
        error_logger: ErrorLogger | None = None,
        console: Console | None = None,
        debug_mode: bool = False,
    ):
        """Initialize the scraper.

        Args:
            llm_config: LLM used for structure detection, re-analysis, and
                link selection. Defaults to None (heuristics only).
            method_selector: Fetch method selector
            structure_detector: Structure detector
            extractor: Content extractor
            reanalyzer: AI re-analyzer
            date_extractor: Date extractor
            link_extractor: Link extractor
            redirect_resolver: Redirect resolver
            error_logger: Error logger
            console: Rich console. Defaults to a themed console.
            debug_mode: Save fetched HTML and selectors under .adaptscrape/debug_html

        """
        self.console = console or Console(theme=THEME)
        self.method_selector = method_selector or MethodSelector()
        self.structure_detector = structure_detector or StructureDetector(llm_config=llm_config, console=self.console)
        self.date_extractor = date_extractor or DateExtractor()
        self.extractor = extractor or ContentExtractor(console=self.console, date_extractor=self.date_extractor)
        self.reanalyzer = reanalyzer or AIReanalyzer(llm_config=llm_config)
        self.link_extractor = link_extractor or LinkExtractor(llm_config=llm_config)
        self.redirect_resolver = redirect_resolver or RedirectResolver()
        self.error_logger = error_logger or ErrorLogger()
        self.debug = DebugManager(console=self.console, enabled=debug_mode)
        self.logger = logging.getLogger(__name__)

    def scrape_article(
        self, url: str, config: ScrapingConfig | None = None, resolve_redirects: bool = False
    ) -> ArticleContent:
        """Scrape a single article.

        Args:
            url: Article URL
            config: Selectors to use instead of detecting them. Ignored if invalid.
            resolve_redirects: Resolve the redirect chain over HTTP first

        Returns:
            The extracted article

        Raises:
            FetchError: If the page could not be fetched by any method

        """
        step = 'start'
        fetched: FetchedContent | None = None

        with logfire.span('scrape_article', url=url, resolve_redirects=resolve_redirects):
            self.console.print(Panel(f'Scraping article: {url}', style='bold blue'))
            try:
                if resolve_redirects:
                    step = 'redirects'
                    self.console.print('[step]Step 0: Resolving redirects...[/step]')
                    info = self.redirect_resolver.resolve(url, RedirectOptions())
                    if info.has_redirects:
                        self.console.print(f'[info]  → {info.final_url}[/info]')
                    url = info.final_url

                step = 'fetch'
                self.console.print('[step]Step 1: Fetching HTML...[/step]')
                fetched = self.method_selector.get_content(url, is_article=True)
                self.console.print(
                    f'[success]  ✓ Fetched {len(fetched.html):,} characters via {fetched.method.value}[/success]'
                )
                self.debug.save_html(url, fetched.html, fetched.method.value)

                step = 'validate'
                validation = validate_content(fetched.html, url, is_article=True)
                if not validation.is_valid or validation.is_error_page:
                    self.logger.warning(
                        f'Page validation flagged {url}: confidence={validation.confidence}, '
                        f'indicators={validation.error_indicators}'
                    )
                    self.console.print(
                        f'[warning]  ⚠ Page looks invalid ({", ".join(validation.error_indicators) or "no content"})'
                        '[/warning]'
                    )

                step = 'detect'
                self.console.print('[step]Step 2: Detecting structure...[/step]')
                if config is None or not is_valid_config(config):
                    if config is not None:
                        self.logger.info('Caller-supplied selectors are invalid, detecting instead')
                    config = self.structure_detector.detect(url, fetched.html)
                self.debug.save_selectors(url, config)

                step = 'extract'
                self.console.print('[step]Step 3: Extracting content...[/step]')
                article = self.extractor.extract_article_content(fetched.html, config, url)

                if self.reanalyzer.should_trigger(article):
                    step = 'reanalyze'
                    self.console.print('[step]Step 4: Re-analyzing weak extraction...[/step]')
                    article = self.reanalyzer.reanalyze(fetched.html, url, article)

                if article.publish_date is None:
                    publish_date = self.date_extractor.extract(fetched.html, config.date_selector)
                    if publish_date is not None:
                        article = replace(article, publish_date=publish_date)

                confidence = article.confidence
                if not validation.is_valid or validation.is_error_page:
                    confidence *= min(validation.confidence / 100, MAX_VALIDATION_FACTOR)

                method = article.extraction_method
                if method in SELECTOR_TIERS:
                    method = f'{fetched.method.value}_{method}'

                article = replace(article, confidence=confidence, extraction_method=method)

            except Exception as e:
                self.error_logger.log_error(
                    e,
                    'scrape_article',
                    url=url,
                    method=fetched.method.value if fetched else None,
                    step=step,
                )
                self.console.print(f'[danger]  ✗ Scraping failed at {step}: {e}[/danger]')
                raise

            self.console.print(
                f'[success]  ✓ Extracted {len(article.content):,} characters '
                f'({article.extraction_method}, confidence {article.confidence:.2f})[/success]'
            )
            logfire.info(
                'Article scraped',
                url=url,
                method=article.extraction_method,
                confidence=article.confidence,
                content_length=len(article.content),
            )
            return article

    def scrape_source(self, url: str, options: SourceScrapingOptions | None = None) -> list[str]:
        """Collect article links from a listing page.

        Args:
            url: Listing page URL
            options: Link filters and limits

        Returns:
            Absolute, deduplicated article URLs, at most max_links long

        Raises:
            FetchError: If the page could not be fetched by any method

        """
        options = options or SourceScrapingOptions()

        with logfire.span('scrape_source', url=url, max_links=options.max_links):
            self.console.print(Panel(f'Scraping source: {url}', style='bold blue'))
            try:
                fetched = self.method_selector.get_content(url, is_article=False)
                base_url = fetched.final_url or url

                if fetched.method == FetchMethod.BROWSER:
                    links = self._links_from_live_page(base_url, fetched.html, options)
                else:
                    links = self.link_extractor.extract_links(fetched.html, base_url, options)
            except Exception as e:
                self.error_logger.log_error(e, 'scrape_source', url=url, step='links')
                self.console.print(f'[danger]  ✗ Source scraping failed: {e}[/danger]')
                raise

            links = list(dict.fromkeys(links))[: options.max_links]
            self.console.print(f'[success]  ✓ Found {len(links)} article links[/success]')
            logfire.info('Source scraped', url=url, links=len(links), method=fetched.method.value)
            return links

    def _links_from_live_page(self, url: str, fallback_html: str, options: SourceScrapingOptions) -> list[str]:
        """Extract links from a rendered page, loading HTMX content first."""
        browser = self.method_selector.browser_fetcher
        try:
            with browser.open_page(url) as page:
                if not page_has_htmx(page):
                    return self.link_extractor.extract_links(page.content(), url, options)

                self.console.print('[info]  HTMX detected, loading dynamic content...[/info]')
                load_htmx_content(page, HTMX_LOAD_WAIT_MS)
                links = self.link_extractor.extract_links(page.content(), url, options)

                if len(links) < MIN_SOURCE_LINKS:
                    self.logger.info(f'Only {len(links)} links after HTMX load, retrying with a longer wait')
                    load_htmx_content(page, HTMX_LOAD_WAIT_MS * 2)
                    links = self.link_extractor.extract_links(page.content(), url, options)
                return links
        except (FetchError, ImportError) as e:
            self.logger.warning(f'Live page unavailable for {url}, using fetched HTML: {e}')
        except Exception as e:
            self.logger.warning(f'Live page failed for {url}, using fetched HTML: {e}')
            logfire.warn('Live source page failed', url=url, error=str(e))

        return self.link_extractor.extract_links(fallback_html, url, options)

    def clear_cache(self, url: str) -> None:
        """Forget cached selectors for a URL's domain."""
        self.structure_detector.clear_cache(url)

    def clear_all_cache(self) -> None:
        """Forget all cached selectors."""
        self.structure_detector.clear_all_cache()
