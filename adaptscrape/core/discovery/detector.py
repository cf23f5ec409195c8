"""Per-domain CSS selector detection with validation, retry, and caching."""

import logging

import logfire
from rich.console import Console

from adaptscrape.core.discovery.analyzer import AgentStructureAnalyzer, StructureAnalyzer
from adaptscrape.core.discovery.cache import InMemorySelectorCache, SelectorCache, normalize_domain
from adaptscrape.core.discovery.selectors import (
    build_config,
    fallback_config,
    is_valid_config,
    parse_structure_response,
    preprocess_html_for_ai,
)
from adaptscrape.exceptions import LLMGenerationError, StructureDetectionError
from adaptscrape.llm_config import LLMConfig
from adaptscrape.models.selectors import ScrapingConfig

logger = logging.getLogger(__name__)

DETECTION_ATTEMPTS = 2


class StructureDetector:
    """Finds the selectors for a site's article pages.

    Detection never raises: any failure ends in the generic fallback config,
    which is returned but not cached.

    Attributes:
        analyzer: AI collaborator, or None to always use the fallback
        cache: Selector cache keyed by normalized domain
        console: Rich console instance for formatted output

    """

    def __init__(
        self,
        analyzer: StructureAnalyzer | None = None,
        llm_config: LLMConfig | None = None,
        cache: SelectorCache | None = None,
        console: Console | None = None,
    ):
        """Initialize the detector.

        Args:
            analyzer: Analyzer to use. Takes priority over llm_config.
            llm_config: Config used to build an AgentStructureAnalyzer
            cache: Selector cache. Defaults to a new InMemorySelectorCache.
            console: Rich console instance for formatted output

        """
        self.console = console or Console()
        self.cache: SelectorCache = cache if cache is not None else InMemorySelectorCache()

        if analyzer is not None:
            self.analyzer: StructureAnalyzer | None = analyzer
        elif llm_config is not None:
            self.analyzer = AgentStructureAnalyzer(llm_config=llm_config, console=self.console)
        else:
            self.analyzer = None

    def detect(self, url: str, html: str, context: str | None = None) -> ScrapingConfig:
        """Return selectors for the page's domain.

        Args:
            url: Page URL; its normalized domain is the cache key
            html: Raw page HTML
            context: Optional site description passed to the analyzer

        Returns:
            A cached, freshly detected, or fallback ScrapingConfig

        """
        domain = normalize_domain(url)

        cached = self.cache.get(domain)
        if cached is not None:
            if is_valid_config(cached):
                logger.debug(f'Using cached selectors for {domain}')
                return cached
            logger.info(f'Cached selectors for {domain} failed validation, evicting')
            self.cache.delete(domain)

        if self.analyzer is None:
            logger.info(f'No AI analyzer configured, using fallback selectors for {domain}')
            return fallback_config()

        with logfire.span('detect_structure', domain=domain):
            processed = preprocess_html_for_ai(html)

            for attempt in range(1, DETECTION_ATTEMPTS + 1):
                try:
                    config = self._propose(processed, url, context)
                except LLMGenerationError as e:
                    logfire.warn('Structure detection AI call failed', domain=domain, error=str(e))
                    return fallback_config()
                except StructureDetectionError as e:
                    logger.warning(f'Attempt {attempt} for {domain}: {e}')
                    continue
                except Exception as e:
                    logger.error(f'Structure detection failed for {domain}: {e}')
                    logfire.error('Structure detection error', domain=domain, error=str(e))
                    return fallback_config()

                if is_valid_config(config):
                    self.cache.set(domain, config)
                    self.console.print(f'[success]  ✓ Selectors detected for {domain}[/success]')
                    logfire.info('Selectors detected', domain=domain, attempt=attempt, **config.model_dump())
                    return config

                logger.warning(f'Attempt {attempt} for {domain} returned text instead of selectors: {config}')
                self.cache.delete(domain)

            self.console.print(f'[warning]  ⚠ Using fallback selectors for {domain}[/warning]')
            logfire.warn('Structure detection fell back', domain=domain)
            return fallback_config()

    def _propose(self, html: str, url: str, context: str | None) -> ScrapingConfig:
        response = self.analyzer.propose(html, url, context)  # type: ignore[union-attr]
        return build_config(parse_structure_response(response))

    def clear_cache(self, url: str) -> None:
        """Forget the cached selectors for a URL's domain."""
        self.cache.delete(normalize_domain(url))

    def clear_all_cache(self) -> None:
        """Forget every cached selector config."""
        self.cache.clear()
