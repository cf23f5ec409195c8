"""AdaptScrape - adaptive article scraping.

Fetch over HTTP or a real browser, detect each site's structure once with an
LLM, and extract articles with graceful fallbacks.
"""

from adaptscrape.core import AIReanalyzer, UnifiedScraper
from adaptscrape.core.discovery import InMemorySelectorCache, SelectorCache, StructureDetector
from adaptscrape.core.extraction import ContentExtractor, DateExtractor, LinkExtractor
from adaptscrape.core.fetcher import MethodSelector, PlaywrightFetcher, SimpleFetcher
from adaptscrape.core.redirects import RedirectResolver
from adaptscrape.core.validation import validate_content
from adaptscrape.exceptions import (
    AdaptScrapeError,
    BotDetectionError,
    FetchError,
    LLMGenerationError,
    StructureDetectionError,
)
from adaptscrape.llm_config import LLMConfig, config_from_env, gemini, groq, openai
from adaptscrape.models import (
    ArticleContent,
    FetchedContent,
    FetchMethod,
    RedirectInfo,
    RedirectOptions,
    ScrapingConfig,
    SourceScrapingOptions,
)

__version__ = '0.1.0'

__all__ = [
    # Orchestration
    'UnifiedScraper',
    'AIReanalyzer',
    # Components
    'ContentExtractor',
    'DateExtractor',
    'InMemorySelectorCache',
    'LinkExtractor',
    'MethodSelector',
    'PlaywrightFetcher',
    'RedirectResolver',
    'SelectorCache',
    'SimpleFetcher',
    'StructureDetector',
    'validate_content',
    # LLM configuration
    'LLMConfig',
    'config_from_env',
    'gemini',
    'groq',
    'openai',
    # Models
    'ArticleContent',
    'FetchedContent',
    'FetchMethod',
    'RedirectInfo',
    'RedirectOptions',
    'ScrapingConfig',
    'SourceScrapingOptions',
    # Errors
    'AdaptScrapeError',
    'BotDetectionError',
    'FetchError',
    'LLMGenerationError',
    'StructureDetectionError',
]
