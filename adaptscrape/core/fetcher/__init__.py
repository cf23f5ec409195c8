"""HTTP and browser fetching, and the selector that chooses between them."""

from adaptscrape.core.fetcher.base import ContentAnalyzer, HTMLFetcher
from adaptscrape.core.fetcher.htmx import load_htmx_content, page_has_htmx
from adaptscrape.core.fetcher.playwright import PlaywrightFetcher
from adaptscrape.core.fetcher.selector import MethodSelector, detect_dynamic_content_needs
from adaptscrape.core.fetcher.simple import SimpleFetcher

__all__ = [
    'ContentAnalyzer',
    'HTMLFetcher',
    'MethodSelector',
    'PlaywrightFetcher',
    'SimpleFetcher',
    'detect_dynamic_content_needs',
    'load_htmx_content',
    'page_has_htmx',
]
