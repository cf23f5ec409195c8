"""Core scraping components."""

from adaptscrape.core.pipeline import UnifiedScraper
from adaptscrape.core.reanalysis import AIReanalyzer

__all__ = ['AIReanalyzer', 'UnifiedScraper']
