"""Article content, author, date, and link extraction."""

from adaptscrape.core.extraction.authors import clean_author_name
from adaptscrape.core.extraction.dates import DateExtractor, parse_date
from adaptscrape.core.extraction.extractor import ContentExtractor
from adaptscrape.core.extraction.links import LinkExtractor
from adaptscrape.core.extraction.recovery import (
    CONTENT_FALLBACK_SELECTORS,
    generate_selector_variations,
    is_low_quality_content,
)

__all__ = [
    'CONTENT_FALLBACK_SELECTORS',
    'ContentExtractor',
    'DateExtractor',
    'LinkExtractor',
    'clean_author_name',
    'generate_selector_variations',
    'is_low_quality_content',
    'parse_date',
]
