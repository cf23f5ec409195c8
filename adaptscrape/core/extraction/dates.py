"""Publish date extraction from article HTML."""

import json
import logging
import re
from datetime import date, datetime, timedelta, timezone

from bs4 import BeautifulSoup, Tag
from dateutil import parser as dateparser
from dateutil.relativedelta import relativedelta

from adaptscrape.core.extraction.recovery import safe_select

logger = logging.getLogger(__name__)

MIN_YEAR = 1990
MAX_FUTURE = timedelta(days=1)

DATE_SELECTORS = (
    'time[datetime]',
    'time',
    '.date',
    '.publish-date',
    '.published',
    '.article-date',
    '.post-date',
    '.timestamp',
    '.publication-date',
    '.entry-date',
    '.byline-date',
    '.meta-date',
    '[data-date]',
    '[data-published]',
    '[data-timestamp]',
    '[itemprop="datePublished"]',
    '[itemprop="dateCreated"]',
    '.meta time',
    '.byline time',
    'article header time',
)
META_SELECTORS = (
    'meta[property="article:published_time"]',
    'meta[name="article:published_time"]',
    'meta[name="date"]',
    'meta[name="publish_date"]',
    'meta[name="published"]',
    'meta[name="pubdate"]',
    'meta[itemprop="datePublished"]',
    'meta[itemprop="dateCreated"]',
    'meta[property="article:modified_time"]',
)
DATE_ATTRIBUTES = ('datetime', 'data-date', 'data-published', 'data-timestamp', 'data-publish-date', 'content')
TEXT_AREAS = ('article header', '.article-header', '.post-header', '.byline', '.meta', '.article-meta', 'header')
JSON_LD_TYPES = ('Article', 'NewsArticle', 'BlogPosting', 'Report')
JSON_LD_FIELDS = ('datePublished', 'dateCreated')

TEXT_DATE_PATTERNS = (
    re.compile(r'\d{4}-\d{2}-\d{2}(T\d{2}:\d{2}(:\d{2})?)?'),
    re.compile(r'\d{1,2}/\d{1,2}/\d{4}'),
    re.compile(
        r'(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?\s+\d{1,2}(st|nd|rd|th)?,?\s+\d{4}',
        re.IGNORECASE,
    ),
    re.compile(
        r'\d{1,2}\s+(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Sept|Oct|Nov|Dec)[a-z]*\.?\s+\d{4}', re.IGNORECASE
    ),
    re.compile(r'\d+\s+(hour|day|week|month|year)s?\s+ago', re.IGNORECASE),
)
RELATIVE_DATE = re.compile(r'^(\d+)\s+(hour|day|week|month|year)s?\s+ago$', re.IGNORECASE)
UNIX_TIMESTAMP = re.compile(r'^\d{10}(\d{3})?$')
BYLINE_LIKE = re.compile(r'^(by|author|written by)\b', re.IGNORECASE)
NAME_LIKE = re.compile(r'^[A-Z][a-z]+ [A-Z][a-z]+$')
DATE_HINT = re.compile(
    r'\b(19|20)\d{2}\b|\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\b', re.IGNORECASE
)


def parse_date(value: str | None, now: datetime | None = None) -> date | None:
    """Parse a date string into a date, rejecting implausible values.

    Handles ISO and written formats (via dateutil), Unix timestamps in
    seconds or milliseconds, and "N units ago".

    Args:
        value: Candidate date text
        now: Timezone-aware reference time for relative dates and the future check

    Returns:
        The date, or None if the text is not a plausible publish date

    """
    if not value or not isinstance(value, str):
        return None
    text = ' '.join(value.split())
    if len(text) < 4 or len(text) > 100 or BYLINE_LIKE.search(text) or NAME_LIKE.match(text):
        return None

    now = now or datetime.now(timezone.utc)
    parsed: datetime | None = None
    relative = RELATIVE_DATE.match(text)

    if UNIX_TIMESTAMP.match(text):
        seconds = int(text) / 1000 if len(text) == 13 else int(text)
        parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
    elif relative:
        amount, unit = int(relative.group(1)), relative.group(2).lower()
        parsed = now - relativedelta(**{f'{unit}s': amount})
    elif not DATE_HINT.search(text):
        return None
    else:
        try:
            parsed = dateparser.parse(text, fuzzy=True)
        except (ValueError, OverflowError) as e:
            logger.debug(f'Unparseable date {text!r}: {e}')
            return None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.year < MIN_YEAR or parsed > now + MAX_FUTURE:
        return None
    return parsed.date()


class DateExtractor:
    """Finds an article's publish date with progressively broader strategies."""

    def extract(self, html: str, selector_hint: str | None = None) -> date | None:
        """Extract the publish date from page HTML.

        Tries, in order: the hint selector, meta tags, JSON-LD, a list of
        common date selectors, and finally date-looking text in header areas.

        Args:
            html: Page HTML
            selector_hint: Date selector from the site's ScrapingConfig

        Returns:
            The publish date, or None if nothing plausible was found

        """
        if not html:
            return None
        soup = BeautifulSoup(html, 'lxml')

        strategies = (
            ('hint', lambda: self._from_selector(soup, selector_hint) if selector_hint else None),
            ('meta', lambda: self._from_meta(soup)),
            ('json_ld', lambda: self._from_json_ld(soup)),
            ('selectors', lambda: next(filter(None, (self._from_selector(soup, s) for s in DATE_SELECTORS)), None)),
            ('text', lambda: self._from_text(soup)),
        )
        for name, strategy in strategies:
            found = strategy()
            if found:
                logger.debug(f'Publish date {found} found via {name}')
                return found

        return None

    def _from_selector(self, soup: BeautifulSoup, selector: str) -> date | None:
        for element in safe_select(soup, selector):
            found = self._from_element(element)
            if found:
                return found
        return None

    def _from_element(self, element: Tag) -> date | None:
        for attribute in DATE_ATTRIBUTES:
            value = element.get(attribute)
            if isinstance(value, str):
                found = parse_date(value)
                if found:
                    return found
        return parse_date(element.get_text(' ', strip=True))

    def _from_meta(self, soup: BeautifulSoup) -> date | None:
        for selector in META_SELECTORS:
            meta = soup.select_one(selector)
            content = meta.get('content') if meta else None
            if isinstance(content, str):
                found = parse_date(content)
                if found:
                    return found
        return None

    def _from_json_ld(self, soup: BeautifulSoup) -> date | None:
        for script in soup.select('script[type="application/ld+json"]'):
            try:
                data = json.loads(script.string or script.get_text())
            except ValueError:
                continue

            items = data if isinstance(data, list) else data.get('@graph', [data]) if isinstance(data, dict) else []
            for item in items:
                if not isinstance(item, dict):
                    continue
                types = item.get('@type')
                types = types if isinstance(types, list) else [types]
                if not any(t in JSON_LD_TYPES for t in types):
                    continue
                for field in JSON_LD_FIELDS:
                    value = item.get(field)
                    found = parse_date(value) if isinstance(value, str) else None
                    if found:
                        return found
        return None

    def _from_text(self, soup: BeautifulSoup) -> date | None:
        for area in TEXT_AREAS:
            for element in safe_select(soup, area):
                text = element.get_text(' ', strip=True)
                for pattern in TEXT_DATE_PATTERNS:
                    match = pattern.search(text)
                    found = parse_date(match.group(0)) if match else None
                    if found:
                        return found
        return None
