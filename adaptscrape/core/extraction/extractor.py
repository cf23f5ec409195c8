"""Article field extraction with tiered selector recovery."""

import logging

from bs4 import BeautifulSoup, Comment
from rich.console import Console

from adaptscrape.core.extraction.authors import clean_author_name, is_plausible_fallback_author, is_rejected_author
from adaptscrape.core.extraction.dates import DateExtractor
from adaptscrape.core.extraction.recovery import (
    AUTHOR_FALLBACK_SELECTORS,
    CONTENT_FALLBACK_SELECTORS,
    TITLE_FALLBACK_SELECTORS,
    base_class_name,
    element_text,
    generate_selector_variations,
    is_low_quality_content,
    safe_select,
    select_first_text,
    select_text,
)
from adaptscrape.core.validation.text import (
    extract_title_from_url,
    is_valid_article_content,
    is_valid_title,
    sanitize_content,
)
from adaptscrape.models.results import ArticleContent
from adaptscrape.models.selectors import ScrapingConfig

logger = logging.getLogger(__name__)

UNTITLED = 'Untitled'

# (method tag, confidence, minimum characters) per recovery tier
PRIMARY_TIER = ('selectors', 0.9, 100)
VARIATION_TIER = ('selector_variations', 0.7, 100)
CLASS_PATTERN_TIER = ('class_pattern', 0.6, 100)
FALLBACK_TIER = ('fallback_selectors', 0.5, 200)
BODY_TIER = ('body_fallback', 0.3, 0)

VALIDATION_FAILED_CONFIDENCE = 0.1
ERROR_CONFIDENCE = 0.0

NOISE_TAGS = ('script', 'style', 'noscript', 'iframe', 'svg', 'template')
BODY_NOISE_TAGS = ('nav', 'header', 'footer', 'aside', 'form')


class ContentExtractor:
    """Extracts title, body, author, and date using a site's selectors.

    When a selector misses, extraction falls back through selector
    variations, a broader class search, generic article containers, and
    finally the whole body, lowering confidence at each tier.

    Attributes:
        console: Rich console instance for formatted output
        date_extractor: Date extraction strategy chain

    """

    def __init__(self, console: Console | None = None, date_extractor: DateExtractor | None = None):
        """Initialize the extractor.

        Args:
            console: Rich console instance for formatted output
            date_extractor: Date extractor. Defaults to a new DateExtractor.

        """
        self.console = console or Console()
        self.date_extractor = date_extractor or DateExtractor()

    def extract_article_content(
        self, html: str, config: ScrapingConfig, source_url: str | None = None
    ) -> ArticleContent:
        """Extract an article from HTML.

        Args:
            html: Page HTML
            config: Selectors for the page's domain
            source_url: Page URL, used to derive a title when none is found

        Returns:
            ArticleContent; never raises. 'validation_failed' (confidence 0.1)
            when the body is not article text, 'error_fallback' (confidence 0)
            on unexpected errors.

        """
        try:
            return self._extract(html, config, source_url)
        except Exception as e:
            logger.exception(f'Extraction failed for {source_url or "page"}')
            return ArticleContent(
                title='',
                content='',
                extraction_method='error_fallback',
                confidence=ERROR_CONFIDENCE,
                diagnostic=f'extraction error: {e}',
            )

    def _extract(self, html: str, config: ScrapingConfig, source_url: str | None) -> ArticleContent:
        soup = BeautifulSoup(html or '', 'lxml')
        for tag in soup.find_all(NOISE_TAGS):
            tag.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        title = self._extract_title(soup, config.title_selector, source_url)
        author = self._extract_author(soup, config.author_selector)

        raw_content, method, confidence = self._extract_content(soup, config.content_selector)
        content = '\n\n'.join(filter(None, (sanitize_content(part) for part in raw_content.split('\n\n'))))

        if not is_valid_article_content(content):
            logger.info(f'Content from {method} failed validation ({len(content)} chars)')
            return ArticleContent(
                title=title,
                content=content,
                author=author,
                extraction_method='validation_failed',
                confidence=VALIDATION_FAILED_CONFIDENCE,
                diagnostic=f'content from {method} is not valid article text',
            )

        if method != PRIMARY_TIER[0]:
            self.console.print(f'[warning]  ⚠ Content recovered via {method}[/warning]')

        return ArticleContent(
            title=title,
            content=content,
            author=author,
            publish_date=self.date_extractor.extract(html, config.date_selector),
            extraction_method=method,
            confidence=confidence,
        )

    def _extract_title(self, soup: BeautifulSoup, selector: str, source_url: str | None) -> str:
        candidates = [*generate_selector_variations(selector), *TITLE_FALLBACK_SELECTORS]
        title = next(filter(None, (select_first_text(soup, candidate) for candidate in candidates)), '')
        title = sanitize_content(title)

        if is_valid_title(title):
            return title

        from_url = extract_title_from_url(source_url) if source_url else None
        if from_url:
            logger.info(f'Using URL-derived title {from_url!r} instead of {title!r}')
            return from_url
        return UNTITLED

    def _extract_content(self, soup: BeautifulSoup, selector: str) -> tuple[str, str, float]:
        """Run the recovery tiers and return (text, method, confidence)."""
        variations = generate_selector_variations(selector)
        base_class = base_class_name(selector)

        tiers = [
            (PRIMARY_TIER, variations[:1]),
            (VARIATION_TIER, variations[1:]),
            (CLASS_PATTERN_TIER, [f'[class*="{base_class}"]'] if base_class else []),
            (FALLBACK_TIER, list(CONTENT_FALLBACK_SELECTORS)),
        ]
        for (method, confidence, min_length), candidates in tiers:
            for candidate in candidates:
                text = select_text(soup, candidate)
                if len(text) >= min_length and not is_low_quality_content(text):
                    logger.debug(f'Content matched {candidate!r} ({method}, {len(text)} chars)')
                    return text, method, confidence

        method, confidence, _ = BODY_TIER
        body = soup.body or soup
        for tag in body.find_all(BODY_NOISE_TAGS):
            tag.decompose()
        logger.info(f'No selector matched article content, using body text for {selector!r}')
        return element_text(body), method, confidence

    def _extract_author(self, soup: BeautifulSoup, selector: str | None) -> str | None:
        if selector:
            for candidate in generate_selector_variations(selector):
                text = select_first_text(soup, candidate)
                if text and not is_rejected_author(text):
                    return clean_author_name(text) or None

        for candidate in AUTHOR_FALLBACK_SELECTORS:
            for element in safe_select(soup, candidate):
                text = element_text(element)
                if is_plausible_fallback_author(text):
                    return clean_author_name(text) or None

        meta = soup.select_one('meta[name="author"]')
        content = meta.get('content') if meta else None
        if isinstance(content, str) and is_plausible_fallback_author(content.strip()):
            return clean_author_name(content) or None
        return None
