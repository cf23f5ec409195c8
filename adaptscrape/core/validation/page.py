"""Page-level validation: error pages, bot protection, and structural richness."""

import logging
from typing import ClassVar

from bs4 import BeautifulSoup

from adaptscrape.models.results import ContentValidationResult, ProtectionType

logger = logging.getLogger(__name__)


class PageValidator:
    """Scores fetched HTML for error/protection markers and usable content.

    Attributes:
        TITLE_INDICATORS: Phrases that mark an error page when found in <title>
        BODY_INDICATORS: Markup fragments left by protection/error pages
        LINK_INDICATORS: Links that only appear on CDN error pages
        SCRIPT_INDICATORS: Script sources loaded by challenge pages

    """

    MIN_HTML_LENGTH = 500
    MIN_SOURCE_LINKS = 10
    MIN_ARTICLE_TEXT = 500
    MIN_CONFIDENCE = 30
    ERROR_PAGE_CONFIDENCE = 50
    MAX_INDICATORS = 2

    TITLE_PENALTY = 20
    BODY_PENALTY = 15
    LINK_PENALTY = 25
    SCRIPT_PENALTY = 20

    TITLE_INDICATORS: ClassVar[tuple[str, ...]] = (
        'Error',
        'Forbidden',
        'Access Denied',
        'Just a moment',
        '403',
        '503',
        '502',
        '504',
        'Blocked',
        'Challenge',
        'Please Wait',
        'Checking your browser',
        'Security Check',
    )
    BODY_INDICATORS: ClassVar[tuple[str, ...]] = (
        'cf-error',
        'cloudflare',
        'ray ID',
        'challenge-form',
        'cf-browser-verification',
        'cf-wrapper',
        'cf-browser-check',
        'ddos-protection',
        'rate-limited',
        'security-challenge',
        'access-restricted',
        'bot-detection',
        '_cf_chl_jschl_tk',
        'cf-chl-bypass',
        'cf-challenge-running',
        'cf-im-under-attack',
    )
    LINK_INDICATORS: ClassVar[tuple[str, ...]] = (
        'cloudflare.com/5xx-error',
        'support.cloudflare.com',
        'cloudflare.com/error',
        'challenges.cloudflare.com',
    )
    SCRIPT_INDICATORS: ClassVar[tuple[str, ...]] = (
        'cdn-cgi/challenge-platform',
        'cloudflare-static',
        '/cdn-cgi/scripts/',
        'cf-challenge.js',
    )
    HTMX_ATTRIBUTES: ClassVar[tuple[str, ...]] = ('hx-get', 'hx-post', 'data-hx-get', 'data-hx-post')
    HTMX_IGNORED: ClassVar[tuple[str, ...]] = ('search', 'filter', 'login', 'signup')

    def validate(self, html: str, url: str | None = None, is_article: bool = False) -> ContentValidationResult:
        """Validate fetched HTML.

        Args:
            html: Raw HTML of the page
            url: URL the HTML came from (for logging only)
            is_article: Validate as a single article rather than a listing page

        Returns:
            ContentValidationResult with a 0-100 confidence score

        """
        result = ContentValidationResult()

        if not html or len(html) < self.MIN_HTML_LENGTH:
            result.is_valid = False
            result.has_content = False
            result.confidence = 0
            return result

        soup = BeautifulSoup(html, 'lxml')
        result.link_count = self._count_links(soup)

        title = soup.title.get_text().lower() if soup.title else ''
        body = soup.body.decode_contents().lower() if soup.body else html.lower()
        confidence = 100

        for indicator in self.TITLE_INDICATORS:
            if indicator.lower() in title:
                result.error_indicators.append(f'title:{indicator}')
                confidence -= self.TITLE_PENALTY

        for indicator in self.BODY_INDICATORS:
            if indicator.lower() in body:
                result.error_indicators.append(f'body:{indicator}')
                confidence -= self.BODY_PENALTY

        for link in self.LINK_INDICATORS:
            if link in body:
                result.error_indicators.append(f'link:{link}')
                confidence -= self.LINK_PENALTY

        for script in soup.select('script[src]'):
            src = str(script.get('src', '')).lower()
            for indicator in self.SCRIPT_INDICATORS:
                if indicator in src:
                    result.error_indicators.append(f'script:{indicator}')
                    confidence -= self.SCRIPT_PENALTY

        result.protection_type = self._protection_type(result.error_indicators, body)
        result.is_error_page = (
            len(result.error_indicators) > self.MAX_INDICATORS or confidence < self.ERROR_PAGE_CONFIDENCE
        )

        if is_article:
            text_length = sum(len(el.get_text()) for el in soup.select('p, article, div.content, main, section'))
            result.is_valid = (
                not result.is_error_page and text_length > self.MIN_ARTICLE_TEXT and confidence > self.MIN_CONFIDENCE
            )
            result.has_content = text_length > 100
        else:
            result.is_valid = (
                not result.is_error_page
                and result.link_count >= self.MIN_SOURCE_LINKS
                and confidence > self.MIN_CONFIDENCE
            )
            text_length = sum(len(el.get_text()) for el in soup.select('p, article, div.content'))
            result.has_content = result.link_count > 0 or text_length > 100

        result.confidence = max(0, min(100, confidence))

        if result.error_indicators:
            logger.info(
                f'Validation of {url or "page"}: confidence={result.confidence} '
                f'indicators={", ".join(result.error_indicators)}'
            )
        return result

    def _count_links(self, soup: BeautifulSoup) -> int:
        """Count distinct navigable elements, including HTMX navigation."""
        counted = set()

        for anchor in soup.select('a[href]'):
            href = str(anchor.get('href', '')).strip()
            if href and not href.startswith('#') and href != '/':
                counted.add(id(anchor))

        for element in soup.select(', '.join(f'[{attr}]' for attr in self.HTMX_ATTRIBUTES)):
            target = next((str(element.get(attr)) for attr in self.HTMX_ATTRIBUTES if element.get(attr)), '')
            if not target or target == '/' or any(word in target for word in self.HTMX_IGNORED):
                continue
            counted.add(id(element))

        return len(counted)

    def _protection_type(self, indicators: list[str], body: str) -> ProtectionType:
        if any('cloudflare' in indicator or 'cf-' in indicator for indicator in indicators):
            return ProtectionType.CLOUDFLARE
        if 'datadome' in body:
            return ProtectionType.DATADOME
        if 'recaptcha' in body:
            return ProtectionType.RECAPTCHA
        if indicators:
            return ProtectionType.GENERIC
        return ProtectionType.NONE


def validate_content(html: str, url: str | None = None, is_article: bool = False) -> ContentValidationResult:
    """Validate fetched HTML with the default page validator."""
    return PageValidator().validate(html, url, is_article)
