"""Abstract base class for HTML fetchers and the content analyzer."""

import re
from abc import ABC, abstractmethod

from adaptscrape.models.results import ContentMetadata, FetchResult

RSS_MARKERS = (
    '<?xml',
    '<rss',
    '<feed',
    '<channel>',
    'xmlns="http://www.w3.org/2005/atom"',
    'xmlns="http://purl.org/rss/1.0/"',
)

FRAMEWORK_MARKERS: dict[str, tuple[str, ...]] = {
    'react': ('data-reactroot', 'react-root', '__react'),
    'vue': ('v-if=', 'v-for=', 'vue.js', '__vue'),
    'angular': ('ng-app', 'ng-controller', 'ng-version'),
    'next': ('__next', '_next/static'),
    'nuxt': ('__nuxt', '_nuxt/'),
    'svelte': ('__svelte', 'svelte-'),
    'htmx': ('htmx.min.js', 'htmx.js', 'hx-get='),
}

# Markers checked in the first 2000 characters of a 200 response
STRICT_BLOCK_MARKERS = {
    'challenge-form': 'Cloudflare challenge',
    'cf-captcha': 'Cloudflare CAPTCHA',
    'access denied</title>': 'Access denied page',
    'rate limit exceeded': 'Rate limit',
    'please verify you are human': 'Human verification',
    'enable javascript to continue': 'JavaScript block',
}

# Markers checked on 4xx/5xx responses
ERROR_BLOCK_MARKERS = {
    'captcha': 'CAPTCHA required',
    'access denied': 'Access denied',
    'cloudflare': 'Cloudflare protection',
    'datadome': 'DataDome protection',
    'rate limit': 'Rate limited',
    'too many requests': 'Too many requests',
    'forbidden': 'Forbidden',
}

BLOCKING_STATUS_CODES = (403, 429, 503)


class ContentAnalyzer:
    """Analyzes fetched content to detect feeds and client-side rendering."""

    @staticmethod
    def analyze(html: str) -> ContentMetadata:
        """Analyze HTML content and return metadata.

        Args:
            html: Fetched HTML

        Returns:
            ContentMetadata describing the document

        """
        html_lower = html.lower()
        metadata = ContentMetadata(content_length=len(html))

        if any(marker in html_lower[:500] for marker in RSS_MARKERS):
            metadata.is_rss = True
            metadata.content_type = 'rss'
            return metadata

        metadata.js_framework = next(
            (name for name, markers in FRAMEWORK_MARKERS.items() if any(m in html_lower for m in markers)),
            None,
        )
        metadata.requires_js = (
            metadata.js_framework is not None and ContentAnalyzer._has_minimal_body(html_lower)
        ) or ('<noscript>' in html_lower and ('enable javascript' in html_lower or 'requires javascript' in html_lower))

        return metadata

    @staticmethod
    def _has_minimal_body(html_lower: str) -> bool:
        """Whether the body holds under 100 characters once scripts and styles are removed."""
        body_match = re.search(r'<body[^>]*>(.*?)</body>', html_lower, re.DOTALL)
        if not body_match:
            return False
        body = re.sub(r'<script[^>]*>.*?</script>', '', body_match.group(1), flags=re.DOTALL)
        body = re.sub(r'<style[^>]*>.*?</style>', '', body, flags=re.DOTALL)
        return len(body.strip()) < 100


class HTMLFetcher(ABC):
    """Abstract base class for HTML fetchers.

    Implementations return a FetchResult for ordinary failures and raise
    BotDetectionError when the response is a block page.
    """

    @abstractmethod
    def fetch(self, url: str) -> FetchResult:
        """Fetch HTML from a URL.

        Args:
            url: URL to fetch

        Returns:
            FetchResult with HTML, metadata, and status

        Raises:
            BotDetectionError: If bot detection is triggered

        """

    def _check_for_bot_detection(self, html: str, status_code: int) -> tuple[bool, list[str]]:
        """Check if HTML indicates bot detection.

        Args:
            html: Fetched HTML
            status_code: HTTP status code of the response

        Returns:
            Tuple of (is_blocked, indicators)

        """
        if not html or len(html) < 100:
            return True, ['HTML too short']

        if status_code in BLOCKING_STATUS_CODES:
            return True, [f'HTTP {status_code}']

        head = html[:2000].lower()

        # A 200 page can mention "captcha" in passing, so only exact block markers count
        if status_code == 200:
            found = [message for marker, message in STRICT_BLOCK_MARKERS.items() if marker in head]
            return bool(found), found

        if status_code >= 400:
            found = [message for marker, message in ERROR_BLOCK_MARKERS.items() if marker in head]
            return bool(found), found

        return False, []
