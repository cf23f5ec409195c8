"""Result and option types passed between pipeline components."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class FetchMethod(str, Enum):
    """Strategy that produced a page's HTML."""

    HTTP = 'http'
    BROWSER = 'browser'


class ProtectionType(str, Enum):
    """Kind of bot protection detected on a page."""

    NONE = 'none'
    CLOUDFLARE = 'cloudflare'
    DATADOME = 'datadome'
    RECAPTCHA = 'recaptcha'
    GENERIC = 'generic'


@dataclass
class ContentMetadata:
    """Metadata about the fetched content.

    Attributes:
        is_rss: True if the URL is rss
        requires_js: True if the URL has JS
        content_type: Kind of document ('html' or 'rss')
        js_framework: If has JS, what type
        content_length: Length of the HTML

    """

    is_rss: bool = False
    requires_js: bool = False
    content_type: str = 'html'
    js_framework: str | None = None
    content_length: int = 0


@dataclass
class FetchResult:
    """Result of a single fetcher call.

    Attributes:
        url: URL that was requested
        html: HTML content, or None if the fetch failed
        status_code: HTTP status code of the final response
        final_url: URL after any automatic redirects
        is_blocked: True if bot protection was detected
        block_reason: Why the fetch failed or was blocked
        fetch_time: Total time for the HTML to be fetched

    """

    url: str
    html: str | None = None
    status_code: int | None = None
    final_url: str | None = None
    is_blocked: bool = False
    block_reason: str | None = None
    fetch_time: float = 0.0

    # Content metadata
    metadata: ContentMetadata = field(default_factory=ContentMetadata)

    @property
    def success(self) -> bool:
        """Whether the fetch was successful.

        Returns:
            True if the HTML was successfully fetched

        """
        return self.html is not None and not self.is_blocked

    @property
    def protection_detected(self) -> bool:
        """Shortcut for whether bot protection blocked the fetch."""
        return self.is_blocked


@dataclass(frozen=True)
class FetchedContent:
    """HTML chosen by the method selector, tagged with the method that produced it.

    Attributes:
        url: URL that was requested
        html: The fetched HTML
        method: Which strategy produced the HTML
        status_code: HTTP status code, when known
        final_url: URL after redirects, when known
        browser_attempts: How many browser attempts were made
        escalation_reason: Why the browser path was used, if it was
        diagnostic: Notes about degraded paths (e.g. a failed escalation)

    """

    url: str
    html: str
    method: FetchMethod
    status_code: int | None = None
    final_url: str | None = None
    browser_attempts: int = 0
    escalation_reason: str | None = None
    diagnostic: str | None = None


@dataclass
class BrowserFetchOptions:
    """Options for a headless-browser fetch.

    Attributes:
        timeout: Navigation timeout in milliseconds
        is_article_page: Whether the page is a single article
        handle_htmx: Trigger HTMX loaders before capturing the HTML
        scroll_to_load: Scroll the page to trigger lazy loading
        protection_bypass: Apply extra waits and stealth tweaks

    """

    timeout: int = 60000
    is_article_page: bool = False
    handle_htmx: bool = False
    scroll_to_load: bool = False
    protection_bypass: bool = True


@dataclass
class RedirectOptions:
    """Options for redirect resolution.

    Attributes:
        max_redirects: Maximum number of redirects to follow
        timeout: Per-request timeout in milliseconds
        follow_meta_refresh: Follow <meta http-equiv="refresh"> tags
        follow_javascript_redirects: Follow JavaScript location assignments
        wait_for_javascript: Browser-only wait before checking the DOM, in milliseconds

    """

    max_redirects: int = 5
    timeout: int = 15000
    follow_meta_refresh: bool = True
    follow_javascript_redirects: bool = True
    wait_for_javascript: int = 2000


@dataclass
class SourceScrapingOptions:
    """Options for scraping a source/listing page for article links.

    Attributes:
        max_links: Maximum number of links to return
        include_patterns: Keep only links containing one of these substrings
        exclude_patterns: Drop links containing any of these substrings
        min_link_text_length: Minimum anchor text length for a candidate link
        ai_context: Optional description used to ask the AI to pick article links

    """

    max_links: int = 50
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    min_link_text_length: int = 20
    ai_context: str | None = None


@dataclass(frozen=True)
class RedirectInfo:
    """Outcome of resolving a URL's redirect chain.

    Attributes:
        original_url: URL resolution started from
        final_url: Last URL in the chain, or the original URL on failure
        redirect_chain: Visited URLs in order, starting with the original URL
        method: 'http' or 'browser'
        error: Diagnostic message when resolution failed open

    """

    original_url: str
    final_url: str
    redirect_chain: tuple[str, ...]
    method: str = 'http'
    error: str | None = None

    @property
    def redirect_count(self) -> int:
        """Number of redirects followed."""
        return len(self.redirect_chain) - 1

    @property
    def has_redirects(self) -> bool:
        """Whether at least one redirect was followed."""
        return self.redirect_count > 0

    @classmethod
    def unresolved(cls, url: str, method: str = 'http', error: str | None = None) -> 'RedirectInfo':
        """Fail-open result pointing back at the original URL."""
        return cls(original_url=url, final_url=url, redirect_chain=(url,), method=method, error=error)


@dataclass
class ContentValidationResult:
    """Page-level validation of fetched HTML.

    Attributes:
        is_valid: Whether the page looks like usable content
        is_error_page: Whether the page looks like an error or protection page
        has_content: Whether any meaningful content was found
        confidence: 0-100 score of how much the page is trusted
        error_indicators: Matched error/protection markers
        link_count: Number of navigable links found
        protection_type: Kind of protection detected

    """

    is_valid: bool = True
    is_error_page: bool = False
    has_content: bool = False
    confidence: int = 100
    error_indicators: list[str] = field(default_factory=list)
    link_count: int = 0
    protection_type: ProtectionType = ProtectionType.NONE


@dataclass(frozen=True)
class ArticleContent:
    """Extracted article.

    A confidence of 0.1 or lower marks an unusable extraction, and 0 marks a
    hard technical failure.

    Attributes:
        title: Article title
        content: Article body text
        author: Author name, if found
        publish_date: Publish date, if found
        extraction_method: Which strategy produced the result
        confidence: 0.0-1.0 trust in the extraction
        diagnostic: Why the result is degraded, if it is

    """

    title: str
    content: str
    author: str | None = None
    publish_date: date | None = None
    extraction_method: str = 'selectors'
    confidence: float = 0.9
    diagnostic: str | None = None

    @property
    def is_usable(self) -> bool:
        """Whether callers should keep this result."""
        return self.confidence > 0.1
