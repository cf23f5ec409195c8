"""Selector sanitization, validation, and AI input/output handling."""

import re

from bs4 import BeautifulSoup, Comment
from pydantic import ValidationError

from adaptscrape.exceptions import StructureDetectionError
from adaptscrape.models.selectors import ScrapingConfig, StructureProposal

MAX_AI_HTML_CHARS = 45_000
TRUNCATION_MARKER = '\n<!-- [truncated for AI analysis] -->'

DEFAULT_CONFIDENCE = 0.8
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0
FALLBACK_CONFIDENCE = 0.2

DEFAULT_TITLE_SELECTOR = 'h1'
DEFAULT_CONTENT_SELECTOR = 'article'

# Patterns that mean the AI returned visible text instead of a selector
TEXT_LIKE_PATTERNS = (
    re.compile(r'^By\s+'),
    re.compile(r'^\d{1,2}/\d{1,2}/\d{4}'),
    re.compile(r'^[A-Z][a-z]+ \d{1,2}, \d{4}'),
    re.compile(r'^Published:?\s+'),
    re.compile(r'^Written by\s+'),
    re.compile(r'^Author:?\s+'),
    re.compile(r'^\d{4}-\d{2}-\d{2}'),
    re.compile(r'^\d{1,2}(st|nd|rd|th)\s+[A-Z][a-z]+'),
    re.compile(r'^[A-Z][a-z]+\s+\d{1,2}(st|nd|rd|th)\b'),
    re.compile(r'\s+\d{1,2}:\d{2}'),
    re.compile(r'^[A-Z][a-z]+ \d{1,2} \d{4}'),
)

_JQUERY_ONLY = re.compile(r':(contains|eq)\([^)]*\)')
_FIRST = re.compile(r':first(?![\w-])')
_LAST = re.compile(r':last(?![\w-])')
_EMPTY_NOT = re.compile(r':not\(\s*\)')
_MARKUP_CHARS = re.compile(r'[<>]')
_CODE_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


def sanitize_selector(selector: str | None) -> str | None:
    """Turn an AI-proposed selector into one BeautifulSoup can run.

    Strips jQuery-only pseudo-classes, maps ``:first``/``:last`` to their
    CSS equivalents, drops empty ``:not()`` and collapses whitespace.
    Applying it twice gives the same result as applying it once.

    Args:
        selector: Raw selector, possibly None

    Returns:
        The cleaned selector, or None if nothing usable remains

    """
    if not selector or not isinstance(selector, str):
        return None

    cleaned = _MARKUP_CHARS.sub('', selector)
    cleaned = _FIRST.sub(':first-child', cleaned)
    cleaned = _LAST.sub(':last-child', cleaned)

    # Removing one pseudo-class can empty the :not() around it
    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = _JQUERY_ONLY.sub('', cleaned)
        cleaned = _EMPTY_NOT.sub('', cleaned)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()

    return cleaned or None


def looks_like_text(selector: str) -> bool:
    """Whether a "selector" is really extracted text such as a byline or date."""
    return any(pattern.search(selector) for pattern in TEXT_LIKE_PATTERNS)


def is_valid_config(config: ScrapingConfig) -> bool:
    """Check that every selector in a config is selector syntax.

    Args:
        config: Config to check

    Returns:
        False if a required selector is empty or any selector looks like text

    """
    if not config.title_selector.strip() or not config.content_selector.strip():
        return False
    return not any(selector and looks_like_text(selector) for selector in config.selectors().values())


def fallback_config() -> ScrapingConfig:
    """Generic selectors used when detection fails. Never cached."""
    return ScrapingConfig(
        title_selector=DEFAULT_TITLE_SELECTOR,
        content_selector=DEFAULT_CONTENT_SELECTOR,
        author_selector='.author',
        date_selector='time',
        confidence=FALLBACK_CONFIDENCE,
    )


def preprocess_html_for_ai(html: str, max_chars: int = MAX_AI_HTML_CHARS) -> str:
    """Shrink page HTML to the part worth sending to the AI.

    Keeps the <body> when present, removes scripts, styles and comments,
    and truncates with a marker.

    Args:
        html: Raw page HTML
        max_chars: Maximum characters to keep. Defaults to 45,000.

    Returns:
        Cleaned HTML no longer than max_chars plus the truncation marker

    """
    soup = BeautifulSoup(html, 'lxml')
    root = soup.body or soup

    for tag in root.find_all(['script', 'style']):
        tag.decompose()
    for comment in root.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    processed = str(root)
    if len(processed) > max_chars:
        processed = processed[:max_chars] + TRUNCATION_MARKER
    return processed


def parse_structure_response(response: str) -> StructureProposal:
    """Parse a ``structure-v1`` JSON response.

    Args:
        response: Raw model output, optionally wrapped in a ```json fence

    Returns:
        The parsed proposal

    Raises:
        StructureDetectionError: If the response is not valid JSON for the contract

    """
    text = _CODE_FENCE.sub('', response.strip()).strip()
    try:
        return StructureProposal.model_validate_json(text)
    except ValidationError as e:
        raise StructureDetectionError(f'Unparseable structure response: {e.errors()[0]["msg"]}') from e


def build_config(proposal: StructureProposal) -> ScrapingConfig:
    """Sanitize a proposal into a ScrapingConfig.

    Missing title/content selectors default to 'h1'/'article' and the
    confidence is clamped to [0.1, 1.0] (0.8 when missing).
    """
    confidence = DEFAULT_CONFIDENCE if proposal.confidence is None else proposal.confidence
    return ScrapingConfig(
        title_selector=sanitize_selector(proposal.title_selector) or DEFAULT_TITLE_SELECTOR,
        content_selector=sanitize_selector(proposal.content_selector) or DEFAULT_CONTENT_SELECTOR,
        author_selector=sanitize_selector(proposal.author_selector),
        date_selector=sanitize_selector(proposal.date_selector),
        confidence=min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence)),
    )
