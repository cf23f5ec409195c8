"""Selector repair and fallback tiers shared by the extractors."""

import logging
import re

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

CONTENT_FALLBACK_SELECTORS = (
    'article',
    '[role="main"]',
    '.content',
    '.article-content',
    '.post-content',
    'main',
    '.main-content',
)
TITLE_FALLBACK_SELECTORS = (
    'h1',
    '.article-title',
    '.entry-title',
    '.post-title',
    '[itemprop="headline"]',
    'title',
)
AUTHOR_FALLBACK_SELECTORS = (
    '.author',
    '.byline',
    '[rel="author"]',
    '[itemprop="author"]',
    '.author-name',
    '.post-author',
)

MIN_LOW_QUALITY_LENGTH = 50

NAVIGATION_START = re.compile(
    r'^(menu|navigation|nav|sidebar|footer|header|advertisement|ad|cookie|privacy|terms|home|about|contact'
    r'|login|register|subscribe|newsletter)\b',
    re.IGNORECASE,
)
REPEATED_PHRASE = re.compile(r'^(.{1,5}\s*)\1{3,}$', re.DOTALL)
ALPHANUMERIC = re.compile(r'[A-Za-z0-9]')

_PSEUDO = re.compile(r':[\w-]+(\([^)]*\))?')
_NOT = re.compile(r':not\([^)]*\)')
_CLASS_ONLY = re.compile(r'^\.([\w-]+)$')
_BASE_CLASS = re.compile(r'^.*\.([^.\s>]+).*$')

# soupsieve raises these for selectors it cannot compile or does not support
INVALID_SELECTOR_ERRORS = (SelectorSyntaxError, ValueError, NotImplementedError)


def safe_select(root: BeautifulSoup | Tag, selector: str) -> list[Tag]:
    """Run a CSS selector, treating invalid syntax as no match."""
    if not selector or not selector.strip():
        return []
    try:
        return root.select(selector)
    except INVALID_SELECTOR_ERRORS as e:
        logger.debug(f'Invalid selector {selector!r}: {e}')
        return []


def element_text(element: Tag, separator: str = ' ') -> str:
    """Visible text of an element with whitespace collapsed."""
    return ' '.join(element.get_text(separator=separator).split())


def select_text(root: BeautifulSoup | Tag, selector: str) -> str:
    """Paragraph-joined text of every non-empty match for a selector.

    Matches nested inside another match are skipped so their text is not
    counted twice.
    """
    elements = safe_select(root, selector)
    matched = {id(el) for el in elements}
    outermost = [el for el in elements if not any(id(parent) in matched for parent in el.parents)]
    texts = [text for text in (element_text(el) for el in outermost) if text]
    return '\n\n'.join(texts)


def select_first_text(root: BeautifulSoup | Tag, selector: str) -> str:
    """Text of the first match with any text, or ''."""
    for element in safe_select(root, selector):
        text = element_text(element)
        if text:
            return text
    return ''


def is_low_quality_content(text: str) -> bool:
    """Whether text is too short, navigation boilerplate, repetitive, or symbol-only."""
    stripped = text.strip() if text else ''
    return (
        len(stripped) < MIN_LOW_QUALITY_LENGTH
        or bool(NAVIGATION_START.match(stripped))
        or bool(REPEATED_PHRASE.match(stripped))
        or not ALPHANUMERIC.search(stripped)
    )


def generate_selector_variations(selector: str) -> list[str]:
    """Structural variations of a selector, most faithful first.

    The original selector always comes first and the list has no
    duplicates.

    Args:
        selector: CSS selector that failed to match

    Returns:
        Ordered candidate selectors

    """
    selector = selector.strip()
    if not selector:
        return []

    variations = [selector]

    if '_' in selector:
        variations.append(selector.replace('_', '-'))
    if '-' in selector:
        variations.append(selector.replace('-', '_'))

    class_match = _CLASS_ONLY.match(selector)
    if class_match:
        name = class_match.group(1)
        variations.extend(
            [f'[class="{name}"]', f'[class*="{name}"]', f'[class^="{name}"]', f'[class$="{name}"]']
        )

    if ':' in selector:
        stripped = _PSEUDO.sub('', _NOT.sub('', selector)).strip()
        if stripped and stripped != selector:
            variations.append(stripped)

    if ' ' in selector and '>' not in selector:
        variations.append(re.sub(r'\s+', ' > ', selector))
    if '>' in selector:
        variations.append(re.sub(r'\s*>\s*', ' ', selector))

    return list(dict.fromkeys(variations))


def base_class_name(selector: str) -> str | None:
    """The last class name in a selector, used for a broader class search."""
    if '.' not in selector:
        return None
    name = _BASE_CLASS.sub(r'\1', selector.strip())
    name = re.split(r'[:\[\s,]', name)[0]
    return name or None
