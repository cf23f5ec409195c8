"""Text-level validation for extracted article fields.

Every function here is total: bad input resolves to "invalid" or an empty
string instead of raising.
"""

import logging
import re
from urllib.parse import unquote, urlparse

logger = logging.getLogger(__name__)

MIN_ARTICLE_LENGTH = 200
MIN_CHECKABLE_LENGTH = 50
MAX_NON_ASCII_RATIO = 0.5
MIN_WORD_RATIO = 0.3
WORD_RATIO_MIN_LENGTH = 100
MIN_SENTENCE_BOUNDARIES = 3
MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 500
MIN_URL_TITLE_LENGTH = 5
MAX_URL_TITLE_LENGTH = 200

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F]')
REPLACEMENT_RUN = re.compile('\ufffd{3,}')
C1_CONTROLS = re.compile(r'[\x80-\x9F]')
WORD_TOKEN = re.compile(r'\b[a-zA-Z]{2,}\b')
REPEATED_GIBBERISH = re.compile(r'(\S{2,5})\1{4,}')
SEPARATOR_UNIT = re.compile(r'^[-=_*.~#0]+$')
SENTENCE_BOUNDARY = re.compile(r'[.!?]+\s+[A-Z]')

ERROR_PHRASES: tuple[str, ...] = (
    'access denied',
    'permission denied',
    'forbidden',
    '404 not found',
    'page not found',
    'cloudflare',
    'captcha',
    'verify you are human',
    'just a moment',
    'checking your browser',
    'checking if the site connection is secure',
    'ddos protection',
    'enable javascript',
    'rate limit exceeded',
    'too many requests',
    'service unavailable',
    'bad gateway',
    'internal server error',
    'bot detection',
)

PLACEHOLDER_TITLES = frozenset(
    {
        'untitled',
        'no title',
        'unknown',
        'error',
        'not found',
        '404',
        'access denied',
        'forbidden',
        'page not found',
        'cannot be found',
        "can't be found",
    }
)

ERROR_TITLE_PREFIXES: tuple[str, ...] = ('oops ', 'error:', '404:', '403:', '500:')

ERROR_TITLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'\b404\s+(error|page|not\s+found)\b', re.IGNORECASE),
    re.compile(r'\b(403|500)\s+(error|forbidden|internal\s+server\s+error)\b', re.IGNORECASE),
    re.compile(r'\bpage\s+(not\s+found|can\'?t\s+be\s+found|cannot\s+be\s+found|doesn\'?t\s+exist)\b', re.IGNORECASE),
    re.compile(r'^(not\s+found|access\s+denied|forbidden)', re.IGNORECASE),
    re.compile(r'^(just a moment|attention required)', re.IGNORECASE),
)

URL_EXTENSION = re.compile(r'\.(html?|php|aspx?|jsp|cgi)$', re.IGNORECASE)
URL_PREFIX = re.compile(r'^(article|post|news|blog|story)[-_]', re.IGNORECASE)
URL_TRAILING_ID = re.compile(r'([-_]\d+)+$')


def is_corrupted_text(text: str) -> bool:
    """Check whether text looks garbled or mis-decoded.

    Any one signal is enough: a non-ASCII majority, control characters,
    runs of replacement characters, C1 controls, too few word-like tokens,
    or a short chunk of characters repeated over and over.

    Args:
        text: Text to check

    Returns:
        True if the text should be treated as corrupted

    """
    if not text:
        return True

    non_ascii = sum(1 for char in text if ord(char) > 127)
    if non_ascii / len(text) > MAX_NON_ASCII_RATIO:
        logger.debug(f'Corrupted text: non-ASCII ratio {non_ascii / len(text):.0%}')
        return True

    for pattern in (CONTROL_CHARS, REPLACEMENT_RUN, C1_CONTROLS):
        if pattern.search(text):
            logger.debug(f'Corrupted text: matched {pattern.pattern!r}')
            return True

    if len(text) > WORD_RATIO_MIN_LENGTH:
        words = WORD_TOKEN.findall(text)
        ratio = len(words) / max(1, len(text.split()))
        if ratio < MIN_WORD_RATIO:
            logger.debug(f'Corrupted text: word ratio {ratio:.0%}')
            return True

    for match in REPEATED_GIBBERISH.finditer(text):
        if not SEPARATOR_UNIT.match(match.group(1)):
            logger.debug(f'Corrupted text: repeated chunk {match.group(1)!r}')
            return True

    return False


def is_valid_article_content(content: str, min_length: int = MIN_ARTICLE_LENGTH) -> bool:
    """Check whether extracted body text looks like a real article.

    Args:
        content: Extracted article body
        min_length: Minimum number of characters required

    Returns:
        True if the content is long enough, clean, and sentence-structured

    """
    if not content or len(content) < max(min_length, MIN_CHECKABLE_LENGTH):
        return False

    if is_corrupted_text(content):
        return False

    whitespace = sum(1 for char in content if char.isspace())
    if whitespace * 2 >= len(content):
        logger.debug('Content is mostly whitespace')
        return False

    lower = content.lower()
    for phrase in ERROR_PHRASES:
        if phrase in lower:
            logger.debug(f'Content contains error phrase {phrase!r}')
            return False

    boundaries = len(SENTENCE_BOUNDARY.findall(content))
    if boundaries < MIN_SENTENCE_BOUNDARIES:
        logger.debug(f'Content has only {boundaries} sentence boundaries')
        return False

    return True


def is_valid_title(title: str) -> bool:
    """Check whether a title is a real headline rather than a placeholder or error.

    Args:
        title: Extracted title

    Returns:
        True if the title is usable

    """
    if not title:
        return False

    trimmed = title.strip()
    if not MIN_TITLE_LENGTH <= len(trimmed) <= MAX_TITLE_LENGTH:
        return False

    if is_corrupted_text(trimmed):
        return False

    lower = trimmed.lower()
    if lower in PLACEHOLDER_TITLES or lower.startswith(ERROR_TITLE_PREFIXES):
        logger.debug(f'Placeholder title: {trimmed!r}')
        return False

    if any(pattern.search(trimmed) for pattern in ERROR_TITLE_PATTERNS):
        logger.debug(f'Error-page title: {trimmed!r}')
        return False

    return bool(re.search(r'[a-zA-Z]{2,}', trimmed))


def sanitize_content(text: str) -> str:
    """Strip control and replacement characters, then collapse whitespace."""
    if not text:
        return ''
    cleaned = re.sub(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]', '', text)
    cleaned = re.sub('\ufffd+', '', cleaned)
    cleaned = C1_CONTROLS.sub('', cleaned)
    return re.sub(r'\s+', ' ', cleaned).strip()


def extract_title_from_url(url: str) -> str | None:
    """Derive a readable title from the last path segment of a URL.

    Args:
        url: Article URL

    Returns:
        Title-cased words from the slug, or None if nothing usable was found

    """
    try:
        path = urlparse(url).path
    except ValueError:
        return None

    segments = [segment for segment in unquote(path).split('/') if segment.strip()]
    if not segments:
        return None

    slug = URL_EXTENSION.sub('', segments[-1])
    slug = URL_PREFIX.sub('', slug)
    slug = URL_TRAILING_ID.sub('', slug)
    slug = re.sub(r'[-_]+', ' ', slug)
    slug = re.sub(r'([a-z])([A-Z])', r'\1 \2', slug)

    words = slug.split()
    title = ' '.join(word[:1].upper() + word[1:].lower() for word in words)

    if MIN_URL_TITLE_LENGTH <= len(title) <= MAX_URL_TITLE_LENGTH and re.search(r'[a-zA-Z]{3,}', title):
        return title
    return None
