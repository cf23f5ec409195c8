"""Author byline filtering and name cleaning."""

import re

CONTACT_BOILERPLATE = re.compile(
    r'^(CONTACT|CONTACTS:|FOR MORE INFORMATION|PRESS CONTACT|MEDIA CONTACT)', re.IGNORECASE
)
MONTHS = r'(JANUARY|FEBRUARY|MARCH|APRIL|MAY|JUNE|JULY|AUGUST|SEPTEMBER|OCTOBER|NOVEMBER|DECEMBER)'
# Month names count only next to a day number, so "April Glaser" is still a name
DATE_OR_TIME = re.compile(
    rf'\b({MONTHS}\.?\s+\d{{1,2}}\b|\d{{1,2}}\s+{MONTHS}\b'
    r'|\d{1,2},?\s*\d{4}|\d{1,2}:\d{2}\s*(AM|PM))',
    re.IGNORECASE,
)
BYLINE_PREFIX = re.compile(r'^(by|written by|author:?)\s+', re.IGNORECASE)

# Where a byline stops being a name and turns into a biography
BIO_MARKERS = (
    re.compile(r'\s+is\s+(a|an)\s+', re.IGNORECASE),
    re.compile(r'\s+has\s+(been|worked)', re.IGNORECASE),
    re.compile(r'\s+worked?\s+(at|for|in)', re.IGNORECASE),
    re.compile(r'\s+(veteran|former|senior)\s+', re.IGNORECASE),
    re.compile(r'\s+of\s+more\s+than\s+\d+', re.IGNORECASE),
    re.compile(r'\.\s*[A-Z]'),
    re.compile(r'\s+(received|won|earned)', re.IGNORECASE),
    re.compile(r'\s+(published|written)', re.IGNORECASE),
    re.compile(r'\s+specializes?\s+in', re.IGNORECASE),
    re.compile(r'\s+covers?\s+(topics|stories)', re.IGNORECASE),
)
NAME_PATTERN = re.compile(r'^([A-Z][a-z]+(?:\s+[A-Z][a-z]*\.?){0,3}(?:,?\s*[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)?)')

MAX_BIO_LENGTH = 100
MAX_NAME_LENGTH = 80
HARD_TRUNCATE_LENGTH = 60
MIN_TRUNCATE_POSITION = 20
MIN_FALLBACK_AUTHOR_LENGTH = 3
MAX_FALLBACK_AUTHOR_LENGTH = 80


def is_rejected_author(text: str) -> bool:
    """Whether a byline candidate is contact boilerplate or a date/time string."""
    return bool(CONTACT_BOILERPLATE.match(text.strip()) or DATE_OR_TIME.search(text))


def is_plausible_fallback_author(text: str) -> bool:
    """Length and letter check for authors found by generic fallback selectors."""
    return (
        MIN_FALLBACK_AUTHOR_LENGTH <= len(text) <= MAX_FALLBACK_AUTHOR_LENGTH
        and any(char.isalpha() for char in text)
        and not is_rejected_author(text)
    )


def clean_author_name(text: str) -> str:
    """Cut an author byline down to the name.

    Truncates at the first biography marker, then shortens anything still
    too long to a first line, first sentence, capitalized name, or a word
    boundary near 60 characters.

    Args:
        text: Raw byline text

    Returns:
        The cleaned name (possibly empty)

    """
    name = BYLINE_PREFIX.sub('', text.strip())

    cut = min((m.start() for m in (p.search(name) for p in BIO_MARKERS) if m), default=None)
    if cut is not None:
        name = name[:cut]
    name = name.strip().rstrip(',.').strip()

    if len(name) > MAX_BIO_LENGTH:
        first_line = name.split('\n', 1)[0].strip()
        first_sentence = re.split(r'[.!?]\s', name, maxsplit=1)[0].strip()
        if len(first_line) < MAX_NAME_LENGTH:
            name = first_line
        elif len(first_sentence) < MAX_NAME_LENGTH:
            name = first_sentence

    if len(name) > MAX_NAME_LENGTH:
        match = NAME_PATTERN.match(name)
        if match:
            name = match.group(1)
        else:
            name = name[:HARD_TRUNCATE_LENGTH]
            last_space = name.rfind(' ')
            if last_space > MIN_TRUNCATE_POSITION:
                name = name[:last_space]

    return ' '.join(name.split())
