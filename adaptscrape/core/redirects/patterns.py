"""Declarative table of in-page redirect patterns.

Both the plain-HTTP resolver and the browser resolver scan page HTML with
this one table, so the two paths recognise the same redirects.
"""

import re
from dataclasses import dataclass
from typing import Literal

RedirectKind = Literal['meta_refresh', 'javascript']


@dataclass(frozen=True)
class RedirectPattern:
    """One way a page can send the browser somewhere else.

    Attributes:
        name: Short identifier used in logs
        kind: 'meta_refresh' or 'javascript'
        regex: Compiled pattern whose ``target`` group holds the destination URL

    """

    name: str
    kind: RedirectKind
    regex: re.Pattern[str]


_QUOTED = r'["\'](?P<target>[^"\']+)["\']'

REDIRECT_PATTERNS: tuple[RedirectPattern, ...] = (
    RedirectPattern(
        'meta_refresh',
        'meta_refresh',
        re.compile(
            r'<meta[^>]*http-equiv=["\']?refresh["\']?[^>]*content=["\']\s*\d+\s*;\s*url=\s*["\']?(?P<target>[^"\'>\s]+)',
            re.IGNORECASE,
        ),
    ),
    RedirectPattern(
        'meta_refresh_content_first',
        'meta_refresh',
        re.compile(
            r'<meta[^>]*content=["\']\s*\d+\s*;\s*url=\s*["\']?(?P<target>[^"\'>\s]+)["\']?[^>]*http-equiv=["\']?refresh',
            re.IGNORECASE,
        ),
    ),
    RedirectPattern('window_location_href', 'javascript', re.compile(r'window\.location\.href\s*=\s*' + _QUOTED)),
    RedirectPattern(
        'window_location_replace', 'javascript', re.compile(r'window\.location\.replace\s*\(\s*' + _QUOTED + r'\s*\)')
    ),
    RedirectPattern('window_location', 'javascript', re.compile(r'window\.location\s*=\s*' + _QUOTED)),
    RedirectPattern('location_href', 'javascript', re.compile(r'(?<![\w.])location\.href\s*=\s*' + _QUOTED)),
    RedirectPattern('document_location', 'javascript', re.compile(r'document\.location(?:\.href)?\s*=\s*' + _QUOTED)),
    RedirectPattern('url_key', 'javascript', re.compile(r'\burl\s*:\s*' + _QUOTED)),
)


def find_redirect_target(
    html: str,
    follow_meta_refresh: bool = True,
    follow_javascript: bool = True,
    visited: tuple[str, ...] | list[str] = (),
) -> str | None:
    """Find the first absolute, unvisited redirect target in a page.

    Meta refresh patterns are checked before JavaScript ones.

    Args:
        html: Page HTML to scan
        follow_meta_refresh: Consider <meta http-equiv="refresh"> tags
        follow_javascript: Consider JavaScript location assignments
        visited: URLs already in the redirect chain

    Returns:
        The destination URL, or None if no usable redirect was found

    """
    if not html:
        return None

    enabled = {kind for kind, on in (('meta_refresh', follow_meta_refresh), ('javascript', follow_javascript)) if on}

    for pattern in REDIRECT_PATTERNS:
        if pattern.kind not in enabled:
            continue
        for match in pattern.regex.finditer(html):
            target = match.group('target').strip().replace('&amp;', '&')
            if target.startswith(('http://', 'https://')) and target not in visited:
                return target

    return None
