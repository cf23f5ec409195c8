"""HTMX detection and content loading on a live Playwright page."""

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

HTMX_LOAD_WAIT_MS = 3000
MAX_HTMX_ELEMENTS = 5

HTMX_DETECTION_SCRIPT = """
() => {
    const scriptLoaded = Array.from(document.scripts).some(s => (s.src || '').includes('htmx'));
    const attributes = document.querySelectorAll('[hx-get], [hx-post], [data-hx-get], [data-hx-post]').length;
    return { scriptLoaded: scriptLoaded || typeof window.htmx !== 'undefined', attributes: attributes };
}
"""

HTMX_ELEMENTS_SCRIPT = """
() => Array.from(document.querySelectorAll('[hx-get], [data-hx-get]')).map(el => ({
    hxGet: el.getAttribute('hx-get') || el.getAttribute('data-hx-get') || '',
    trigger: el.getAttribute('hx-trigger') || 'click',
    tag: el.tagName.toLowerCase(),
    className: (typeof el.className === 'string' ? el.className : ''),
    text: (el.textContent || '').trim().toLowerCase().slice(0, 100),
}))
"""

_ARTICLE_PATH = re.compile(r'/(items|articles|posts)/[^/]+/')


def classify_htmx_element(hx_get: str, tag: str = '', class_name: str = '', text: str = '') -> tuple[str, int]:
    """Classify an hx-get element by what it is likely to load.

    Args:
        hx_get: Value of the hx-get attribute
        tag: Lower-case tag name
        class_name: Element class attribute
        text: Lower-case element text

    Returns:
        Tuple of (kind, priority) where kind is 'container', 'article',
        'pagination' or 'filter'; higher priority loads first

    """
    if (
        (('/items/' in hx_get or '/articles/' in hx_get) and not _ARTICLE_PATH.search(hx_get))
        or '/list/' in hx_get
        or '/feed/' in hx_get
        or (tag == 'div' and ('content' in class_name or 'list' in class_name))
    ):
        return 'container', 10
    if _ARTICLE_PATH.search(hx_get) or (tag == 'a' and '/' in hx_get):
        return 'article', 8
    if any(marker in hx_get for marker in ('page=', '/next/', '/more/')) or 'load more' in text or 'next' in text:
        return 'pagination', 6
    if any(marker in hx_get for marker in ('/filter/', '/search/', '/topics/')) or 'filter' in text or 'search' in text:
        return 'filter', 3
    return 'article', 5


def page_has_htmx(page: Any) -> bool:
    """Whether a live page loads HTMX or carries HTMX request attributes."""
    try:
        detection = page.evaluate(HTMX_DETECTION_SCRIPT)
    except Exception as e:
        logger.debug(f'HTMX detection failed: {e}')
        return False
    return bool(detection and (detection.get('scriptLoaded') or detection.get('attributes', 0) > 0))


def load_htmx_content(page: Any, wait_ms: int = HTMX_LOAD_WAIT_MS, max_elements: int = MAX_HTMX_ELEMENTS) -> int:
    """Trigger HTMX loaders on a live page so their content lands in the DOM.

    Elements with an automatic ``load`` trigger already fired when the page
    loaded; everything else is clicked in priority order, skipping filters.

    Args:
        page: Playwright Page that has finished navigating
        wait_ms: Wait after the initial load and after each click, in milliseconds
        max_elements: Maximum number of elements to click

    Returns:
        Number of elements that were clicked

    """
    page.wait_for_timeout(wait_ms)

    try:
        elements = page.evaluate(HTMX_ELEMENTS_SCRIPT) or []
    except Exception as e:
        logger.warning(f'Could not list HTMX elements: {e}')
        return 0

    candidates = []
    seen = set()
    for element in elements:
        hx_get = element.get('hxGet', '')
        if not hx_get or hx_get in seen or element.get('trigger', '').startswith('load'):
            continue
        seen.add(hx_get)
        kind, priority = classify_htmx_element(
            hx_get, element.get('tag', ''), element.get('className', ''), element.get('text', '')
        )
        if kind != 'filter':
            candidates.append((priority, hx_get))

    candidates.sort(key=lambda item: item[0], reverse=True)

    clicked = 0
    for _, hx_get in candidates[:max_elements]:
        selector = f'[hx-get="{hx_get}"], [data-hx-get="{hx_get}"]'
        try:
            page.click(selector, timeout=wait_ms)
            page.wait_for_timeout(wait_ms)
            clicked += 1
        except Exception as e:
            logger.debug(f'HTMX element {hx_get} could not be triggered: {e}')

    logger.info(f'Triggered {clicked} of {len(candidates)} HTMX elements')
    return clicked
