"""Article link extraction from listing pages."""

import logging
from typing import Any
from urllib.parse import urljoin, urlparse

import logfire
from bs4 import BeautifulSoup
from pydantic_ai import Agent

from adaptscrape.llm_config import LLMConfig, create_agent
from adaptscrape.models.results import SourceScrapingOptions
from adaptscrape.models.selectors import ArticleLinkSelection

logger = logging.getLogger(__name__)

SKIPPED_SCHEMES = ('javascript:', 'mailto:', 'tel:', '#', 'data:')
MAX_AI_CANDIDATES = 200

LINK_SYSTEM_PROMPT = (
    'You pick links to individual articles from a list of links found on a news or blog listing page. '
    'Only return URLs that appear in the list, unchanged.'
)


class LinkExtractor:
    """Collects candidate article links and optionally lets the AI pick among them.

    Attributes:
        agent: Agent used for AI link selection, or None

    """

    def __init__(self, llm_config: LLMConfig | None = None, agent: Agent[Any, ArticleLinkSelection] | None = None):
        """Initialize the extractor.

        Args:
            llm_config: Config used to build the link-selection agent
            agent: Agent to use instead of building one

        """
        if agent is not None:
            self.agent: Agent[Any, ArticleLinkSelection] | None = agent
        elif llm_config is not None:
            self.agent = create_agent(llm_config, LINK_SYSTEM_PROMPT, output_type=ArticleLinkSelection)
        else:
            self.agent = None

    def extract_links(self, html: str, base_url: str, options: SourceScrapingOptions | None = None) -> list[str]:
        """Extract article links from listing-page HTML.

        Args:
            html: Listing page HTML (static or rendered)
            base_url: URL the HTML came from, for resolving relative links
            options: Filters, limits, and optional AI context

        Returns:
            Absolute, deduplicated URLs in page order, at most max_links long

        """
        options = options or SourceScrapingOptions()
        candidates = self.collect_candidates(html, base_url, options)
        links = [url for url, _ in candidates]

        if options.ai_context and self.agent is not None and links:
            links = self._select_with_ai(candidates, options.ai_context) or links

        return links[: options.max_links]

    def collect_candidates(
        self, html: str, base_url: str, options: SourceScrapingOptions
    ) -> list[tuple[str, str]]:
        """Anchors with enough text to be article links, as (url, text) pairs."""
        soup = BeautifulSoup(html or '', 'lxml')
        seen: dict[str, str] = {}

        for anchor in soup.select('a[href]'):
            href = str(anchor.get('href', '')).strip().replace('&amp;', '&')
            text = ' '.join(anchor.get_text(' ').split())

            if not href or href.lower().startswith(SKIPPED_SCHEMES) or len(text) < options.min_link_text_length:
                continue

            url = urljoin(base_url, href)
            if urlparse(url).scheme not in ('http', 'https'):
                continue
            if options.include_patterns and not any(pattern in url for pattern in options.include_patterns):
                continue
            if any(pattern in url for pattern in options.exclude_patterns):
                continue

            seen.setdefault(url, text)

        logger.info(f'Found {len(seen)} candidate links on {base_url}')
        return list(seen.items())

    @logfire.instrument('llm_link_selection', extract_args=False)
    def _select_with_ai(self, candidates: list[tuple[str, str]], context: str) -> list[str]:
        """Ask the AI which candidates are articles; [] means "use the heuristic list"."""
        listing = '\n'.join(f'- {text} | {url}' for url, text in candidates[:MAX_AI_CANDIDATES])
        prompt = (
            f'Context: {context}\n\n'
            f'Pick the links that lead to individual articles. Each line is "anchor text | URL".\n\n{listing}'
        )

        try:
            result = self.agent.run_sync(prompt)  # type: ignore[union-attr]
        except Exception as e:
            logger.warning(f'AI link selection failed, using extracted links: {e}')
            logfire.warn('AI link selection failed', error=str(e))
            return []

        allowed = {url for url, _ in candidates}
        selected = [url for url in dict.fromkeys(result.output.urls) if url in allowed]
        logger.info(f'AI selected {len(selected)} of {len(candidates)} links')
        return selected
