"""AI re-analysis and multi-attempt recovery for weak extractions."""

import logging
import re
import time
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import logfire
from bs4 import BeautifulSoup, Comment
from pydantic_ai import Agent

from adaptscrape.core.discovery.selectors import preprocess_html_for_ai
from adaptscrape.core.extraction.dates import parse_date
from adaptscrape.core.extraction.recovery import CONTENT_FALLBACK_SELECTORS, is_low_quality_content, select_text
from adaptscrape.llm_config import LLMConfig, create_agent
from adaptscrape.models.results import ArticleContent
from adaptscrape.models.selectors import ExtractedArticle

logger = logging.getLogger(__name__)

TRIGGER_MIN_CONTENT = 100
TRIGGER_MIN_CONFIDENCE = 0.5
TRIGGER_MIN_TITLE = 10

AI_ACCEPT_CONFIDENCE = 0.5
RECOVERY_MIN_CONTENT = 200
RECOVERY_MIN_CONFIDENCE = 0.4
RECOVERY_FAILED_CONFIDENCE = 0.2

PARAGRAPH_MIN_LENGTH = 20
BODY_LINE_MIN_LENGTH = 20
MAX_AGGRESSIVE_CHARS = 5000

ALTERNATIVE_PARSER_CONFIDENCE = 0.6
CLEANED_HTML_CONFIDENCE = 0.7
PARAGRAPH_CONFIDENCE = 0.5
BODY_LINES_CONFIDENCE = 0.3

CLEANED_TAGS = ('script', 'style', 'noscript')
BOILERPLATE_LINE = re.compile(r'^(menu|home|search|share|subscribe|sign in|log in|cookie|advertisement)\b', re.IGNORECASE)

REANALYSIS_SYSTEM_PROMPT = (
    'You extract news articles from HTML. Return the headline, the full body text without navigation, '
    'ads or related links, the author name without biography, the publish date as written on the page, '
    'and your confidence from 0.0 to 1.0 that the body is the complete article.'
)

RecoveryAttempt = Callable[[str], tuple[str, float]]


class AIReanalyzer:
    """Second chance for extractions that came back short or doubtful.

    The AI is asked to read the page directly first. If it is unavailable
    or unsure, a series of parser-level recovery attempts runs instead.

    Attributes:
        agent: Agent returning ExtractedArticle, or None when no AI is configured
        retry_wait: Seconds to pause between recovery attempts

    """

    def __init__(
        self,
        llm_config: LLMConfig | None = None,
        agent: Agent[Any, ExtractedArticle] | None = None,
        retry_wait: float = 2.0,
    ):
        """Initialize the re-analyzer.

        Args:
            llm_config: Config used to build the extraction agent
            agent: Agent to use instead of building one
            retry_wait: Seconds to pause between recovery attempts

        """
        if agent is not None:
            self.agent: Agent[Any, ExtractedArticle] | None = agent
        elif llm_config is not None:
            self.agent = create_agent(llm_config, REANALYSIS_SYSTEM_PROMPT, output_type=ExtractedArticle)
        else:
            self.agent = None
        self.retry_wait = retry_wait

    @staticmethod
    def should_trigger(result: ArticleContent) -> bool:
        """Whether an extraction is weak enough to re-analyze."""
        content = result.content or ''
        return (
            len(content) < TRIGGER_MIN_CONTENT
            or result.confidence < TRIGGER_MIN_CONFIDENCE
            or is_low_quality_content(content)
            or len(result.title or '') < TRIGGER_MIN_TITLE
        )

    def reanalyze(self, html: str, url: str, previous: ArticleContent) -> ArticleContent:
        """Try to improve a weak extraction.

        Args:
            html: Page HTML
            url: Page URL
            previous: The extraction being improved

        Returns:
            'ai_reanalysis' when the AI is confident, 'multi_attempt_N' when a
            recovery attempt succeeds, otherwise 'recovery_failed' carrying
            the previous fields

        """
        with logfire.span('reanalyze_article', url=url):
            if self.agent is not None:
                improved = self._ask_ai(html, url, previous)
                if improved is not None:
                    return improved
            return self.recover(html, previous)

    def recover(self, html: str, previous: ArticleContent) -> ArticleContent:
        """Run the parser-level recovery attempts in order."""
        attempts: list[RecoveryAttempt] = [_alternative_parser, _cleaned_html, _aggressive_text]

        for number, attempt in enumerate(attempts, start=1):
            if number > 1 and self.retry_wait > 0:
                time.sleep(self.retry_wait)
            try:
                content, confidence = attempt(html)
            except Exception as e:
                logger.warning(f'Recovery attempt {number} failed: {e}')
                continue

            if len(content) >= RECOVERY_MIN_CONTENT and not is_low_quality_content(content):
                logger.info(f'Recovery attempt {number} succeeded with {len(content)} chars')
                return replace(
                    previous,
                    content=content,
                    extraction_method=f'multi_attempt_{number}',
                    confidence=max(RECOVERY_MIN_CONFIDENCE, confidence),
                    diagnostic=None,
                )

        logfire.warn('All recovery attempts failed')
        return replace(
            previous,
            extraction_method='recovery_failed',
            confidence=RECOVERY_FAILED_CONFIDENCE,
            diagnostic='AI re-analysis and every recovery attempt failed',
        )

    @logfire.instrument('llm_reanalysis_request', extract_args=False)
    def _ask_ai(self, html: str, url: str, previous: ArticleContent) -> ArticleContent | None:
        prompt = f'Extract the article from this page.\n\nURL: {url}\n\nHTML:\n{preprocess_html_for_ai(html)}'
        try:
            extracted = self.agent.run_sync(prompt).output  # type: ignore[union-attr]
        except Exception as e:
            logger.warning(f'AI re-analysis failed for {url}: {e}')
            logfire.error('AI re-analysis failed', url=url, error=str(e))
            return None

        if extracted.confidence <= AI_ACCEPT_CONFIDENCE or not extracted.content.strip():
            logger.info(f'AI re-analysis confidence {extracted.confidence} too low for {url}')
            return None

        return ArticleContent(
            title=extracted.title.strip() or previous.title,
            content=extracted.content.strip(),
            author=(extracted.author or '').strip() or previous.author,
            publish_date=parse_date(extracted.date) or previous.publish_date,
            extraction_method='ai_reanalysis',
            confidence=extracted.confidence,
        )


def _alternative_parser(html: str) -> tuple[str, float]:
    soup = BeautifulSoup(html, 'html.parser')
    for selector in CONTENT_FALLBACK_SELECTORS:
        text = select_text(soup, selector)
        if len(text) >= RECOVERY_MIN_CONTENT:
            return text, ALTERNATIVE_PARSER_CONFIDENCE
    return '', ALTERNATIVE_PARSER_CONFIDENCE


def _cleaned_html(html: str) -> tuple[str, float]:
    soup = BeautifulSoup(html, 'lxml')
    for tag in soup.find_all(CLEANED_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for selector in CONTENT_FALLBACK_SELECTORS:
        text = select_text(soup, selector)
        if len(text) >= RECOVERY_MIN_CONTENT:
            return text, CLEANED_HTML_CONFIDENCE
    return '', CLEANED_HTML_CONFIDENCE


def _aggressive_text(html: str) -> tuple[str, float]:
    soup = BeautifulSoup(html, 'lxml')
    for tag in soup.find_all((*CLEANED_TAGS, 'nav', 'header', 'footer', 'aside')):
        tag.decompose()

    paragraphs = [' '.join(p.get_text(' ').split()) for p in soup.find_all('p')]
    joined = '\n\n'.join(p for p in paragraphs if len(p) > PARAGRAPH_MIN_LENGTH)
    if len(joined) >= RECOVERY_MIN_CONTENT:
        return joined[:MAX_AGGRESSIVE_CHARS], PARAGRAPH_CONFIDENCE

    body = soup.body or soup
    lines = [' '.join(line.split()) for line in body.get_text('\n').splitlines()]
    lines = [line for line in lines if len(line) > BODY_LINE_MIN_LENGTH and not BOILERPLATE_LINE.match(line)]
    return '\n'.join(lines)[:MAX_AGGRESSIVE_CHARS], BODY_LINES_CONFIDENCE
