"""AI collaborator that proposes CSS selectors for a page."""

from typing import Any, ClassVar, Protocol

import logfire
from pydantic_ai import Agent
from rich.console import Console

from adaptscrape.exceptions import LLMGenerationError
from adaptscrape.llm_config import LLMConfig, create_agent
from adaptscrape.models.selectors import STRUCTURE_CONTRACT_VERSION

SYSTEM_PROMPT = (
    'You identify HTML structure and return precise CSS selectors for content extraction. '
    'Return only CSS selectors, never the visible text of the page. '
    'Respond with a single JSON object and nothing else.'
)


class StructureAnalyzer(Protocol):
    """Proposes selectors for a page as a ``structure-v1`` JSON string."""

    contract_version: str

    def propose(self, html: str, url: str, context: str | None = None) -> str:
        """Return the raw JSON proposal for the given preprocessed HTML.

        Raises:
            LLMGenerationError: If the model call itself failed

        """
        ...


def build_structure_prompt(html: str, url: str, context: str | None = None) -> str:
    """Build the user prompt for a structure proposal."""
    context_block = f'\nAdditional context about this site: {context}\n' if context else ''
    return f"""Analyze this HTML from {url} and identify CSS selectors for the article's
title, main body content, author, and publish date.
{context_block}
Rules:
- Target the main content, not navigation, sidebars or related-article lists
- Prefer semantic elements (article, main, time) and specific content classes
- For dates, prefer <time> elements with a datetime attribute
- For authors, prefer author/byline classes or rel="author"
- Never return the text you see on the page (e.g. "By Jane Doe" or "March 3, 2024")

Return JSON in exactly this shape:
{{"titleSelector": "...", "contentSelector": "...", "authorSelector": "... or null",
 "dateSelector": "... or null", "confidence": 0.9}}

Set confidence between 0.1 and 1.0 based on how specific and semantic the selectors are.

HTML:
```html
{html}
```"""


class AgentStructureAnalyzer:
    """StructureAnalyzer backed by a pydantic-ai agent with text output.

    Attributes:
        agent: The LLM agent used for proposals
        model_name: Name of the model being used
        provider: Name of the LLM provider
        console: Rich console instance for formatted output

    """

    contract_version: ClassVar[str] = STRUCTURE_CONTRACT_VERSION

    agent: Agent[Any, str]
    model_name: str
    provider: str

    def __init__(
        self,
        llm_config: LLMConfig | None = None,
        agent: Agent[Any, str] | None = None,
        console: Console | None = None,
    ):
        """Initialize with an LLM configuration or a ready agent.

        Args:
            llm_config: Configuration for the LLM provider and model
            agent: Agent to use instead of building one
            console: Rich console instance for formatted output

        Raises:
            ValueError: Must provide llm_config or an agent

        """
        self.console = console or Console()

        # Priority: agent > llm_config
        if agent is not None:
            self.agent = agent
            self.model_name = 'custom-agent'
            self.provider = 'custom'
        elif llm_config is not None:
            self.agent = create_agent(llm_config, SYSTEM_PROMPT)
            self.model_name = llm_config.model_name
            self.provider = llm_config.provider
        else:
            raise ValueError('Either provide llm_config or agent parameter')

    @logfire.instrument('llm_structure_request', extract_args=False)
    def propose(self, html: str, url: str, context: str | None = None) -> str:
        """Ask the model for selectors.

        Args:
            html: Preprocessed page HTML
            url: Page URL, included in the prompt
            context: Optional site description to steer the model

        Returns:
            Raw model output

        Raises:
            LLMGenerationError: If the model call fails

        """
        try:
            result = self.agent.run_sync(build_structure_prompt(html, url, context))
        except Exception as e:
            self.console.print(f'[danger]  ✗ Error getting selectors from AI: {e}[/danger]')
            logfire.error('AI request failed', error=str(e), provider=self.provider, model=self.model_name)
            raise LLMGenerationError(f'AI structure detection failed: {e}') from e

        return str(result.output)
