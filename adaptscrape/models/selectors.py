"""Pydantic models for selector configs and AI response contracts."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

STRUCTURE_CONTRACT_VERSION = 'structure-v1'


class ScrapingConfig(BaseModel):
    """Per-domain selector recipe.

    Attributes:
        title_selector: CSS selector for the article title
        content_selector: CSS selector for the article body
        author_selector: CSS selector for the author byline, if any
        date_selector: CSS selector for the publish date, if any
        confidence: How certain the detector was about these selectors

    """

    title_selector: str = Field(description='CSS selector for the article title')
    content_selector: str = Field(description='CSS selector for the article body')
    author_selector: str | None = Field(default=None, description='CSS selector for the author')
    date_selector: str | None = Field(default=None, description='CSS selector for the publish date')
    confidence: float = Field(default=0.8, ge=0.0, le=1.0, description='Detector confidence (0.0-1.0)')

    def selectors(self) -> dict[str, str | None]:
        """Return the selectors keyed by field name."""
        return {
            'title': self.title_selector,
            'content': self.content_selector,
            'author': self.author_selector,
            'date': self.date_selector,
        }


class StructureProposal(BaseModel):
    """Raw selector proposal returned by the AI (contract ``structure-v1``).

    All fields are optional here; defaults and clamping are applied by the
    structure detector after sanitization.
    """

    model_config = ConfigDict(populate_by_name=True)

    title_selector: str | None = Field(default=None, alias='titleSelector')
    content_selector: str | None = Field(default=None, alias='contentSelector')
    author_selector: str | None = Field(default=None, alias='authorSelector')
    date_selector: str | None = Field(default=None, alias='dateSelector')
    confidence: float | None = Field(default=None)

    @field_validator('confidence', mode='before')
    @classmethod
    def _coerce_confidence(cls, value: Any) -> float | None:
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator('title_selector', 'content_selector', 'author_selector', 'date_selector', mode='before')
    @classmethod
    def _drop_null_strings(cls, value: Any) -> str | None:
        if value is None or not isinstance(value, str):
            return None
        if value.strip().lower() in ('', 'null', 'undefined', 'none', 'na'):
            return None
        return value


class ExtractedArticle(BaseModel):
    """Article fields extracted directly by the AI during re-analysis."""

    title: str = Field(default='', description='Article headline')
    content: str = Field(default='', description='Full article body text')
    author: str | None = Field(default=None, description='Author name, without biography')
    date: str | None = Field(default=None, description='Publish date as written on the page')
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description='Extraction confidence (0.0-1.0)')


class ArticleLinkSelection(BaseModel):
    """Article links chosen by the AI from a page's candidate links."""

    urls: list[str] = Field(default_factory=list, description='Absolute URLs of links that lead to articles')
