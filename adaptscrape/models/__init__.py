"""Pydantic models and result types."""

from adaptscrape.models.results import (
    ArticleContent,
    BrowserFetchOptions,
    ContentMetadata,
    ContentValidationResult,
    FetchedContent,
    FetchMethod,
    FetchResult,
    ProtectionType,
    RedirectInfo,
    RedirectOptions,
    SourceScrapingOptions,
)
from adaptscrape.models.selectors import (
    STRUCTURE_CONTRACT_VERSION,
    ArticleLinkSelection,
    ExtractedArticle,
    ScrapingConfig,
    StructureProposal,
)

__all__ = [
    'STRUCTURE_CONTRACT_VERSION',
    'ArticleContent',
    'ArticleLinkSelection',
    'BrowserFetchOptions',
    'ContentMetadata',
    'ContentValidationResult',
    'ExtractedArticle',
    'FetchedContent',
    'FetchMethod',
    'FetchResult',
    'ProtectionType',
    'RedirectInfo',
    'RedirectOptions',
    'ScrapingConfig',
    'SourceScrapingOptions',
    'StructureProposal',
]
