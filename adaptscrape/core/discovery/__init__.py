"""Selector discovery: AI proposals, validation, and the per-domain cache."""

from adaptscrape.core.discovery.analyzer import AgentStructureAnalyzer, StructureAnalyzer
from adaptscrape.core.discovery.cache import InMemorySelectorCache, SelectorCache, normalize_domain
from adaptscrape.core.discovery.detector import StructureDetector
from adaptscrape.core.discovery.selectors import (
    MAX_AI_HTML_CHARS,
    fallback_config,
    is_valid_config,
    looks_like_text,
    parse_structure_response,
    preprocess_html_for_ai,
    sanitize_selector,
)

__all__ = [
    'MAX_AI_HTML_CHARS',
    'AgentStructureAnalyzer',
    'InMemorySelectorCache',
    'SelectorCache',
    'StructureAnalyzer',
    'StructureDetector',
    'fallback_config',
    'is_valid_config',
    'looks_like_text',
    'normalize_domain',
    'parse_structure_response',
    'preprocess_html_for_ai',
    'sanitize_selector',
]
