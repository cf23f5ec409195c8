"""Content and page validation."""

from adaptscrape.core.validation.page import PageValidator, validate_content
from adaptscrape.core.validation.text import (
    extract_title_from_url,
    is_corrupted_text,
    is_valid_article_content,
    is_valid_title,
    sanitize_content,
)

__all__ = [
    'PageValidator',
    'extract_title_from_url',
    'is_corrupted_text',
    'is_valid_article_content',
    'is_valid_title',
    'sanitize_content',
    'validate_content',
]
