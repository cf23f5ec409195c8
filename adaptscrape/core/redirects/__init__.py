"""Redirect resolution."""

from adaptscrape.core.redirects.patterns import REDIRECT_PATTERNS, RedirectPattern, find_redirect_target
from adaptscrape.core.redirects.resolver import RedirectResolver

__all__ = ['REDIRECT_PATTERNS', 'RedirectPattern', 'RedirectResolver', 'find_redirect_target']
