"""Command line entry point for AdaptScrape.

Usage:
    adaptscrape article <url> [--resolve-redirects] [--json]
    adaptscrape source <url> [--max-links N] [--include P] [--exclude P]
    adaptscrape redirects <url> [--max-redirects N] [--no-meta] [--no-js]
"""

import argparse
import json
import os
import sys
from collections.abc import Sequence

import logfire
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adaptscrape.core.pipeline import THEME, UnifiedScraper
from adaptscrape.core.redirects import RedirectResolver
from adaptscrape.exceptions import AdaptScrapeError
from adaptscrape.llm_config import API_KEY_ENV_VARS, config_from_env
from adaptscrape.models import ArticleContent, RedirectOptions, SourceScrapingOptions
from adaptscrape.utils import init_state_dir, setup_local_logging

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'ALL')
PREVIEW_CHARS = 500


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog='adaptscrape', description='Adaptive article and link scraping')
    parser.add_argument('--debug', action='store_true', help='Save fetched HTML and selectors for debugging')
    parser.add_argument('--log-level', choices=LOG_LEVELS, default='INFO', help='File log level')
    parser.add_argument('--provider', choices=list(API_KEY_ENV_VARS), help='LLM provider (default: first key found)')
    parser.add_argument('--model', help="Model name (default: the provider's default)")

    subparsers = parser.add_subparsers(dest='command', required=True)

    article = subparsers.add_parser('article', help='Scrape a single article')
    article.add_argument('url')
    article.add_argument('--resolve-redirects', action='store_true', help='Resolve redirects before fetching')
    article.add_argument('--json', action='store_true', help='Print the article as JSON')

    source = subparsers.add_parser('source', help='Collect article links from a listing page')
    source.add_argument('url')
    source.add_argument('--max-links', type=int, default=50, help='Maximum links to return')
    source.add_argument('--include', action='append', default=[], help='Keep only links containing this text')
    source.add_argument('--exclude', action='append', default=[], help='Drop links containing this text')
    source.add_argument('--context', help='Describe the articles wanted to let the AI pick links')

    redirects = subparsers.add_parser('redirects', help='Resolve the redirect chain of a URL')
    redirects.add_argument('url')
    redirects.add_argument('--max-redirects', type=int, default=5, help='Maximum redirects to follow')
    redirects.add_argument('--no-meta', action='store_true', help='Ignore meta refresh redirects')
    redirects.add_argument('--no-js', action='store_true', help='Ignore JavaScript redirects')

    return parser


def article_to_dict(article: ArticleContent) -> dict:
    """JSON-friendly view of an article."""
    return {
        'title': article.title,
        'content': article.content,
        'author': article.author,
        'publish_date': article.publish_date.isoformat() if article.publish_date else None,
        'extraction_method': article.extraction_method,
        'confidence': round(article.confidence, 3),
        'diagnostic': article.diagnostic,
    }


def print_article(console: Console, article: ArticleContent) -> None:
    """Render an article summary table and a content preview."""
    table = Table(title='Article', show_header=False)
    table.add_column('Field', style='cyan', no_wrap=True)
    table.add_column('Value')
    table.add_row('Title', article.title)
    table.add_row('Author', article.author or '-')
    table.add_row('Published', article.publish_date.isoformat() if article.publish_date else '-')
    table.add_row('Method', article.extraction_method)
    table.add_row('Confidence', f'{article.confidence:.2f}')
    table.add_row('Length', f'{len(article.content):,} chars')
    if article.diagnostic:
        table.add_row('Diagnostic', f'[warning]{article.diagnostic}[/warning]')
    console.print(table)

    preview = article.content[:PREVIEW_CHARS] + ('…' if len(article.content) > PREVIEW_CHARS else '')
    console.print(Panel(preview or '[dim]no content[/dim]', title='Content preview', border_style='blue'))


def run(args: argparse.Namespace, console: Console) -> int:
    """Execute a parsed command and return the exit code."""
    if args.command == 'redirects':
        options = RedirectOptions(
            max_redirects=args.max_redirects,
            follow_meta_refresh=not args.no_meta,
            follow_javascript_redirects=not args.no_js,
        )
        info = RedirectResolver().resolve(args.url, options)

        table = Table(title=f'Redirect chain ({info.redirect_count} redirects)')
        table.add_column('#', style='dim', justify='right')
        table.add_column('URL', style='cyan')
        for index, hop in enumerate(info.redirect_chain):
            table.add_row(str(index), hop)
        console.print(table)
        if info.error:
            console.print(f'[danger]✗ {info.error}[/danger]')
            return 1
        return 0

    llm_config = config_from_env(args.provider, args.model)
    if llm_config is None:
        console.print('[warning]⚠ No LLM API key found, using heuristic selectors only[/warning]')

    scraper = UnifiedScraper(llm_config=llm_config, console=console, debug_mode=args.debug)

    if args.command == 'article':
        article = scraper.scrape_article(args.url, resolve_redirects=args.resolve_redirects)
        if args.json:
            print(json.dumps(article_to_dict(article), indent=2, ensure_ascii=False))
        else:
            print_article(console, article)
        return 0 if article.is_usable else 1

    options = SourceScrapingOptions(
        max_links=args.max_links,
        include_patterns=args.include,
        exclude_patterns=args.exclude,
        ai_context=args.context,
    )
    links = scraper.scrape_source(args.url, options)

    table = Table(title=f'Article links ({len(links)})')
    table.add_column('#', style='dim', justify='right')
    table.add_column('URL', style='cyan')
    for index, link in enumerate(links, 1):
        table.add_row(str(index), link)
    console.print(table)
    return 0 if links else 1


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    load_dotenv()

    args = build_parser().parse_args(argv)

    # JSON output goes to stdout, so progress goes to stderr
    console = Console(theme=THEME, stderr=bool(getattr(args, 'json', False)))

    logfire_token = os.getenv('LOGFIRE_TOKEN')
    if logfire_token:
        logfire.configure(token=logfire_token, service_name='adaptscrape')

    init_state_dir()
    log_file = setup_local_logging(args.log_level)
    console.print(f'[info]Logging to {log_file}[/info]')

    try:
        return run(args, console)
    except AdaptScrapeError as e:
        console.print(f'[danger]✗ {e}[/danger]')
        return 1
    except KeyboardInterrupt:
        console.print('[warning]Interrupted[/warning]')
        return 130


if __name__ == '__main__':
    sys.exit(main())
