"""Debug snapshots of fetched pages and the selectors used on them."""

import json
import re
from pathlib import Path
from urllib.parse import urlparse

from rich.console import Console

from adaptscrape.models.selectors import ScrapingConfig
from adaptscrape.utils.files import get_debug_html_path

MAX_PATH_CHARS = 50
_UNSAFE = re.compile(r'[^\w.-]+')


class DebugManager:
    """Writes per-URL debug files when debug mode is on.

    Attributes:
        console: Rich console instance for output
        enabled: Whether anything is written
        debug_dir: Output directory, or None when disabled

    """

    def __init__(self, console: Console | None = None, enabled: bool = False, debug_dir: Path | None = None):
        """Initialize the manager.

        Args:
            console: Rich console instance for output
            enabled: Whether debug mode is enabled
            debug_dir: Output directory. Defaults to .adaptscrape/debug_html.

        """
        self.console = console or Console()
        self.enabled = enabled
        self.debug_dir: Path | None = None
        if enabled:
            self.debug_dir = debug_dir or get_debug_html_path()
            self.debug_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def safe_filename(url: str, suffix: str) -> str:
        """Filesystem-safe name built from a URL's host and path."""
        parsed = urlparse(url)
        path = _UNSAFE.sub('_', parsed.path.strip('/'))[:MAX_PATH_CHARS]
        base = _UNSAFE.sub('_', parsed.netloc) + (f'_{path}' if path else '')
        return f'{base}.{suffix}'

    def save_html(self, url: str, html: str, method: str) -> Path | None:
        """Save fetched HTML with a header comment naming its source."""
        if not self.enabled or self.debug_dir is None:
            return None

        filepath = self.debug_dir / self.safe_filename(url, 'html')
        try:
            filepath.write_text(
                f'<!-- URL: {url} -->\n<!-- Method: {method}, {len(html)} chars -->\n\n{html}', encoding='utf-8'
            )
        except OSError as e:
            self.console.print(f'[warning]Failed to save debug HTML: {e}[/warning]')
            return None

        self.console.print(f'  [dim]↻ Debug HTML saved to: {filepath}[/dim]')
        return filepath

    def save_selectors(self, url: str, config: ScrapingConfig) -> Path | None:
        """Save the selectors used for a page as JSON."""
        if not self.enabled or self.debug_dir is None:
            return None

        filepath = self.debug_dir / self.safe_filename(url, 'selectors.json')
        try:
            filepath.write_text(
                json.dumps({'url': url, 'config': config.model_dump()}, indent=2), encoding='utf-8'
            )
        except OSError as e:
            self.console.print(f'[warning]Failed to save debug selectors: {e}[/warning]')
            return None

        self.console.print(f'  [dim]↻ Debug selectors saved to: {filepath}[/dim]')
        return filepath
