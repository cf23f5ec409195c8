"""Locations for files AdaptScrape writes at runtime."""

from pathlib import Path

STATE_DIR = '.adaptscrape'


def get_project_root() -> Path:
    """Find the project root by searching upwards from the current working directory.

    Stops at the first directory containing a marker file, and falls back to
    the current directory when none is found.
    """
    current_path = Path.cwd()
    markers = {'.git', 'pyproject.toml', STATE_DIR}

    for parent in [current_path, *current_path.parents]:
        if any((parent / marker).exists() for marker in markers):
            return parent

    return current_path


def get_state_dir() -> Path:
    """Return the .adaptscrape directory in the project root."""
    return get_project_root() / STATE_DIR


def get_logs_path() -> Path:
    """Return the path to the logs directory."""
    return get_state_dir() / 'logs'


def get_debug_html_path() -> Path:
    """Return the path where HTML of failed extractions is saved."""
    return get_state_dir() / 'debug_html'


def init_state_dir() -> Path:
    """Create the state directory tree and return its path."""
    state_dir = get_state_dir()
    get_logs_path().mkdir(parents=True, exist_ok=True)
    get_debug_html_path().mkdir(parents=True, exist_ok=True)

    gitignore = state_dir / '.gitignore'
    if not gitignore.exists():
        gitignore.write_text('# Automatically created by adaptscrape\n*\n')

    return state_dir
