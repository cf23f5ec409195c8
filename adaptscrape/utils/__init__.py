"""Utility helpers for AdaptScrape."""

from adaptscrape.utils.debug import DebugManager
from adaptscrape.utils.errors import ErrorLogger, ErrorRecord, infer_error_type
from adaptscrape.utils.files import get_debug_html_path, get_logs_path, get_project_root, init_state_dir
from adaptscrape.utils.headers import HeaderGenerator, UserAgentRotator
from adaptscrape.utils.logging import setup_local_logging

__all__ = [
    'DebugManager',
    'ErrorLogger',
    'ErrorRecord',
    'HeaderGenerator',
    'UserAgentRotator',
    'get_debug_html_path',
    'get_logs_path',
    'get_project_root',
    'infer_error_type',
    'init_state_dir',
    'setup_local_logging',
]
