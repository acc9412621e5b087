"""Shared helpers for the CLI commands."""

import logging
import sys
from contextlib import contextmanager

from rich.console import Console

from ..config.settings import settings
from ..database.connection import get_session_context

console = Console()


def setup_logging():
    """
    Configure logging for CLI operations.

    Sets up dual logging output:
    - File logging for a permanent record of season transitions and repairs
    - Console logging for real-time feedback
    """
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(settings.log_file),
            logging.StreamHandler(sys.stdout),
        ],
    )


@contextmanager
def open_session():
    """Session for one command; committed and closed when the command finishes."""
    with get_session_context() as session:
        yield session
