"""Logging configuration for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "sentence_transformers", "faiss")


def setup_logging(verbosity: int = 0, level: str = "WARNING") -> None:
    """Setup logging configuration.

    Args:
        verbosity: Number of -v flags (0-3); overrides `level` when set
        level: Configured log level used when verbosity is 0
    """
    if verbosity:
        log_level = {
            1: logging.INFO,
            2: logging.DEBUG,
        }.get(verbosity, logging.DEBUG)
    else:
        log_level = logging.getLevelName(level)

    # Remove all existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(log_level)

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity > 2,
    )
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root_logger.addHandler(console_handler)

    # Keep third party chatter down unless fully verbose
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbosity > 2 else logging.WARNING)
