"""Logging setup for chat-cli.

Modules log through ``logging.getLogger(__name__)``; the CLI installs a Rich
handler on the package logger so diagnostics share the terminal console.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "chatcli"


def setup_logging(level: int = logging.WARNING, console: Console | None = None) -> logging.Logger:
    """Configure the package logger.

    Calling this more than once replaces the previous handler instead of
    stacking a second one.

    Args:
        level: Minimum level to emit
        console: Console to write to (defaults to stderr)

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
