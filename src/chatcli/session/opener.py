"""Open files with the operating system's default viewer."""

import logging
import os
import subprocess
import sys

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


def viewer_command(path: str, platform: str | None = None) -> list[str]:
    """Command that opens ``path`` in the default viewer for ``platform``."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return ["cmd", "/c", "start", "", path]
    if platform == "darwin":
        return ["open", path]
    return ["xdg-open", path]


def open_file(path: str, console: Console | None = None) -> bool:
    """Launch the default viewer without waiting for it.

    Failures are reported and never raised.

    Returns:
        True if the viewer process was started
    """
    command = viewer_command(os.fspath(path))
    try:
        subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug("Viewer command %s failed: %s", command, e)
        if console is not None:
            console.print(f"[yellow]Failed to open file: {escape(str(e))}[/yellow]")
        return False
    return True
