"""Console output helpers built on Rich."""

import os
from typing import Optional

from rich.console import Console

_console: Optional[Console] = None
_color_enabled = "NO_COLOR" not in os.environ

# Styles mirror the SUCCESS / WARN / INFO / ERROR levels of the carton CLI.
STATUS_STYLES = {
    "success": "green",
    "warning": "yellow",
    "info": "cyan",
    "error": "red",
}


def set_color(enabled: bool) -> None:
    """Enable or disable colored output for subsequent messages."""
    global _color_enabled, _console
    _color_enabled = enabled
    _console = None


def get_console() -> Console:
    """Return the shared console, creating it on first use."""
    global _console
    if _console is None:
        _console = Console(
            no_color=not _color_enabled,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )
    return _console


def _rich_echo(message: str, style: Optional[str] = None) -> None:
    """Print a message verbatim, optionally styled."""
    get_console().print(message, style=style if _color_enabled else None, markup=False)


def _rich_success(message: str) -> None:
    _rich_echo(message, STATUS_STYLES["success"])


def _rich_info(message: str) -> None:
    _rich_echo(message, STATUS_STYLES["info"])


def _rich_warning(message: str) -> None:
    _rich_echo(message, STATUS_STYLES["warning"])


def _rich_error(message: str) -> None:
    _rich_echo(message, STATUS_STYLES["error"])
