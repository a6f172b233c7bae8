"""Rich Console factory, theme, and the semantic message renderer.

Every terminal message belongs to a :class:`MessageClass`; the class maps
to a style in ``MKACCT_THEME``. Colors are switched off entirely (plain
text, no escape codes) when stdout is not a TTY, ``NO_COLOR`` is set, or
``TERM=dumb``.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from enum import StrEnum
from typing import IO

from rich.console import Console
from rich.text import Text
from rich.theme import Theme


class MessageClass(StrEnum):
    """Semantic class of a terminal message."""

    ERROR = "error"
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"
    HIGHLIGHT = "highlight"
    CRITICAL = "critical"


MKACCT_THEME = Theme(
    {
        "mkacct.error": "bold red",
        "mkacct.success": "bold green",
        "mkacct.warning": "bold yellow",
        "mkacct.info": "cyan",
        "mkacct.debug": "dim",
        "mkacct.highlight": "bold",
        "mkacct.critical": "white on red",
    }
)

BANNER_WIDTH = 60


def style_for(message_class: MessageClass | str) -> str:
    """Return the theme style name for a message class (or log level name)."""
    try:
        return f"mkacct.{MessageClass(str(message_class).lower())}"
    except ValueError:
        return ""


def color_enabled(stream: IO[str] | None = None, environ: Mapping[str, str] | None = None) -> bool:
    """Whether styled output should be written to *stream*."""
    env = os.environ if environ is None else environ
    target = stream if stream is not None else sys.stdout
    if env.get("NO_COLOR"):
        return False
    if env.get("TERM") == "dumb":
        return False
    isatty = getattr(target, "isatty", None)
    return bool(isatty and isatty())


def create_console(
    *,
    file: IO[str] | None = None,
    no_color: bool | None = None,
    width: int | None = None,
) -> Console:
    """Create the terminal Console.

    Args:
        file: Output stream; None follows ``sys.stdout`` at print time.
        no_color: Force plain output. None decides via :func:`color_enabled`.
        width: Override terminal width (useful for consistent test output).
    """
    if no_color is None:
        no_color = not color_enabled(file)
    return Console(
        file=file,
        theme=MKACCT_THEME,
        color_system=None if no_color else "auto",
        no_color=no_color,
        highlight=False,
        emoji=False,
        width=width,
    )


class Renderer:
    """Writes semantic messages to the terminal.

    Rendering never raises: a closed or broken terminal stream drops the
    message.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or create_console()

    def render(self, message_class: MessageClass, text: str, *, newline: bool = True) -> None:
        """Print *text* in the style of *message_class*."""
        self._print(Text(text, style=style_for(message_class)), end="\n" if newline else "")

    def line(self, text: str) -> None:
        """Print unstyled *text*."""
        self._print(Text(text), end="\n")

    def markup(self, markup: str) -> None:
        """Print a line of Rich markup (already escaped by the caller)."""
        self._print(markup, end="\n")

    def banner(self, title: str) -> None:
        """Print *title* centered between two rules."""
        border = "=" * BANNER_WIDTH
        self.blank()
        self.render(MessageClass.HIGHLIGHT, border)
        self.render(MessageClass.HIGHLIGHT, title.center(BANNER_WIDTH).rstrip())
        self.render(MessageClass.HIGHLIGHT, border)
        self.blank()

    def blank(self) -> None:
        self._print("", end="\n")

    def flush(self) -> None:
        try:
            self.console.file.flush()
        except (OSError, ValueError):
            pass

    def _print(self, renderable: Text | str, *, end: str) -> None:
        try:
            self.console.print(renderable, end=end, soft_wrap=True)
        except (OSError, ValueError):
            # Terminal gone (closed pipe, closed file); the log file still has the record.
            pass
