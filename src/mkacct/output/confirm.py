"""Interactive yes/no confirmation.

The gate reads a single line from stdin. Callers must check
:func:`stdin_is_interactive` first; the gate itself never decides what a
non-interactive run should do.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Literal

from mkacct.output.console import MessageClass

if TYPE_CHECKING:
    from mkacct.output.console import Renderer

Default = Literal["y", "n"]

_AFFIRMATIVE = frozenset({"y", "yes"})


def stdin_is_interactive() -> bool:
    """Whether stdin is attached to a terminal."""
    return sys.stdin.isatty()


def _read_line() -> str:
    return sys.stdin.readline()


def confirm(
    prompt: str,
    default: Default = "n",
    *,
    renderer: Renderer,
    reader: Callable[[], str] | None = None,
) -> bool:
    """Ask *prompt* and return True only for an explicit or defaulted yes.

    Empty input (or end of input) selects *default*. Answers are compared
    case-insensitively against ``y`` and ``yes``.
    """
    renderer.render(MessageClass.WARNING, prompt, newline=False)
    suffix = " [Y/n]: " if default == "y" else " [y/N]: "
    renderer.render(MessageClass.INFO, suffix, newline=False)
    renderer.flush()

    response = (reader or _read_line)().strip() or default
    return response.lower() in _AFFIRMATIVE
