"""Usage screen for ``mkacct --help`` and usage errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mkacct.output.console import MessageClass

if TYPE_CHECKING:
    from mkacct.output.console import Renderer

_OPTIONS: list[tuple[str, str]] = [
    ("--groups <group1,group2>", "Add user to specified groups"),
    ("--shell <shell_path>", "Set custom shell (default: {default_shell})"),
    ("--comment <comment>", "Set user comment/description"),
    ("--no-password", "Skip password setup"),
    ("--dry-run", "Show what would be done without executing"),
    ("--verbose", "Enable verbose output"),
    ("--help, -h", "Show this help message"),
]

_EXAMPLES = [
    "{prog} john",
    "{prog} jane --groups sudo,docker --comment 'Jane Doe'",
    "{prog} admin --shell /bin/zsh --no-password",
    "{prog} test --dry-run",
]


def render_usage(renderer: Renderer, *, prog_name: str, default_shell: str) -> None:
    """Print the banner, usage line, options and examples."""
    renderer.banner("User Account Provisioning")

    renderer.render(MessageClass.INFO, "USAGE:")
    renderer.line(f"  {prog_name} <username> [OPTIONS]")
    renderer.blank()

    renderer.render(MessageClass.INFO, "OPTIONS:")
    width = max(len(flag) for flag, _ in _OPTIONS) + 2
    for flag, text in _OPTIONS:
        line = f"  {flag.ljust(width)} {text.format(default_shell=default_shell)}"
        renderer.line(line)
    renderer.blank()

    renderer.render(MessageClass.INFO, "EXAMPLES:")
    for example in _EXAMPLES:
        renderer.line(f"  {example.format(prog=prog_name)}")
    renderer.blank()
