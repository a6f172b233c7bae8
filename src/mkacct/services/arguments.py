"""Command-line parsing into an immutable Configuration.

The grammar is deliberately forgiving: unknown ``--flags`` and extra
positional arguments are reported as warnings and skipped. Only a value
flag without a value, or an empty command line, is an error.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mkacct.domain.accounts import DEFAULT_SHELL, Configuration
from mkacct.services.result import ErrorCode, ServiceResult

OP = "parse_arguments"

HELP_FLAGS = frozenset({"--help", "-h"})

# flag -> Configuration field
VALUE_FLAGS: dict[str, str] = {
    "--groups": "groups",
    "--shell": "shell",
    "--comment": "comment",
}
BOOLEAN_FLAGS: dict[str, str] = {
    "--no-password": "skip_password",
    "--dry-run": "dry_run",
    "--verbose": "verbose",
}


def split_groups(raw: str) -> tuple[str, ...]:
    """Split ``g1,g2`` into group names, dropping blanks."""
    return tuple(g.strip() for g in raw.split(",") if g.strip())


def parse_arguments(args: Sequence[str], *, default_shell: str = DEFAULT_SHELL) -> ServiceResult:
    """Parse *args* (without the program name).

    On success ``data["config"]`` holds the Configuration, or
    ``data["help"]`` is True when help was requested.
    """
    if not args:
        return ServiceResult.failure(OP, ErrorCode.USAGE, "No arguments provided", show_usage=True)

    fields: dict[str, Any] = {"shell": default_shell}
    username = ""
    warnings: list[str] = []

    tokens = list(args)
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in HELP_FLAGS:
            return ServiceResult(ok=True, op=OP, data={"help": True}, warnings=warnings)

        if token in VALUE_FLAGS:
            value = tokens[i + 1] if i + 1 < len(tokens) else ""
            if not value or value.startswith("--"):
                return ServiceResult.failure(
                    OP, ErrorCode.USAGE, f"{token} requires a value", warnings=warnings
                )
            field = VALUE_FLAGS[token]
            fields[field] = split_groups(value) if field == "groups" else value
            i += 2
            continue

        if token in BOOLEAN_FLAGS:
            fields[BOOLEAN_FLAGS[token]] = True
        elif token.startswith("--"):
            warnings.append(f"Unknown option: {token}")
        elif not username:
            username = token
        else:
            warnings.append(f"Ignoring extra argument: {token}")
        i += 1

    config = Configuration(username=username, **fields)
    return ServiceResult(ok=True, op=OP, data={"config": config}, warnings=warnings)
