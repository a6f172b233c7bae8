"""Environment and input validators.

Each validator returns a ServiceResult and short-circuits on the first
failing check. Host lookups go through the injected AccountProvider so
the rules can be exercised without a privileged environment.
"""

from __future__ import annotations

import os
import shlex
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from mkacct.config.logging import get_logger
from mkacct.domain.accounts import (
    MAX_USERNAME_LENGTH,
    RESERVED_USERNAMES,
    is_portable_username,
)
from mkacct.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from mkacct.infrastructure.accounts import AccountProvider

log = get_logger("VALIDATE")

USERNAME_RULES = [
    "Username must:",
    "  - Start with lowercase letter or underscore",
    "  - Contain only lowercase letters, numbers, underscore, or hyphen",
    "  - Be 1-32 characters long",
]


def check_dependencies(provider: AccountProvider, required: Iterable[str]) -> ServiceResult:
    """Fail listing every required command that cannot be resolved."""
    missing = [cmd for cmd in required if provider.resolve_command(cmd) is None]
    if missing:
        return ServiceResult.failure(
            "check_dependencies",
            ErrorCode.DEPENDENCY,
            f"Missing required commands: {' '.join(missing)}",
            missing=missing,
        )
    return ServiceResult(ok=True, op="check_dependencies")


def check_privileges(
    provider: AccountProvider, *, prog_name: str, args: Sequence[str] = ()
) -> ServiceResult:
    """Fail unless running as root, suggesting a sudo re-invocation."""
    if not provider.is_privileged():
        rerun = shlex.join(["sudo", prog_name, *args])
        return ServiceResult.failure(
            "check_privileges",
            ErrorCode.PRIVILEGE,
            "This command requires root privileges",
            hints=[f"Please run with: {rerun}"],
        )
    return ServiceResult(ok=True, op="check_privileges")


def validate_username(
    name: str,
    provider: AccountProvider,
    *,
    reserved: frozenset[str] = RESERVED_USERNAMES,
) -> ServiceResult:
    """Validate a new username.

    Checks, in order: non-empty, length, POSIX portable pattern, reserved
    names, existing account. A same-name group only produces a warning.
    """
    op = "validate_username"
    if not name:
        return ServiceResult.failure(op, ErrorCode.VALIDATION, "No username provided", show_usage=True)

    if len(name) > MAX_USERNAME_LENGTH:
        return ServiceResult.failure(
            op,
            ErrorCode.VALIDATION,
            f"Username '{name}' is too long (maximum {MAX_USERNAME_LENGTH} characters)",
        )

    if not is_portable_username(name):
        return ServiceResult.failure(
            op,
            ErrorCode.VALIDATION,
            f"Invalid username format: '{name}'",
            hints=USERNAME_RULES,
        )

    if name in reserved:
        return ServiceResult.failure(
            op, ErrorCode.VALIDATION, f"Username '{name}' is reserved by the system"
        )

    if provider.lookup_user(name) is not None:
        return ServiceResult.failure(op, ErrorCode.VALIDATION, f"User '{name}' already exists")

    warnings: list[str] = []
    if provider.group_exists(name):
        warnings.append(f"Group '{name}' already exists and will be used as primary group")

    return ServiceResult(ok=True, op=op, data={"username": name}, warnings=warnings)


def validate_shell(
    path: str,
    provider: AccountProvider,
    *,
    confirm: Callable[[str], bool],
    registry: str = "/etc/shells",
) -> ServiceResult:
    """Validate a login shell path.

    The path must be an existing executable file. A shell missing from the
    registered-shells list is logged as a warning before *confirm* is asked,
    and is accepted only if *confirm* says so.
    """
    op = "validate_shell"
    shell = Path(path)
    if not shell.is_file():
        return ServiceResult.failure(op, ErrorCode.VALIDATION, f"Shell '{path}' does not exist")

    if not os.access(shell, os.X_OK):
        return ServiceResult.failure(op, ErrorCode.VALIDATION, f"Shell '{path}' is not executable")

    if path not in provider.registered_shells():
        warning = f"Shell '{path}' is not listed in {registry}"
        log.warning(warning)
        if not confirm(f"{warning}. Continue anyway?"):
            return ServiceResult.failure(
                op,
                ErrorCode.VALIDATION,
                f"Shell '{path}' rejected: not a registered login shell",
            )

    return ServiceResult(ok=True, op=op, data={"shell": path})
