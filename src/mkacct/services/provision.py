"""ProvisionService — account creation and password assignment.

INVARIANT: Dry-run never calls ``create_account`` or ``set_password``.
INVARIANT: A failed ``useradd`` is an EXECUTION error and the password
step is never attempted; a failed ``passwd`` is only a warning.
"""

from __future__ import annotations

import shlex
from collections.abc import Callable
from typing import TYPE_CHECKING

from mkacct.config.logging import get_logger
from mkacct.domain.accounts import Configuration, ProvisionOutcome
from mkacct.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from mkacct.infrastructure.accounts import AccountProvider

# Conventional shell status for "command not found".
COMMAND_NOT_FOUND = 127

log = get_logger("PROVISION")


def build_useradd_command(config: Configuration) -> list[str]:
    """Assemble the ``useradd`` invocation; the username is always last."""
    command = ["useradd", "-m", "-s", config.shell]
    if config.groups:
        command.extend(["-G", config.groups_csv])
    if config.comment:
        command.extend(["-c", config.comment])
    command.append(config.username)
    return command


class ProvisionService:
    """Creates the account described by a Configuration."""

    def __init__(self, provider: AccountProvider) -> None:
        self._provider = provider

    def provision(
        self,
        config: Configuration,
        *,
        on_created: Callable[[ProvisionOutcome], None] | None = None,
    ) -> ServiceResult:
        """Create the account, then assign its password unless skipped.

        *on_created* runs after a successful ``useradd`` and before the
        interactive password step.
        """
        op = "provision_account"
        username = config.username
        command = build_useradd_command(config)

        log.info(f"Starting user creation process for '{username}'")
        if config.groups:
            log.info(f"User will be added to groups: {config.groups_csv}")
        if config.comment:
            log.info(f"User comment set to: {config.comment}")
        log.debug(f"Executing command: {shlex.join(command)}")

        if config.dry_run:
            home = self._provider.default_home(username)
            log.info(f"DRY RUN: Would execute: {shlex.join(command)}")
            log.info(f"DRY RUN: Home directory would be created at: {home}")
            outcome = ProvisionOutcome(
                username=username,
                home_directory=str(home),
                shell=config.shell,
                dry_run=True,
                command=command,
            )
            return ServiceResult(ok=True, op=op, data={"outcome": outcome})

        try:
            finished = self._provider.create_account(command)
            returncode = finished.returncode
            output = [*finished.stdout.splitlines(), *finished.stderr.splitlines()]
        except OSError as exc:
            returncode = COMMAND_NOT_FOUND
            output = [str(exc)]
        # Output of a failed run is logged at WARNING so it reaches the terminal.
        emit = log.info if returncode == 0 else log.warning
        for line in output:
            if line.strip():
                emit(line)

        if returncode != 0:
            return ServiceResult.failure(
                op,
                ErrorCode.EXECUTION,
                f"Failed to create user '{username}' (exit code: {returncode})",
                exit_code=returncode,
            )

        log.info(f"User '{username}' created successfully")
        record = self._provider.lookup_user(username)
        home = str(record.home) if record else str(self._provider.default_home(username))
        outcome = ProvisionOutcome(
            username=username,
            created=True,
            home_directory=home,
            shell=config.shell,
            command=command,
        )
        if on_created is not None:
            on_created(outcome)

        warnings: list[str] = []
        if config.skip_password:
            log.info("Password setup skipped")
            warnings.append("User account may be locked until password is set")
            return ServiceResult(ok=True, op=op, data={"outcome": outcome}, warnings=warnings)

        log.info(f"Setting password for '{username}'")
        if self._set_password(username):
            outcome = outcome.model_copy(update={"password_set": True})
            log.info(f"Password set for '{username}'")
        else:
            warnings.append("Password setting failed or was cancelled; user account may be locked")
        return ServiceResult(ok=True, op=op, data={"outcome": outcome}, warnings=warnings)

    def _set_password(self, username: str) -> bool:
        try:
            return self._provider.set_password(username) == 0
        except OSError as exc:
            log.debug(f"passwd could not be started: {exc}")
            return False
