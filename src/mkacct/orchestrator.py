"""Orchestrator — the end-to-end provisioning pipeline.

parse -> dependencies -> privileges -> username -> shell -> confirm ->
provision -> report. The first failing stage ends the run; its
ServiceError decides the exit status (see ``EXIT_STATUS``).
"""

from __future__ import annotations

import shlex
import signal
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from mkacct.config.logging import get_logger
from mkacct.output.confirm import confirm
from mkacct.output.console import MessageClass
from mkacct.output.usage import render_usage
from mkacct.services.arguments import parse_arguments
from mkacct.services.provision import ProvisionService
from mkacct.services.result import ErrorCode, ServiceResult
from mkacct.services.validation import (
    check_dependencies,
    check_privileges,
    validate_shell,
    validate_username,
)

if TYPE_CHECKING:
    from types import FrameType

    from mkacct.context import AppContext
    from mkacct.domain.accounts import Configuration, ProvisionOutcome

log = get_logger()

# Log component per pipeline stage.
COMPONENTS: dict[str, str] = {
    "parse_arguments": "ARGS",
    "check_dependencies": "ENV",
    "check_privileges": "ENV",
    "validate_username": "VALIDATE",
    "validate_shell": "VALIDATE",
    "confirm": "CONFIRM",
    "provision_account": "PROVISION",
}

INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


@contextmanager
def interrupt_handlers(signals: Sequence[signal.Signals] = INTERRUPT_SIGNALS) -> Iterator[None]:
    """Turn SIGINT/SIGTERM into a logged exit with status 128+N.

    Previous handlers are restored on exit.
    """

    def _handle(signum: int, _frame: FrameType | None) -> None:
        log.info(f"Interrupted by signal {signal.Signals(signum).name}")
        raise SystemExit(128 + signum)

    previous = {sig: signal.signal(sig, _handle) for sig in signals}
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


class Orchestrator:
    """Runs one provisioning request against an AppContext."""

    def __init__(self, app: AppContext) -> None:
        self._app = app
        self._renderer = app.renderer

    def run(self, args: Sequence[str]) -> int:
        """Run the pipeline for *args* and return the process exit status."""
        with interrupt_handlers():
            return self._run(list(args))

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _run(self, args: list[str]) -> int:
        app = self._app
        log.info("Starting user management")
        log.info(f"Command line: {shlex.join([app.prog_name, *args])}")

        parsed = parse_arguments(args, default_shell=app.settings.shell.default)
        self._record_warnings(parsed)
        if not parsed.ok:
            return self._fail(parsed)
        if parsed.data.get("help"):
            self._usage()
            return 0

        config: Configuration = parsed.data["config"]
        app.set_verbose(config.verbose)

        provider = app.provider
        stages: list[Callable[[], ServiceResult]] = [
            lambda: check_dependencies(provider, app.settings.accounts.required_commands),
            lambda: check_privileges(provider, prog_name=app.prog_name, args=args),
            lambda: validate_username(config.username, provider, reserved=app.reserved_usernames),
            lambda: validate_shell(
                config.shell,
                provider,
                confirm=self._confirm_shell,
                registry=str(app.settings.shell.registry),
            ),
        ]
        for stage in stages:
            result = stage()
            self._record_warnings(result)
            if not result.ok:
                return self._fail(result)
            log.info(f"{result.op} passed", component=COMPONENTS[result.op])

        if config.verbose or config.dry_run:
            self._summary(config)

        if not config.dry_run:
            gate = self._confirm_creation(config)
            if gate is not None:
                return gate

        self._renderer.banner(f"Creating User: {config.username}")
        result = ProvisionService(provider).provision(
            config, on_created=lambda outcome: self._report_created(config, outcome)
        )
        self._record_warnings(result)
        if not result.ok:
            return self._fail(result)

        outcome: ProvisionOutcome = result.data["outcome"]
        if outcome.dry_run:
            self._info(f"DRY RUN: Would execute: {shlex.join(outcome.command)}")
            self._info(f"DRY RUN: Home directory would be created at: {outcome.home_directory}")

        log.info("User management completed successfully")
        self._renderer.render(MessageClass.SUCCESS, "✓ User management completed successfully")
        if app.log_path is not None:
            self._info(f"Detailed logs available at: {app.log_path}")
        return 0

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def _confirm_creation(self, config: Configuration) -> int | None:
        """Ask before mutating the host. Returns an exit status to stop with, or None."""
        if self._app.interactive:
            if not confirm(f"Create user '{config.username}'?", "y", renderer=self._renderer):
                log.info("User creation cancelled by user", component="CONFIRM")
                self._info("Operation cancelled")
                return 0
            return None

        if self._app.settings.confirm.require_interactive:
            return self._fail(
                ServiceResult.failure(
                    "confirm",
                    ErrorCode.CONFIRMATION_REQUIRED,
                    "Standard input is not interactive; refusing to create the account",
                    hints=["Run from a terminal, or preview with --dry-run"],
                )
            )
        log.warning(
            "Standard input is not interactive; proceeding without confirmation",
            component="CONFIRM",
        )
        return None

    def _confirm_shell(self, prompt: str) -> bool:
        if not self._app.interactive:
            log.warning(
                "Standard input is not interactive; cannot confirm shell", component="CONFIRM"
            )
            return False
        accepted = confirm(prompt, "n", renderer=self._renderer)
        log.info(
            f"Unregistered shell {'accepted' if accepted else 'declined'} by user",
            component="CONFIRM",
        )
        return accepted

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _record_warnings(self, result: ServiceResult) -> None:
        component = COMPONENTS.get(result.op, "MAIN")
        for warning in result.warnings:
            log.warning(warning, component=component)

    def _fail(self, result: ServiceResult) -> int:
        """Log and render a failed stage; return its exit status."""
        assert result.error is not None
        error = result.error
        log.error(error.message, component=COMPONENTS.get(result.op, "MAIN"), code=str(error.code))
        self._renderer.render(MessageClass.ERROR, error.message)
        for hint in error.detail.get("hints", []):
            self._info(hint)
        if error.detail.get("show_usage"):
            self._usage()
        return result.exit_status

    def _report_created(self, config: Configuration, outcome: ProvisionOutcome) -> None:
        self._renderer.render(MessageClass.SUCCESS, f"✓ User '{outcome.username}' created successfully")
        self._info(f"Home directory: {outcome.home_directory}")
        self._info(f"Shell: {outcome.shell}")
        if config.skip_password:
            self._info("Password setup skipped")
        else:
            self._info(f"Setting password for '{outcome.username}'")
            self._renderer.flush()

    def _summary(self, config: Configuration) -> None:
        self._info("Configuration Summary:")
        rows = [
            ("Username", config.username),
            ("Shell", config.shell),
            ("Groups", config.groups_csv or "none"),
            ("Comment", config.comment or "none"),
            ("Skip password", str(config.skip_password).lower()),
            ("Dry run", str(config.dry_run).lower()),
        ]
        for label, value in rows:
            self._info(f"  {label}: {value}")
        self._renderer.blank()

    def _usage(self) -> None:
        render_usage(
            self._renderer,
            prog_name=self._app.prog_name,
            default_shell=self._app.settings.shell.default,
        )

    def _info(self, text: str) -> None:
        self._renderer.render(MessageClass.INFO, text)
