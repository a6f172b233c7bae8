"""AppContext — per-run collaborators shared by the CLI and the orchestrator.

Created once per invocation. Logging is configured at construction so
every later stage, including argument parsing, is recorded in the run's
log file. The account provider is created lazily so ``--help`` never
touches the host's account databases.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from mkacct.config.logging import configure_logging, init_log_sink, shutdown_logging
from mkacct.domain.accounts import RESERVED_USERNAMES
from mkacct.output.confirm import stdin_is_interactive
from mkacct.output.console import Renderer

if TYPE_CHECKING:
    from mkacct.config.settings import MkacctSettings
    from mkacct.infrastructure.accounts import AccountProvider


class AppContext:
    """Settings, renderer, log sink and account provider for one run.

    Args:
        settings: Host-level settings.
        prog_name: Name the program was invoked as (for usage and hints).
        renderer: Terminal renderer; a stdout renderer by default.
        provider: Account provider; the local host by default.
        interactive: Whether stdin can answer prompts; detected by default.
    """

    def __init__(
        self,
        settings: MkacctSettings,
        *,
        prog_name: str = "mkacct",
        renderer: Renderer | None = None,
        provider: AccountProvider | None = None,
        interactive: bool | None = None,
    ) -> None:
        self.settings = settings
        self.prog_name = prog_name
        self.renderer = renderer or Renderer()
        self.interactive = stdin_is_interactive() if interactive is None else interactive
        self._provider = provider

        self.log_path: Path | None = init_log_sink(settings.log, self.renderer)
        self._echo = configure_logging(sink=self.log_path, renderer=self.renderer)

    @property
    def provider(self) -> AccountProvider:
        """The account provider (created lazily on first access)."""
        if self._provider is None:
            from mkacct.infrastructure.accounts import SystemAccountProvider

            self._provider = SystemAccountProvider(
                shells_file=self.settings.shell.registry,
                useradd_defaults=self.settings.accounts.useradd_defaults,
            )
        return self._provider

    @property
    def reserved_usernames(self) -> frozenset[str]:
        return RESERVED_USERNAMES | frozenset(self.settings.accounts.extra_reserved)

    def set_verbose(self, verbose: bool) -> None:
        """Echo INFO records to the terminal from now on."""
        self._echo.verbose = verbose

    def close(self) -> None:
        """Flush and release the log sink."""
        shutdown_logging()
