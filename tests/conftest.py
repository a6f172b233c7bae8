"""Shared pytest fixtures and test helpers for mkacct tests."""

from __future__ import annotations

import logging
import stat
from collections.abc import Generator
from dataclasses import dataclass, field
from io import StringIO
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner

from mkacct.config.logging import LOGGER_NAME, shutdown_logging
from mkacct.config.settings import MkacctSettings
from mkacct.infrastructure.accounts import AccountRecord, CommandOutcome
from mkacct.output.console import Renderer, create_console


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_host(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep every test away from the host's config and log directories."""
    monkeypatch.setenv("MKACCT_CONFIG", str(tmp_path / "absent.toml"))
    monkeypatch.setenv("MKACCT_LOG__DIRECTORY", str(tmp_path / "logs"))
    monkeypatch.delenv("NO_COLOR", raising=False)
    yield
    shutdown_logging()
    structlog.reset_defaults()
    logging.getLogger(LOGGER_NAME).setLevel(logging.NOTSET)


@pytest.fixture
def console_buffer() -> StringIO:
    return StringIO()


@pytest.fixture
def renderer(console_buffer: StringIO) -> Renderer:
    """Plain-text renderer writing into ``console_buffer``."""
    return Renderer(create_console(file=console_buffer, no_color=True, width=120))


@pytest.fixture
def settings(tmp_path: Path) -> MkacctSettings:
    return MkacctSettings.load(log={"directory": tmp_path / "logs"})


def make_shell(directory: Path, name: str = "testsh", *, executable: bool = True) -> Path:
    """Create a stand-in shell binary under *directory*."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n", encoding="utf-8")
    mode = stat.S_IRUSR | stat.S_IWUSR
    if executable:
        mode |= stat.S_IXUSR
    path.chmod(mode)
    return path


@pytest.fixture
def shell(tmp_path: Path) -> Path:
    """An executable shell that the fake provider lists as registered."""
    return make_shell(tmp_path / "bin")


# ---------------------------------------------------------------------------
# Fake host
# ---------------------------------------------------------------------------


@dataclass
class FakeAccountProvider:
    """In-memory AccountProvider recording every mutating call."""

    commands: set[str] = field(default_factory=lambda: {"useradd", "passwd"})
    privileged: bool = True
    users: dict[str, AccountRecord] = field(default_factory=dict)
    groups: set[str] = field(default_factory=set)
    shells: set[str] = field(default_factory=set)
    home_base: Path = Path("/home")
    create_returncode: int = 0
    create_stderr: str = ""
    create_error: OSError | None = None
    passwd_returncode: int = 0
    created: list[list[str]] = field(default_factory=list)
    passwords: list[str] = field(default_factory=list)

    def resolve_command(self, name: str) -> str | None:
        return f"/usr/sbin/{name}" if name in self.commands else None

    def is_privileged(self) -> bool:
        return self.privileged

    def lookup_user(self, name: str) -> AccountRecord | None:
        return self.users.get(name)

    def group_exists(self, name: str) -> bool:
        return name in self.groups

    def registered_shells(self) -> frozenset[str]:
        return frozenset(self.shells)

    def default_home(self, username: str) -> Path:
        return self.home_base / username

    def create_account(self, command: list[str]) -> CommandOutcome:
        self.created.append(command)
        if self.create_error is not None:
            raise self.create_error
        if self.create_returncode == 0:
            username = command[-1]
            shell = command[command.index("-s") + 1]
            self.users[username] = AccountRecord(
                name=username, uid=1001, gid=1001, home=self.default_home(username), shell=shell
            )
        return CommandOutcome(returncode=self.create_returncode, stderr=self.create_stderr)

    def set_password(self, username: str) -> int:
        self.passwords.append(username)
        return self.passwd_returncode


@pytest.fixture
def provider(shell: Path) -> FakeAccountProvider:
    """Privileged fake host with ``shell`` registered."""
    return FakeAccountProvider(shells={str(shell)})
