"""Host account databases and account-management tools.

The privileged operations (``useradd``, ``passwd``) and every lookup the
validators need sit behind :class:`AccountProvider` so validation and
provisioning can run against a fake in tests.

All subprocess calls go through ``subprocess.run`` with ``check=False``;
a missing binary surfaces as :class:`OSError` to the caller.
"""

from __future__ import annotations

import grp
import logging
import os
import pwd
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_HOME_BASE = "/home"


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """A passwd entry."""

    name: str
    uid: int
    gid: int
    home: Path
    shell: str


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    """Exit status and captured output of a finished command."""

    returncode: int
    stdout: str = ""
    stderr: str = ""


class AccountProvider(Protocol):
    """What the pipeline needs from the host."""

    def resolve_command(self, name: str) -> str | None:
        """Return the full path of executable *name*, or None."""
        ...

    def is_privileged(self) -> bool:
        """Whether the process runs with root identity."""
        ...

    def lookup_user(self, name: str) -> AccountRecord | None:
        """Return the passwd entry for *name*, or None."""
        ...

    def group_exists(self, name: str) -> bool:
        """Whether a group called *name* exists."""
        ...

    def registered_shells(self) -> frozenset[str]:
        """Shells listed in the host's registered-shells file."""
        ...

    def default_home(self, username: str) -> Path:
        """Home directory ``useradd -m`` would create for *username*."""
        ...

    def create_account(self, command: list[str]) -> CommandOutcome:
        """Run the assembled account-creation command."""
        ...

    def set_password(self, username: str) -> int:
        """Run the interactive password assignment; return its exit status."""
        ...


class SystemAccountProvider:
    """AccountProvider backed by the local passwd/group databases.

    Args:
        shells_file: Registered-shells list (``/etc/shells``).
        useradd_defaults: useradd defaults file holding ``HOME=``.
    """

    def __init__(
        self,
        *,
        shells_file: Path = Path("/etc/shells"),
        useradd_defaults: Path = Path("/etc/default/useradd"),
    ) -> None:
        self._shells_file = shells_file
        self._useradd_defaults = useradd_defaults

    def resolve_command(self, name: str) -> str | None:
        return shutil.which(name)

    def is_privileged(self) -> bool:
        return os.geteuid() == 0

    def lookup_user(self, name: str) -> AccountRecord | None:
        try:
            entry = pwd.getpwnam(name)
        except KeyError:
            return None
        return AccountRecord(
            name=entry.pw_name,
            uid=entry.pw_uid,
            gid=entry.pw_gid,
            home=Path(entry.pw_dir),
            shell=entry.pw_shell,
        )

    def group_exists(self, name: str) -> bool:
        try:
            grp.getgrnam(name)
        except KeyError:
            return False
        return True

    def registered_shells(self) -> frozenset[str]:
        try:
            raw = self._shells_file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.debug("Cannot read %s: %s", self._shells_file, exc)
            return frozenset()
        return frozenset(
            line.strip()
            for line in raw.splitlines()
            if line.strip() and not line.lstrip().startswith("#")
        )

    def default_home(self, username: str) -> Path:
        return Path(self._home_base()) / username

    def create_account(self, command: list[str]) -> CommandOutcome:
        proc = subprocess.run(command, capture_output=True, text=True, check=False)  # noqa: S603
        return CommandOutcome(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def set_password(self, username: str) -> int:
        # Inherit stdio so passwd can prompt on the terminal.
        proc = subprocess.run(["passwd", username], check=False)  # noqa: S603,S607
        return proc.returncode

    def _home_base(self) -> str:
        """Read ``HOME=`` from the useradd defaults file."""
        try:
            raw = self._useradd_defaults.read_text(encoding="utf-8")
        except OSError:
            return DEFAULT_HOME_BASE
        for line in raw.splitlines():
            key, sep, value = line.strip().partition("=")
            if sep and key == "HOME" and value.strip():
                return value.strip()
        return DEFAULT_HOME_BASE
