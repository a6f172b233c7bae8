"""Account configuration, naming rules, and provisioning outcome.

Username rules follow the POSIX portable username convention used by
shadow-utils: a lowercase letter or underscore, then lowercase letters,
digits, underscores or hyphens, optionally ending in ``$`` (Samba machine
accounts), 1-32 characters in total.

INVARIANT: Configuration is built once by the argument parser and never
mutated afterwards.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

DEFAULT_SHELL = "/bin/bash"
MAX_USERNAME_LENGTH = 32

USERNAME_PATTERN: re.Pattern[str] = re.compile(r"^[a-z_]([a-z0-9_-]{0,31}|[a-z0-9_-]{0,30}\$)$")

# Built-in service accounts shipped by common Debian/Ubuntu images.
RESERVED_USERNAMES: frozenset[str] = frozenset(
    {
        "root",
        "daemon",
        "bin",
        "sys",
        "sync",
        "games",
        "man",
        "lp",
        "mail",
        "news",
        "uucp",
        "proxy",
        "www-data",
        "backup",
        "list",
        "irc",
        "gnats",
        "nobody",
        "systemd-network",
        "systemd-resolve",
        "messagebus",
        "systemd-timesync",
        "syslog",
        "_apt",
        "tss",
        "uuidd",
        "tcpdump",
        "sshd",
        "landscape",
        "pollinate",
        "ec2-instance-connect",
        "systemd-coredump",
        "ubuntu",
        "lxd",
        "dnsmasq",
        "libvirt-qemu",
        "libvirt-dnsmasq",
    }
)


class Configuration(BaseModel):
    """Parsed command line, frozen after construction.

    ``username`` may be empty here; the username validator reports it.
    """

    model_config = {"frozen": True}

    username: str = ""
    groups: tuple[str, ...] = ()
    shell: str = DEFAULT_SHELL
    comment: str = ""
    skip_password: bool = False
    dry_run: bool = False
    verbose: bool = False

    @property
    def groups_csv(self) -> str:
        """Supplementary groups in ``useradd -G`` form."""
        return ",".join(self.groups)


class ProvisionOutcome(BaseModel):
    """What the provisioner did (or would do, in dry-run mode)."""

    model_config = {"frozen": True}

    username: str
    created: bool = False
    home_directory: str = ""
    shell: str = DEFAULT_SHELL
    password_set: bool = False
    dry_run: bool = False
    command: list[str] = Field(default_factory=list)


def is_portable_username(name: str) -> bool:
    """Check *name* against the POSIX portable username pattern."""
    return USERNAME_PATTERN.fullmatch(name) is not None
