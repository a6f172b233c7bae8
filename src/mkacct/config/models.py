"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, mkacct.toml only contains
overrides. A host with no config file runs with these values.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

# --- mkacct.toml sections ---


class LogConfig(BaseModel):
    """[log] section."""

    model_config = {"frozen": True}

    directory: Path = Path("/var/log/mkacct")
    fallback_directory: Path | None = None
    file_prefix: str = "mkacct"


class ShellConfig(BaseModel):
    """[shell] section."""

    model_config = {"frozen": True}

    default: str = "/bin/bash"
    registry: Path = Path("/etc/shells")


class AccountsConfig(BaseModel):
    """[accounts] section."""

    model_config = {"frozen": True}

    required_commands: list[str] = Field(default_factory=lambda: ["useradd", "passwd"])
    extra_reserved: list[str] = Field(default_factory=list)
    useradd_defaults: Path = Path("/etc/default/useradd")


class ConfirmConfig(BaseModel):
    """[confirm] section."""

    model_config = {"frozen": True}

    require_interactive: bool = False
