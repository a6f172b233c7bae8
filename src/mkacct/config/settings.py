"""Unified settings — env vars and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — explicit overrides (tests, embedding callers)
  2. Env vars     — ``MKACCT_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``mkacct.toml`` found by :mod:`mkacct.config.discovery`
  4. Code defaults — baked into the section models

The command line itself is not a settings source: it is parsed into an
immutable :class:`~mkacct.domain.accounts.Configuration` per run.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from mkacct.config.discovery import CONFIG_ENV_VAR, find_config
from mkacct.config.models import AccountsConfig, ConfirmConfig, LogConfig, ShellConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a discovered ``mkacct.toml`` file.

    Only the known sections (``[log]``, ``[shell]``, ``[accounts]``,
    ``[confirm]``) may appear at the top level of the file.
    """

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = _read_config(toml_path, settings_cls)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


def _read_config(path: Path, settings_cls: type[BaseSettings]) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as exc:
        raise click.ClickException(f"Cannot read config file {path}: {exc.strerror}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(
            f"Invalid TOML in {path}: {exc} (set {CONFIG_ENV_VAR} to use another file)"
        ) from exc

    sections = set(settings_cls.model_fields) - {"config_path"}
    unknown = sorted(set(data) - sections)
    if unknown:
        raise click.ClickException(
            f"Unknown section in {path}: {', '.join(unknown)} "
            f"(expected one of: {', '.join(sorted(sections))})"
        )
    return data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class MkacctSettings(BaseSettings):
    """Host-level settings for mkacct, frozen after construction.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MKACCT_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    log: LogConfig = Field(default_factory=LogConfig)
    shell: ShellConfig = Field(default_factory=ShellConfig)
    accounts: AccountsConfig = Field(default_factory=AccountsConfig)
    confirm: ConfirmConfig = Field(default_factory=ConfirmConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def load(cls, *, config_path: str | Path | None = None, **overrides: Any) -> MkacctSettings:
        """Construct settings, discovering ``mkacct.toml`` unless *config_path* is given."""
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config()

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **overrides)
        finally:
            _tls.toml_path = None
