"""Config file discovery.

Looks for mkacct.toml in a fixed list of system and user locations.
The MKACCT_CONFIG env var and the explicit ``config_path`` override win.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "mkacct.toml"
CONFIG_ENV_VAR = "MKACCT_CONFIG"


def search_paths() -> list[Path]:
    """Candidate config locations, highest priority first."""
    return [
        Path("/etc/mkacct") / CONFIG_FILENAME,
        Path.home() / ".config" / "mkacct" / CONFIG_FILENAME,
    ]


def find_config(candidates: list[Path] | None = None) -> Path | None:
    """Return the first existing config file, or None.

    Checks MKACCT_CONFIG env var first; when it is set, no other location
    is searched.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        if p.is_file():
            return p
        return None

    for candidate in candidates if candidates is not None else search_paths():
        if candidate.is_file():
            return candidate
    return None
