"""Config file discovery.

Walk-up finder locates viewbind.toml, similar to how git finds .git/.
Supports VIEWBIND_CONFIG env var and --config CLI flag overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "viewbind.toml"
CONFIG_ENV_VAR = "VIEWBIND_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for viewbind.toml.

    Returns the path to the config file, or None if not found.
    Checks VIEWBIND_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        explicit = Path(env_path)
        return explicit if explicit.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
