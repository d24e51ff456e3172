"""Where aicmd looks for config.yaml.

Lowest to highest priority:
    system    /etc/aicmd/config.yaml (%PROGRAMDATA%\\aicmd on Windows)
    user      $XDG_CONFIG_HOME/aicmd/, ~/.config/aicmd/ or ~/.aicmd/
              (%APPDATA%\\aicmd on Windows)
    explicit  the file passed with --config
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

APP_NAME = "aicmd"
CONFIG_FILENAME = "config.yaml"
DOT_DIR = ".aicmd"


def _windows_dir(variable: str) -> Path | None:
    base = os.environ.get(variable)
    return Path(base) / APP_NAME if base else None


def user_config_dir() -> Path | None:
    """Directory for the user's config.yaml and .env.secrets (may not exist)."""
    if sys.platform == "win32":
        return _windows_dir("APPDATA")

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME

    home = Path.home()
    if (home / ".config").is_dir():
        return home / ".config" / APP_NAME
    return home / DOT_DIR


def get_system_config_path() -> Path | None:
    if sys.platform == "win32":
        directory = _windows_dir("PROGRAMDATA")
    else:
        directory = Path("/etc") / APP_NAME
    return directory / CONFIG_FILENAME if directory else None


def get_user_config_path() -> Path | None:
    directory = user_config_dir()
    return directory / CONFIG_FILENAME if directory else None


def get_config_paths(extra: Path | None = None) -> list[Path]:
    """Config files to merge, lowest priority first.

    Args:
        extra: Explicit config file (e.g. from --config), merged last.
    """
    candidates = [get_system_config_path(), get_user_config_path(), extra]
    return [path for path in candidates if path is not None]
