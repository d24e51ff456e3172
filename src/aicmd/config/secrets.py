"""Secret lookup from the environment and .env.secrets files.

Priority order:
1. Environment variables (os.environ)
2. .env.secrets in the current directory
3. .env.secrets next to the user config file
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import dotenv_values

from aicmd.config.paths import user_config_dir

SECRETS_FILE = ".env.secrets"


def _candidate_files() -> list[Path]:
    candidates = [Path(SECRETS_FILE)]
    config_dir = user_config_dir()
    if config_dir:
        candidates.append(config_dir / SECRETS_FILE)
    return candidates


@lru_cache(maxsize=1)
def _load_secrets(secrets_path: Path | None = None) -> dict[str, str | None]:
    """Load and cache secrets files.

    Args:
        secrets_path: Explicit file. If None, the default locations are
            searched and merged (earlier files win).
    """
    if secrets_path:
        return dotenv_values(secrets_path) if secrets_path.exists() else {}

    merged: dict[str, str | None] = {}
    for path in reversed(_candidate_files()):
        if path.exists():
            merged.update(dotenv_values(path))
    return merged


def fetch_secret(
    key: str,
    default: str | None = None,
    secrets_path: Path | None = None,
) -> str | None:
    """Fetch a secret from the environment or a .env.secrets file.

    Empty values count as unset.

    Args:
        key: Variable name (e.g., "ANTHROPIC_API_KEY")
        default: Value returned when not found
        secrets_path: Optional explicit .env.secrets file

    Example:
        >>> fetch_secret("ANTHROPIC_API_KEY")
        'sk-ant-...'
    """
    # os.environ first so tests can monkeypatch
    value = os.environ.get(key)
    if value:
        return value

    secrets = _load_secrets(secrets_path)
    value = secrets.get(key)
    if value:
        return value

    return default


def clear_secret_cache() -> None:
    """Forget cached .env.secrets contents."""
    _load_secrets.cache_clear()
