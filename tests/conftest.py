"""Root pytest configuration for all tests."""

from __future__ import annotations

import os

import pytest

from aicmd.config import clear_secret_cache, reset_config
from aicmd.llm.providers import ProviderName

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep the developer's keys, AI_CMD_* settings and config files out of tests."""
    for provider in ProviderName:
        monkeypatch.delenv(provider.env_var, raising=False)
    for name in list(os.environ):
        if name.startswith("AI_CMD_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    reset_config()
    clear_secret_cache()
    yield
    reset_config()
    clear_secret_cache()
