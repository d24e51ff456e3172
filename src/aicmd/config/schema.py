"""Configuration schema dataclasses for aicmd.

All fields have defaults so partial configs merge cleanly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_TRIGGER_KEY = "c-z"
DEFAULT_PROVIDER = "anthropic"
DEFAULT_LOG_FILE = "/tmp/aicmd.log"


@dataclass
class KeyConfig:
    """Key bindings."""

    trigger: str = DEFAULT_TRIGGER_KEY  # prompt_toolkit or zsh (^z) notation


@dataclass
class LLMConfig:
    """Provider selection and request limits.

    ``provider`` is kept as the raw configured string; it is validated when
    the request dispatcher is built.
    """

    provider: str = DEFAULT_PROVIDER
    models: dict[str, str] = field(default_factory=dict)  # provider -> model override
    api_base: str | None = None  # Custom endpoint
    timeout: float = 30.0  # Seconds per provider call
    max_tokens: int = 256

    def model_for(self, provider: str) -> str | None:
        """Configured model for a provider, or None to use its default."""
        return self.models.get(provider.strip().lower())


@dataclass
class LoggingConfig:
    """Logging configuration."""

    debug: bool = False  # Log every state transition at DEBUG
    file: str = DEFAULT_LOG_FILE  # Debug log destination
    level: str | None = None  # Explicit level (DEBUG, INFO, WARNING, ERROR)


@dataclass
class ShellConfig:
    """Interactive session settings."""

    prompt: str = "❯ "
    history_file: str | None = None  # e.g. ~/.local/state/aicmd/history
    poll_interval: float = 0.1  # Seconds between progress updates


@dataclass
class Config:
    """Root configuration object."""

    keys: KeyConfig = field(default_factory=KeyConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)

    # Unknown top-level sections, kept for forward compatibility
    extra: dict[str, Any] = field(default_factory=dict)
