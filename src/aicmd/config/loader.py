"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Environment variable overrides (AI_CMD_*)
- Conversion from dict to the typed Config dataclass
- Caching with reset support
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from aicmd.config.merge import merge_configs
from aicmd.config.paths import get_config_paths
from aicmd.config.schema import (
    DEFAULT_TRIGGER_KEY,
    Config,
    KeyConfig,
    LLMConfig,
    LoggingConfig,
    ShellConfig,
)

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("aicmd.config")

ENV_PREFIX = "AI_CMD_"

# AI_CMD_<PROVIDER>_MODEL, e.g. AI_CMD_OPENAI_MODEL
_MODEL_VAR_RE = re.compile(rf"^{ENV_PREFIX}([A-Z0-9]+)_MODEL$")

_TRUE_VALUES = {"1", "true", "yes", "on"}

_cached_config: Config | None = None


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _parse_float(value: Any, default: float, name: str) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        _log.warning("Ignoring invalid %s: %r", name, value)
        return default
    if result <= 0:
        _log.warning("Ignoring non-positive %s: %r", name, value)
        return default
    return result


def _parse_int(value: Any, default: int, name: str) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        _log.warning("Ignoring invalid %s: %r", name, value)
        return default
    return result if result > 0 else default


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Build a config dict from AI_CMD_* environment variables.

    API keys are not read here; see aicmd.llm.credentials.

    Args:
        environ: Environment mapping. Defaults to os.environ.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}

    def put(section: str, key: str, value: Any) -> None:
        overrides.setdefault(section, {})[key] = value

    if env.get(f"{ENV_PREFIX}KEY"):
        put("keys", "trigger", env[f"{ENV_PREFIX}KEY"])
    if env.get(f"{ENV_PREFIX}PROVIDER"):
        put("llm", "provider", env[f"{ENV_PREFIX}PROVIDER"])
    if env.get(f"{ENV_PREFIX}API_BASE"):
        put("llm", "api_base", env[f"{ENV_PREFIX}API_BASE"])
    if env.get(f"{ENV_PREFIX}TIMEOUT"):
        put("llm", "timeout", env[f"{ENV_PREFIX}TIMEOUT"])
    if env.get(f"{ENV_PREFIX}DEBUG"):
        put("logging", "debug", _parse_bool(env[f"{ENV_PREFIX}DEBUG"]))
    if env.get(f"{ENV_PREFIX}LOG"):
        put("logging", "file", env[f"{ENV_PREFIX}LOG"])

    models: dict[str, str] = {}
    # Legacy: AI_CMD_MODEL names the anthropic model
    if env.get(f"{ENV_PREFIX}MODEL"):
        models["anthropic"] = env[f"{ENV_PREFIX}MODEL"]
    for name, value in env.items():
        match = _MODEL_VAR_RE.match(name)
        if match and value:
            models[match.group(1).lower()] = value
    if models:
        put("llm", "models", models)

    return overrides


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass."""
    keys_data = data.get("keys") or {}
    keys = KeyConfig(trigger=str(keys_data.get("trigger") or DEFAULT_TRIGGER_KEY))

    llm_data = data.get("llm") or {}
    defaults = LLMConfig()
    models_data = llm_data.get("models") or {}
    llm = LLMConfig(
        provider=str(llm_data.get("provider") or defaults.provider),
        models={
            str(k).strip().lower(): str(v)
            for k, v in models_data.items()
            if v
        } if isinstance(models_data, dict) else {},
        api_base=llm_data.get("api_base"),
        timeout=_parse_float(llm_data.get("timeout", defaults.timeout), defaults.timeout, "llm.timeout"),
        max_tokens=_parse_int(llm_data.get("max_tokens", defaults.max_tokens), defaults.max_tokens, "llm.max_tokens"),
    )

    log_data = data.get("logging") or {}
    log_defaults = LoggingConfig()
    logging_config = LoggingConfig(
        debug=_parse_bool(log_data.get("debug", log_defaults.debug)),
        file=str(log_data.get("file") or log_defaults.file),
        level=log_data.get("level"),
    )

    shell_data = data.get("shell") or {}
    shell_defaults = ShellConfig()
    shell = ShellConfig(
        prompt=str(shell_data.get("prompt", shell_defaults.prompt)),
        history_file=shell_data.get("history_file"),
        poll_interval=_parse_float(
            shell_data.get("poll_interval", shell_defaults.poll_interval),
            shell_defaults.poll_interval,
            "shell.poll_interval",
        ),
    )

    known_keys = {"keys", "llm", "logging", "shell"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(keys=keys, llm=llm, logging=logging_config, shell=shell, extra=extra)


def load_config(config_file: Path | None = None, reload: bool = False) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables (AI_CMD_*)
    2. Explicit config file (config_file)
    3. User config (~/.config/aicmd/config.yaml or ~/.aicmd/config.yaml)
    4. System config (/etc/aicmd/config.yaml)

    Args:
        config_file: Optional explicit config file.
        reload: Force reload even if cached.
    """
    global _cached_config

    if _cached_config is not None and not reload and config_file is None:
        return _cached_config

    layers: list[dict[str, Any]] = []
    for path in get_config_paths(config_file):
        data = load_yaml_file(path)
        if data:
            _log.debug("Loaded config from %s", path)
            layers.append(data)

    env_config = env_overrides()
    if env_config:
        layers.append(env_config)

    config = dict_to_config(merge_configs(*layers))

    if config_file is None:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset the cached config (used by tests)."""
    global _cached_config
    _cached_config = None
