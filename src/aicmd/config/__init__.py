"""Configuration management for aicmd.

Layered YAML configuration with environment overrides:
- System-level config (/etc/aicmd/ or %PROGRAMDATA%)
- User-level config (~/.config/aicmd/, ~/.aicmd/ or %APPDATA%)
- An explicit file passed with --config
- AI_CMD_* environment variables (highest priority)

Example usage:
    from aicmd.config import load_config

    config = load_config()
    print(config.llm.provider, config.keys.trigger)
"""

from aicmd.config.loader import (
    env_overrides,
    get_config,
    load_config,
    reset_config,
)
from aicmd.config.paths import (
    get_config_paths,
    get_system_config_path,
    get_user_config_path,
    user_config_dir,
)
from aicmd.config.schema import (
    Config,
    KeyConfig,
    LLMConfig,
    LoggingConfig,
    ShellConfig,
)
from aicmd.config.secrets import (
    clear_secret_cache,
    fetch_secret,
)

__all__ = [
    # Main API
    "Config",
    "load_config",
    "get_config",
    "reset_config",
    "env_overrides",
    # Schema types
    "KeyConfig",
    "LLMConfig",
    "LoggingConfig",
    "ShellConfig",
    # Secret management
    "fetch_secret",
    "clear_secret_cache",
    # Path utilities
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
    "user_config_dir",
]
