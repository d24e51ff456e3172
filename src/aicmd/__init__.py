"""aicmd: AI command suggestions for an interactive command line."""

__version__ = "0.1.0"

from aicmd.config import Config, get_config, load_config
from aicmd.core import (
    Overlay,
    RequestOutcome,
    Resolution,
    Session,
    SessionState,
    Suggestion,
    SuggestionController,
    sanitize,
)
from aicmd.errors import (
    AICmdError,
    CallInFlightError,
    ConfigurationError,
    CredentialError,
    EmptyResponseError,
    NetworkError,
    ProviderError,
    ProviderTimeoutError,
)
from aicmd.llm import ProviderName, RequestDispatcher

__all__ = [
    "__version__",
    # Configuration
    "Config",
    "get_config",
    "load_config",
    # Lifecycle
    "SuggestionController",
    "Session",
    "SessionState",
    "Suggestion",
    "RequestOutcome",
    "Resolution",
    "Overlay",
    "sanitize",
    # Providers
    "ProviderName",
    "RequestDispatcher",
    # Errors
    "AICmdError",
    "ConfigurationError",
    "CredentialError",
    "ProviderError",
    "NetworkError",
    "ProviderTimeoutError",
    "EmptyResponseError",
    "CallInFlightError",
]
