"""Provider layer: adapters, credentials and request dispatch."""

from aicmd.llm.adapters import (
    ADAPTERS,
    AnthropicAdapter,
    DeepSeekAdapter,
    GeminiAdapter,
    LiteLLMAdapter,
    OllamaAdapter,
    OpenAIAdapter,
    create_adapter,
)
from aicmd.llm.credentials import CredentialResolver, remediation_message
from aicmd.llm.dispatcher import RequestDispatcher
from aicmd.llm.prompt import build_system_prompt, prepare_input
from aicmd.llm.provider import Message, ProviderAdapter, Role
from aicmd.llm.providers import PROVIDER_SPECS, ProviderName, ProviderSpec

__all__ = [
    # Protocol and message types
    "ProviderAdapter",
    "Message",
    "Role",
    # Providers
    "ProviderName",
    "ProviderSpec",
    "PROVIDER_SPECS",
    # Adapters
    "LiteLLMAdapter",
    "AnthropicAdapter",
    "OpenAIAdapter",
    "GeminiAdapter",
    "DeepSeekAdapter",
    "OllamaAdapter",
    "ADAPTERS",
    "create_adapter",
    # Dispatch
    "RequestDispatcher",
    "CredentialResolver",
    "remediation_message",
    "build_system_prompt",
    "prepare_input",
]
