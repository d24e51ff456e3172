"""Provider definitions.

The set of supported backends is closed: :class:`ProviderName` has one
member per backend and parsing any other name fails with a
ConfigurationError. Per-provider details (litellm model prefix, default
model, where to get a key) are loaded from providers.yaml.
"""

from __future__ import annotations

import importlib.resources
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

import yaml

from aicmd.errors import ConfigurationError


class ProviderName(Enum):
    """Supported suggestion backends."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"
    DEEPSEEK = "deepseek"
    OLLAMA = "ollama"

    @classmethod
    def parse(cls, name: str | None) -> ProviderName:
        """Parse a configured provider name.

        Raises:
            ConfigurationError: If the name is empty or not a supported backend.
        """
        normalized = (name or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            supported = ", ".join(p.value for p in cls)
            raise ConfigurationError(
                f"unknown provider '{name}' (supported: {supported})"
            ) from None

    @property
    def env_var(self) -> str:
        """Environment variable holding the API key, e.g. ANTHROPIC_API_KEY."""
        return f"{self.value.upper()}_API_KEY"

    @property
    def keychain_service(self) -> str:
        """Service name used in the local credential store."""
        return f"{self.value}-api-key"


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of a backend."""

    name: ProviderName
    display_name: str
    model_prefix: str
    default_model: str
    requires_key: bool = True
    default_api_base: str | None = None
    key_url: str | None = None

    def litellm_model(self, model: str) -> str:
        """Return the litellm model string for a configured model id."""
        if not self.model_prefix or model.startswith(self.model_prefix):
            return model
        return f"{self.model_prefix}{model}"


@lru_cache(maxsize=1)
def _load_providers_yaml() -> dict[str, Any]:
    """Load providers.yaml from package resources."""
    files = importlib.resources.files("aicmd.llm")
    yaml_path = files.joinpath("providers.yaml")
    with importlib.resources.as_file(yaml_path) as path:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)


def _build_provider_specs() -> dict[ProviderName, ProviderSpec]:
    """Build ProviderSpec objects from YAML data."""
    data = _load_providers_yaml().get("providers", {})
    specs: dict[ProviderName, ProviderSpec] = {}

    for provider in ProviderName:
        entry = data.get(provider.value)
        if entry is None:
            raise RuntimeError(f"providers.yaml has no entry for {provider.value}")
        specs[provider] = ProviderSpec(
            name=provider,
            display_name=entry.get("display_name", provider.value),
            model_prefix=entry.get("model_prefix", ""),
            default_model=entry["default_model"],
            requires_key=entry.get("requires_key", True),
            default_api_base=entry.get("default_api_base"),
            key_url=entry.get("key_url"),
        )

    return specs


PROVIDER_SPECS: dict[ProviderName, ProviderSpec] = _build_provider_specs()

DEFAULT_MODELS: dict[str, str] = {
    p.value: spec.default_model for p, spec in PROVIDER_SPECS.items()
}


def get_provider_spec(provider: ProviderName) -> ProviderSpec:
    """Get the static description of a provider."""
    return PROVIDER_SPECS[provider]
