"""Request dispatcher: provider selection and invocation.

The dispatcher is built once from configuration. Building it validates the
provider name, so a misconfigured provider fails before any request is made.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from aicmd.errors import EmptyResponseError
from aicmd.llm.adapters import DEFAULT_MAX_TOKENS, DEFAULT_TIMEOUT, create_adapter
from aicmd.llm.credentials import CredentialResolver
from aicmd.llm.prompt import build_system_prompt, prepare_input
from aicmd.llm.providers import ProviderName
from aicmd.logging import get_logger

if TYPE_CHECKING:
    from aicmd.config.schema import LLMConfig
    from aicmd.llm.provider import ProviderAdapter

log = get_logger("dispatcher")


class RequestDispatcher:
    """Turns a buffer into raw suggestion text via the configured provider."""

    def __init__(
        self,
        provider: str | ProviderName,
        *,
        model: str | None = None,
        api_base: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        adapter: ProviderAdapter | None = None,
        credentials: CredentialResolver | None = None,
        prompt_builder: Callable[[], str] = build_system_prompt,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            provider: Provider name as configured.
            model: Model override. Defaults to the provider's default model.
            api_base: Custom API base URL.
            timeout: Seconds per provider call.
            max_tokens: Maximum tokens to generate.
            adapter: Adapter to use instead of the provider's litellm adapter.
            credentials: Credential resolver.
            prompt_builder: Builds the system prompt for each request.

        Raises:
            ConfigurationError: If ``provider`` is not a supported backend.
        """
        self.provider = (
            provider if isinstance(provider, ProviderName) else ProviderName.parse(provider)
        )
        self.adapter: ProviderAdapter = adapter or create_adapter(
            self.provider,
            model=model,
            api_base=api_base,
            timeout=timeout,
            max_tokens=max_tokens,
        )
        self._credentials = credentials or CredentialResolver()
        self._prompt_builder = prompt_builder

    @classmethod
    def from_config(
        cls,
        config: LLMConfig,
        *,
        credentials: CredentialResolver | None = None,
    ) -> RequestDispatcher:
        """Build the dispatcher from the llm config section.

        Raises:
            ConfigurationError: If the configured provider is unknown.
        """
        provider = ProviderName.parse(config.provider)
        return cls(
            provider,
            model=config.model_for(provider.value),
            api_base=config.api_base,
            timeout=config.timeout,
            max_tokens=config.max_tokens,
            credentials=credentials,
        )

    @property
    def model(self) -> str:
        return self.adapter.model

    async def dispatch(self, buffer: str) -> str:
        """Request a suggestion for ``buffer``.

        Returns:
            Raw (unsanitized) suggestion text.

        Raises:
            CredentialError: No API key available.
            ProviderError: The provider call failed or returned nothing.
        """
        credential = await self._credentials.resolve(self.provider)
        user_input = prepare_input(buffer)
        log.debug("dispatch: provider=%s model=%s", self.provider.value, self.model)
        text = await self.adapter.call(user_input, self._prompt_builder(), credential)
        if not text or not text.strip():
            raise EmptyResponseError("empty response")
        return text
