"""litellm-backed provider adapters.

Every backend goes through ``litellm.acompletion``; the variants differ in
the litellm model prefix, whether a key is required and the default API
base. :func:`create_adapter` maps each ProviderName to its adapter class.
"""

from __future__ import annotations

import asyncio
from typing import Any, ClassVar

import litellm

from aicmd.errors import EmptyResponseError, NetworkError, ProviderTimeoutError
from aicmd.llm.provider import Message, Role
from aicmd.llm.providers import ProviderName, ProviderSpec, get_provider_spec
from aicmd.logging import get_logger

log = get_logger("llm")

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_TOKENS = 256


def _short_error(exc: BaseException, limit: int = 120) -> str:
    """First line of an exception message, truncated."""
    text = str(exc).strip().splitlines()[0] if str(exc).strip() else type(exc).__name__
    return text if len(text) <= limit else text[: limit - 3] + "..."


class LiteLLMAdapter:
    """Base adapter calling a provider through litellm.

    Usage:
        adapter = AnthropicAdapter("claude-haiku-4-5-20251001")
        text = await adapter.call("list big files", system_prompt, api_key)
    """

    provider: ClassVar[ProviderName]

    def __init__(
        self,
        model: str | None = None,
        *,
        api_base: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        **kwargs: Any,
    ) -> None:
        """Initialize the adapter.

        Args:
            model: Model identifier. Defaults to the provider's default model.
            api_base: Custom API base URL.
            timeout: Seconds before a call fails with ProviderTimeoutError.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional litellm options.
        """
        self._spec: ProviderSpec = get_provider_spec(self.provider)
        self._model = model or self._spec.default_model
        self._api_base = api_base or self._spec.default_api_base
        self._timeout = timeout
        self._max_tokens = max_tokens
        self._kwargs = kwargs

    @property
    def model(self) -> str:
        return self._model

    @property
    def requires_key(self) -> bool:
        return self._spec.requires_key

    @property
    def timeout(self) -> float:
        return self._timeout

    def _build_kwargs(
        self,
        messages: list[Message],
        credential: str | None,
    ) -> dict[str, Any]:
        """Build kwargs for the litellm call."""
        kwargs: dict[str, Any] = {
            "model": self._spec.litellm_model(self._model),
            "messages": [
                {"role": m.role.value, "content": m.content} for m in messages
            ],
            "max_tokens": self._max_tokens,
            "timeout": self._timeout,
            "stream": False,
            **self._kwargs,
        }
        if credential and self.requires_key:
            kwargs["api_key"] = credential
        if self._api_base:
            kwargs["api_base"] = self._api_base
        return kwargs

    async def call(
        self,
        user_input: str,
        system_prompt: str,
        credential: str | None,
    ) -> str:
        """Request a suggestion. See ProviderAdapter.call."""
        messages = [
            Message(role=Role.SYSTEM, content=system_prompt),
            Message(role=Role.USER, content=user_input),
        ]
        kwargs = self._build_kwargs(messages, credential)
        name = self.provider.value
        log.debug("%s request: model=%s input=%r", name, kwargs["model"], user_input)

        try:
            response = await asyncio.wait_for(
                litellm.acompletion(**kwargs),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"{name} request timed out after {self._timeout:g}s"
            ) from e
        except litellm.Timeout as e:
            raise ProviderTimeoutError(
                f"{name} request timed out after {self._timeout:g}s"
            ) from e
        except Exception as e:
            # litellm maps each backend's failures to its own exception types
            log.debug("%s request failed: %r", name, e)
            raise NetworkError(f"{name}: {_short_error(e)}") from e

        content = self._extract_content(response)
        log.debug("%s response: %r", name, content)
        if not content:
            raise EmptyResponseError("empty response")
        return content

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Pull the generated text out of a litellm response."""
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError):
            return ""
        return content if isinstance(content, str) else ""


class AnthropicAdapter(LiteLLMAdapter):
    provider = ProviderName.ANTHROPIC


class OpenAIAdapter(LiteLLMAdapter):
    provider = ProviderName.OPENAI


class GeminiAdapter(LiteLLMAdapter):
    provider = ProviderName.GEMINI


class DeepSeekAdapter(LiteLLMAdapter):
    provider = ProviderName.DEEPSEEK


class OllamaAdapter(LiteLLMAdapter):
    """Local Ollama server. Needs no credential."""

    provider = ProviderName.OLLAMA


ADAPTERS: dict[ProviderName, type[LiteLLMAdapter]] = {
    ProviderName.ANTHROPIC: AnthropicAdapter,
    ProviderName.OPENAI: OpenAIAdapter,
    ProviderName.GEMINI: GeminiAdapter,
    ProviderName.DEEPSEEK: DeepSeekAdapter,
    ProviderName.OLLAMA: OllamaAdapter,
}


def create_adapter(provider: ProviderName, **kwargs: Any) -> LiteLLMAdapter:
    """Create the adapter for a provider.

    Args:
        provider: Parsed provider name.
        **kwargs: Passed to the adapter constructor (model, api_base, ...).
    """
    return ADAPTERS[provider](**kwargs)
