"""Tests for the request dispatcher."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest

from aicmd.config.schema import LLMConfig
from aicmd.errors import ConfigurationError, CredentialError, EmptyResponseError
from aicmd.llm.adapters import OpenAIAdapter
from aicmd.llm.dispatcher import RequestDispatcher
from aicmd.llm.providers import ProviderName


def _credentials(key: str | None = "sk-test") -> Mock:
    credentials = Mock()
    credentials.resolve = AsyncMock(return_value=key)
    return credentials


def _adapter(result: str = "ls -la") -> Mock:
    adapter = Mock()
    adapter.model = "test-model"
    adapter.call = AsyncMock(return_value=result)
    return adapter


class TestConstruction:
    """Provider validation happens at construction."""

    def test_unknown_provider(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown provider 'gpt'"):
            RequestDispatcher("gpt")

    def test_unknown_provider_from_config(self) -> None:
        with pytest.raises(ConfigurationError):
            RequestDispatcher.from_config(LLMConfig(provider="mistral"))

    def test_from_config(self) -> None:
        config = LLMConfig(provider="OpenAI", models={"openai": "gpt-4.1"}, timeout=12, max_tokens=99)
        dispatcher = RequestDispatcher.from_config(config)
        assert dispatcher.provider is ProviderName.OPENAI
        assert isinstance(dispatcher.adapter, OpenAIAdapter)
        assert dispatcher.model == "gpt-4.1"
        assert dispatcher.adapter.timeout == 12

    def test_default_model(self) -> None:
        dispatcher = RequestDispatcher.from_config(LLMConfig(provider="gemini"))
        assert dispatcher.model == "gemini-2.5-flash"


class TestDispatch:
    """Dispatching a buffer."""

    @pytest.mark.asyncio
    async def test_dispatch_calls_adapter(self) -> None:
        adapter = _adapter("ls -la")
        credentials = _credentials("sk-test")
        dispatcher = RequestDispatcher(
            "anthropic",
            adapter=adapter,
            credentials=credentials,
            prompt_builder=lambda: "SYSTEM",
        )

        assert await dispatcher.dispatch("list files") == "ls -la"
        credentials.resolve.assert_awaited_once_with(ProviderName.ANTHROPIC)
        adapter.call.assert_awaited_once_with("list files", "SYSTEM", "sk-test")

    @pytest.mark.asyncio
    async def test_newlines_become_separators(self) -> None:
        adapter = _adapter()
        dispatcher = RequestDispatcher(
            "openai", adapter=adapter, credentials=_credentials(), prompt_builder=lambda: "S"
        )
        await dispatcher.dispatch("cd src\nls\n")
        assert adapter.call.call_args.args[0] == "cd src; ls"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n"])
    async def test_empty_text_is_failure(self, text: str) -> None:
        dispatcher = RequestDispatcher(
            "openai", adapter=_adapter(text), credentials=_credentials()
        )
        with pytest.raises(EmptyResponseError, match="empty response"):
            await dispatcher.dispatch("x")

    @pytest.mark.asyncio
    async def test_credential_error_propagates(self) -> None:
        credentials = Mock()
        credentials.resolve = AsyncMock(
            side_effect=CredentialError("OPENAI_API_KEY not set", provider="openai")
        )
        adapter = _adapter()
        dispatcher = RequestDispatcher("openai", adapter=adapter, credentials=credentials)

        with pytest.raises(CredentialError):
            await dispatcher.dispatch("x")
        adapter.call.assert_not_called()
