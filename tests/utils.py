"""Shared test utilities for aicmd tests."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import Mock

from aicmd.core.controller import SuggestionController


def create_mock_llm_response(content: str | None = "ls -la") -> Any:
    """Create a mock LiteLLM response object.

    Args:
        content: Message content of the first choice.

    Returns:
        Mock mimicking the litellm response structure
    """
    response = Mock()
    response.choices = [Mock()]
    response.choices[0].message = Mock()
    response.choices[0].message.content = content
    response.choices[0].finish_reason = "stop"
    return response


class FakeDispatch:
    """Stand-in for RequestDispatcher.dispatch.

    Returns ``result`` (or raises it, if it is an exception). With
    ``hold=True`` every call blocks until :meth:`release` is called, which
    lets tests observe the REQUESTING state.
    """

    def __init__(self, result: str | BaseException = "ls -la", *, hold: bool = False) -> None:
        self.result = result
        self.calls: list[str] = []
        self.cancelled = False
        self._gate = asyncio.Event()
        if not hold:
            self._gate.set()

    def release(self) -> None:
        self._gate.set()

    async def __call__(self, buffer: str) -> str:
        self.calls.append(buffer)
        try:
            await self._gate.wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


def make_controller(
    result: str | BaseException = "ls -la",
    *,
    buffer: str = "",
    hold: bool = False,
) -> tuple[SuggestionController, FakeDispatch]:
    """Create a controller backed by a FakeDispatch, with a fast poll interval."""
    fake = FakeDispatch(result, hold=hold)
    controller = SuggestionController(fake, poll_interval=0.01)
    if buffer:
        controller.on_edit(buffer)
    return controller, fake


async def settle(rounds: int = 3) -> None:
    """Let pending tasks run for a few event loop iterations."""
    for _ in range(rounds):
        await asyncio.sleep(0)
