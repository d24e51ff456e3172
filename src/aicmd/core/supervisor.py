"""Async call supervisor.

Runs the request dispatcher as a background asyncio task so key handlers
never block on the network. The foreground observes the task with
:meth:`CallSupervisor.poll` (non-blocking) or :meth:`CallSupervisor.wait`
(bounded by a timeout) and may cancel it at any time.

At most one call exists at a time. A finished call's result is handed out
exactly once; afterwards the slot is free for the next call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from aicmd.errors import AICmdError, CallInFlightError, EmptyResponseError, ProviderError
from aicmd.logging import get_logger

log = get_logger("supervisor")

DispatchFn = Callable[[str], Awaitable[str]]


@dataclass(frozen=True, slots=True)
class Pending:
    """The call has not finished yet."""


@dataclass(frozen=True, slots=True)
class Done:
    """The call finished with text."""

    text: str


@dataclass(frozen=True, slots=True)
class Failed:
    """The call finished with an error."""

    error: AICmdError


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The call was cancelled; its output was discarded."""


PollResult = Pending | Done | Failed | Cancelled

PENDING = Pending()
CANCELLED = Cancelled()


@dataclass(eq=False)
class PendingCall:
    """One in-flight background call.

    Attributes:
        input: Buffer text the call was started for.
        task: Task running the dispatch coroutine.
        cancelled: Set once the call has been cancelled.
        consumed: Set once the result has been handed out.
    """

    input: str
    task: asyncio.Task[str] = field(repr=False)
    cancelled: bool = False
    consumed: bool = False


def _discard_result(task: asyncio.Task[str]) -> None:
    """Retrieve a dropped task's outcome so asyncio does not warn about it."""
    if not task.cancelled():
        task.exception()


class CallSupervisor:
    """Owns the single background call slot."""

    def __init__(self, dispatch: DispatchFn) -> None:
        """Initialize the supervisor.

        Args:
            dispatch: Coroutine function turning buffer text into raw text.
        """
        self._dispatch = dispatch
        self._current: PendingCall | None = None

    @property
    def current(self) -> PendingCall | None:
        return self._current

    @property
    def busy(self) -> bool:
        return self._current is not None

    def begin(self, text: str) -> PendingCall:
        """Start a background call for ``text``.

        Must be called from a running event loop.

        Raises:
            CallInFlightError: Another call is still pending.
        """
        if self._current is not None:
            raise CallInFlightError("a suggestion request is already in flight")
        task = asyncio.get_running_loop().create_task(self._dispatch(text))
        call = PendingCall(input=text, task=task)
        self._current = call
        log.debug("begin: %r", text)
        return call

    def poll(self, call: PendingCall) -> PollResult:
        """Check a call without blocking.

        A finished call's result is consumed by this method and the slot is
        freed. Polling a cancelled or already consumed call returns
        Cancelled.
        """
        if call.cancelled or call.consumed:
            return CANCELLED
        if not call.task.done():
            return PENDING

        call.consumed = True
        if self._current is call:
            self._current = None
        result = self._collect(call.task)
        log.debug("poll: %s", type(result).__name__.lower())
        return result

    async def wait(self, call: PendingCall, timeout: float) -> PollResult:
        """Wait up to ``timeout`` seconds for a call, then poll it."""
        if not (call.cancelled or call.consumed or call.task.done()):
            await asyncio.wait({call.task}, timeout=timeout)
        return self.poll(call)

    def cancel(self, call: PendingCall | None = None) -> bool:
        """Cancel a call (the current one by default) and discard its output.

        Returns:
            True if a pending call was cancelled.
        """
        call = call or self._current
        if call is None or call.cancelled or call.consumed:
            return False
        call.cancelled = True
        if self._current is call:
            self._current = None
        call.task.cancel()
        call.task.add_done_callback(_discard_result)
        log.debug("cancel: %r", call.input)
        return True

    @staticmethod
    def _collect(task: asyncio.Task[str]) -> Done | Failed:
        if task.cancelled():
            return Failed(ProviderError("request cancelled"))
        error = task.exception()
        if isinstance(error, AICmdError):
            return Failed(error)
        if error is not None:
            log.debug("unexpected dispatch failure", exc_info=error)
            wrapped = ProviderError(str(error) or type(error).__name__)
            wrapped.__cause__ = error
            return Failed(wrapped)
        text = task.result()
        if not text:
            return Failed(EmptyResponseError("no suggestion"))
        return Done(text)
