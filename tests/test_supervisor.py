"""Tests for the async call supervisor."""

from __future__ import annotations

import pytest

from aicmd.core.supervisor import (
    CallSupervisor,
    Cancelled,
    Done,
    Failed,
    Pending,
)
from aicmd.errors import CallInFlightError, EmptyResponseError, NetworkError, ProviderError
from tests.utils import FakeDispatch, settle


class TestLifecycle:
    """begin / poll / wait."""

    @pytest.mark.asyncio
    async def test_wait_returns_text(self) -> None:
        supervisor = CallSupervisor(FakeDispatch("ls -la"))
        call = supervisor.begin("list files")
        result = await supervisor.wait(call, timeout=1.0)
        assert result == Done("ls -la")
        assert not supervisor.busy

    @pytest.mark.asyncio
    async def test_poll_pending_then_done(self) -> None:
        fake = FakeDispatch("git status", hold=True)
        supervisor = CallSupervisor(fake)
        call = supervisor.begin("status")

        assert isinstance(supervisor.poll(call), Pending)
        assert supervisor.busy

        fake.release()
        await settle()
        assert supervisor.poll(call) == Done("git status")
        assert supervisor.current is None

    @pytest.mark.asyncio
    async def test_result_is_consumed_once(self) -> None:
        supervisor = CallSupervisor(FakeDispatch("pwd"))
        call = supervisor.begin("where am i")
        assert isinstance(await supervisor.wait(call, 1.0), Done)
        assert isinstance(supervisor.poll(call), Cancelled)
        assert call.consumed

    @pytest.mark.asyncio
    async def test_wait_times_out_as_pending(self) -> None:
        fake = FakeDispatch(hold=True)
        supervisor = CallSupervisor(fake)
        call = supervisor.begin("x")
        assert isinstance(await supervisor.wait(call, timeout=0.01), Pending)
        supervisor.cancel(call)
        await settle()

    @pytest.mark.asyncio
    async def test_dispatch_receives_input(self) -> None:
        fake = FakeDispatch()
        supervisor = CallSupervisor(fake)
        await supervisor.wait(supervisor.begin("show disk usage"), 1.0)
        assert fake.calls == ["show disk usage"]


class TestSingleFlight:
    """At most one pending call."""

    @pytest.mark.asyncio
    async def test_second_begin_raises(self) -> None:
        fake = FakeDispatch(hold=True)
        supervisor = CallSupervisor(fake)
        supervisor.begin("first")
        with pytest.raises(CallInFlightError):
            supervisor.begin("second")
        assert supervisor.current is not None
        assert supervisor.current.input == "first"
        supervisor.cancel()
        await settle()

    @pytest.mark.asyncio
    async def test_slot_freed_after_completion(self) -> None:
        supervisor = CallSupervisor(FakeDispatch("a"))
        await supervisor.wait(supervisor.begin("one"), 1.0)
        result = await supervisor.wait(supervisor.begin("two"), 1.0)
        assert result == Done("a")


class TestCancel:
    """Cooperative cancellation."""

    @pytest.mark.asyncio
    async def test_cancel_discards_output(self) -> None:
        fake = FakeDispatch("rm -rf /", hold=True)
        supervisor = CallSupervisor(fake)
        call = supervisor.begin("clean up")
        await settle()

        assert supervisor.cancel(call) is True
        assert not supervisor.busy

        fake.release()
        assert isinstance(await supervisor.wait(call, 1.0), Cancelled)
        await settle()
        assert fake.cancelled
        assert call.task.cancelled()

    @pytest.mark.asyncio
    async def test_cancel_without_call(self) -> None:
        supervisor = CallSupervisor(FakeDispatch())
        assert supervisor.cancel() is False

    @pytest.mark.asyncio
    async def test_cancel_twice(self) -> None:
        supervisor = CallSupervisor(FakeDispatch(hold=True))
        call = supervisor.begin("x")
        assert supervisor.cancel(call)
        assert not supervisor.cancel(call)
        await settle()


class TestFailures:
    """Errors are delivered as Failed results."""

    @pytest.mark.asyncio
    async def test_empty_text(self) -> None:
        supervisor = CallSupervisor(FakeDispatch(""))
        result = await supervisor.wait(supervisor.begin("x"), 1.0)
        assert isinstance(result, Failed)
        assert isinstance(result.error, EmptyResponseError)

    @pytest.mark.asyncio
    async def test_provider_error_passes_through(self) -> None:
        error = NetworkError("anthropic: connection refused")
        supervisor = CallSupervisor(FakeDispatch(error))
        result = await supervisor.wait(supervisor.begin("x"), 1.0)
        assert result == Failed(error)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self) -> None:
        boom = RuntimeError("boom")
        supervisor = CallSupervisor(FakeDispatch(boom))
        result = await supervisor.wait(supervisor.begin("x"), 1.0)
        assert isinstance(result, Failed)
        assert isinstance(result.error, ProviderError)
        assert result.error.__cause__ is boom
