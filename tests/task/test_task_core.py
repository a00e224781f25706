"""Tests for the Task state machine: construction, settlement, accessors and awaiting."""

from __future__ import annotations

import asyncio
import gc
from collections.abc import Awaitable, Callable
from typing import Any

import msgspec
import pytest
from hypothesis import given, settings
from strategies import payloads, results

from klaw_task import (
    Err,
    InvalidAccess,
    Ok,
    State,
    Task,
    TaskExecutorException,
    Unit,
    WithResolvers,
)

type Drain = Callable[[int], Awaitable[None]]


class Point(msgspec.Struct):
    x: int
    y: int

    def __repr__(self) -> str:
        raise RuntimeError('no repr')


class TestState:
    """State transitions and synchronous accessors."""

    async def test_resolved_state(self) -> None:
        """A resolved Task exposes its value."""
        task = Task.resolve(1)
        assert task.state is State.RESOLVED
        assert task.is_resolved()
        assert not task.is_pending()
        assert task.value == 1

    async def test_rejected_state(self) -> None:
        """A rejected Task exposes its reason."""
        task = Task.reject('nope')
        assert task.state is State.REJECTED
        assert task.is_rejected()
        assert task.reason == 'nope'

    async def test_pending_state(self) -> None:
        """A Task whose executor never settles stays pending."""
        task = Task(lambda resolve, reject: None)
        assert task.state is State.PENDING
        assert task.is_pending()

    async def test_state_values(self) -> None:
        """State renders as the lifecycle names."""
        assert [s.value for s in State] == ['Pending', 'Resolved', 'Rejected']

    async def test_value_on_rejected_raises(self) -> None:
        """Reading value of a rejected Task raises InvalidAccess."""
        with pytest.raises(InvalidAccess, match="'Task.value' when its state was 'Rejected'"):
            Task.reject('x').value  # noqa: B018

    async def test_reason_on_pending_raises(self) -> None:
        """Reading reason of a pending Task raises InvalidAccess."""
        task, _, _ = Task.with_resolvers()
        with pytest.raises(InvalidAccess) as excinfo:
            task.reason  # noqa: B018
        assert excinfo.value.field == 'reason'
        assert excinfo.value.state is State.PENDING

    async def test_first_settlement_wins(self) -> None:
        """Only the first resolve/reject call has any effect."""
        task, resolve, reject = Task.with_resolvers()
        resolve(1)
        reject('late')
        resolve(2)
        assert task.value == 1
        assert await task == Ok(1)

    async def test_resolve_without_argument_is_unit(self) -> None:
        """resolve() resolves with Unit, not None."""
        assert Task.resolve().value is Unit
        assert Task.resolve(None).value is None

    async def test_reject_without_argument_is_unit(self) -> None:
        """reject() rejects with Unit, not None."""
        assert Task.reject().reason is Unit
        assert Task.reject(None).reason is None

    async def test_from_result(self) -> None:
        """from_result settles to the matching state immediately."""
        assert Task.from_result(Ok(3)).value == 3
        assert Task.from_result(Err('e')).reason == 'e'

    def test_requires_running_loop(self) -> None:
        """Creating a Task outside an event loop fails."""
        with pytest.raises(RuntimeError):
            Task.resolve(1)


class TestRendering:
    """str() and repr() of a Task."""

    async def test_pending(self) -> None:
        """Pending renders without a payload."""
        assert str(Task(lambda resolve, reject: None)) == 'Task.Pending'

    async def test_resolved(self) -> None:
        """Resolved renders the value's repr."""
        assert str(Task.resolve(1)) == 'Task.Resolved(1)'
        assert repr(Task.resolve('a')) == "Task.Resolved('a')"

    async def test_rejected(self) -> None:
        """Rejected renders the reason's repr."""
        assert str(Task.reject(ValueError('bad'))) == "Task.Rejected(ValueError('bad'))"

    async def test_unrepresentable_payload(self) -> None:
        """A payload whose repr raises still renders."""

        class Opaque:
            def __repr__(self) -> str:
                raise RuntimeError('no repr')

        assert str(Task.resolve(Opaque())) == 'Task.Resolved(<unrepresentable Opaque>)'

    async def test_repr_fallback_uses_json(self) -> None:
        """A payload msgspec can encode falls back to its JSON form."""
        assert str(Task.reject(Point(1, 2))) == 'Task.Rejected({"x":1,"y":2})'


class TestAwaiting:
    """Awaiting a Task yields its Result."""

    async def test_await_resolved(self) -> None:
        """Awaiting a resolved Task gives Ok."""
        assert await Task.resolve(5) == Ok(5)

    async def test_await_rejected_does_not_raise(self) -> None:
        """Awaiting a rejected Task gives Err instead of raising."""
        result = await Task.reject('boom')
        assert result == Err('boom')

    async def test_await_later_settlement(self) -> None:
        """Awaiting waits for a later settlement."""
        task, resolve, _ = Task.with_resolvers()
        asyncio.get_running_loop().call_later(0.01, resolve, 'done')
        assert await task == Ok('done')
        assert task.state is State.RESOLVED

    async def test_wait_alias(self) -> None:
        """wait() is the coroutine behind await."""
        assert await Task.reject(1).wait() == Err(1)

    async def test_cancelling_waiter_leaves_task(self, drain: Drain) -> None:
        """Cancelling a coroutine awaiting a Task does not cancel the Task."""
        task, resolve, _ = Task.with_resolvers()
        waiter = asyncio.ensure_future(task.wait())
        await drain()
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

        assert task.is_pending()
        assert not task.to_future().cancelled()
        resolve(1)
        assert await task == Ok(1)

    async def test_to_future(self) -> None:
        """to_future exposes the backing future of a Result."""
        task = Task.resolve(2)
        future = task.to_future()
        assert isinstance(future, asyncio.Future)
        assert await future == Ok(2)

    async def test_with_resolvers_is_named_tuple(self) -> None:
        """with_resolvers returns a named, unpackable triple."""
        resolvers = Task.with_resolvers()
        assert isinstance(resolvers, WithResolvers)
        resolvers.reject('r')
        assert resolvers.task.reason == 'r'


class TestExecutorFailures:
    """Executors that raise instead of settling."""

    async def test_sync_executor_raises(self) -> None:
        """A raising executor fails the Task with TaskExecutorException."""
        cause = ValueError('broken')

        def executor(resolve: Any, reject: Any) -> None:
            raise cause

        task = Task(executor)
        assert task.is_pending()
        with pytest.raises(TaskExecutorException) as excinfo:
            await task
        assert excinfo.value.cause is cause
        assert excinfo.value.__cause__ is cause

    async def test_unobserved_failure_reaches_loop(self, loop_errors: list[dict[str, Any]]) -> None:
        """A failure nobody awaits is reported by asyncio."""

        def executor(resolve: Any, reject: Any) -> None:
            raise ValueError('unseen')

        task = Task(executor)
        del task
        gc.collect()

        assert any(isinstance(ctx.get('exception'), TaskExecutorException) for ctx in loop_errors)

    async def test_raise_after_settling_reported(self, loop_errors: list[dict[str, Any]]) -> None:
        """Raising after settling keeps the settlement and reports the error."""

        def executor(resolve: Any, reject: Any) -> None:
            resolve(1)
            raise ValueError('too late')

        task = Task(executor)
        assert await task == Ok(1)
        assert any(isinstance(ctx.get('exception'), TaskExecutorException) for ctx in loop_errors)

    async def test_async_executor(self) -> None:
        """An async executor is scheduled and may settle later."""

        async def executor(resolve: Any, reject: Any) -> None:
            await asyncio.sleep(0)
            reject('async no')

        task = Task(executor)
        assert task.is_pending()
        assert await task == Err('async no')

    async def test_async_executor_raises(self) -> None:
        """An async executor raising before settling fails the Task."""

        async def executor(resolve: Any, reject: Any) -> None:
            await asyncio.sleep(0)
            raise KeyError('gone')

        with pytest.raises(TaskExecutorException) as excinfo:
            await Task(executor)
        assert isinstance(excinfo.value.cause, KeyError)

    async def test_async_executor_raises_after_settling(
        self, loop_errors: list[dict[str, Any]], drain: Drain
    ) -> None:
        """An async executor raising after settling goes to the loop handler."""

        async def executor(resolve: Any, reject: Any) -> None:
            resolve('kept')
            await asyncio.sleep(0)
            raise KeyError('late')

        task = Task(executor)
        await drain()
        assert task.value == 'kept'
        assert any(isinstance(ctx.get('exception'), TaskExecutorException) for ctx in loop_errors)


class TestResultCorrespondence:
    """Property-based tests: a settled Task corresponds to a Result."""

    @settings(max_examples=25)
    @given(results)
    def test_from_result_round_trip(self, result: Ok[int] | Err[str]) -> None:
        """Awaiting Task.from_result(r) gives back r, and the state agrees."""

        async def main() -> tuple[Ok[int] | Err[str], State]:
            task = Task.from_result(result)
            return await task, task.state

        awaited, state = asyncio.run(main())
        assert awaited == result
        assert state is (State.RESOLVED if result.is_ok() else State.REJECTED)

    @settings(max_examples=25)
    @given(payloads)
    def test_resolve_renders_payload(self, value: object) -> None:
        """str(Task.resolve(v)) embeds repr(v)."""

        async def main() -> str:
            return str(Task.resolve(value))

        assert asyncio.run(main()) == f'Task.Resolved({value!r})'
