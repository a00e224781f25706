"""Task: an asynchronous computation that settles to a Result.

A `Task[T, E]` wraps exactly one `asyncio.Future[Result[T, E]]`. The future
always completes with `Ok` or `Err`, so awaiting a Task never raises for an
ordinary failure; the failure is a value. Once settled, the outcome is also
readable synchronously through `state`, `value` and `reason`.

Example:
    ```python
    async def main():
        task = Task.resolve(21).map(lambda n: n * 2)
        result = await task  # Ok(value=42)
        task.state  # State.RESOLVED

        failed = Task.try_(fetch('https://example.invalid'))
        match await failed:
            case Ok(value=body):
                ...
            case Err(error=exc):
                ...
    ```

Continuations are future done-callbacks, which the event loop runs through
`call_soon`. A Task must therefore be created while an event loop is running.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Generator
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Never, NamedTuple

from klaw_task._logging import get_logger
from klaw_task._utils import safe_repr
from klaw_task.errors import InvalidAccess, TaskExecutorException, UnsafePromise
from klaw_task.result import Err, Ok
from klaw_task.unit import Unit

if TYPE_CHECKING:
    from klaw_task.errors import Timeout
    from klaw_task.result import Result

__all__ = [
    'Executor',
    'State',
    'Task',
    'WithResolvers',
]


class State(StrEnum):
    """Lifecycle of a Task. A Task moves out of PENDING exactly once."""

    PENDING = 'Pending'
    RESOLVED = 'Resolved'
    REJECTED = 'Rejected'


type Executor[T, E] = Callable[[Callable[[T], None], Callable[[E], None]], object]

# Strong references to futures scheduled on behalf of Tasks, so the loop's
# weak task registry cannot drop them mid-flight.
_background: set[asyncio.Future[Any]] = set()


def _spawn(awaitable: Awaitable[Any]) -> asyncio.Future[Any]:
    future = asyncio.ensure_future(awaitable)
    _background.add(future)
    future.add_done_callback(_background.discard)
    return future


def _identity[A](value: A) -> A:
    return value


def _never_settle(_resolve: object, _reject: object) -> None:
    return None


class Task[T, E]:
    """An asynchronous computation that resolves with T or rejects with E.

    Construct one from an executor, which receives `resolve` and `reject`
    callbacks and is run immediately:

        task = Task(lambda resolve, reject: resolve(42))

    Only the first call to either callback has any effect. The executor may
    also be an `async def`, in which case it is scheduled on the running loop.

    An executor that raises has broken its contract: there is no rejection
    reason to settle with, so the backing future fails with
    `TaskExecutorException`. Awaiting the Task then raises it; if nobody awaits,
    asyncio reports the failure through its exception handler.

    Attributes:
        _future: The backing future, always completed with Ok or Err.
        _state: `(State.PENDING,)` or `(state, payload)` once settled.
    """

    __slots__ = ('__weakref__', '_future', '_state')

    def __init__(self, executor: Executor[T, E]) -> None:
        loop = asyncio.get_running_loop()
        self._future: asyncio.Future[Result[T, E]] = loop.create_future()
        self._state: tuple[State] | tuple[State, Any] = (State.PENDING,)
        try:
            outcome = executor(self._resolve, self._reject)
        except Exception as exc:
            self._fail(exc)
            return
        if inspect.isawaitable(outcome):
            _spawn(outcome).add_done_callback(self._executor_done)

    # --- Settlement ---

    def _resolve(self, value: T) -> None:
        if self._future.done():
            return
        self._state = (State.RESOLVED, value)
        self._future.set_result(Ok(value))

    def _reject(self, reason: E) -> None:
        if self._future.done():
            return
        self._state = (State.REJECTED, reason)
        self._future.set_result(Err(reason))

    def _fail(self, exc: BaseException) -> None:
        error = TaskExecutorException(exc)
        get_logger(__name__).error('task.executor_failed', error=safe_repr(exc), settled=self._future.done())
        if self._future.done():
            self._future.get_loop().call_exception_handler({
                'message': str(error),
                'exception': error,
                'future': self._future,
            })
            return
        self._future.set_exception(error)

    def _executor_done(self, outcome: asyncio.Future[object]) -> None:
        # Cancellation here only happens when the loop is shutting down.
        if outcome.cancelled():
            return
        exc = outcome.exception()
        if exc is not None:
            self._fail(exc)

    def _on_settled(self, fn: Callable[[Result[T, E]], object]) -> None:
        """Call `fn` with the Result once the backing future completes."""
        self._future.add_done_callback(lambda future: fn(future.result()))

    def _adopt_into(self, resolve: Callable[[T], None], reject: Callable[[E], None]) -> None:
        """Forward this Task's eventual settlement to another Task's callbacks."""
        self._on_settled(lambda result: result.match(ok=resolve, err=reject))

    def _derive[U](self, fn: Callable[[Result[T, E]], U]) -> asyncio.Future[U]:
        """Create a plain future completed with `fn(result)` once this Task settles.

        Exceptions raised by `fn`, or carried by the backing future, fail the
        derived future instead of escaping the callback.
        """
        derived: asyncio.Future[U] = self._future.get_loop().create_future()

        def callback(source: asyncio.Future[Result[T, E]]) -> None:
            if derived.done():
                return
            if source.cancelled():
                derived.cancel()
                return
            exc = source.exception()
            if exc is not None:
                derived.set_exception(exc)
                return
            try:
                derived.set_result(fn(source.result()))
            except Exception as err:
                derived.set_exception(err)

        self._future.add_done_callback(callback)
        return derived

    # --- State ---

    @property
    def state(self) -> State:
        """The current lifecycle state."""
        return self._state[0]

    def is_pending(self) -> bool:
        return self._state[0] is State.PENDING

    def is_resolved(self) -> bool:
        return self._state[0] is State.RESOLVED

    def is_rejected(self) -> bool:
        return self._state[0] is State.REJECTED

    @property
    def value(self) -> T:
        """The resolved value.

        Raises:
            InvalidAccess: If the Task is not Resolved.
        """
        if self._state[0] is not State.RESOLVED:
            raise InvalidAccess('value', self._state[0])
        return self._state[1]

    @property
    def reason(self) -> E:
        """The rejection reason.

        Raises:
            InvalidAccess: If the Task is not Rejected.
        """
        if self._state[0] is not State.REJECTED:
            raise InvalidAccess('reason', self._state[0])
        return self._state[1]

    def __repr__(self) -> str:
        match self._state:
            case (State.RESOLVED, value):
                return f'Task.Resolved({safe_repr(value)})'
            case (State.REJECTED, reason):
                return f'Task.Rejected({safe_repr(reason)})'
            case _:
                return 'Task.Pending'

    __str__ = __repr__

    # --- Awaiting ---

    async def wait(self) -> Result[T, E]:
        """Wait for the Task to settle and return its Result.

        The backing future is shielded, so cancelling the waiter leaves the
        Task itself untouched.

        Raises:
            TaskExecutorException: If the executor raised instead of settling.
        """
        return await asyncio.shield(self._future)

    def __await__(self) -> Generator[Any, None, Result[T, E]]:
        """Support await syntax."""
        return self.wait().__await__()

    def to_future(self) -> asyncio.Future[Result[T, E]]:
        """Return the backing future.

        The future always completes with a Result, but anything done to it
        directly (cancelling it, chaining onto it) bypasses Task's guarantees.
        """
        return self._future

    # --- Constructors ---

    @classmethod
    def resolve(cls, value: Any = Unit) -> Task[Any, Never]:
        """Create a Task resolved with `value`, or with `Unit` when called with no argument."""
        return cls(lambda resolve, _reject: resolve(value))

    @classmethod
    def reject(cls, reason: Any = Unit) -> Task[Never, Any]:
        """Create a Task rejected with `reason`, or with `Unit` when called with no argument."""
        return cls(lambda _resolve, reject: reject(reason))

    @classmethod
    def from_result(cls, result: Result[T, E]) -> Task[T, E]:
        """Create a Task settled to match `result`.

        The state is readable immediately; awaiting still goes through the loop.
        """
        return cls(lambda resolve, reject: result.match(ok=resolve, err=reject))

    @classmethod
    def with_resolvers(cls) -> WithResolvers[T, E]:
        """Create a pending Task together with the callbacks that settle it.

        Examples:
            >>> task, resolve, reject = Task.with_resolvers()  # doctest: +SKIP
            >>> resolve(1)  # doctest: +SKIP
            >>> reject('ignored, already resolved')  # doctest: +SKIP
        """
        task: Task[T, E] = cls(_never_settle)
        return WithResolvers(task, task._resolve, task._reject)

    @classmethod
    def try_(cls, awaitable: Awaitable[T]) -> Task[T, BaseException]:
        """Run an awaitable that may raise; any exception becomes the rejection reason.

        Cancellation of the awaitable rejects with `asyncio.CancelledError`.
        """
        return cls.try_or_else(awaitable, _identity)

    @classmethod
    def try_or[F](cls, awaitable: Awaitable[T], fallback: F) -> Task[T, F]:
        """As `try_`, but reject with `fallback` whatever the exception was."""
        return cls.try_or_else(awaitable, lambda _exc: fallback)

    @classmethod
    def try_or_else[F](cls, awaitable: Awaitable[T], on_rejection: Callable[[BaseException], F]) -> Task[T, F]:
        """As `try_`, but reject with `on_rejection(exc)`."""

        def executor(resolve: Callable[[T], None], reject: Callable[[F], None]) -> None:
            def settle(future: asyncio.Future[T]) -> None:
                if future.cancelled():
                    reject(on_rejection(asyncio.CancelledError()))
                    return
                exc = future.exception()
                if exc is not None:
                    reject(on_rejection(exc))
                else:
                    resolve(future.result())

            _spawn(awaitable).add_done_callback(settle)

        return cls(executor)

    @classmethod
    def from_unsafe_awaitable(cls, awaitable: Awaitable[Result[T, E]]) -> Task[T, E]:
        """Create a Task from an awaitable that produces a Result and never raises.

        If the awaitable raises anyway (or is cancelled), `UnsafePromise` is
        raised from a loop callback: it reaches the loop's exception handler,
        never the code awaiting the Task, and the Task stays pending.
        """

        def executor(resolve: Callable[[T], None], reject: Callable[[E], None]) -> None:
            def settle(future: asyncio.Future[Result[T, E]]) -> None:
                exc = asyncio.CancelledError() if future.cancelled() else future.exception()
                if exc is not None:
                    get_logger(__name__).error('task.unsafe_awaitable_failed', error=safe_repr(exc))
                    raise UnsafePromise(exc)
                future.result().match(ok=resolve, err=reject)

            _spawn(awaitable).add_done_callback(settle)

        return cls(executor)

    # --- Combinators ---

    def map[U](self, fn: Callable[[T], U]) -> Task[U, E]:
        """Transform the resolved value; a rejection passes through untouched.

        `fn` must not raise. If it does, the new Task never settles and the
        error surfaces as `UnsafePromise` on the loop's exception handler.
        """
        return Task.from_unsafe_awaitable(self._derive(lambda result: result.map(fn)))

    def map_rejected[F](self, fn: Callable[[E], F]) -> Task[T, F]:
        """Transform the rejection reason; a resolution passes through untouched."""
        return Task.from_unsafe_awaitable(self._derive(lambda result: result.map_err(fn)))

    def and_[U, F](self, other: Task[U, F]) -> Task[U, E | F]:
        """Settle like `other` if this Task resolves, otherwise reject with this reason.

        `other` is only inspected once this Task has resolved.
        """

        def executor(resolve: Callable[[U], None], reject: Callable[[E | F], None]) -> None:
            self._on_settled(lambda result: result.match(ok=lambda _: other._adopt_into(resolve, reject), err=reject))

        return Task(executor)

    def or_[U, F](self, other: Task[U, F]) -> Task[T | U, F]:
        """Resolve with this value if this Task resolves, otherwise settle like `other`."""

        def executor(resolve: Callable[[T | U], None], reject: Callable[[F], None]) -> None:
            self._on_settled(lambda result: result.match(ok=resolve, err=lambda _: other._adopt_into(resolve, reject)))

        return Task(executor)

    def and_then[U, F](self, fn: Callable[[T], Task[U, F]]) -> Task[U, E | F]:
        """Chain a Task-producing function on the resolved value.

        The Task returned by `fn` is flattened one level. On rejection `fn`
        is never called.

        Examples:
            >>> Task.resolve(2).and_then(lambda n: Task.resolve(n * 10))  # doctest: +SKIP
        """

        def executor(resolve: Callable[[U], None], reject: Callable[[E | F], None]) -> None:
            def on_settled(result: Result[T, E]) -> None:
                match result:
                    case Ok(value=value):
                        fn(value)._adopt_into(resolve, reject)
                    case Err(error=reason):
                        reject(reason)

            self._on_settled(on_settled)

        return Task(executor)

    def or_else[U, F](self, fn: Callable[[E], Task[U, F]]) -> Task[T | U, F]:
        """Chain a Task-producing recovery function on the rejection reason."""

        def executor(resolve: Callable[[T | U], None], reject: Callable[[F], None]) -> None:
            def on_settled(result: Result[T, E]) -> None:
                match result:
                    case Ok(value=value):
                        resolve(value)
                    case Err(error=reason):
                        fn(reason)._adopt_into(resolve, reject)

            self._on_settled(on_settled)

        return Task(executor)

    def match[A](self, *, resolved: Callable[[T], A], rejected: Callable[[E], A]) -> asyncio.Future[A]:
        """Run the handler matching the eventual state and return a future of its result.

        The handlers are attached right away, whether or not the future is awaited.
        """
        return self._derive(lambda result: result.match(ok=resolved, err=rejected))

    def timeout(self, seconds_or_timer: float | Task[float, Never]) -> Task[T, E | Timeout]:
        """Settle like this Task, or reject with `Timeout` if the timer elapses first.

        When both finish in the same loop iteration this Task wins.
        """
        from klaw_task.task.combinators import timeout

        return timeout(seconds_or_timer, self)


class WithResolvers[T, E](NamedTuple):
    """A pending Task and the callbacks that settle it."""

    task: Task[T, E]
    resolve: Callable[[T], None]
    reject: Callable[[E], None]
