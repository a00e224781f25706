"""Module-level Task constructors.

These cover the same ground as the `Task` classmethods and add helpers for
turning raising async code into Tasks: `safely_try*` for a single call and the
`safe` / `safe_nullable` decorators for whole functions.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, overload

import wrapt

from klaw_task._utils import MISSING, curry1
from klaw_task.maybe import Maybe, maybe_of
from klaw_task.task.core import Task, WithResolvers

__all__ = [
    'from_awaitable',
    'from_result',
    'from_unsafe_awaitable',
    'reject',
    'resolve',
    'safe',
    'safe_nullable',
    'safely_try',
    'safely_try_or',
    'safely_try_or_else',
    'with_resolvers',
]

resolve = Task.resolve
reject = Task.reject
from_result = Task.from_result
from_unsafe_awaitable = Task.from_unsafe_awaitable


def with_resolvers() -> WithResolvers[Any, Any]:
    """Create a pending Task together with its `resolve` and `reject` callbacks."""
    return Task.with_resolvers()


def _identity(exc: BaseException) -> BaseException:
    return exc


def from_awaitable[T](
    awaitable: Awaitable[T],
    *,
    fallback: Any = MISSING,
    on_rejection: Callable[[BaseException], Any] | None = None,
) -> Task[T, Any]:
    """Create a Task from an awaitable that may raise.

    Args:
        awaitable: A coroutine, future or other awaitable.
        fallback: Reject with this value whatever the exception was.
        on_rejection: Reject with `on_rejection(exc)`. Mutually exclusive
            with `fallback`.

    Returns:
        A Task resolving with the awaitable's value, or rejecting with the
        exception (or its replacement).

    Raises:
        TypeError: If both `fallback` and `on_rejection` are given.

    Example:
        ```python
        task = from_awaitable(client.get(url), on_rejection=lambda exc: f'request failed: {exc}')
        ```
    """
    if fallback is not MISSING and on_rejection is not None:
        msg = 'from_awaitable() takes either fallback or on_rejection, not both'
        raise TypeError(msg)
    if fallback is not MISSING:
        return Task.try_or(awaitable, fallback)
    return Task.try_or_else(awaitable, on_rejection or _identity)


def safely_try[T](fn: Callable[[], Awaitable[T]]) -> Task[T, BaseException]:
    """Call `fn` and run the awaitable it returns, catching every exception.

    Unlike `Task.try_`, this also catches an exception raised by the call
    itself, before any awaitable exists.
    """
    return safely_try_or_else(_identity, fn)


def safely_try_or(rejection: Any, fn: Any = MISSING) -> Any:
    """As `safely_try`, but reject with `rejection` on any exception.

    Returns a function awaiting `fn` when `fn` is omitted.
    """
    return safely_try_or_else(lambda _exc: rejection, fn)


def safely_try_or_else(on_error: Callable[[BaseException], Any], fn: Any = MISSING) -> Any:
    """As `safely_try`, but reject with `on_error(exc)`.

    Returns a function awaiting `fn` when `fn` is omitted.
    """

    def op(fn: Callable[[], Awaitable[Any]]) -> Task[Any, Any]:
        try:
            awaitable = fn()
        except Exception as exc:
            return Task.reject(on_error(exc))
        return Task.try_or_else(awaitable, on_error)

    return curry1(op, fn)


@overload
def safe[**P, T](
    fn: Callable[P, Awaitable[T]],
    *,
    on_error: None = None,
) -> Callable[P, Task[T, BaseException]]: ...


@overload
def safe[**P, T, E](
    fn: Callable[P, Awaitable[T]],
    *,
    on_error: Callable[[BaseException], E],
) -> Callable[P, Task[T, E]]: ...


@overload
def safe[E](
    fn: None = None,
    *,
    on_error: Callable[[BaseException], E] | None = None,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Task[Any, E]]]: ...


def safe(
    fn: Callable[..., Awaitable[Any]] | None = None,
    *,
    on_error: Callable[[BaseException], Any] | None = None,
) -> Any:
    """Decorator that makes an async function return a Task instead of raising.

    Can be used with or without arguments:
        @safe
        async def fetch(url): ...

        @safe(on_error=lambda exc: FetchError(str(exc)))
        async def fetch_or_wrap(url): ...

    Args:
        fn: The async function to wrap (when used without parentheses).
        on_error: Transforms the raised exception into the rejection reason.
            Defaults to the exception itself.

    Returns:
        A wrapped function with the same parameters that returns a Task.

    Example:
        ```python
        @safe
        async def divide(a: int, b: int) -> float:
            return a / b

        await divide(10, 2)
        # Ok(value=5.0)
        await divide(10, 0)
        # Err(error=ZeroDivisionError('division by zero'))
        ```
    """
    handle = on_error if on_error is not None else _identity

    @wrapt.decorator
    def wrapper(
        wrapped: Callable[..., Awaitable[Any]],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Task[Any, Any]:
        return safely_try_or_else(handle, lambda: wrapped(*args, **kwargs))

    if fn is not None:
        return wrapper(fn)
    return wrapper


def safe_nullable(
    fn: Callable[..., Awaitable[Any]] | None = None,
    *,
    on_error: Callable[[BaseException], Any] | None = None,
) -> Any:
    """As `safe`, but resolve with `maybe_of(value)` so a `None` result becomes Nothing.

    Example:
        ```python
        @safe_nullable
        async def find_user(user_id: int) -> User | None: ...

        await find_user(1)
        # Ok(value=Just(value=User(...))) or Ok(value=Nothing)
        ```
    """
    handle = on_error if on_error is not None else _identity

    async def _as_maybe(awaitable: Awaitable[Any]) -> Maybe[Any]:
        return maybe_of(await awaitable)

    @wrapt.decorator
    def wrapper(
        wrapped: Callable[..., Awaitable[Any]],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Task[Any, Any]:
        return safely_try_or_else(handle, lambda: _as_maybe(wrapped(*args, **kwargs)))

    if fn is not None:
        return wrapper(fn)
    return wrapper
