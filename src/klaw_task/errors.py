"""Error types for Task.

Two families live here. `TaskError` subclasses signal programmer errors (a
broken executor, an unsafe awaitable that raised, reading the wrong field of
a Task); they are raised, never used for control flow. The rest are ordinary
rejection reasons produced by the aggregate and timing helpers, with a
struct+exception pair where a value is more useful than an exception.
"""

from __future__ import annotations

from enum import StrEnum

import msgspec

__all__ = [
    'AggregateRejection',
    'InvalidAccess',
    'TaskError',
    'TaskExecutorException',
    'TaskTimeoutError',
    'Timeout',
    'UnsafePromise',
]


class TaskError(Exception):
    """Base class for violations of a `Task` construction or access contract."""


class TaskExecutorException(TaskError):
    """The executor passed to `Task(...)` raised instead of calling `reject`.

    There is no well-typed rejection reason to settle with, so the backing
    future fails with this error and it propagates as an unhandled failure.
    The original exception is available as `cause` and `__cause__`.
    """

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__('The executor for `Task` raised an error. This cannot be handled safely.')
        self.__cause__ = cause


class UnsafePromise(TaskError):
    """An awaitable given to `from_unsafe_awaitable` raised.

    The caller promised the awaitable would only ever produce a `Result`.
    This error is raised inside an event loop callback, so it reaches the
    loop's exception handler rather than anyone awaiting the Task.
    """

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        explanation = (
            'If you see this message, someone constructed a `Task` from an awaitable of `Result` '
            'which could still raise. Make sure every awaitable passed to `Task.from_unsafe_awaitable` '
            'handles its own exceptions and returns `Err` instead.'
        )
        super().__init__(f"Called 'Task.from_unsafe_awaitable' with an unsafe awaitable.\n{explanation}")
        self.__cause__ = cause


class InvalidAccess(TaskError):
    """`Task.value` or `Task.reason` was read while the Task was in another state."""

    def __init__(self, field: str, state: StrEnum | str) -> None:
        self.field = field
        self.state = state
        super().__init__(f"Tried to access 'Task.{field}' when its state was '{state}'")


class AggregateRejection(Exception):
    """Every task passed to `any_` rejected.

    Attributes:
        errors: The rejection reasons, in the same order as the input tasks.
    """

    def __init__(self, errors: list[object]) -> None:
        self.errors = errors
        super().__init__('`any_`: all tasks rejected')

    def __str__(self) -> str:
        reasons = ','.join(str(error) for error in self.errors)
        return f'AggregateRejection: {self.args[0]}: {reasons}'


class Timeout(msgspec.Struct, frozen=True, gc=False):
    """A timer elapsed before the task settled - struct variant for Task[T, Timeout]."""

    seconds: float

    def to_exception(self) -> TaskTimeoutError:
        """Convert to exception for raise-based code."""
        return TaskTimeoutError(self.seconds)


class TaskTimeoutError(Exception):
    """A timer elapsed before the task settled - exception variant."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(f'Timed out after {seconds} seconds')

    def to_struct(self) -> Timeout:
        """Convert to struct for Result-based code."""
        return Timeout(self.seconds)
