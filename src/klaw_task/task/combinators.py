"""Combinators over Tasks: aggregates, timing, and curried function forms.

The aggregates coordinate several Tasks through their eventual Results:

    all_([a, b])          # Resolved([a_value, b_value]) or the first rejection
    all_settled([a, b])   # Resolved([Ok(...), Err(...)]), never rejects
    any_([a, b])          # first resolution, or AggregateRejection of all reasons
    race([a, b])          # whichever settles first

The curried forms take the function (or other Task) first and the Task last,
returning a one-argument function when the Task is omitted, for use in
pipelines:

    to_text = map_(str)
    to_text(Task.resolve(42))
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any, Never

import anyio

from klaw_task._logging import get_logger
from klaw_task._utils import MISSING, curry1
from klaw_task.errors import AggregateRejection, Timeout
from klaw_task.result import Err, Ok, Result
from klaw_task.task.core import Task

__all__ = [
    'all_',
    'all_settled',
    'and_',
    'and_then',
    'any_',
    'map_',
    'map_rejected',
    'match',
    'or_',
    'or_else',
    'race',
    'timeout',
    'timer',
    'to_future',
]

type Timer = Task[float, Never]


# --- Aggregates ---


def all_[T, E](tasks: Iterable[Task[T, E]]) -> Task[list[T], E]:
    """Resolve with every value, in input order, once all tasks resolve.

    Rejects as soon as any task rejects, with that task's reason. An empty
    input resolves with `[]`.
    """
    tasks = list(tasks)
    if not tasks:
        return Task.resolve([])

    def executor(resolve: Callable[[list[T]], None], reject: Callable[[E], None]) -> None:
        values: list[Any] = [None] * len(tasks)
        remaining = len(tasks)

        def on_settled(idx: int, result: Result[T, E]) -> None:
            nonlocal remaining
            match result:
                case Ok(value=value):
                    values[idx] = value
                    remaining -= 1
                    if remaining == 0:
                        resolve(values)
                case Err(error=reason):
                    reject(reason)

        for idx, task in enumerate(tasks):
            task._on_settled(lambda result, idx=idx: on_settled(idx, result))

    return Task(executor)


def all_settled[T, E](tasks: Iterable[Task[T, E]]) -> Task[list[Result[T, E]], Never]:
    """Resolve with every task's Result, in input order, once all have settled."""
    tasks = list(tasks)
    if not tasks:
        return Task.resolve([])

    def executor(resolve: Callable[[list[Result[T, E]]], None], _reject: object) -> None:
        results: list[Any] = [None] * len(tasks)
        remaining = len(tasks)

        def on_settled(idx: int, result: Result[T, E]) -> None:
            nonlocal remaining
            results[idx] = result
            remaining -= 1
            if remaining == 0:
                resolve(results)

        for idx, task in enumerate(tasks):
            task._on_settled(lambda result, idx=idx: on_settled(idx, result))

    return Task(executor)


def any_[T, E](tasks: Iterable[Task[T, E]]) -> Task[T, AggregateRejection]:
    """Resolve with the first value produced by any task.

    Rejects with an `AggregateRejection` holding every reason, in input order,
    once all tasks reject. An empty input rejects immediately with an empty one.
    """
    tasks = list(tasks)
    if not tasks:
        return Task.reject(AggregateRejection([]))

    def executor(resolve: Callable[[T], None], reject: Callable[[AggregateRejection], None]) -> None:
        reasons: list[Any] = [None] * len(tasks)
        remaining = len(tasks)

        def on_settled(idx: int, result: Result[T, E]) -> None:
            nonlocal remaining
            match result:
                case Ok(value=value):
                    resolve(value)
                case Err(error=reason):
                    reasons[idx] = reason
                    remaining -= 1
                    if remaining == 0:
                        reject(AggregateRejection(reasons))

        for idx, task in enumerate(tasks):
            task._on_settled(lambda result, idx=idx: on_settled(idx, result))

    return Task(executor)


def race[T, E](tasks: Iterable[Task[T, E]]) -> Task[T, E]:
    """Settle like whichever task settles first. An empty input never settles."""
    tasks = list(tasks)

    def executor(resolve: Callable[[T], None], reject: Callable[[E], None]) -> None:
        for task in tasks:
            task._adopt_into(resolve, reject)

    return Task(executor)


# --- Timing ---


def timer(seconds: float) -> Timer:
    """A Task that resolves with `seconds` after sleeping that long."""

    async def executor(resolve: Callable[[float], None], _reject: object) -> None:
        await anyio.sleep(seconds)
        resolve(seconds)

    return Task(executor)


def timeout(seconds_or_timer: float | Timer, task: Any = MISSING) -> Any:
    """Settle like `task`, or reject with `Timeout` if the timer elapses first.

    `seconds_or_timer` is either a number of seconds or an existing `timer`.
    When `task` and the timer finish in the same loop iteration, `task` wins.
    """

    def op(task: Task[Any, Any]) -> Task[Any, Any]:
        clock = seconds_or_timer if isinstance(seconds_or_timer, Task) else timer(seconds_or_timer)
        out, resolve, reject = Task.with_resolvers()
        task._adopt_into(resolve, reject)

        def expire(seconds: float) -> None:
            if not out.is_pending():
                return
            get_logger(__name__).debug('task.timed_out', seconds=seconds)
            reject(Timeout(seconds))

        def on_elapsed(result: Result[float, Never]) -> None:
            # One more hop lets a task settled in the same iteration go first.
            asyncio.get_running_loop().call_soon(expire, result.unwrap())

        clock._on_settled(on_elapsed)
        return out

    return curry1(op, task)


# --- Curried forms ---


def map_(fn: Callable[[Any], Any], task: Any = MISSING) -> Any:
    """Curried `Task.map`."""
    return curry1(lambda t: t.map(fn), task)


def map_rejected(fn: Callable[[Any], Any], task: Any = MISSING) -> Any:
    """Curried `Task.map_rejected`."""
    return curry1(lambda t: t.map_rejected(fn), task)


def and_(other: Task[Any, Any], task: Any = MISSING) -> Any:
    """Curried `Task.and_`: `and_(other, task)` is `task.and_(other)`."""
    return curry1(lambda t: t.and_(other), task)


def or_(other: Task[Any, Any], task: Any = MISSING) -> Any:
    """Curried `Task.or_`: `or_(other, task)` is `task.or_(other)`."""
    return curry1(lambda t: t.or_(other), task)


def and_then(fn: Callable[[Any], Task[Any, Any]], task: Any = MISSING) -> Any:
    """Curried `Task.and_then`."""
    return curry1(lambda t: t.and_then(fn), task)


def or_else(fn: Callable[[Any], Task[Any, Any]], task: Any = MISSING) -> Any:
    """Curried `Task.or_else`."""
    return curry1(lambda t: t.or_else(fn), task)


def match(*, resolved: Callable[[Any], Any], rejected: Callable[[Any], Any], task: Any = MISSING) -> Any:
    """Curried `Task.match`. The handlers are keyword-only, as on the method."""
    return curry1(lambda t: t.match(resolved=resolved, rejected=rejected), task)


def to_future(task: Task[Any, Any]) -> asyncio.Future[Any]:
    """Function form of `Task.to_future`."""
    return task.to_future()
