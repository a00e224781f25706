"""Retrying Task-producing operations with a delay strategy.

Example:
    ```python
    from itertools import islice

    from klaw_task.task import delay, stop_retrying, with_retries

    def fetch_once(status: RetryStatus) -> Task[bytes, Exception] | StopRetrying:
        if status.elapsed > 30:
            return stop_retrying('gave up after 30 seconds')
        return Task.try_(client.get(url))

    result = await with_retries(fetch_once, islice(delay.exponential(start=0.1), 5))
    ```
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeIs

import msgspec

from klaw_task._config import get_config
from klaw_task._logging import get_logger
from klaw_task.task.combinators import timer
from klaw_task.task.core import Task

__all__ = [
    'RetryFailed',
    'RetryStatus',
    'StopRetrying',
    'is_retry_failed',
    'stop_retrying',
    'with_retries',
]


class RetryStatus(msgspec.Struct, frozen=True, gc=False):
    """Passed to the retryable on every attempt.

    Attributes:
        count: Retries made so far; 0 on the first attempt.
        elapsed: Seconds since `with_retries` was called.
    """

    count: int
    elapsed: float


class StopRetrying(Exception):
    """Return or reject with this from a retryable to end retries early."""


def stop_retrying(message: str, cause: BaseException | None = None) -> StopRetrying:
    """Build a `StopRetrying`, optionally chained to the error that caused it."""
    stop = StopRetrying(message)
    stop.__cause__ = cause
    return stop


class RetryFailed[E](Exception):
    """Rejection reason of `with_retries` once it gives up.

    Attributes:
        tries: Retries made before giving up.
        total_duration: Seconds spent, including delays.
        rejections: Every rejection reason collected along the way, in order.

    When retries ended through `StopRetrying`, it is available as `__cause__`.
    """

    def __init__(
        self,
        tries: int,
        total_duration: float,
        rejections: list[E],
        cause: StopRetrying | None = None,
    ) -> None:
        self.tries = tries
        self.total_duration = total_duration
        self.rejections = rejections
        super().__init__(f'Stopped retrying after {tries} tries ({total_duration:.3f}s)')
        self.__cause__ = cause


def is_retry_failed(value: object) -> TypeIs[RetryFailed[Any]]:
    return isinstance(value, RetryFailed)


def with_retries[T, E](
    retryable: Callable[[RetryStatus], Task[T, E | StopRetrying] | StopRetrying],
    strategy: Iterable[float] | None = None,
) -> Task[T, RetryFailed[E]]:
    """Run `retryable` until its Task resolves or the strategy runs out of delays.

    Each rejection is recorded, then the next delay is taken from `strategy`
    and the retryable is called again after sleeping that long. Retries end
    with a `RetryFailed` rejection when:

    - the strategy is exhausted, or
    - the retryable returns `StopRetrying`, or its Task rejects with one.

    Args:
        retryable: Called with the current `RetryStatus` on every attempt.
        strategy: Delays in seconds, one per retry. Defaults to
            `get_config().default_retries` immediate retries.

    Returns:
        A Task resolving with the first successful value.
    """
    if strategy is None:
        strategy = itertools.repeat(0.0, get_config().default_retries)
    delays = iter(strategy)
    log = get_logger(__name__)
    started = time.monotonic()
    count = 0
    rejections: list[E] = []

    def elapsed() -> float:
        return time.monotonic() - started

    def stopped(stop: StopRetrying) -> Task[Any, RetryFailed[E]]:
        log.debug('task.retries_stopped', tries=count, reason=str(stop))
        return Task.reject(RetryFailed(count, elapsed(), rejections, cause=stop))

    def on_rejection(reason: E | StopRetrying) -> Task[T, RetryFailed[E]]:
        nonlocal count
        if isinstance(reason, StopRetrying):
            return stopped(reason)
        rejections.append(reason)

        pause = next(delays, None)
        if pause is None:
            log.debug('task.retries_exhausted', tries=count, elapsed=elapsed())
            return Task.reject(RetryFailed(count, elapsed(), rejections))

        count += 1
        log.debug('task.retry_scheduled', attempt=count, delay=pause)
        return timer(pause).and_then(attempt)

    def attempt(_slept: float | None = None) -> Task[T, RetryFailed[E]]:
        outcome = retryable(RetryStatus(count=count, elapsed=elapsed()))
        if isinstance(outcome, StopRetrying):
            return stopped(outcome)
        return outcome.or_else(on_rejection)

    return attempt()
