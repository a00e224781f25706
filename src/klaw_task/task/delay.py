"""Retry delay strategies for `with_retries`.

A strategy is any iterator of delays in seconds. `with_retries` pulls one
delay per retry and stops once the iterator is exhausted, so bound the
infinite strategies here with `itertools.islice`:

    from itertools import islice

    with_retries(fetch_once, islice(exponential(start=0.1), 5))

Growing strategies are capped at `MAX_DELAY`. Combine any of them with
`jitter` to spread out retries started at the same time:

    (jitter(delay) for delay in islice(fibonacci(start=0.05), 8))
"""

from __future__ import annotations

import random
from collections.abc import Iterator

__all__ = [
    'MAX_DELAY',
    'Strategy',
    'exponential',
    'fibonacci',
    'fixed',
    'immediate',
    'jitter',
    'linear',
    'none',
]

MAX_DELAY: float = float(2**53 - 1)
"""Upper bound, in seconds, for every growing strategy."""

type Strategy = Iterator[float]


def exponential(start: float = 0.001, factor: float = 2.0) -> Iterator[float]:
    """Yield `start`, then multiply by `factor` each step.

    A `factor` below 1 makes the delays decay rather than grow.

    Examples:
        >>> from itertools import islice
        >>> list(islice(exponential(1.0), 4))
        [1.0, 2.0, 4.0, 8.0]
    """
    current = float(start)
    while True:
        yield current
        current = min(current * factor, MAX_DELAY)


def fibonacci(start: float = 0.001) -> Iterator[float]:
    """Yield `start` scaled along the Fibonacci sequence: 1, 1, 2, 3, 5, ...

    Examples:
        >>> from itertools import islice
        >>> list(islice(fibonacci(1.0), 6))
        [1.0, 1.0, 2.0, 3.0, 5.0, 8.0]
    """
    current = nxt = float(start)
    while True:
        yield current
        current, nxt = nxt, min(current + nxt, MAX_DELAY)


def fixed(delay: float = 0.001) -> Iterator[float]:
    """Yield the same delay forever."""
    while True:
        yield float(delay)


def immediate() -> Iterator[float]:
    """Yield `0.0` forever: retry without waiting."""
    while True:
        yield 0.0


def linear(start: float = 0.0, step: float = 0.001) -> Iterator[float]:
    """Yield `start`, then add `step` each time.

    Examples:
        >>> from itertools import islice
        >>> list(islice(linear(1.0, 0.5), 4))
        [1.0, 1.5, 2.0, 2.5]
    """
    current = float(start)
    while True:
        yield current
        current = min(current + step, MAX_DELAY)


def none() -> Iterator[float]:
    """Yield nothing: the first rejection is final."""
    yield from ()


def jitter(n: float) -> float:
    """Return a random delay in `[0, 2n]`, centred on `n`."""
    return random.uniform(0.0, 2.0 * n)  # noqa: S311
