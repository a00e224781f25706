"""Task[T, E]: asynchronous computations that settle to a Result."""

from klaw_task.task import delay
from klaw_task.task.combinators import (
    all_,
    all_settled,
    and_,
    and_then,
    any_,
    map_,
    map_rejected,
    match,
    or_,
    or_else,
    race,
    timeout,
    timer,
    to_future,
)
from klaw_task.task.constructors import (
    from_awaitable,
    from_result,
    from_unsafe_awaitable,
    reject,
    resolve,
    safe,
    safe_nullable,
    safely_try,
    safely_try_or,
    safely_try_or_else,
    with_resolvers,
)
from klaw_task.task.core import Executor, State, Task, WithResolvers
from klaw_task.task.retry import (
    RetryFailed,
    RetryStatus,
    StopRetrying,
    is_retry_failed,
    stop_retrying,
    with_retries,
)

__all__ = [
    'Executor',
    'RetryFailed',
    'RetryStatus',
    'State',
    'StopRetrying',
    'Task',
    'WithResolvers',
    'all_',
    'all_settled',
    'and_',
    'and_then',
    'any_',
    'delay',
    'from_awaitable',
    'from_result',
    'from_unsafe_awaitable',
    'is_retry_failed',
    'map_',
    'map_rejected',
    'match',
    'or_',
    'or_else',
    'race',
    'reject',
    'resolve',
    'safe',
    'safe_nullable',
    'safely_try',
    'safely_try_or',
    'safely_try_or_else',
    'stop_retrying',
    'timeout',
    'timer',
    'to_future',
    'with_resolvers',
    'with_retries',
]
