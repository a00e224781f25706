"""klaw-task: Maybe, Result and Task types for Python 3.13+.

Flat imports (preferred):
    from klaw_task import Task, Ok, Err, Just, Nothing, Unit
    from klaw_task import all_, any_, race, timer, with_retries, safe

Submodule imports (for organization):
    from klaw_task.task import Task, delay
    from klaw_task.result import Result
    from klaw_task.maybe import Maybe
"""

# Types
from klaw_task.maybe import Just, Maybe, Nothing, NothingType, maybe_of
from klaw_task.result import Err, Ok, Result, collect
from klaw_task.unit import Unit, UnitType

# Errors
from klaw_task.errors import (
    AggregateRejection,
    InvalidAccess,
    TaskError,
    TaskExecutorException,
    TaskTimeoutError,
    Timeout,
    UnsafePromise,
)

# Task
from klaw_task.task import (
    RetryFailed,
    RetryStatus,
    State,
    StopRetrying,
    Task,
    WithResolvers,
    all_,
    all_settled,
    any_,
    delay,
    from_awaitable,
    from_result,
    from_unsafe_awaitable,
    is_retry_failed,
    race,
    safe,
    safe_nullable,
    safely_try,
    safely_try_or,
    safely_try_or_else,
    stop_retrying,
    timer,
    with_retries,
)

# Configuration and logging
from klaw_task._config import TaskConfig, get_config, init
from klaw_task._logging import add_log_hook, clear_log_hooks, configure_logging, get_logger, remove_log_hook

__all__ = [
    'AggregateRejection',
    'Err',
    'InvalidAccess',
    'Just',
    'Maybe',
    'Nothing',
    'NothingType',
    'Ok',
    'Result',
    'RetryFailed',
    'RetryStatus',
    'State',
    'StopRetrying',
    'Task',
    'TaskConfig',
    'TaskError',
    'TaskExecutorException',
    'TaskTimeoutError',
    'Timeout',
    'Unit',
    'UnitType',
    'UnsafePromise',
    'WithResolvers',
    'add_log_hook',
    'all_',
    'all_settled',
    'any_',
    'clear_log_hooks',
    'collect',
    'configure_logging',
    'delay',
    'from_awaitable',
    'from_result',
    'from_unsafe_awaitable',
    'get_config',
    'get_logger',
    'init',
    'is_retry_failed',
    'maybe_of',
    'race',
    'remove_log_hook',
    'safe',
    'safe_nullable',
    'safely_try',
    'safely_try_or',
    'safely_try_or_else',
    'stop_retrying',
    'timer',
    'with_retries',
]
