"""Library configuration: TaskConfig and initialization."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from klaw_task._logging import configure_logging

__all__ = [
    'TaskConfig',
    'get_config',
    'init',
]

DEFAULT_RETRIES = 3


@dataclass(frozen=True)
class TaskConfig:
    """Configuration for klaw_task.

    Attributes:
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = leave logging alone.
        json_logs: Emit JSON logs when logging is configured; console output otherwise.
        default_retries: Number of immediate retries `with_retries` uses when no
            strategy is given.
    """

    log_level: str | None = None
    json_logs: bool = True
    default_retries: int = DEFAULT_RETRIES


# Global configuration (set by init())
_config: TaskConfig | None = None


def _detect_log_level() -> str | None:
    value = os.environ.get('KLAW_TASK_LOG_LEVEL', '').strip()
    return value.upper() or None


def _detect_json_logs() -> bool:
    """Read KLAW_TASK_LOG_FORMAT ("json" or "console"), defaulting to JSON."""
    value = os.environ.get('KLAW_TASK_LOG_FORMAT', '').lower()
    if value == 'console':
        return False
    if value and value != 'json':
        logging.warning("Unknown KLAW_TASK_LOG_FORMAT value '%s', defaulting to json", value)
    return True


def _detect_default_retries() -> int:
    value = os.environ.get('KLAW_TASK_DEFAULT_RETRIES', '')
    if not value:
        return DEFAULT_RETRIES
    try:
        return max(0, int(value))
    except ValueError:
        logging.warning("Invalid KLAW_TASK_DEFAULT_RETRIES value '%s', defaulting to %d", value, DEFAULT_RETRIES)
        return DEFAULT_RETRIES


def init(
    log_level: str | None = None,
    json_logs: bool | None = None,
    default_retries: int | None = None,
) -> TaskConfig:
    """Initialize klaw_task with the specified configuration.

    Arguments take precedence over environment variables, which take
    precedence over the defaults.

    Args:
        log_level: Logging level ("DEBUG", "INFO", etc.). Falls back to
            KLAW_TASK_LOG_LEVEL; None = leave logging alone.
        json_logs: JSON or console log output. Falls back to KLAW_TASK_LOG_FORMAT.
        default_retries: Default retry count for `with_retries`. Falls back to
            KLAW_TASK_DEFAULT_RETRIES.

    Returns:
        The TaskConfig that was set.

    Example:
        ```python
        import klaw_task

        klaw_task.init(log_level='DEBUG', json_logs=False)
        klaw_task.get_config().default_retries  # 3
        ```
    """
    global _config  # noqa: PLW0603

    resolved_level = log_level if log_level is not None else _detect_log_level()
    resolved_json = json_logs if json_logs is not None else _detect_json_logs()
    resolved_retries = max(0, default_retries) if default_retries is not None else _detect_default_retries()

    _config = TaskConfig(
        log_level=resolved_level,
        json_logs=resolved_json,
        default_retries=resolved_retries,
    )

    # Configure logging if level specified
    if resolved_level is not None:
        configure_logging(resolved_level, json_output=resolved_json)

    return _config


def get_config() -> TaskConfig:
    """Get the current configuration, initializing from the environment if needed.

    Returns:
        The current TaskConfig.
    """
    if _config is None:
        return init()
    return _config
