"""Tests for logging configuration, hooks and library events."""

from __future__ import annotations

import logging
from typing import Any

import pytest
import structlog

from klaw_task import Task, TaskExecutorException
from klaw_task._logging import (
    add_log_hook,
    clear_log_hooks,
    configure_logging,
    get_logger,
    remove_log_hook,
)


class TestLogHooks:
    """Tests for logging hooks functionality."""

    def test_hook_receives_log_events(self) -> None:
        """Registered hooks receive log entry dicts."""
        received: list[dict[str, Any]] = []

        configure_logging(level='DEBUG', json_output=True)
        add_log_hook(received.append)

        logger = get_logger('test')
        logger.info('Test message', extra_field='extra_value')

        test_entries = [e for e in received if e.get('event') == 'Test message']
        assert len(test_entries) == 1
        assert test_entries[0]['extra_field'] == 'extra_value'
        assert test_entries[0]['level'] == 'info'

    def test_remove_hook(self) -> None:
        """remove_log_hook() stops hook from being called."""
        calls: list[str] = []

        def hook(event_dict: dict[str, Any]) -> None:
            calls.append('called')

        configure_logging(level='DEBUG', json_output=False)
        add_log_hook(hook)

        logger = get_logger('test')
        logger.info('First')
        assert len(calls) == 1

        remove_log_hook(hook)
        logger.info('Second')
        assert len(calls) == 1

    def test_clear_hooks(self) -> None:
        """clear_log_hooks() removes all hooks."""
        calls: list[str] = []

        configure_logging(level='DEBUG', json_output=True)
        add_log_hook(lambda _: calls.append('hook1'))
        add_log_hook(lambda _: calls.append('hook2'))

        logger = get_logger('test')
        logger.info('First')
        assert calls == ['hook1', 'hook2']

        clear_log_hooks()
        logger.info('Second')
        assert len(calls) == 2

    def test_hook_exception_does_not_break_logging(self) -> None:
        """Exceptions in hooks don't prevent logging or other hooks."""
        calls: list[str] = []

        def bad_hook(event_dict: dict[str, Any]) -> None:
            raise RuntimeError('Hook failed')

        configure_logging(level='DEBUG', json_output=True)
        add_log_hook(bad_hook)
        add_log_hook(lambda _: calls.append('good'))

        get_logger('test').info('Test')

        assert calls == ['good']

    def test_level_filters_events(self) -> None:
        """Events below the configured level never reach hooks."""
        received: list[dict[str, Any]] = []

        configure_logging(level='WARNING', json_output=True)
        add_log_hook(received.append)

        logger = get_logger('test')
        logger.debug('hidden')
        logger.warning('shown')

        assert [e['event'] for e in received] == ['shown']


class TestUnconfigured:
    """get_logger() before the application configures structlog."""

    def test_defers_to_stdlib_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        """The stdlib logger's level decides what is emitted."""
        structlog.reset_defaults()
        logger = get_logger('klaw_task.test')

        with caplog.at_level(logging.WARNING, logger='klaw_task.test'):
            logger.debug('quiet')
            logger.warning('loud', attempt=2)

        assert "event='loud'" in caplog.text
        assert 'attempt=2' in caplog.text
        assert 'quiet' not in caplog.text

    def test_hooks_still_run(self, caplog: pytest.LogCaptureFixture) -> None:
        """Hooks see events from the stdlib-bound logger too."""
        structlog.reset_defaults()
        received: list[dict[str, Any]] = []
        add_log_hook(received.append)

        with caplog.at_level(logging.ERROR, logger='klaw_task.test'):
            get_logger('klaw_task.test').error('failed')

        assert [e['event'] for e in received] == ['failed']

    def test_logger_reused_per_name(self) -> None:
        """The stdlib-bound logger for a name is built once and reused."""
        structlog.reset_defaults()
        assert get_logger('klaw_task.test') is get_logger('klaw_task.test')
        assert get_logger('klaw_task.test') is not get_logger('klaw_task.other')


class TestLibraryEvents:
    """Events emitted by Task itself."""

    async def test_tasks_rendered_in_event_dict(self, log_events: list[dict[str, Any]]) -> None:
        """Task values in an event dict are rendered with their display form."""
        get_logger('test').info('settled', task=Task.resolve(1))

        assert log_events[0]['task'] == 'Task.Resolved(1)'

    async def test_executor_failure_logged(self, log_events: list[dict[str, Any]]) -> None:
        """A raising executor emits task.executor_failed."""

        def executor(resolve: Any, reject: Any) -> None:
            raise ValueError('broken')

        task = Task(executor)
        with pytest.raises(TaskExecutorException):
            await task

        events = [e for e in log_events if e['event'] == 'task.executor_failed']
        assert len(events) == 1
        assert events[0]['level'] == 'error'
        assert 'broken' in events[0]['error']
