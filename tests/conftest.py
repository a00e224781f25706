"""Pytest configuration and shared fixtures for klaw-task tests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import Any

import pytest
import structlog

from klaw_task._logging import add_log_hook, clear_log_hooks, configure_logging


@pytest.fixture
async def loop_errors() -> AsyncIterator[list[dict[str, Any]]]:
    """Capture contexts passed to the running loop's exception handler."""
    loop = asyncio.get_running_loop()
    captured: list[dict[str, Any]] = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _loop, context: captured.append(context))
    yield captured
    loop.set_exception_handler(previous)


@pytest.fixture
def drain() -> Callable[[int], Awaitable[None]]:
    """Return a coroutine function that lets pending loop callbacks run."""

    async def _drain(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _drain


@pytest.fixture(autouse=True)
def cleanup_hooks() -> Iterator[None]:
    """Clear log hooks before and after each test."""
    clear_log_hooks()
    yield
    clear_log_hooks()


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo configure_logging(): root handlers, root level and structlog config."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
async def log_events() -> list[dict[str, Any]]:
    """Configure DEBUG logging and collect every event through a hook."""
    received: list[dict[str, Any]] = []
    configure_logging(level='DEBUG', json_output=True)
    add_log_hook(received.append)
    return received
