"""Small internal helpers shared across klaw_task modules."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import msgspec

__all__ = ['MISSING', 'curry1', 'safe_repr']


class _Missing:
    """Marker for an omitted positional argument in curried helpers."""

    __slots__ = ()

    def __repr__(self) -> str:
        return '<missing>'


MISSING: Any = _Missing()


def curry1[A, R](op: Callable[[A], R], item: A | _Missing) -> R | Callable[[A], R]:
    """Apply `op` to `item`, or return `op` itself when `item` was omitted."""
    if item is MISSING:
        return op
    return op(item)  # type: ignore[arg-type]


def safe_repr(value: object) -> str:
    """Render a value for display without ever raising.

    Tries `repr`, then a JSON encoding, then a placeholder naming the type.
    """
    try:
        return repr(value)
    except Exception:
        pass
    try:
        return msgspec.json.encode(value).decode()
    except Exception:
        return f'<unrepresentable {type(value).__name__}>'
