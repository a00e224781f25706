"""Unit type: a concrete stand-in for "no meaningful value"."""

from __future__ import annotations

import msgspec

__all__ = ['Unit', 'UnitType']


class UnitType(msgspec.Struct, frozen=True, gc=False):
    """The type of `Unit`, equivalent to `()` in languages with a unit type.

    This is a singleton - use the `Unit` constant instead of instantiating
    directly. It lets `Task.resolve()` and `Task.reject()` carry "nothing"
    without confusing it with an explicit `None`.

    Examples:
        >>> Unit
        Unit
    """

    def __repr__(self) -> str:
        return 'Unit'

    def __bool__(self) -> bool:
        return False


Unit: UnitType = UnitType()
"""Singleton instance representing the absence of a meaningful value."""
