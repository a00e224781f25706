"""Maybe type: Just[T] | Nothing for optional values."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, NoReturn, TypeIs

import msgspec

if TYPE_CHECKING:
    from klaw_task.result import Err, Ok

__all__ = ['Just', 'Maybe', 'Nothing', 'NothingType', 'maybe_of']


class Just[T](msgspec.Struct, frozen=True, gc=False):
    """Present variant of Maybe containing a value of type T.

    Examples:
        >>> Just(42).map(lambda x: x + 1)
        Just(value=43)
    """

    value: T

    def is_just(self) -> TypeIs[Just[T]]:
        """Return True; narrows the type to Just[T]."""
        return True

    def is_nothing(self) -> TypeIs[NothingType]:
        """Return False since this is Just."""
        return False

    def map[U](self, f: Callable[[T], U]) -> Just[U]:
        """Apply f to the contained value."""
        return Just(f(self.value))

    def and_then[U](self, f: Callable[[T], Just[U] | NothingType]) -> Just[U] | NothingType:
        """Apply f, which itself returns a Maybe, to the contained value."""
        return f(self.value)

    def or_else(self, _f: Callable[[], object]) -> Just[T]:
        """Return self unchanged since this is Just."""
        return self

    def match[A](self, *, just: Callable[[T], A], nothing: Callable[[], A]) -> A:  # noqa: ARG002
        """Call the `just` handler with the contained value."""
        return just(self.value)

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, _default: object) -> T:
        """Return the contained value, ignoring the default."""
        return self.value

    def unwrap_or_else(self, _f: Callable[[], object]) -> T:
        """Return the contained value, ignoring the fallback function."""
        return self.value

    def ok_or(self, _err: object) -> Ok[T]:
        """Convert to Result, returning Ok(value)."""
        from klaw_task.result import Ok

        return Ok(self.value)


class NothingType(msgspec.Struct, frozen=True, gc=False):
    """Absent variant of Maybe.

    This is a singleton - use the `Nothing` constant instead of
    instantiating directly.
    """

    def is_just(self) -> TypeIs[Just[object]]:
        """Return False since this is Nothing."""
        return False

    def is_nothing(self) -> TypeIs[NothingType]:
        """Return True; narrows the type to NothingType."""
        return True

    def map(self, _f: Callable[[object], object]) -> NothingType:
        """Return Nothing since there's no value to map."""
        return self

    def and_then(self, _f: Callable[[object], object]) -> NothingType:
        """Return Nothing since there's no value to bind."""
        return self

    def or_else[T](self, f: Callable[[], Just[T] | NothingType]) -> Just[T] | NothingType:
        """Produce the alternative Maybe."""
        return f()

    def match[A](self, *, just: Callable[[object], A], nothing: Callable[[], A]) -> A:  # noqa: ARG002
        """Call the `nothing` handler."""
        return nothing()

    def unwrap(self) -> NoReturn:
        """Raise, since there is no value.

        Raises:
            RuntimeError: Always.
        """
        raise RuntimeError('Called unwrap on Nothing')

    def unwrap_or[T](self, default: T) -> T:
        """Return the default value since this is Nothing."""
        return default

    def unwrap_or_else[T](self, f: Callable[[], T]) -> T:
        """Compute and return a default value since this is Nothing."""
        return f()

    def ok_or[E](self, err: E) -> Err[E]:
        """Convert to Result, returning Err(err)."""
        from klaw_task.result import Err

        return Err(err)

    def __repr__(self) -> str:
        return 'Nothing'


Nothing: NothingType = NothingType()
"""Singleton instance representing the absence of a value."""


type Maybe[T] = Just[T] | NothingType


def maybe_of[T](value: T | None) -> Maybe[T]:
    """Wrap a possibly-None value: `None` becomes Nothing, anything else Just.

    Examples:
        >>> maybe_of(None)
        Nothing
        >>> maybe_of(0)
        Just(value=0)
    """
    if value is None:
        return Nothing
    return Just(value)
