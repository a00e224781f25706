"""Result type: Ok[T] | Err[E], the synchronous counterpart of a settled Task.

Every settled `Task` corresponds 1:1 to a `Result` obtained by awaiting it,
so this module defines exactly the surface `Task` relies on plus the usual
extraction helpers.

Example:
    ```python
    def parse(text: str) -> Result[int, str]:
        return Ok(int(text)) if text.isdigit() else Err(f'not a number: {text!r}')

    parse('42').map(lambda n: n * 2)  # Ok(value=84)
    parse('nope').unwrap_or(0)  # 0
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, NoReturn, TypeIs

import msgspec

if TYPE_CHECKING:
    from klaw_task.maybe import Maybe

__all__ = ['Err', 'Ok', 'Result', 'collect']


class Ok[T](msgspec.Struct, frozen=True, gc=False):
    """Success variant of Result containing a value of type T.

    Examples:
        >>> Ok(42).unwrap()
        42
        >>> Ok(42).map(lambda x: x * 2)
        Ok(value=84)
    """

    value: T

    def is_ok(self) -> TypeIs[Ok[T]]:
        """Return True; narrows the type to Ok[T]."""
        return True

    def is_err(self) -> TypeIs[Err[object]]:
        """Return False since this is Ok."""
        return False

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        """Apply f to the contained value, producing a new Ok."""
        return Ok(f(self.value))

    def map_err(self, _f: Callable[[object], object]) -> Ok[T]:
        """Return self unchanged since this is Ok."""
        return self

    def and_then[U, E](self, f: Callable[[T], Ok[U] | Err[E]]) -> Ok[U] | Err[E]:
        """Apply f, which itself returns a Result, to the contained value."""
        return f(self.value)

    def or_else(self, _f: Callable[[object], object]) -> Ok[T]:
        """Return self unchanged since this is Ok."""
        return self

    def and_[U, E](self, other: Ok[U] | Err[E]) -> Ok[U] | Err[E]:
        """Return other, since this is Ok."""
        return other

    def or_(self, _other: object) -> Ok[T]:
        """Return self, since this is Ok."""
        return self

    def match[A](self, *, ok: Callable[[T], A], err: Callable[[object], A]) -> A:  # noqa: ARG002
        """Call the `ok` handler with the contained value."""
        return ok(self.value)

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def unwrap_or(self, _default: object) -> T:
        """Return the contained value, ignoring the default."""
        return self.value

    def unwrap_or_else(self, _f: Callable[[object], object]) -> T:
        """Return the contained value, ignoring the fallback function."""
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Raise, since there is no error to unwrap.

        Raises:
            RuntimeError: Always.
        """
        raise RuntimeError(f'Called unwrap_err on Ok: {self.value!r}')

    def ok(self) -> Maybe[T]:
        """Convert to Maybe, returning Just(value)."""
        from klaw_task.maybe import Just

        return Just(self.value)

    def err(self) -> Maybe[object]:
        """Convert to Maybe, returning Nothing since this is Ok."""
        from klaw_task.maybe import Nothing

        return Nothing


class Err[E](msgspec.Struct, frozen=True, gc=False):
    """Error variant of Result containing an error of type E.

    Examples:
        >>> Err('boom').is_err()
        True
        >>> Err('boom').unwrap_or(0)
        0
    """

    error: E

    def is_ok(self) -> TypeIs[Ok[object]]:
        """Return False since this is Err."""
        return False

    def is_err(self) -> TypeIs[Err[E]]:
        """Return True; narrows the type to Err[E]."""
        return True

    def map(self, _f: Callable[[object], object]) -> Err[E]:
        """Return self unchanged since this is Err."""
        return self

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Apply f to the contained error, producing a new Err."""
        return Err(f(self.error))

    def and_then(self, _f: Callable[[object], object]) -> Err[E]:
        """Return self unchanged since this is Err."""
        return self

    def or_else[T, F](self, f: Callable[[E], Ok[T] | Err[F]]) -> Ok[T] | Err[F]:
        """Apply a recovery function, which returns a Result, to the error."""
        return f(self.error)

    def and_(self, _other: object) -> Err[E]:
        """Return self, since this is Err."""
        return self

    def or_[T, F](self, other: Ok[T] | Err[F]) -> Ok[T] | Err[F]:
        """Return other, since this is Err."""
        return other

    def match[A](self, *, ok: Callable[[object], A], err: Callable[[E], A]) -> A:  # noqa: ARG002
        """Call the `err` handler with the contained error."""
        return err(self.error)

    def unwrap(self) -> NoReturn:
        """Raise, since there is no value to unwrap.

        Raises:
            RuntimeError: Always.
        """
        raise RuntimeError(f'Called unwrap on Err: {self.error!r}')

    def unwrap_or[T](self, default: T) -> T:
        """Return the default value since this is Err."""
        return default

    def unwrap_or_else[T](self, f: Callable[[E], T]) -> T:
        """Compute a value from the error."""
        return f(self.error)

    def unwrap_err(self) -> E:
        """Return the contained error."""
        return self.error

    def ok(self) -> Maybe[object]:
        """Convert to Maybe, returning Nothing since this is Err."""
        from klaw_task.maybe import Nothing

        return Nothing

    def err(self) -> Maybe[E]:
        """Convert to Maybe, returning Just(error)."""
        from klaw_task.maybe import Just

        return Just(self.error)


type Result[T, E] = Ok[T] | Err[E]


def collect[T, E](results: Iterable[Ok[T] | Err[E]]) -> Ok[list[T]] | Err[E]:
    """Collect an iterable of Results into a Result of list.

    Short-circuits on the first Err encountered.

    Examples:
        >>> collect([Ok(1), Ok(2)])
        Ok(value=[1, 2])
        >>> collect([Ok(1), Err('fail'), Ok(3)])
        Err(error='fail')
    """
    values: list[T] = []
    for result in results:
        if isinstance(result, Err):
            return result
        values.append(result.value)
    return Ok(values)
