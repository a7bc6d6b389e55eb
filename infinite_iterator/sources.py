"""
``infinite_iterator.sources``
=============================

Primitive producers, from which pipelines of adapters are built, and
``assume_infinite()``, the factory for declaring host iterators as
infinite.
"""
import typing as ty
import warnings
from collections.abc import Sized

from infinite_iterator.base import (
    ContractViolation,
    InfiniteIterator,
    is_infinite,
)

__all__ = [
    "Count",
    "Repeat",
    "RepeatWith",
    "Cycle",
    "AssumedInfinite",
    "count",
    "repeat",
    "repeat_with",
    "cycle",
    "assume_infinite",
]


T = ty.TypeVar("T")
N = ty.TypeVar("N", int, float)


class Count(InfiniteIterator[N]):
    """Arithmetic progression, starting at ``start`` and incrementing by
    ``step``.

    :group: Sources

    Notes
    -----
    Integer counts use Python ``int``, which has no upper bound, so the
    progression cannot overflow.
    """

    def __init__(self, start: N = 0, step: N = 1) -> None:
        self._next = start
        self.step = step

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"next": self._next, "step": self.step}

    def advance(self) -> N:
        value = self._next
        self._next = value + self.step
        return value


class Repeat(InfiniteIterator[T]):
    """Yields ``value`` forever. The same object is returned each time.

    :group: Sources
    """

    def __init__(self, value: T) -> None:
        self.value = value

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"value": self.value}

    def advance(self) -> T:
        return self.value


class RepeatWith(InfiniteIterator[T]):
    """Yields the result of calling ``func`` with no arguments, on
    every advance.

    :group: Sources
    """

    def __init__(self, func: ty.Callable[[], T]) -> None:
        self.func = func

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"func": self.func}

    def advance(self) -> T:
        return self.func()


class Cycle(InfiniteIterator[T]):
    """Repeats the elements of a finite, non-empty iterable forever.

    :group: Sources

    Parameters
    ----------
    iterable : iterable
        Elements to repeat. The iterable is consumed once, during
        initialisation.

    Raises
    ------
    TypeError
        If ``iterable`` is already an ``InfiniteIterator``, since it
        could never be fully consumed.
    ValueError
        If ``iterable`` contains no elements.
    """

    def __init__(self, iterable: ty.Iterable[T]) -> None:
        if is_infinite(iterable):
            raise TypeError(
                "Cannot cycle an InfiniteIterator, as its elements can "
                "never all be stored. It is already infinite."
            )
        self._items: ty.Tuple[T, ...] = tuple(iterable)
        if not self._items:
            raise ValueError("Cannot cycle an empty iterable.")
        self._idx = 0

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"items": self._items}

    def advance(self) -> T:
        value = self._items[self._idx]
        self._idx = (self._idx + 1) % len(self._items)
        return value


class AssumedInfinite(InfiniteIterator[T]):
    """Wrapper declaring an arbitrary iterator to be infinite. Create
    instances with ``assume_infinite()``.

    :group: Sources
    """

    def __init__(self, iterable: ty.Iterable[T]) -> None:
        self._iter = iter(iterable)
        self._count = 0

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"wrapped": self._iter}

    def advance(self) -> T:
        try:
            value = next(self._iter)
        except StopIteration:
            raise ContractViolation(
                f"Iterator assumed infinite was exhausted after "
                f"{self._count} elements."
            ) from None
        self._count = self._count + 1
        return value


def count(start: N = 0, step: N = 1) -> Count[N]:
    """Returns an infinite arithmetic progression.

    :group: Sources

    Parameters
    ----------
    start : int or float
        First value yielded. Default is ``0``.
    step : int or float
        Increment between successive values. Default is ``1``.
    """
    return Count(start, step)


def repeat(value: T) -> Repeat[T]:
    """Returns an iterator yielding ``value`` forever.

    :group: Sources
    """
    return Repeat(value)


def repeat_with(func: ty.Callable[[], T]) -> RepeatWith[T]:
    """Returns an iterator yielding ``func()`` forever.

    :group: Sources
    """
    return RepeatWith(func)


def cycle(iterable: ty.Iterable[T]) -> Cycle[T]:
    """Returns an iterator repeating the elements of ``iterable``.

    :group: Sources
    """
    return Cycle(iterable)


def assume_infinite(iterable: ty.Iterable[T]) -> AssumedInfinite[T]:
    """Declares that ``iterable`` can never be exhausted, giving it the
    ``InfiniteIterator`` capability.

    :group: Sources

    This is the single place where non-termination is asserted rather
    than guaranteed by construction. Use it at the boundary where a
    host iterator, **eg.** a ``while True`` generator or a polling
    loop, enters a pipeline.

    Parameters
    ----------
    iterable : iterable
        Iterable whose iterator never raises ``StopIteration``.

    Returns
    -------
    AssumedInfinite
        Wrapper holding the capability.

    Raises
    ------
    ContractViolation
        Raised by ``advance()`` on the wrapper, if the underlying
        iterator turns out to be finite.
    UserWarning
        If ``iterable`` has a length, since sized containers are almost
        always finite.
    """
    if isinstance(iterable, Sized):
        warnings.warn(
            f"Assuming an object of type {iterable.__class__.__name__} "
            f"with length {len(iterable)} is infinite. It will raise "
            "ContractViolation once exhausted.",
            UserWarning,
        )
    return AssumedInfinite(iterable)
