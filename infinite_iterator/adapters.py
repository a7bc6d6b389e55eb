"""
``infinite_iterator.adapters``
==============================

Adapters wrapping one or two ``InfiniteIterator`` instances. Each
adapter is itself an ``InfiniteIterator``, so they compose into
pipelines of any depth without losing the guarantee that the output
never ends.

The wrapped producers are owned by the adapter. Advancing them
elsewhere while the adapter is in use gives unspecified results.
"""
import typing as ty

import numpy as np
import numpy.typing as npt

from infinite_iterator.base import InfiniteIterator, require_infinite

__all__ = [
    "Map",
    "Zip",
    "Enumerate",
    "Filter",
    "FilterMap",
    "Skip",
    "SkipWhile",
    "StepBy",
    "Inspect",
    "Chain",
    "Flatten",
    "FlatMap",
    "Peekable",
]


T = ty.TypeVar("T")
U = ty.TypeVar("U")


class _Adapter(InfiniteIterator[U], ty.Generic[T, U]):
    """Wraps a single producer, which it takes ownership of."""

    def __init__(self, source: InfiniteIterator[T]) -> None:
        require_infinite(source, role="source")
        self._source = source

    def _sources(self) -> ty.Tuple[InfiniteIterator[ty.Any], ...]:
        return (self._source,)


class Map(_Adapter[T, U]):
    """Applies ``func`` to each element of ``source``.

    :group: Adapters

    ``Map(source, lambda x: x)`` yields the same sequence as ``source``.
    """

    def __init__(
        self, source: InfiniteIterator[T], func: ty.Callable[[T], U]
    ) -> None:
        super().__init__(source)
        self.func = func

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"func": self.func}

    def advance(self) -> U:
        return self.func(self._source.advance())


class Zip(InfiniteIterator[ty.Tuple[T, U]]):
    """Pairs the elements of two producers.

    :group: Adapters

    Each call to ``advance()`` advances ``first`` and then ``second``,
    exactly once each.
    """

    def __init__(
        self, first: InfiniteIterator[T], second: InfiniteIterator[U]
    ) -> None:
        require_infinite(first, role="first")
        require_infinite(second, role="second")
        self._first = first
        self._second = second

    def _sources(self) -> ty.Tuple[InfiniteIterator[ty.Any], ...]:
        return (self._first, self._second)

    def advance(self) -> ty.Tuple[T, U]:
        left = self._first.advance()
        return left, self._second.advance()


class Enumerate(_Adapter[T, ty.Tuple[int, T]]):
    """Tags each element of ``source`` with a position counter.

    :group: Adapters

    Parameters
    ----------
    source : InfiniteIterator
        Producer to tag.
    start : int
        Value of the counter for the first element. Default is ``0``.
    dtype : dtype-like, optional
        NumPy integer type bounding the counter. If ``None``, the
        counter is a Python ``int`` and cannot overflow. Default is
        ``None``.

    Raises
    ------
    ValueError
        If ``dtype`` is not an integer type, or ``start`` does not fit
        in it.
    OverflowError
        From ``advance()``, when the counter would exceed the maximum
        value of ``dtype``. The source is not advanced in this case.

    Notes
    -----
    With a bounded ``dtype`` the overflow policy is to fail: the counter
    neither saturates nor wraps around. Every later call raises again.
    """

    def __init__(
        self,
        source: InfiniteIterator[T],
        start: int = 0,
        dtype: ty.Optional[npt.DTypeLike] = None,
    ) -> None:
        super().__init__(source)
        self._limit: ty.Optional[int] = None
        self._scalar: ty.Callable[[int], ty.Any] = int
        if dtype is not None:
            dtype = np.dtype(dtype)
            if not np.issubdtype(dtype, np.integer):
                raise ValueError(f"dtype must be an integer type, not {dtype}.")
            info = np.iinfo(dtype)
            if not info.min <= start <= info.max:
                raise ValueError(
                    f"start={start} is out of bounds for {dtype}, which "
                    f"spans [{info.min}, {info.max}]."
                )
            self._limit = int(info.max)
            self._scalar = dtype.type
        self.dtype = dtype
        self._next = int(start)

    def _params(self) -> ty.Dict[str, ty.Any]:
        params: ty.Dict[str, ty.Any] = {"next": self._next}
        if self.dtype is not None:
            params["dtype"] = str(self.dtype)
        return params

    def advance(self) -> ty.Tuple[int, T]:
        idx = self._next
        if self._limit is not None and idx > self._limit:
            raise OverflowError(
                f"Position counter exceeded the maximum of {self.dtype}, "
                f"{self._limit}."
            )
        value = self._source.advance()
        self._next = idx + 1
        return self._scalar(idx), value


class Filter(_Adapter[T, T]):
    """Yields only the elements of ``source`` satisfying ``predicate``.

    :group: Adapters

    Notes
    -----
    If no further element ever satisfies ``predicate``, ``advance()``
    runs forever. It never reports exhaustion.
    """

    def __init__(
        self, source: InfiniteIterator[T], predicate: ty.Callable[[T], bool]
    ) -> None:
        super().__init__(source)
        self.predicate = predicate

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"predicate": self.predicate}

    def advance(self) -> T:
        while True:
            value = self._source.advance()
            if self.predicate(value):
                return value


class FilterMap(_Adapter[T, U]):
    """Applies ``func`` to each element, skipping ``None`` results.

    :group: Adapters
    """

    def __init__(
        self,
        source: InfiniteIterator[T],
        func: ty.Callable[[T], ty.Optional[U]],
    ) -> None:
        super().__init__(source)
        self.func = func

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"func": self.func}

    def advance(self) -> U:
        while True:
            value = self.func(self._source.advance())
            if value is not None:
                return value


class Skip(_Adapter[T, T]):
    """Discards the first ``n`` elements of ``source``. Elements are
    discarded lazily, on the first call to ``advance()``.

    :group: Adapters
    """

    def __init__(self, source: InfiniteIterator[T], n: int) -> None:
        super().__init__(source)
        if n < 0:
            raise ValueError("n must be non-negative.")
        self._remaining = n

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"remaining": self._remaining}

    def advance(self) -> T:
        while self._remaining > 0:
            self._source.advance()
            self._remaining = self._remaining - 1
        return self._source.advance()


class SkipWhile(_Adapter[T, T]):
    """Discards leading elements while ``predicate`` holds, then yields
    every element thereafter.

    :group: Adapters
    """

    def __init__(
        self, source: InfiniteIterator[T], predicate: ty.Callable[[T], bool]
    ) -> None:
        super().__init__(source)
        self.predicate = predicate
        self._skipping = True

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"predicate": self.predicate, "skipping": self._skipping}

    def advance(self) -> T:
        value = self._source.advance()
        while self._skipping:
            if not self.predicate(value):
                self._skipping = False
                break
            value = self._source.advance()
        return value


class StepBy(_Adapter[T, T]):
    """Yields the first element of ``source``, then every ``step``-th
    element after it.

    :group: Adapters
    """

    def __init__(self, source: InfiniteIterator[T], step: int) -> None:
        super().__init__(source)
        if step < 1:
            raise ValueError("step must be at least 1.")
        self.step = step
        self._first = True

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"step": self.step}

    def advance(self) -> T:
        if self._first:
            self._first = False
            return self._source.advance()
        for _ in range(self.step - 1):
            self._source.advance()
        return self._source.advance()


class Inspect(_Adapter[T, T]):
    """Calls ``func`` on each element before passing it on unchanged.

    :group: Adapters
    """

    def __init__(
        self, source: InfiniteIterator[T], func: ty.Callable[[T], ty.Any]
    ) -> None:
        super().__init__(source)
        self.func = func

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"func": self.func}

    def advance(self) -> T:
        value = self._source.advance()
        self.func(value)
        return value


class Chain(InfiniteIterator[T]):
    """Yields the elements of a finite ``head``, followed by those of
    an infinite ``tail``.

    :group: Adapters

    Parameters
    ----------
    head : iterable
        Any iterable, consumed lazily. May be empty.
    tail : InfiniteIterator
        Producer used once ``head`` is exhausted.
    """

    def __init__(
        self, head: ty.Iterable[T], tail: InfiniteIterator[T]
    ) -> None:
        require_infinite(tail, role="tail")
        self._head: ty.Optional[ty.Iterator[T]] = iter(head)
        self._tail = tail

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"head_exhausted": self._head is None}

    def _sources(self) -> ty.Tuple[InfiniteIterator[ty.Any], ...]:
        return (self._tail,)

    def advance(self) -> T:
        if self._head is not None:
            for value in self._head:
                return value
            self._head = None
        return self._tail.advance()


class Flatten(_Adapter[ty.Iterable[T], T]):
    """Yields the elements of each iterable produced by ``source``, in
    turn. Empty iterables are skipped over.

    :group: Adapters
    """

    def __init__(self, source: InfiniteIterator[ty.Iterable[T]]) -> None:
        super().__init__(source)
        self._current: ty.Iterator[T] = iter(())

    def advance(self) -> T:
        while True:
            for value in self._current:
                return value
            self._current = iter(self._source.advance())


class FlatMap(Flatten[U]):
    """Maps each element of ``source`` to an iterable with ``func``, and
    flattens the result.

    :group: Adapters
    """

    def __init__(
        self, source: InfiniteIterator[T], func: ty.Callable[[T], ty.Iterable[U]]
    ) -> None:
        super().__init__(Map(source, func))
        self.func = func

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"func": self.func}


class Peekable(_Adapter[T, T]):
    """Allows the next element of ``source`` to be inspected without
    consuming it.

    :group: Adapters
    """

    def __init__(self, source: InfiniteIterator[T]) -> None:
        super().__init__(source)
        self._peeked: ty.Tuple[T, ...] = ()

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {"peeked": self._peeked}

    def peek(self) -> T:
        """Returns the next element, without advancing. Repeated calls
        return the same object, which the next ``advance()`` yields.
        Since the source never ends, a value is always available.
        """
        if not self._peeked:
            self._peeked = (self._source.advance(),)
        return self._peeked[0]

    def replace(self, value: T) -> None:
        """Replaces the next element with ``value``."""
        self.peek()
        self._peeked = (value,)

    def advance(self) -> T:
        if self._peeked:
            value = self._peeked[0]
            self._peeked = ()
            return value
        return self._source.advance()
