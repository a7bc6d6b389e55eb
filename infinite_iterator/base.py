"""
``infinite_iterator.base``
==========================

Defines the ``InfiniteIterator`` interface, for producers which can
never be exhausted. Every call to ``advance()`` returns a value, and the
standard iterator protocol delegates to it, so ``StopIteration`` is
never raised by a conforming producer.
"""
import typing as ty
from abc import ABC, abstractmethod

import numpy as np
import numpy.typing as npt
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

if ty.TYPE_CHECKING:
    from infinite_iterator import adapters

__all__ = [
    "InfiniteIterator",
    "ContractViolation",
    "is_infinite",
    "require_infinite",
]


T = ty.TypeVar("T")
U = ty.TypeVar("U")

# fixed width, so the text form does not depend on the terminal
_REPR_WIDTH = 100


class ContractViolation(RuntimeError):
    """Raised when an iterator declared infinite runs out of elements."""


class InfiniteIterator(ABC, ty.Iterator[T]):
    """Iterator which never ends.

    :group: Capability

    Subclasses implement a single method, ``advance()``, which must
    return a new element on every call. They may not define ``__len__``,
    nor override ``__next__``, directly or through a base class. Both are
    rejected with ``TypeError`` when the subclass is defined.

    Notes
    -----
    ``advance()`` may still raise for reasons outside of this contract,
    **eg.** an error in a user-supplied callback. Such exceptions
    propagate unmodified. The one exception is ``StopIteration``, which
    the iterator protocol would mistake for exhaustion. When raised by
    ``advance()`` during ``next()``, it is replaced by a
    ``RuntimeError``, as for generators.
    """

    def __init_subclass__(cls, **kwargs: ty.Any) -> None:
        super().__init_subclass__(**kwargs)
        # inherited definitions count, so mixins cannot reintroduce them
        if getattr(cls, "__len__", None) is not None:
            name = "__len__"
        elif cls.__next__ is not InfiniteIterator.__next__:
            name = "__next__"
        else:
            return
        raise TypeError(
            f"{cls.__name__} may not define {name}, since "
            "InfiniteIterator subclasses can neither be sized nor "
            "exhausted. Implement advance() instead."
        )

    @abstractmethod
    def advance(self) -> T:
        """Returns the next element. Never signals exhaustion."""

    @ty.final
    def __next__(self) -> T:
        try:
            return self.advance()
        except StopIteration as e:
            raise RuntimeError("advance() raised StopIteration") from e

    def __iter__(self) -> "InfiniteIterator[T]":
        return self

    def _params(self) -> ty.Dict[str, ty.Any]:
        return {}

    def _sources(self) -> ty.Tuple["InfiniteIterator[ty.Any]", ...]:
        return ()

    def _label(self) -> str:
        params = ", ".join(
            f"[red]{key}[default]=[green]{escape(repr(val))}[default]"
            for key, val in self._params().items()
        )
        return f"[blue]{self.__class__.__name__}[default]({params})"

    def _grow(self, tree: Tree) -> Tree:
        for source in self._sources():
            source._grow(tree.add(source._label()))
        return tree

    def __rich__(self) -> Tree:
        return self._grow(Tree(self._label()))

    def __repr__(self) -> str:
        console = Console(color_system=None, width=_REPR_WIDTH)
        with console.capture() as capture:
            console.print(self)
        return capture.get().rstrip("\n")

    def map(self, func: ty.Callable[[T], U]) -> "InfiniteIterator[U]":
        """Transforms each element with ``func``. See ``adapters.Map``."""
        from infinite_iterator import adapters

        return adapters.Map(self, func)

    def zip(
        self, other: "InfiniteIterator[U]"
    ) -> "InfiniteIterator[ty.Tuple[T, U]]":
        """Pairs elements with those of ``other``. See ``adapters.Zip``."""
        from infinite_iterator import adapters

        return adapters.Zip(self, other)

    def enumerate(
        self, start: int = 0, dtype: ty.Optional[npt.DTypeLike] = None
    ) -> "InfiniteIterator[ty.Tuple[int, T]]":
        """Tags each element with its position. See
        ``adapters.Enumerate``.
        """
        from infinite_iterator import adapters

        return adapters.Enumerate(self, start=start, dtype=dtype)

    def filter(self, predicate: ty.Callable[[T], bool]) -> "InfiniteIterator[T]":
        from infinite_iterator import adapters

        return adapters.Filter(self, predicate)

    def filter_map(
        self, func: ty.Callable[[T], ty.Optional[U]]
    ) -> "InfiniteIterator[U]":
        from infinite_iterator import adapters

        return adapters.FilterMap(self, func)

    def skip(self, n: int) -> "InfiniteIterator[T]":
        from infinite_iterator import adapters

        return adapters.Skip(self, n)

    def skip_while(
        self, predicate: ty.Callable[[T], bool]
    ) -> "InfiniteIterator[T]":
        from infinite_iterator import adapters

        return adapters.SkipWhile(self, predicate)

    def step_by(self, step: int) -> "InfiniteIterator[T]":
        from infinite_iterator import adapters

        return adapters.StepBy(self, step)

    def inspect(self, func: ty.Callable[[T], ty.Any]) -> "InfiniteIterator[T]":
        from infinite_iterator import adapters

        return adapters.Inspect(self, func)

    def flatten(self) -> "InfiniteIterator[ty.Any]":
        from infinite_iterator import adapters

        return adapters.Flatten(self)

    def flat_map(
        self, func: ty.Callable[[T], ty.Iterable[U]]
    ) -> "InfiniteIterator[U]":
        from infinite_iterator import adapters

        return adapters.FlatMap(self, func)

    def peekable(self) -> "adapters.Peekable[T]":
        from infinite_iterator import adapters

        return adapters.Peekable(self)

    def take(self, n: int) -> ty.List[T]:
        """Advances the iterator ``n`` times, returning the elements in
        a list.
        """
        if n < 0:
            raise ValueError("n must be non-negative.")
        return [self.advance() for _ in range(n)]

    def take_array(self, n: int, dtype: npt.DTypeLike) -> npt.NDArray[ty.Any]:
        """Advances the iterator ``n`` times, collecting the elements
        into a NumPy array.

        Parameters
        ----------
        n : int
            Number of elements to consume.
        dtype : dtype-like
            Data type of the output array. Structured dtypes are allowed
            when the elements are tuples.

        Returns
        -------
        ndarray
            One-dimensional array of length ``n``.
        """
        if n < 0:
            raise ValueError("n must be non-negative.")
        return np.fromiter(self, dtype=dtype, count=n)

    def nth(self, n: int) -> T:
        """Discards ``n`` elements and returns the next one."""
        if n < 0:
            raise ValueError("n must be non-negative.")
        for _ in range(n):
            self.advance()
        return self.advance()

    def find(self, predicate: ty.Callable[[T], bool]) -> T:
        """Returns the first element satisfying ``predicate``.

        Notes
        -----
        Since the iterator never ends, this either returns a value or
        runs forever. There is no 'not found' outcome.
        """
        from infinite_iterator.control import Exit, ifor

        return ifor(self, lambda x: Exit(x) if predicate(x) else None)

    def position(self, predicate: ty.Callable[[T], bool]) -> int:
        """Returns the zero-based index of the first element satisfying
        ``predicate``. Like ``find()``, this may run forever.
        """
        from infinite_iterator.control import Exit, ifor

        return ifor(
            self.enumerate(),
            lambda pair: Exit(pair[0]) if predicate(pair[1]) else None,
        )


def is_infinite(obj: ty.Any) -> bool:
    """Returns ``True`` if ``obj`` holds the ``InfiniteIterator``
    capability.

    :group: Capability
    """
    return isinstance(obj, InfiniteIterator)


def require_infinite(obj: ty.Any, role: str = "producer") -> None:
    """Rejects objects without the ``InfiniteIterator`` capability.

    :group: Capability

    Raises
    ------
    TypeError
        If ``obj`` is not an ``InfiniteIterator``. Use
        ``sources.assume_infinite()`` to declare an arbitrary iterator
        as infinite.
    """
    if not is_infinite(obj):
        raise TypeError(
            f"{role} must be an InfiniteIterator, got "
            f"{obj.__class__.__name__}. Wrap it with assume_infinite() if "
            "it can never be exhausted."
        )
