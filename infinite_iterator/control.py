"""
``infinite_iterator.control``
=============================

Loop construct driving an ``InfiniteIterator``. The loop body is a
callable receiving each element in turn, and returning either
``Continue`` or ``Exit(value)``. The loop has no other way to stop, so
it evaluates to the value of the first ``Exit`` it receives.

Examples
--------
>>> from infinite_iterator import count, ifor, Exit
>>> ifor(count(), lambda x: Exit("found") if x == 5 else None)
'found'
"""
import enum
import typing as ty
from dataclasses import dataclass

from infinite_iterator.base import InfiniteIterator, require_infinite

__all__ = [
    "Continue",
    "CONTINUE",
    "Exit",
    "LoopState",
    "Loop",
    "ifor",
    "loop",
]


T = ty.TypeVar("T")
R = ty.TypeVar("R")


class Continue:
    """Loop step requesting the next iteration. Use the ``CONTINUE``
    instance; returning ``None`` from a body is equivalent.
    """

    _instance: ty.Optional["Continue"] = None

    def __new__(cls) -> "Continue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "CONTINUE"


CONTINUE = Continue()


@dataclass(frozen=True)
class Exit(ty.Generic[R]):
    """Loop step requesting the loop stop, evaluating to ``value``."""

    value: R


Step = ty.Optional[ty.Union[Continue, Exit[R]]]


class LoopState(enum.Enum):
    RUNNING = "running"
    EXITED = "exited"


class Loop(ty.Generic[T, R]):
    """Drives ``producer``, calling ``body`` on each element until it
    returns ``Exit``.

    :group: Control

    Parameters
    ----------
    producer : InfiniteIterator
        Source of elements. The loop takes ownership of it.
    body : callable
        Called with each element. Must return ``Exit(value)`` to stop
        the loop, or ``CONTINUE`` / ``None`` to carry on.

    Attributes
    ----------
    state : LoopState
        ``RUNNING`` until an ``Exit`` is received, then ``EXITED``.
    iterations : int
        Number of times the producer has been advanced.

    Raises
    ------
    TypeError
        If ``producer`` is not an ``InfiniteIterator``.

    Notes
    -----
    Exceptions raised by the producer or the body propagate out of
    ``run()`` unmodified. The loop stays ``RUNNING`` in that case, with
    no result.
    """

    def __init__(
        self, producer: InfiniteIterator[T], body: ty.Callable[[T], Step[R]]
    ) -> None:
        require_infinite(producer)
        self._producer = producer
        self._body = body
        self.state = LoopState.RUNNING
        self.iterations = 0
        self._result: ty.Optional[Exit[R]] = None

    def __repr__(self) -> str:
        name = self.__class__.__name__
        return f"{name}(state={self.state.name}, iterations={self.iterations})"

    @property
    def result(self) -> R:
        """The value carried by the ``Exit`` which stopped the loop."""
        if self._result is None:
            raise RuntimeError("Loop has not exited, so has no result.")
        return self._result.value

    def run(self) -> R:
        """Runs the loop until the body requests an exit.

        Returns
        -------
        R
            The value passed to ``Exit``.

        Raises
        ------
        RuntimeError
            If the loop has already exited.
        TypeError
            If the body returns something other than ``Exit``,
            ``CONTINUE`` or ``None``.
        """
        if self.state is LoopState.EXITED:
            raise RuntimeError("Loop has already exited, and cannot rerun.")
        producer, body = self._producer, self._body
        while True:
            value = producer.advance()
            self.iterations = self.iterations + 1
            step = body(value)
            if step is None or step is CONTINUE:
                continue
            if isinstance(step, Exit):
                self._result = step
                self.state = LoopState.EXITED
                return step.value
            raise TypeError(
                "Loop body must return Exit, CONTINUE or None, got "
                f"{step.__class__.__name__}."
            )


def ifor(
    producer: InfiniteIterator[T], body: ty.Callable[[T], Step[R]]
) -> R:
    """Loops over ``producer`` until ``body`` returns ``Exit(value)``,
    and evaluates to ``value``.

    :group: Control

    If ``body`` never exits, this function never returns.
    """
    return Loop(producer, body).run()


def loop(
    producer: InfiniteIterator[T],
) -> ty.Callable[[ty.Callable[[T], Step[R]]], R]:
    """Decorator form of ``ifor()``. The decorated function is used as
    the loop body, and its name is bound to the exit value.

    :group: Control

    Examples
    --------
    >>> from infinite_iterator import count, loop, Exit
    >>> @loop(count(1))
    ... def first_square_over_50(x):
    ...     if x * x > 50:
    ...         return Exit(x)
    >>> first_square_over_50
    8
    """
    require_infinite(producer)

    def decorator(body: ty.Callable[[T], Step[R]]) -> R:
        return ifor(producer, body)

    return decorator
