"""
``infinite_iterator``
=====================

Provides iterators which never end, adapters composing them without
losing that guarantee, and a loop construct driving them which
evaluates to a value on exit.
"""
from ._version import __version__
from . import adapters, control, factory, sources
from .base import ContractViolation, InfiniteIterator, is_infinite
from .control import CONTINUE, Continue, Exit, Loop, LoopState, ifor, loop
from .sources import assume_infinite, count, cycle, repeat, repeat_with


__all__ = [
    "__version__",
    "adapters",
    "control",
    "factory",
    "sources",
    "InfiniteIterator",
    "ContractViolation",
    "is_infinite",
    "Continue",
    "CONTINUE",
    "Exit",
    "Loop",
    "LoopState",
    "ifor",
    "loop",
    "assume_infinite",
    "count",
    "cycle",
    "repeat",
    "repeat_with",
]
