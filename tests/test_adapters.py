import itertools as it
import typing as ty
import warnings

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

import infinite_iterator as ii
from infinite_iterator import adapters


@st.composite
def counters(
    draw: st.DrawFn, min_value: int = -1000, max_value: int = 1000
) -> ii.sources.Count[int]:
    """Custom strategy providing a ``Count`` with a random start and
    non-zero step.
    """
    start = draw(st.integers(min_value, max_value))
    step = draw(st.integers(1, 50) | st.integers(-50, -1))
    return ii.count(start, step)


def test_map_doubles() -> None:
    assert adapters.Map(ii.count(), lambda x: x * 2).take(4) == [0, 2, 4, 6]


@given(counters(), st.integers(0, 200))
@settings(max_examples=25)
def test_identity_law(counter: ii.sources.Count[int], n: int) -> None:
    """Tests that mapping the identity reproduces the source sequence."""
    reference = ii.count(counter.take(1)[0], counter.step)
    mapped = adapters.Map(counter, lambda x: x)
    reference.advance()
    assert mapped.take(n) == reference.take(n)


def test_zip_pairs() -> None:
    paired = adapters.Zip(ii.count(), ii.count(10, 10))
    assert paired.take(3) == [(0, 10), (1, 20), (2, 30)]


def test_zip_advance_order() -> None:
    """Tests that the first producer is advanced before the second,
    once each per call.
    """
    calls: ty.List[str] = []
    left = ii.repeat_with(lambda: calls.append("left"))
    right = ii.repeat_with(lambda: calls.append("right"))
    paired = left.zip(right)
    paired.advance()
    paired.advance()
    assert calls == ["left", "right", "left", "right"]


def test_enumerate_tags() -> None:
    tagged = adapters.Enumerate(ii.repeat("a"))
    assert tagged.take(3) == [(0, "a"), (1, "a"), (2, "a")]


@given(st.integers(-(2**70), 2**70), st.integers(1, 100))
@settings(max_examples=25)
def test_enumerate_origin(start: int, n: int) -> None:
    tagged = ii.repeat(None).enumerate(start)
    assert [idx for idx, _ in tagged.take(n)] == list(range(start, start + n))


def test_enumerate_overflow_fails() -> None:
    """Tests that a bounded counter raises at its limit, without
    advancing the source, rather than wrapping around.
    """
    source = ii.count()
    tagged = adapters.Enumerate(source, start=126, dtype=np.int8)
    first, second = tagged.take(2)
    assert first == (126, 0) and second == (127, 1)
    assert isinstance(second[0], np.int8)
    with pytest.raises(OverflowError):
        tagged.advance()
    with pytest.raises(OverflowError):
        tagged.advance()
    assert source.advance() == 2


def test_enumerate_invalid_dtype() -> None:
    with pytest.raises(ValueError):
        adapters.Enumerate(ii.count(), dtype=np.float64)
    with pytest.raises(ValueError):
        adapters.Enumerate(ii.count(), start=-1, dtype=np.uint8)
    with pytest.raises(ValueError):
        adapters.Enumerate(ii.count(), start=256, dtype=np.uint8)


@pytest.mark.parametrize(
    "construct",
    [
        lambda src: adapters.Map(src, abs),
        lambda src: adapters.Zip(src, ii.count()),
        lambda src: adapters.Zip(ii.count(), src),
        lambda src: adapters.Enumerate(src),
        lambda src: adapters.Filter(src, bool),
        lambda src: adapters.Peekable(src),
        lambda src: adapters.Chain([], src),
        lambda src: ii.Loop(src, lambda x: None),
    ],
)
def test_finite_rejected(construct: ty.Callable[[ty.Any], ty.Any]) -> None:
    """Tests that finite iterables are rejected when a pipeline is
    built, not when it runs.
    """
    with pytest.raises(TypeError, match="InfiniteIterator"):
        construct(iter(range(10)))


def test_composition_is_associative() -> None:
    nested = ii.count().map(lambda x: x + 1).map(lambda x: x * 3)
    flat = ii.count().map(lambda x: (x + 1) * 3)
    assert nested.take(20) == flat.take(20)
    assert ii.is_infinite(nested)


def test_filter_and_filter_map() -> None:
    evens = ii.count().filter(lambda x: x % 2 == 0)
    assert evens.take(4) == [0, 2, 4, 6]
    halves = ii.count().filter_map(lambda x: x // 2 if x % 2 == 0 else None)
    assert halves.take(4) == [0, 1, 2, 3]


def test_filter_map_keeps_falsy() -> None:
    zeros = ii.repeat(0).filter_map(lambda x: x)
    assert zeros.take(2) == [0, 0]


def test_skip_is_lazy() -> None:
    source = ii.count()
    skipped = adapters.Skip(source, 5)
    assert source._next == 0  # type: ignore
    assert skipped.take(2) == [5, 6]
    with pytest.raises(ValueError):
        adapters.Skip(ii.count(), -1)


def test_skip_while() -> None:
    source = ii.cycle([1, 2, 3, 0])
    assert source.skip_while(lambda x: x < 3).take(5) == [3, 0, 1, 2, 3]


@given(st.integers(1, 20), st.integers(0, 50))
@settings(max_examples=25)
def test_step_by(step: int, n: int) -> None:
    stepped = ii.count().step_by(step)
    assert stepped.take(n) == list(range(0, n * step, step))


def test_step_by_invalid() -> None:
    with pytest.raises(ValueError):
        ii.count().step_by(0)


def test_inspect() -> None:
    seen: ty.List[int] = []
    assert ii.count().inspect(seen.append).take(3) == [0, 1, 2]
    assert seen == [0, 1, 2]


def test_chain() -> None:
    chained = adapters.Chain(["a", "b"], ii.repeat("z"))
    assert chained.take(4) == ["a", "b", "z", "z"]
    assert adapters.Chain([], ii.count()).take(2) == [0, 1]


def test_flatten_skips_empty() -> None:
    source = ii.cycle([[], [1, 2], [], [3]])
    assert source.flatten().take(6) == [1, 2, 3, 1, 2, 3]


def test_flat_map() -> None:
    flat = ii.count(1).flat_map(lambda x: it.repeat(x, x))
    assert flat.take(6) == [1, 2, 2, 3, 3, 3]


def test_peekable() -> None:
    """Tests that peeking is idempotent, and that the peeked element is
    the one advanced to next.
    """
    peek = ii.count().peekable()
    assert peek.peek() == 0
    assert peek.peek() == 0
    assert peek.advance() == 0
    assert peek.advance() == 1
    peek.replace(-1)
    assert peek.take(2) == [-1, 3]


def test_cycle() -> None:
    assert ii.cycle("ab").take(5) == ["a", "b", "a", "b", "a"]
    with pytest.raises(ValueError):
        ii.cycle([])
    with pytest.raises(TypeError):
        ii.cycle(ii.count())


def test_repeat_with() -> None:
    values = iter(range(100))
    assert ii.repeat_with(lambda: next(values)).take(3) == [0, 1, 2]


def test_assume_infinite_generator() -> None:
    def polling() -> ty.Iterator[int]:
        n = 0
        while True:
            yield n
            n = n + 1

    wrapped = ii.assume_infinite(polling())
    assert wrapped.map(str).take(3) == ["0", "1", "2"]


def test_assume_infinite_violation() -> None:
    """Tests that a broken non-termination promise raises a dedicated
    error, instead of ``StopIteration``.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        wrapped = ii.assume_infinite(iter([1, 2]))
    assert wrapped.take(2) == [1, 2]
    with pytest.raises(ii.ContractViolation, match="after 2 elements"):
        wrapped.advance()


def test_assume_infinite_warns_on_sized() -> None:
    with pytest.warns(UserWarning, match="length 3"):
        ii.assume_infinite([1, 2, 3])
