"""
``infinite_iterator.factory``
=============================

Builds producer pipelines from declarative descriptions. Each node is a
mapping whose ``type`` entry names a registered constructor, and whose
remaining entries are passed to it as keyword arguments.

Nested producers are given under ``source`` (or ``sources``, a list),
and callables under ``func`` or ``predicate`` as import paths, **eg.**
``"operator:neg"`` or ``"math.sqrt"``.

Examples
--------
>>> pipe = construct_pipeline('''
... type: map
... func: operator:neg
... source:
...   type: count
...   start: 1
... ''')
>>> pipe.take(3)
[-1, -2, -3]
"""
import importlib
import inspect
import typing as ty
from collections.abc import Mapping

from omegaconf import DictConfig, ListConfig, OmegaConf

from infinite_iterator import adapters, sources
from infinite_iterator.base import InfiniteIterator

__all__ = [
    "register",
    "unregister",
    "create",
    "load_callable",
    "construct_pipeline",
]


Constructor = ty.Callable[..., InfiniteIterator[ty.Any]]
create_funcs: ty.Dict[str, Constructor] = {}

_SOURCE_KEYS = ("source", "sources")
_CALLABLE_KEYS = ("func", "predicate")


def register(name: str, creation_func: Constructor) -> None:
    """Register a new producer constructor."""
    create_funcs[name] = creation_func


def unregister(name: str) -> None:
    """Unregister a producer constructor."""
    create_funcs.pop(name, None)


def load_callable(path: str) -> ty.Callable[..., ty.Any]:
    """Imports an object from a path of the form ``"module:attr"`` or
    ``"module.attr"``.

    Raises
    ------
    ValueError
        If the module or the attribute cannot be found, or the object
        found is not callable.
    """
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ValueError(f"Invalid import path {path!r}.")
    try:
        obj: ty.Any = importlib.import_module(module_name)
        for attr in attr_path.split("."):
            obj = getattr(obj, attr)
    except (ImportError, AttributeError) as e:
        raise ValueError(f"Cannot import {path!r}: {e}") from None
    if not callable(obj):
        raise ValueError(f"{path!r} does not refer to a callable.")
    return obj


def _to_container(config: ty.Any) -> ty.Any:
    if isinstance(config, str):
        config = OmegaConf.create(config)
    if isinstance(config, (DictConfig, ListConfig)):
        return OmegaConf.to_container(config, resolve=True)
    return config


def create(arguments: ty.Mapping[str, ty.Any]) -> InfiniteIterator[ty.Any]:
    """Create a producer of a registered type, given a mapping of
    arguments. Nested producers are created first.

    Raises
    ------
    ValueError
        If the mapping has no ``type``, or names an unregistered one.
    """
    args_copy = dict(arguments)
    try:
        name = args_copy.pop("type")
    except KeyError:
        raise ValueError(f"No producer type given in {arguments}.") from None
    try:
        creation_func = create_funcs[name]
    except KeyError:
        raise ValueError(f"Unknown producer of name {name}.") from None
    for key in _SOURCE_KEYS:
        if key not in args_copy:
            continue
        nested = args_copy[key]
        if isinstance(nested, Mapping):
            args_copy[key] = create(nested)
        else:
            args_copy[key] = [create(item) for item in nested]
    for key in _CALLABLE_KEYS:
        if isinstance(args_copy.get(key), str):
            args_copy[key] = load_callable(args_copy[key])
    if "sources" in args_copy:
        params = inspect.signature(creation_func).parameters
        if "sources" not in params:
            positional = args_copy.pop("sources")
            return creation_func(*positional, **args_copy)
    return creation_func(**args_copy)


def construct_pipeline(config: ty.Any) -> InfiniteIterator[ty.Any]:
    """Builds a producer pipeline from its description.

    Parameters
    ----------
    config : mapping, str, or DictConfig
        Description of the outermost producer. Strings are parsed as
        YAML by OmegaConf, and interpolations are resolved.

    Returns
    -------
    InfiniteIterator
        The outermost producer of the pipeline.
    """
    tree = _to_container(config)
    if not isinstance(tree, Mapping):
        raise ValueError(
            f"Pipeline description must be a mapping, got {type(tree).__name__}."
        )
    return create(tree)


def _register_defaults() -> None:
    register("count", sources.Count)
    register("repeat", sources.Repeat)
    register("repeat_with", lambda func: sources.RepeatWith(func))
    register("cycle", lambda items: sources.Cycle(items))
    register("map", lambda source, func: adapters.Map(source, func))
    register("zip", adapters.Zip)
    register("enumerate", lambda source, **kw: adapters.Enumerate(source, **kw))
    register("filter", lambda source, predicate: adapters.Filter(source, predicate))
    register("filter_map", lambda source, func: adapters.FilterMap(source, func))
    register("skip", lambda source, n: adapters.Skip(source, n))
    register(
        "skip_while",
        lambda source, predicate: adapters.SkipWhile(source, predicate),
    )
    register("step_by", lambda source, step: adapters.StepBy(source, step))
    register("inspect", lambda source, func: adapters.Inspect(source, func))
    register("chain", lambda head, source: adapters.Chain(head, source))
    register("flatten", lambda source: adapters.Flatten(source))
    register("flat_map", lambda source, func: adapters.FlatMap(source, func))
    register("peekable", lambda source: adapters.Peekable(source))


_register_defaults()
