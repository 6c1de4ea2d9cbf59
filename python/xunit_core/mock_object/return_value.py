"""Default return values for doubled methods without a configured stub."""

from __future__ import annotations

import collections.abc
import types
import typing
from typing import Any

_DEFAULTS: dict[Any, Any] = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    str: "",
    bytes: b"",
}

_EMPTY_CONTAINERS: dict[Any, Any] = {
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    collections.abc.Sequence: tuple,
    collections.abc.MutableSequence: list,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.abc.Set: frozenset,
    collections.abc.Iterable: tuple,
    collections.abc.Iterator: lambda: iter(()),
}


def generate_return_value(annotation: Any) -> Any:
    """Return a neutral value for a resolved return annotation.

    Scalars get their zero value, containers an empty instance, and
    optional or unknown types None.

    Example:
        >>> generate_return_value(int)
        0
        >>> generate_return_value(list[str])
        []
        >>> generate_return_value(str | None)
        None
    """
    if annotation is None or annotation is type(None):
        return None

    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        if type(None) in typing.get_args(annotation):
            return None
        return generate_return_value(typing.get_args(annotation)[0])

    base = origin if origin is not None else annotation
    if base in _DEFAULTS:
        return _DEFAULTS[base]
    if base in _EMPTY_CONTAINERS:
        return _EMPTY_CONTAINERS[base]()
    return None


__all__ = ["generate_return_value"]
