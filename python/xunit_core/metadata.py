"""Test method metadata declared with decorators.

Decorators attach metadata to test methods; MetadataParser reads it back
for a class and method name.

Example:
    >>> class GreeterTest(TestCase):
    ...     @staticmethod
    ...     def names():
    ...         return {"alice": ("Alice",), "bob": ("Bob",)}
    ...
    ...     @data_provider("names")
    ...     def test_greets(self, name):
    ...         self.assert_equals(f"Hello {name}", greet(name))
    ...
    ...     @with_data((1, 2, 3), name="small")
    ...     @time_limit(2)
    ...     def test_adds(self, a, b, expected):
    ...         self.assert_equals(expected, a + b)
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_METADATA_ATTRIBUTE = "__xunit_metadata__"


@dataclass(frozen=True)
class DataProvider:
    """A method that provides data sets for a test method.

    Attributes:
        class_ref: Class declaring the provider method; None means the test
            class itself until the parser binds it.
        method_name: Name of the provider method.
    """

    class_ref: type | None
    method_name: str

    @property
    def class_name(self) -> str:
        return self.class_ref.__qualname__ if self.class_ref is not None else ""


@dataclass(frozen=True)
class TestWith:
    """A literal data set declared on the test method."""

    __test__ = False

    data: Any
    name: str | None = None

    def has_name(self) -> bool:
        return self.name is not None


@dataclass(frozen=True)
class TimeLimit:
    """Maximum run time of a test method, in seconds."""

    seconds: float


Metadata = DataProvider | TestWith | TimeLimit


def _attach(function: F, metadata: Metadata) -> F:
    existing = list(getattr(function, _METADATA_ATTRIBUTE, ()))
    # Decorators apply bottom-up; keep source order.
    existing.insert(0, metadata)
    setattr(function, _METADATA_ATTRIBUTE, tuple(existing))
    return function


def data_provider(method_name: str) -> Callable[[F], F]:
    """Declare a provider method on the test class itself."""

    def decorator(function: F) -> F:
        return _attach(function, DataProvider(None, method_name))

    return decorator


def data_provider_external(class_ref: type, method_name: str) -> Callable[[F], F]:
    """Declare a provider method on another class."""

    def decorator(function: F) -> F:
        return _attach(function, DataProvider(class_ref, method_name))

    return decorator


def with_data(data: Any, name: str | None = None) -> Callable[[F], F]:
    """Declare one literal data set, optionally named."""

    def decorator(function: F) -> F:
        return _attach(function, TestWith(data, name))

    return decorator


def time_limit(seconds: float) -> Callable[[F], F]:
    """Declare the maximum run time of a test method."""
    if seconds <= 0:
        raise ValueError(f"Time limit must be positive, got {seconds}")

    def decorator(function: F) -> F:
        return _attach(function, TimeLimit(seconds))

    return decorator


class MetadataCollection:
    """Ordered, immutable collection of metadata."""

    def __init__(self, items: tuple[Metadata, ...] = ()) -> None:
        self._items = items

    def __iter__(self) -> Iterator[Metadata]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    def is_not_empty(self) -> bool:
        return bool(self._items)

    def is_data_provider(self) -> MetadataCollection:
        return MetadataCollection(tuple(m for m in self._items if isinstance(m, DataProvider)))

    def is_test_with(self) -> MetadataCollection:
        return MetadataCollection(tuple(m for m in self._items if isinstance(m, TestWith)))

    def is_time_limit(self) -> MetadataCollection:
        return MetadataCollection(tuple(m for m in self._items if isinstance(m, TimeLimit)))

    def __repr__(self) -> str:
        return f"MetadataCollection({list(self._items)!r})"


class MetadataParser:
    """Reads decorator metadata from test methods."""

    def for_method(self, test_class: type, method_name: str) -> MetadataCollection:
        """Return the metadata declared on ``test_class.method_name``.

        Provider declarations without a class are bound to ``test_class``.
        """
        function = getattr(test_class, method_name, None)
        items: tuple[Metadata, ...] = getattr(function, _METADATA_ATTRIBUTE, ())
        return MetadataCollection(
            tuple(
                DataProvider(test_class, item.method_name)
                if isinstance(item, DataProvider) and item.class_ref is None
                else item
                for item in items
            )
        )


__all__ = [
    "DataProvider",
    "TestWith",
    "TimeLimit",
    "Metadata",
    "MetadataCollection",
    "MetadataParser",
    "data_provider",
    "data_provider_external",
    "with_data",
    "time_limit",
]
