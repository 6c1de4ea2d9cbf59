"""Stub actions that replace the behavior of a doubled method.

A stub is selected once at configuration time and decides what a matched
invocation returns (or raises) at call time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from ..constraints import export
from ..exceptions import MockObjectError
from .invocation import Invocation


class Stub(ABC):
    """Base class for stub actions."""

    @abstractmethod
    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        """Produce the result of a matched invocation.

        Args:
            invocation: The recorded invocation.
            target: The double the call was made against.
            original: The original method bound to the double, when the
                doubled class provides one.
        """
        ...

    @abstractmethod
    def to_string(self) -> str:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()!r})"


class ReturnStub(Stub):
    def __init__(self, value: Any) -> None:
        self.value = value

    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        return self.value

    def to_string(self) -> str:
        return f"return user-specified value {export(self.value)}"


class ReturnCallback(Stub):
    def __init__(self, callback: Callable[..., Any]) -> None:
        self.callback = callback

    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        return self.callback(*invocation.arguments)

    def to_string(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"return result of user defined callback {name} with the passed arguments"


class ExceptionStub(Stub):
    def __init__(self, exception: BaseException | type[BaseException]) -> None:
        self.exception = exception

    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        raise self.exception

    def to_string(self) -> str:
        name = (
            self.exception.__name__
            if isinstance(self.exception, type)
            else self.exception.__class__.__name__
        )
        return f"raise user-specified exception {name}"


class ForwardToOriginal(Stub):
    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        if original is None:
            raise MockObjectError(
                f"{invocation.class_name}::{invocation.method_name}() has no original "
                "implementation to forward to"
            )
        return original(*invocation.arguments)

    def to_string(self) -> str:
        return "call original method"


class ConsecutiveCalls(Stub):
    """Return the configured values one after the other.

    A value that is itself a Stub is invoked instead of returned.
    """

    def __init__(self, values: Iterable[Any]) -> None:
        self.values = list(values)
        self._position = 0

    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        if self._position >= len(self.values):
            raise MockObjectError(
                f"Only {len(self.values)} return values have been configured for "
                f"{invocation.class_name}::{invocation.method_name}()"
            )
        value = self.values[self._position]
        self._position += 1
        if isinstance(value, Stub):
            return value.invoke(invocation, target, original)
        return value

    def to_string(self) -> str:
        return "return user-specified values " + ", ".join(export(v) for v in self.values)


class ReturnArgument(Stub):
    def __init__(self, index: int) -> None:
        self.index = index

    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        if self.index < len(invocation.arguments):
            return invocation.arguments[self.index]
        return None

    def to_string(self) -> str:
        return f"return argument #{self.index}"


class ReturnSelf(Stub):
    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        return target

    def to_string(self) -> str:
        return "return the current object"


class ReturnValueMap(Stub):
    """Look up the return value by the invocation's arguments.

    Each row lists the expected arguments followed by the value to return.
    """

    def __init__(self, value_map: Iterable[Sequence[Any]]) -> None:
        self.value_map = [tuple(row) for row in value_map]

    def invoke(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> Any:
        for row in self.value_map:
            if row[:-1] == invocation.arguments:
                return row[-1]
        return None

    def to_string(self) -> str:
        return "return value from a map"


__all__ = [
    "Stub",
    "ReturnStub",
    "ReturnCallback",
    "ExceptionStub",
    "ForwardToOriginal",
    "ConsecutiveCalls",
    "ReturnArgument",
    "ReturnSelf",
    "ReturnValueMap",
]
