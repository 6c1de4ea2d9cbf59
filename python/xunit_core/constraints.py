"""Constraints evaluated by assertions and by mock parameter rules.

A constraint answers whether a value matches and describes itself for
failure messages:

    >>> IsEqual(2).matches(2)
    True
    >>> IsEqual(2).failure_message(3)
    'Failed asserting that 3 is equal to 2.'

Plain values used where a constraint is expected are wrapped in IsEqual
(see as_constraint).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sized
from typing import Any

from .exceptions import AssertionFailedError

_SCALARS = (int, float, complex, str, bytes, bool, type(None))


def export(value: Any) -> str:
    """Render a value for failure messages."""
    text = repr(value)
    if len(text) > 120:
        return text[:117] + "..."
    return text


class Constraint(ABC):
    """Base class for all constraints."""

    @abstractmethod
    def matches(self, other: Any) -> bool:
        """Return True if the value satisfies the constraint."""
        ...

    @abstractmethod
    def to_string(self) -> str:
        """Describe the constraint, e.g. ``is equal to 2``."""
        ...

    def failure_message(self, other: Any, description: str = "") -> str:
        message = f"Failed asserting that {export(other)} {self.to_string()}."
        if description:
            return f"{description}\n{message}"
        return message

    def evaluate(self, other: Any, description: str = "") -> None:
        """Raise AssertionFailedError unless the value matches."""
        if not self.matches(other):
            raise AssertionFailedError(self.failure_message(other, description))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()!r})"


class IsAnything(Constraint):
    def matches(self, other: Any) -> bool:
        return True

    def to_string(self) -> str:
        return "is anything"


class IsEqual(Constraint):
    def __init__(self, value: Any) -> None:
        self.value = value

    def matches(self, other: Any) -> bool:
        return bool(other == self.value)

    def to_string(self) -> str:
        return f"is equal to {export(self.value)}"


class IsIdentical(Constraint):
    """Same type and value for scalars, same object otherwise."""

    def __init__(self, value: Any) -> None:
        self.value = value

    def matches(self, other: Any) -> bool:
        if isinstance(self.value, _SCALARS):
            return type(other) is type(self.value) and other == self.value
        return other is self.value

    def to_string(self) -> str:
        return f"is identical to {export(self.value)}"


class IsInstanceOf(Constraint):
    def __init__(self, class_or_tuple: type | tuple[type, ...]) -> None:
        self.class_or_tuple = class_or_tuple

    def matches(self, other: Any) -> bool:
        return isinstance(other, self.class_or_tuple)

    def to_string(self) -> str:
        if isinstance(self.class_or_tuple, tuple):
            names = ", ".join(cls.__qualname__ for cls in self.class_or_tuple)
            return f"is an instance of one of {names}"
        return f"is an instance of class {self.class_or_tuple.__qualname__}"


class IsNone(Constraint):
    def matches(self, other: Any) -> bool:
        return other is None

    def to_string(self) -> str:
        return "is None"


class IsTrue(Constraint):
    def matches(self, other: Any) -> bool:
        return other is True

    def to_string(self) -> str:
        return "is true"


class IsFalse(Constraint):
    def matches(self, other: Any) -> bool:
        return other is False

    def to_string(self) -> str:
        return "is false"


class Callback(Constraint):
    def __init__(self, callback: Callable[[Any], Any]) -> None:
        self.callback = callback

    def matches(self, other: Any) -> bool:
        return bool(self.callback(other))

    def to_string(self) -> str:
        return "is accepted by specified callback"


class StringContains(Constraint):
    def __init__(self, needle: str, ignore_case: bool = False) -> None:
        self.needle = needle
        self.ignore_case = ignore_case

    def matches(self, other: Any) -> bool:
        if not isinstance(other, str):
            return False
        if self.ignore_case:
            return self.needle.lower() in other.lower()
        return self.needle in other

    def to_string(self) -> str:
        return f"contains {export(self.needle)}"


class Contains(Constraint):
    """Membership in a container (``needle in other``)."""

    def __init__(self, needle: Any) -> None:
        self.needle = needle

    def matches(self, other: Any) -> bool:
        try:
            return self.needle in other
        except TypeError:
            return False

    def to_string(self) -> str:
        return f"contains {export(self.needle)}"


class Count(Constraint):
    def __init__(self, expected: int) -> None:
        self.expected = expected

    def matches(self, other: Any) -> bool:
        return isinstance(other, Sized) and len(other) == self.expected

    def to_string(self) -> str:
        return f"count matches {self.expected}"

    def failure_message(self, other: Any, description: str = "") -> str:
        actual = len(other) if isinstance(other, Sized) else "not countable"
        message = f"Failed asserting that actual size {actual} matches expected size {self.expected}."
        if description:
            return f"{description}\n{message}"
        return message


class GreaterThan(Constraint):
    def __init__(self, value: Any) -> None:
        self.value = value

    def matches(self, other: Any) -> bool:
        return bool(other > self.value)

    def to_string(self) -> str:
        return f"is greater than {export(self.value)}"


class LessThan(Constraint):
    def __init__(self, value: Any) -> None:
        self.value = value

    def matches(self, other: Any) -> bool:
        return bool(other < self.value)

    def to_string(self) -> str:
        return f"is less than {export(self.value)}"


class LogicalNot(Constraint):
    def __init__(self, constraint: Constraint | Any) -> None:
        self.constraint = as_constraint(constraint)

    def matches(self, other: Any) -> bool:
        return not self.constraint.matches(other)

    def to_string(self) -> str:
        return f"not {self.constraint.to_string()}"


def as_constraint(value: Constraint | Any) -> Constraint:
    """Wrap a plain value in IsEqual; return constraints unchanged."""
    if isinstance(value, Constraint):
        return value
    return IsEqual(value)


__all__ = [
    "Constraint",
    "IsAnything",
    "IsEqual",
    "IsIdentical",
    "IsInstanceOf",
    "IsNone",
    "IsTrue",
    "IsFalse",
    "Callback",
    "StringContains",
    "Contains",
    "Count",
    "GreaterThan",
    "LessThan",
    "LogicalNot",
    "as_constraint",
    "export",
]
