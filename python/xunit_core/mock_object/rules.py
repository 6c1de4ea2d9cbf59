"""Matcher rules applied to invocations of test double methods.

Cardinality rules count the invocations they receive:

- AnyInvokedCount: accepts any number of calls, never fails verification.
- InvokedCount(n): accepts while fewer than n calls happened; verification
  fails unless exactly n happened.
- InvokedAtLeastCount(n): always accepts; verification fails below n.
- InvokedAtMostCount(n): accepts while fewer than n calls happened; a call
  beyond the bound fails at the call site.

Counts only ever grow. ``accepts()`` never changes state, ``invoked()``
advances the count and ``verify()`` may be called any number of times.

MethodName and Parameters are structural rules: they decide whether an
invocation belongs to an expectation, independent of counts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field

from ..constraints import Constraint, IsEqual, as_constraint
from ..exceptions import ExpectationFailedError
from .invocation import Invocation


def _times(n: int) -> str:
    return "time" if n == 1 else "times"


class VerificationResult(BaseModel):
    """Outcome of verifying one or more expectations.

    Example:
        >>> VerificationResult.success().is_success
        True
        >>> result = VerificationResult.failure("expected 2, got 1")
        >>> result.message()
        'expected 2, got 1'
    """

    failures: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def success(cls) -> VerificationResult:
        return cls()

    @classmethod
    def failure(cls, message: str) -> VerificationResult:
        return cls(failures=[message])

    @classmethod
    def combine(cls, results: Iterable[VerificationResult]) -> VerificationResult:
        """Merge several results, keeping every failure."""
        failures: list[str] = []
        for result in results:
            failures.extend(result.failures)
        return cls(failures=failures)

    @property
    def is_success(self) -> bool:
        return not self.failures

    def message(self) -> str:
        return "\n\n".join(self.failures)


class InvocationCountRule(ABC):
    """Base class for cardinality rules."""

    def __init__(self) -> None:
        self._invocations: list[Invocation] = []

    def invocation_count(self) -> int:
        return len(self._invocations)

    def has_been_invoked(self) -> bool:
        return bool(self._invocations)

    def accepts(self, invocation: Invocation) -> bool:
        """Return True if the rule can take this invocation."""
        return self.can_accept()

    def invoked(self, invocation: Invocation) -> None:
        """Count an invocation.

        Raises:
            ExpectationFailedError: If the rule is already saturated.
        """
        if not self.can_accept():
            raise ExpectationFailedError(
                f"{invocation.to_string()} was not expected to be called more than "
                f"{self.invocation_count()} {_times(self.invocation_count())}."
            )
        self._invocations.append(invocation)

    @abstractmethod
    def can_accept(self) -> bool:
        """Return True while another invocation may still be counted."""
        ...

    @abstractmethod
    def is_satisfied(self) -> bool:
        """Return True if the current count satisfies the rule."""
        ...

    @abstractmethod
    def verify(self) -> VerificationResult:
        ...

    @abstractmethod
    def to_string(self) -> str:
        ...

    def is_never(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()!r}, count={self.invocation_count()})"


class AnyInvokedCount(InvocationCountRule):
    def can_accept(self) -> bool:
        return True

    def is_satisfied(self) -> bool:
        return True

    def verify(self) -> VerificationResult:
        return VerificationResult.success()

    def to_string(self) -> str:
        return "invoked zero or more times"


class InvokedCount(InvocationCountRule):
    def __init__(self, expected: int) -> None:
        if expected < 0:
            raise ValueError(f"Expected invocation count must not be negative, got {expected}")
        super().__init__()
        self.expected = expected

    def can_accept(self) -> bool:
        return self.invocation_count() < self.expected

    def is_satisfied(self) -> bool:
        return self.invocation_count() == self.expected

    def is_never(self) -> bool:
        return self.expected == 0

    def verify(self) -> VerificationResult:
        actual = self.invocation_count()
        if actual == self.expected:
            return VerificationResult.success()
        return VerificationResult.failure(
            f"Method was expected to be called {self.expected} {_times(self.expected)}, "
            f"actually called {actual} {_times(actual)}."
        )

    def to_string(self) -> str:
        return f"invoked {self.expected} {_times(self.expected)}"


class InvokedAtLeastCount(InvocationCountRule):
    def __init__(self, minimum: int) -> None:
        if minimum < 1:
            raise ValueError(f"Minimum invocation count must be at least 1, got {minimum}")
        super().__init__()
        self.minimum = minimum

    def can_accept(self) -> bool:
        return True

    def is_satisfied(self) -> bool:
        return self.invocation_count() >= self.minimum

    def verify(self) -> VerificationResult:
        actual = self.invocation_count()
        if actual >= self.minimum:
            return VerificationResult.success()
        return VerificationResult.failure(
            f"Expected invocation at least {self.minimum} {_times(self.minimum)} "
            f"but it occurred {actual} {_times(actual)}."
        )

    def to_string(self) -> str:
        return f"invoked at least {self.minimum} {_times(self.minimum)}"


class InvokedAtLeastOnce(InvokedAtLeastCount):
    def __init__(self) -> None:
        super().__init__(1)

    def verify(self) -> VerificationResult:
        if self.has_been_invoked():
            return VerificationResult.success()
        return VerificationResult.failure("Expected invocation at least once but it never occurred.")

    def to_string(self) -> str:
        return "invoked at least once"


class InvokedAtMostCount(InvocationCountRule):
    def __init__(self, maximum: int) -> None:
        if maximum < 1:
            raise ValueError(f"Maximum invocation count must be at least 1, got {maximum}")
        super().__init__()
        self.maximum = maximum

    def can_accept(self) -> bool:
        return self.invocation_count() < self.maximum

    def is_satisfied(self) -> bool:
        return self.invocation_count() <= self.maximum

    def verify(self) -> VerificationResult:
        actual = self.invocation_count()
        if actual <= self.maximum:
            return VerificationResult.success()
        return VerificationResult.failure(
            f"Expected invocation at most {self.maximum} {_times(self.maximum)} "
            f"but it occurred {actual} {_times(actual)}."
        )

    def to_string(self) -> str:
        return f"invoked at most {self.maximum} {_times(self.maximum)}"


class MethodName:
    """Structural rule matching the invoked method's name."""

    def __init__(self, constraint: Constraint | str) -> None:
        self.constraint = as_constraint(constraint)

    @property
    def literal_name(self) -> str | None:
        """The configured name when matching a plain string, else None."""
        if isinstance(self.constraint, IsEqual) and isinstance(self.constraint.value, str):
            return self.constraint.value
        return None

    def matches(self, invocation: Invocation) -> bool:
        return self.constraint.matches(invocation.method_name)

    def matches_name(self, method_name: str) -> bool:
        return self.constraint.matches(method_name)

    def to_string(self) -> str:
        literal = self.literal_name
        if literal is not None:
            return f'method name is "{literal}"'
        return f"method name {self.constraint.to_string()}"


class ParametersRule(ABC):
    @abstractmethod
    def matches(self, invocation: Invocation) -> bool:
        ...

    @abstractmethod
    def mismatch(self, invocation: Invocation) -> str | None:
        """Explain why the invocation does not match, or None if it does."""
        ...

    @abstractmethod
    def to_string(self) -> str:
        ...


class AnyParameters(ParametersRule):
    def matches(self, invocation: Invocation) -> bool:
        return True

    def mismatch(self, invocation: Invocation) -> str | None:
        return None

    def to_string(self) -> str:
        return "with any parameters"


class Parameters(ParametersRule):
    """Positional parameter constraints; plain values mean IsEqual."""

    def __init__(self, parameters: Iterable[Constraint | Any]) -> None:
        self.constraints = [as_constraint(parameter) for parameter in parameters]

    def matches(self, invocation: Invocation) -> bool:
        return self.mismatch(invocation) is None

    def mismatch(self, invocation: Invocation) -> str | None:
        if len(invocation.arguments) < len(self.constraints):
            return f"Parameter count for invocation {invocation.to_string()} is too low."

        for index, constraint in enumerate(self.constraints):
            argument = invocation.arguments[index]
            if not constraint.matches(argument):
                return (
                    f"Parameter {index} for invocation {invocation.to_string()} "
                    f"does not match expected value.\n{constraint.failure_message(argument)}"
                )
        return None

    def to_string(self) -> str:
        described = ", ".join(constraint.to_string() for constraint in self.constraints)
        return f"with parameter(s) {described}"


__all__ = [
    "VerificationResult",
    "InvocationCountRule",
    "AnyInvokedCount",
    "InvokedCount",
    "InvokedAtLeastCount",
    "InvokedAtLeastOnce",
    "InvokedAtMostCount",
    "MethodName",
    "ParametersRule",
    "AnyParameters",
    "Parameters",
]
