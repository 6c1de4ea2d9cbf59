"""Invocations of test double methods and the per-double recorder."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any, overload

from pydantic import BaseModel, Field

from ..constraints import export


class Invocation(BaseModel):
    """A single call made against a test double.

    Arguments are stored in positional order; keyword arguments are bound
    to their positions by the interception layer before the invocation is
    created. Invocations are immutable once recorded.

    Example:
        >>> invocation = Invocation(
        ...     class_name="Mailer", object_id=1, method_name="send",
        ...     arguments=("alice@example.com",), sequence=1,
        ... )
        >>> invocation.to_string()
        "Mailer::send('alice@example.com')"
    """

    class_name: str = Field(description="Name of the doubled class.")
    object_id: int = Field(description="Identity of the double instance.")
    method_name: str = Field(description="Name of the invoked method.")
    arguments: tuple[Any, ...] = Field(
        default=(),
        description="Arguments in positional order.",
    )
    sequence: int = Field(ge=1, description="Position of the call on its double, from 1.")
    return_annotation: Any = Field(
        default=None,
        description="Declared return annotation of the doubled method, if any.",
    )

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def target(self) -> str:
        """Identity of the double the call was made against."""
        return f"{self.class_name}#{self.object_id}"

    def to_string(self) -> str:
        arguments = ", ".join(export(argument) for argument in self.arguments)
        return f"{self.class_name}::{self.method_name}({arguments})"


class InvocationHistory(Sequence[Invocation]):
    """Read-only, restartable view over a recorder's log.

    Iterating twice yields the same invocations, and a view taken earlier
    reflects invocations recorded later.
    """

    def __init__(self, log: list[Invocation]) -> None:
        self._log = log

    def __iter__(self) -> Iterator[Invocation]:
        return iter(self._log)

    def __len__(self) -> int:
        return len(self._log)

    @overload
    def __getitem__(self, index: int) -> Invocation: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Invocation]: ...

    def __getitem__(self, index: int | slice) -> Invocation | Sequence[Invocation]:
        if isinstance(index, slice):
            return tuple(self._log[index])
        return self._log[index]

    def __repr__(self) -> str:
        return f"InvocationHistory({len(self._log)} invocations)"


class InvocationRecorder:
    """Append-only log of the invocations made against one double."""

    def __init__(self) -> None:
        self._log: list[Invocation] = []

    def next_sequence(self) -> int:
        """Sequence number the next recorded invocation must carry."""
        return len(self._log) + 1

    def record(self, invocation: Invocation) -> None:
        """Append an invocation to the log.

        Raises:
            ValueError: If the invocation is out of sequence.
        """
        expected = self.next_sequence()
        if invocation.sequence != expected:
            raise ValueError(
                f"Invocation {invocation.to_string()} has sequence {invocation.sequence}, "
                f"expected {expected}"
            )
        self._log.append(invocation)

    def history(self) -> InvocationHistory:
        return InvocationHistory(self._log)

    def invocations_of(self, method_name: str) -> list[Invocation]:
        return [invocation for invocation in self._log if invocation.method_name == method_name]

    def __len__(self) -> int:
        return len(self._log)


__all__ = ["Invocation", "InvocationHistory", "InvocationRecorder"]
