"""A configured expectation on a test double.

A Matcher combines a cardinality rule with an optional method-name rule,
parameter rule, order constraint and stub action.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .invocation import Invocation
from .rules import InvocationCountRule, MethodName, ParametersRule, VerificationResult
from .stubs import Stub


class Matcher:
    def __init__(self, count_rule: InvocationCountRule) -> None:
        self.count_rule = count_rule
        self.method_name_rule: MethodName | None = None
        self.parameters_rule: ParametersRule | None = None
        self.stub: Stub | None = None
        self.matcher_id: str | None = None
        self.after_matcher: Matcher | None = None
        self.after_matcher_id: str | None = None

    def has_method_name_rule(self) -> bool:
        return self.method_name_rule is not None

    def matches_method(self, invocation: Invocation) -> bool:
        """Structural match on the method name alone."""
        return self.method_name_rule is not None and self.method_name_rule.matches(invocation)

    def accepts(self, invocation: Invocation) -> bool:
        """Return True if this expectation can take the invocation now."""
        return self.matches_method(invocation) and self.rejection_reason(invocation) is None

    def rejection_reason(self, invocation: Invocation) -> str | None:
        """Explain why a call to a matching method is refused, or None."""
        if self.after_matcher is not None and not self.after_matcher.count_rule.has_been_invoked():
            return (
                f"{invocation.to_string()} was not expected to be called before the "
                f"expectation with id <{self.after_matcher_id}> was invoked."
            )

        if self.parameters_rule is not None:
            mismatch = self.parameters_rule.mismatch(invocation)
            if mismatch is not None:
                return mismatch

        if not self.count_rule.accepts(invocation):
            if self.count_rule.is_never():
                return f"{invocation.to_string()} was not expected to be called."
            count = self.count_rule.invocation_count()
            return (
                f"{invocation.to_string()} was not expected to be called more than "
                f"{count} {'time' if count == 1 else 'times'}."
            )
        return None

    def invoked(
        self,
        invocation: Invocation,
        target: Any = None,
        original: Callable[..., Any] | None = None,
    ) -> tuple[bool, Any]:
        """Count the invocation and apply the stub action.

        Returns:
            ``(True, value)`` when a stub produced the value, otherwise
            ``(False, None)``.
        """
        self.count_rule.invoked(invocation)
        if self.stub is None:
            return False, None
        return True, self.stub.invoke(invocation, target, original)

    def verify(self) -> VerificationResult:
        if self.method_name_rule is None:
            return VerificationResult.failure("No method rule is set")

        result = self.count_rule.verify()
        if result.is_success:
            return result
        return VerificationResult(
            failures=[
                f"Expectation failed for {self.method_name_rule.to_string()} when "
                f"{self.count_rule.to_string()}.\n{failure}"
                for failure in result.failures
            ]
        )

    def to_string(self) -> str:
        parts = [self.count_rule.to_string()]
        if self.method_name_rule is not None:
            parts.append(f"where {self.method_name_rule.to_string()}")
        if self.parameters_rule is not None:
            parts.append(self.parameters_rule.to_string())
        if self.stub is not None:
            parts.append(f"will {self.stub.to_string()}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"Matcher({self.to_string()!r})"


__all__ = ["Matcher"]
