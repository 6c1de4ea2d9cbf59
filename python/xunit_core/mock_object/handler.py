"""Per-double invocation handler.

Every method of a generated double delegates to InvocationHandler.invoke().
The handler records the call, selects the expectation that takes it, applies
that expectation's stub action and returns the result.

Selection policy:
1. Consider expectations whose method rule matches the invoked method,
   in registration order.
2. The first one that still accepts the call (cardinality, parameters and
   order constraints) takes it.
3. If some expectation names the method but none accepts the call, the
   call fails immediately with UnexpectedInvocationError.
4. If no expectation names the method, or the accepting expectation has no
   stub action, a default value is returned (or the original method is
   called, for test proxies).

Example:
    >>> handler = InvocationHandler("Mailer", {"send"})
    >>> handler.expects(InvokedCount(1)).method("send").will_return(True)
    >>> handler.invoke("send", ("alice@example.com",))
    True
    >>> handler.verify().is_success
    True
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from ..exceptions import (
    MatcherAlreadyRegisteredError,
    MockObjectError,
    UnexpectedInvocationError,
    UnknownMatcherIdError,
)
from ..logging import log_trace
from .builder import InvocationMocker
from .invocation import Invocation, InvocationHistory, InvocationRecorder
from .matcher import Matcher
from .return_value import generate_return_value
from .rules import AnyInvokedCount, InvocationCountRule, VerificationResult


class InvocationHandler:
    """Registry of expectations for one test double."""

    def __init__(
        self,
        class_name: str,
        configurable_methods: Iterable[str],
        *,
        return_value_generation: bool = True,
        forward_unconfigured: bool = False,
    ) -> None:
        """Initialize the handler.

        Args:
            class_name: Name of the doubled class, used in messages.
            configurable_methods: Names of the methods that can be configured.
            return_value_generation: Generate default return values for calls
                no stub action answers. When False such calls raise.
            forward_unconfigured: Call the original method for calls no
                stub action answers (test proxies).
        """
        self._class_name = class_name
        self._configurable_methods = frozenset(configurable_methods)
        self._return_value_generation = return_value_generation
        self._forward_unconfigured = forward_unconfigured
        self._matchers: list[Matcher] = []
        self._matchers_by_id: dict[str, Matcher] = {}
        self._recorder = InvocationRecorder()
        self._rejections: list[str] = []

    @property
    def class_name(self) -> str:
        return self._class_name

    @property
    def configurable_methods(self) -> frozenset[str]:
        return self._configurable_methods

    @property
    def recorder(self) -> InvocationRecorder:
        return self._recorder

    def is_configurable(self, method_name: str) -> bool:
        return method_name in self._configurable_methods

    def expects(self, rule: InvocationCountRule) -> InvocationMocker:
        """Register a new expectation and return its builder."""
        matcher = Matcher(rule)
        self._matchers.append(matcher)
        return InvocationMocker(self, matcher)

    def register_matcher_id(self, matcher_id: str, matcher: Matcher) -> None:
        if matcher_id in self._matchers_by_id:
            raise MatcherAlreadyRegisteredError(matcher_id)
        self._matchers_by_id[matcher_id] = matcher
        matcher.matcher_id = matcher_id

    def lookup_matcher(self, matcher_id: str) -> Matcher:
        try:
            return self._matchers_by_id[matcher_id]
        except KeyError:
            raise UnknownMatcherIdError(matcher_id) from None

    def invoke(
        self,
        method_name: str,
        arguments: Iterable[Any] = (),
        *,
        target: Any = None,
        original: Callable[..., Any] | None = None,
        return_annotation: Any = None,
    ) -> Any:
        """Handle one call made against the double.

        Args:
            method_name: Name of the invoked method.
            arguments: Arguments in positional order.
            target: The double the call was made against.
            original: The original method bound to the double, if any.
            return_annotation: Resolved return annotation of the method.

        Returns:
            The value produced by the selected stub action, or a default.

        Raises:
            UnexpectedInvocationError: If expectations name the method but
                none accepts the call.
        """
        invocation = Invocation(
            class_name=self._class_name,
            object_id=id(target) if target is not None else id(self),
            method_name=method_name,
            arguments=tuple(arguments),
            sequence=self._recorder.next_sequence(),
            return_annotation=return_annotation,
        )
        self._recorder.record(invocation)
        log_trace(
            f"Invocation {invocation.to_string()}",
            {"sequence": invocation.sequence, "target": invocation.target},
        )

        candidates = [matcher for matcher in self._matchers if matcher.matches_method(invocation)]
        for matcher in candidates:
            if matcher.accepts(invocation):
                has_value, value = matcher.invoked(invocation, target, original)
                if has_value:
                    return value
                return self._fallback(invocation, original)

        if candidates:
            reasons: list[str] = []
            for matcher in candidates:
                reason = matcher.rejection_reason(invocation)
                if reason is not None and reason not in reasons:
                    reasons.append(reason)
            message = "\n".join(reasons)
            self._rejections.append(message)
            raise UnexpectedInvocationError(message)

        return self._fallback(invocation, original)

    def verify(self) -> VerificationResult:
        """Verify every expectation and collect all failures.

        Verification does not change any count, so calling it again yields
        the same result. Rejected calls are reported as failures even when the code under test
        caught the UnexpectedInvocationError they raised.
        """
        result = VerificationResult.combine(matcher.verify() for matcher in self._matchers)
        return VerificationResult(failures=[*result.failures, *self._rejections])

    def has_matchers(self) -> bool:
        """True if any expectation constrains how often it is invoked."""
        return self.expectation_count() > 0

    def expectation_count(self) -> int:
        return sum(
            1 for matcher in self._matchers if not isinstance(matcher.count_rule, AnyInvokedCount)
        )

    def matchers(self) -> list[Matcher]:
        return list(self._matchers)

    def history(self) -> InvocationHistory:
        return self._recorder.history()

    def _fallback(
        self,
        invocation: Invocation,
        original: Callable[..., Any] | None,
    ) -> Any:
        if self._forward_unconfigured and original is not None:
            return original(*invocation.arguments)
        if not self._return_value_generation:
            raise MockObjectError(
                f"Return value inference disabled and no expectation set up for "
                f"{self._class_name}::{invocation.method_name}()"
            )
        return generate_return_value(invocation.return_annotation)

    def __repr__(self) -> str:
        return f"InvocationHandler({self._class_name!r}, expectations={len(self._matchers)})"


__all__ = ["InvocationHandler"]
