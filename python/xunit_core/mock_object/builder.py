"""Fluent builder for configuring an expectation.

Example:
    >>> mailer = self.create_mock(Mailer)
    >>> (
    ...     mailer.expects(self.exactly(2))
    ...     .method("send")
    ...     .with_("alice@example.com", self.anything())
    ...     .will_return(True)
    ... )
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any

from ..constraints import Constraint
from ..exceptions import MethodCannotBeConfiguredError, MockObjectError
from .rules import AnyParameters, MethodName, Parameters
from .stubs import (
    ConsecutiveCalls,
    ExceptionStub,
    ForwardToOriginal,
    ReturnArgument,
    ReturnCallback,
    ReturnSelf,
    ReturnStub,
    ReturnValueMap,
    Stub,
)

if TYPE_CHECKING:
    from .handler import InvocationHandler
    from .matcher import Matcher


class InvocationMocker:
    """Builder returned by ``expects()`` and ``method()``.

    Every configuration method returns the builder for chaining.
    """

    def __init__(self, handler: InvocationHandler, matcher: Matcher) -> None:
        self._handler = handler
        self._matcher = matcher

    @property
    def matcher(self) -> Matcher:
        return self._matcher

    def id(self, matcher_id: str) -> InvocationMocker:
        """Name this expectation so others can be ordered after it.

        Raises:
            MatcherAlreadyRegisteredError: If another expectation uses the id.
        """
        self._handler.register_matcher_id(matcher_id, self._matcher)
        return self

    def after(self, matcher_id: str) -> InvocationMocker:
        """Only accept calls once the named expectation has been invoked.

        Raises:
            UnknownMatcherIdError: If no expectation carries the id.
        """
        self._matcher.after_matcher = self._handler.lookup_matcher(matcher_id)
        self._matcher.after_matcher_id = matcher_id
        return self

    def method(self, constraint: Constraint | str) -> InvocationMocker:
        """Restrict the expectation to a method name (or a name constraint).

        Raises:
            MockObjectError: If a method rule is already configured.
            MethodCannotBeConfiguredError: If the double has no such method.
        """
        if self._matcher.has_method_name_rule():
            raise MockObjectError("Method name rule is already defined, cannot redefine")

        rule = MethodName(constraint)
        literal = rule.literal_name
        if literal is not None and not self._handler.is_configurable(literal):
            raise MethodCannotBeConfiguredError(literal)
        if literal is None and not any(
            rule.matches_name(name) for name in self._handler.configurable_methods
        ):
            raise MockObjectError(
                f"No configurable method of {self._handler.class_name} {rule.to_string()}"
            )

        self._matcher.method_name_rule = rule
        return self

    def with_(self, *parameters: Constraint | Any) -> InvocationMocker:
        """Constrain the arguments positionally; plain values mean equality."""
        self._ensure_parameters_can_be_configured()
        self._matcher.parameters_rule = Parameters(parameters)
        return self

    def with_any_parameters(self) -> InvocationMocker:
        self._ensure_parameters_can_be_configured()
        self._matcher.parameters_rule = AnyParameters()
        return self

    def will(self, stub: Stub) -> InvocationMocker:
        self._matcher.stub = stub
        return self

    def will_return(self, value: Any, *next_values: Any) -> InvocationMocker:
        if next_values:
            return self.will(ConsecutiveCalls((value, *next_values)))
        return self.will(ReturnStub(value))

    def will_return_callback(self, callback: Callable[..., Any]) -> InvocationMocker:
        return self.will(ReturnCallback(callback))

    def will_throw_exception(
        self, exception: BaseException | type[BaseException]
    ) -> InvocationMocker:
        return self.will(ExceptionStub(exception))

    def will_return_on_consecutive_calls(self, *values: Any) -> InvocationMocker:
        return self.will(ConsecutiveCalls(values))

    def will_return_argument(self, index: int) -> InvocationMocker:
        return self.will(ReturnArgument(index))

    def will_return_self(self) -> InvocationMocker:
        return self.will(ReturnSelf())

    def will_return_map(self, value_map: Iterable[Sequence[Any]]) -> InvocationMocker:
        return self.will(ReturnValueMap(value_map))

    def will_call_original(self) -> InvocationMocker:
        return self.will(ForwardToOriginal())

    def _ensure_parameters_can_be_configured(self) -> None:
        if not self._matcher.has_method_name_rule():
            raise MockObjectError("Method name rule is not defined, cannot define parameter rule")
        if self._matcher.parameters_rule is not None:
            raise MockObjectError("Parameter rule is already defined, cannot redefine")


__all__ = ["InvocationMocker"]
