"""Base class for test cases.

Test methods are public methods whose name starts with ``test``. A test
case instance runs exactly one test method with one data set.

Example:
    >>> from xunit_core import TestCase
    >>>
    >>> class GreeterTest(TestCase):
    ...     def set_up(self):
    ...         self.mailer = self.create_mock(Mailer)
    ...         self.greeter = Greeter(self.mailer)
    ...
    ...     def test_sends_one_greeting(self):
    ...         self.mailer.expects(self.once()).method("send").with_("alice")
    ...         self.greeter.greet("alice")
    ...
    ...     def test_greeting_text(self):
    ...         self.assert_equals("Hello alice", self.greeter.text("alice"))
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .constraints import (
    Callback,
    Constraint,
    Contains,
    Count,
    GreaterThan,
    IsAnything,
    IsEqual,
    IsFalse,
    IsIdentical,
    IsInstanceOf,
    IsNone,
    IsTrue,
    LessThan,
    LogicalNot,
    StringContains,
    export,
)
from .event_facade import EventFacade
from .exceptions import AssertionFailedError, IncompleteTestError, SkippedTestError
from .mock_object import (
    AnyInvokedCount,
    ConsecutiveCalls,
    ExceptionStub,
    InvokedAtLeastCount,
    InvokedAtLeastOnce,
    InvokedAtMostCount,
    InvokedCount,
    ReturnArgument,
    ReturnCallback,
    ReturnSelf,
    ReturnStub,
    ReturnValueMap,
    VerificationResult,
    create_double,
    invocation_handler_of,
)


class TestCase:
    """Base class for all test cases.

    Class Attributes:
        test_method_prefix: Methods starting with this prefix are tests.
    """

    __test__ = False

    test_method_prefix = "test"

    def __init__(
        self,
        method_name: str,
        data: Sequence[Any] = (),
        data_set_name: int | str | None = None,
        facade: EventFacade | None = None,
    ) -> None:
        self._method_name = method_name
        self._data = tuple(data)
        self._data_set_name = data_set_name
        self._facade = facade
        self._assertion_count = 0
        self._doubles: list[Any] = []

    # Identity

    @property
    def method_name(self) -> str:
        return self._method_name

    @property
    def data(self) -> tuple[Any, ...]:
        return self._data

    @property
    def data_set_name(self) -> int | str | None:
        return self._data_set_name

    def test_id(self) -> str:
        """Identifier used in events, e.g. ``GreeterTest::test_greets with data set #0``."""
        return build_test_id(type(self), self._method_name, self._data_set_name)

    # Lifecycle hooks

    @classmethod
    def set_up_before_class(cls) -> None:
        """Called once before the first test of the class."""

    @classmethod
    def tear_down_after_class(cls) -> None:
        """Called once after the last test of the class."""

    def set_up(self) -> None:
        """Called before each test method."""

    def tear_down(self) -> None:
        """Called after each prepared test method, whatever its outcome."""

    def run_test_method(self) -> Any:
        """Call the test method with the data set."""
        return getattr(self, self._method_name)(*self._data)

    # Assertions

    def assert_that(self, value: Any, constraint: Constraint, message: str = "") -> None:
        self._assertion_count += 1
        constraint.evaluate(value, message)

    def assert_true(self, condition: Any, message: str = "") -> None:
        self.assert_that(condition, IsTrue(), message)

    def assert_false(self, condition: Any, message: str = "") -> None:
        self.assert_that(condition, IsFalse(), message)

    def assert_equals(self, expected: Any, actual: Any, message: str = "") -> None:
        self.assert_that(actual, IsEqual(expected), message)

    def assert_not_equals(self, expected: Any, actual: Any, message: str = "") -> None:
        self.assert_that(actual, LogicalNot(IsEqual(expected)), message)

    def assert_same(self, expected: Any, actual: Any, message: str = "") -> None:
        self.assert_that(actual, IsIdentical(expected), message)

    def assert_not_same(self, expected: Any, actual: Any, message: str = "") -> None:
        self.assert_that(actual, LogicalNot(IsIdentical(expected)), message)

    def assert_none(self, actual: Any, message: str = "") -> None:
        self.assert_that(actual, IsNone(), message)

    def assert_not_none(self, actual: Any, message: str = "") -> None:
        self.assert_that(actual, LogicalNot(IsNone()), message)

    def assert_count(self, expected: int, haystack: Any, message: str = "") -> None:
        self.assert_that(haystack, Count(expected), message)

    def assert_instance_of(self, expected: type, actual: Any, message: str = "") -> None:
        self.assert_that(actual, IsInstanceOf(expected), message)

    def assert_contains(self, needle: Any, haystack: Any, message: str = "") -> None:
        constraint = StringContains(needle) if isinstance(haystack, str) else Contains(needle)
        self.assert_that(haystack, constraint, message)

    def assert_greater_than(self, expected: Any, actual: Any, message: str = "") -> None:
        self.assert_that(actual, GreaterThan(expected), message)

    def assert_less_than(self, expected: Any, actual: Any, message: str = "") -> None:
        self.assert_that(actual, LessThan(expected), message)

    @contextmanager
    def assert_raises(
        self,
        expected: type[BaseException],
        message: str | None = None,
    ) -> Iterator[None]:
        """Assert that the block raises ``expected`` (optionally containing ``message``)."""
        self._assertion_count += 1
        try:
            yield
        except expected as e:
            if message is not None and message not in str(e):
                raise AssertionFailedError(
                    f"Failed asserting that exception message {export(str(e))} "
                    f"contains {export(message)}."
                ) from e
            return
        raise AssertionFailedError(
            f"Failed asserting that exception of type {expected.__qualname__} is raised."
        )

    def fail(self, message: str = "") -> None:
        raise AssertionFailedError(message or "Test failed")

    def mark_test_skipped(self, message: str = "") -> None:
        raise SkippedTestError(message)

    def mark_test_incomplete(self, message: str = "") -> None:
        raise IncompleteTestError(message)

    def add_to_assertion_count(self, count: int) -> None:
        self._assertion_count += count

    def number_of_assertions_performed(self) -> int:
        return self._assertion_count

    # Test doubles

    def create_mock(self, spec: type) -> Any:
        """Create a mock object for a class; expectations are verified at teardown."""
        return self._register_double(create_double(spec, facade=self._facade))

    def create_stub(self, spec: type) -> Any:
        """Create a stub for a class; stubs only support ``method()``."""
        return self._register_double(create_double(spec, stub=True, facade=self._facade))

    def create_partial_mock(self, spec: type, methods: Iterable[str]) -> Any:
        """Create a mock that doubles only the given methods."""
        return self._register_double(
            create_double(spec, only_methods=list(methods), facade=self._facade)
        )

    def create_test_proxy(self, spec: type, *args: Any, **kwargs: Any) -> Any:
        """Create a real instance whose calls are recorded and can carry expectations."""
        return self._register_double(
            create_double(
                spec,
                call_original_constructor=True,
                constructor_arguments=args,
                constructor_keywords=kwargs,
                forward_to_original=True,
                facade=self._facade,
            )
        )

    def doubles(self) -> list[Any]:
        return list(self._doubles)

    def has_expectations_on_doubles(self) -> bool:
        return any(invocation_handler_of(double).has_matchers() for double in self._doubles)

    def verify_doubles(self) -> VerificationResult:
        """Verify every double created by this test.

        Each verified expectation counts as one assertion.
        """
        results = []
        for double in self._doubles:
            handler = invocation_handler_of(double)
            self._assertion_count += handler.expectation_count()
            results.append(handler.verify())
        return VerificationResult.combine(results)

    def _register_double(self, double: Any) -> Any:
        self._doubles.append(double)
        return double

    # Invocation count rules

    @staticmethod
    def any() -> AnyInvokedCount:
        return AnyInvokedCount()

    @staticmethod
    def never() -> InvokedCount:
        return InvokedCount(0)

    @staticmethod
    def once() -> InvokedCount:
        return InvokedCount(1)

    @staticmethod
    def exactly(count: int) -> InvokedCount:
        return InvokedCount(count)

    @staticmethod
    def at_least(count: int) -> InvokedAtLeastCount:
        return InvokedAtLeastCount(count)

    @staticmethod
    def at_least_once() -> InvokedAtLeastOnce:
        return InvokedAtLeastOnce()

    @staticmethod
    def at_most(count: int) -> InvokedAtMostCount:
        return InvokedAtMostCount(count)

    # Stub actions

    @staticmethod
    def return_value(value: Any) -> ReturnStub:
        return ReturnStub(value)

    @staticmethod
    def return_callback(callback: Callable[..., Any]) -> ReturnCallback:
        return ReturnCallback(callback)

    @staticmethod
    def throw_exception(exception: BaseException | type[BaseException]) -> ExceptionStub:
        return ExceptionStub(exception)

    @staticmethod
    def on_consecutive_calls(*values: Any) -> ConsecutiveCalls:
        return ConsecutiveCalls(values)

    @staticmethod
    def return_argument(index: int) -> ReturnArgument:
        return ReturnArgument(index)

    @staticmethod
    def return_self() -> ReturnSelf:
        return ReturnSelf()

    @staticmethod
    def return_value_map(value_map: Iterable[Sequence[Any]]) -> ReturnValueMap:
        return ReturnValueMap(value_map)

    # Constraints

    @staticmethod
    def anything() -> IsAnything:
        return IsAnything()

    @staticmethod
    def equal_to(value: Any) -> IsEqual:
        return IsEqual(value)

    @staticmethod
    def identical_to(value: Any) -> IsIdentical:
        return IsIdentical(value)

    @staticmethod
    def is_instance_of(class_or_tuple: type | tuple[type, ...]) -> IsInstanceOf:
        return IsInstanceOf(class_or_tuple)

    @staticmethod
    def callback(function: Callable[[Any], Any]) -> Callback:
        return Callback(function)

    @staticmethod
    def string_contains(needle: str, ignore_case: bool = False) -> StringContains:
        return StringContains(needle, ignore_case)

    @staticmethod
    def logical_not(constraint: Constraint | Any) -> LogicalNot:
        return LogicalNot(constraint)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.test_id()!r})"


def build_test_id(test_class: type, method_name: str, data_set_name: int | str | None = None) -> str:
    """Build the identifier of a test, e.g. ``GreeterTest::test_greets with data set "alice"``."""
    base = f"{test_class.__qualname__}::{method_name}"
    if data_set_name is None:
        return base
    if isinstance(data_set_name, int):
        return f"{base} with data set #{data_set_name}"
    return f'{base} with data set "{data_set_name}"'


__all__ = ["TestCase", "build_test_id"]
