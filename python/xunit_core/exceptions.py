"""Custom exceptions for xunit-core.

This module provides the exception hierarchy used by the runner, the data
provider resolver and the mock object engine.

Exceptions raised by a test body are caught at the test boundary and turned
into lifecycle events. Only EventFacadeIsSealedError and
InvalidStateTransitionError are allowed to abort a whole run.
"""

from __future__ import annotations

from typing import Any


class XUnitError(Exception):
    """Base exception for all xunit-core errors.

    All exceptions raised by xunit-core inherit from this class,
    making it easy to catch all framework errors.

    Example:
        >>> try:
        ...     runner.run()
        ... except XUnitError as e:
        ...     print(f"xunit error: {e}")
    """

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for event details.

        Returns:
            Dictionary with the error type and message.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
        }


class AssertionFailedError(XUnitError):
    """Raised by an assertion that does not hold.

    A test whose body raises this error is reported as Failed.

    Example:
        >>> raise AssertionFailedError("Failed asserting that false is true.")
    """

    pass


class ExpectationFailedError(AssertionFailedError):
    """Raised when a mock object expectation is not met.

    Raised at teardown when verification of a double fails, or at the
    call site when an invocation violates a configured expectation.
    """

    pass


class UnexpectedInvocationError(ExpectationFailedError):
    """Raised at the call site when no configured expectation accepts a call.

    This happens when every expectation for the invoked method is
    saturated, or when parameter or order constraints reject the call.

    Example:
        >>> mock.expects(exactly(2)).method("foo")
        >>> mock.foo(); mock.foo()
        >>> mock.foo()  # raises UnexpectedInvocationError
    """

    pass


class SkippedTestError(XUnitError):
    """Raised to mark the running test as skipped."""

    pass


class IncompleteTestError(XUnitError):
    """Raised to mark the running test as incomplete."""

    pass


class TimeLimitExceededError(XUnitError):
    """Raised inside a test that runs longer than its time limit.

    Example:
        >>> @time_limit(1)
        ... def test_slow(self):
        ...     time.sleep(5)  # interrupted with TimeLimitExceededError
    """

    pass


class InvalidDataProviderError(XUnitError):
    """Raised when the data for a parameterized test cannot be resolved.

    Common causes:
    - Provider method is not public or not static
    - Provider method expects an argument or raises
    - Provider returns an empty or malformed data set
    - Two providers define the same named data set

    Example:
        >>> try:
        ...     resolver.resolve(GreeterTest, "test_greeting")
        ... except InvalidDataProviderError as e:
        ...     print(f"Invalid data provider: {e}")
    """

    pass


class MockObjectError(XUnitError):
    """Base class for test double configuration errors."""

    pass


class MethodCannotBeConfiguredError(MockObjectError):
    """Raised when an expectation names a method the double does not have."""

    def __init__(self, method_name: str) -> None:
        super().__init__(f'Trying to configure method "{method_name}" which cannot be configured')
        self.method_name = method_name


class MatcherAlreadyRegisteredError(MockObjectError):
    """Raised when two expectations on one double share the same id."""

    def __init__(self, matcher_id: str) -> None:
        super().__init__(f'Matcher with id <{matcher_id}> is already registered')
        self.matcher_id = matcher_id


class UnknownMatcherIdError(MockObjectError):
    """Raised when after() refers to an id no expectation carries."""

    def __init__(self, matcher_id: str) -> None:
        super().__init__(f'No builder found for match builder identification <{matcher_id}>')
        self.matcher_id = matcher_id


class EventFacadeIsSealedError(XUnitError):
    """Raised when subscribing to the event facade after it was sealed.

    Example:
        >>> facade.seal()
        >>> facade.register_tracer(my_tracer)  # raises EventFacadeIsSealedError
    """

    pass


class InvalidStateTransitionError(XUnitError):
    """Raised when the runner is driven through an illegal lifecycle transition.

    This indicates an internal invariant break and aborts the run.
    """

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot transition from {current} to {target}")
        self.current = current
        self.target = target


__all__ = [
    "XUnitError",
    "AssertionFailedError",
    "ExpectationFailedError",
    "UnexpectedInvocationError",
    "SkippedTestError",
    "IncompleteTestError",
    "TimeLimitExceededError",
    "InvalidDataProviderError",
    "MockObjectError",
    "MethodCannotBeConfiguredError",
    "MatcherAlreadyRegisteredError",
    "UnknownMatcherIdError",
    "EventFacadeIsSealedError",
    "InvalidStateTransitionError",
]
