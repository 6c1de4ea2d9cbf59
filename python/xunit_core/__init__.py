"""
xunit-core

An xUnit-style unit testing framework: test cases with assertions and
data providers, mock objects and stubs, and a test runner that reports
every step of a run as a structured event stream.

Example:
    >>> import xunit_core
    >>> xunit_core.version()
    '0.1.0'

    >>> # Write a test case
    >>> from xunit_core import TestCase, data_provider
    >>> class GreeterTest(TestCase):
    ...     @staticmethod
    ...     def names():
    ...         return {"alice": ("Alice",)}
    ...
    ...     @data_provider("names")
    ...     def test_greets(self, name):
    ...         mailer = self.create_mock(Mailer)
    ...         mailer.expects(self.once()).method("send").with_(name)
    ...         Greeter(mailer).greet(name)

    >>> # Run it and observe the event stream
    >>> from xunit_core import EventCollector, EventFacade, TestRunner, TestSuite
    >>> facade = EventFacade.instance()
    >>> collector = EventCollector()
    >>> facade.register_tracer(collector)
    >>> result = TestRunner(facade=facade).execute(TestSuite.from_class(GreeterTest))
    >>> result.was_successful()
    True
"""

from __future__ import annotations

__version__ = "0.1.0"

from xunit_core.constraints import (
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
)
from xunit_core.data_provider import DataProviderResolver, DataSets
from xunit_core.event_facade import ALL_EVENTS, Emitter, EventFacade, Tracer
from xunit_core.event_tracer import EventCollector, TextEventLogger
from xunit_core.exceptions import (
    AssertionFailedError,
    EventFacadeIsSealedError,
    ExpectationFailedError,
    IncompleteTestError,
    InvalidDataProviderError,
    InvalidStateTransitionError,
    MatcherAlreadyRegisteredError,
    MethodCannotBeConfiguredError,
    MockObjectError,
    SkippedTestError,
    TimeLimitExceededError,
    UnexpectedInvocationError,
    UnknownMatcherIdError,
    XUnitError,
)
from xunit_core.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from xunit_core.metadata import (
    MetadataCollection,
    MetadataParser,
    data_provider,
    data_provider_external,
    time_limit,
    with_data,
)
from xunit_core.mock_object import (
    Invocation,
    InvocationHandler,
    InvocationRecorder,
    create_double,
)
from xunit_core.reflection import MethodDescriptor, describe_method
from xunit_core.result import ResultCollector
from xunit_core.result_cache import ResultCache, ResultCacheHandler
from xunit_core.runner import LifecyclePhase, RunnerState, TestRunner
from xunit_core.suite import TestMethod, TestSuite, TestSuiteLoader
from xunit_core.test_case import TestCase
from xunit_core.timer import Invoker
from xunit_core.types import (
    ClassMethod,
    Event,
    EventKind,
    LogContext,
    Outcome,
    OutcomeStatus,
    RunnerConfig,
    RunResult,
)


def version() -> str:
    """Return the xunit-core version."""
    return __version__


__all__ = [
    # Version
    "__version__",
    "version",
    # Test cases and suites
    "TestCase",
    "TestMethod",
    "TestSuite",
    "TestSuiteLoader",
    # Runner
    "TestRunner",
    "RunnerState",
    "LifecyclePhase",
    "RunnerConfig",
    "RunResult",
    "Outcome",
    "OutcomeStatus",
    "ResultCollector",
    "ResultCache",
    "ResultCacheHandler",
    "Invoker",
    # Events
    "ALL_EVENTS",
    "Emitter",
    "Event",
    "EventCollector",
    "EventFacade",
    "EventKind",
    "TextEventLogger",
    "Tracer",
    "ClassMethod",
    # Metadata and data providers
    "DataProviderResolver",
    "DataSets",
    "MetadataCollection",
    "MetadataParser",
    "MethodDescriptor",
    "describe_method",
    "data_provider",
    "data_provider_external",
    "time_limit",
    "with_data",
    # Test doubles
    "Invocation",
    "InvocationHandler",
    "InvocationRecorder",
    "create_double",
    # Constraints
    "Constraint",
    "Callback",
    "Contains",
    "Count",
    "GreaterThan",
    "IsAnything",
    "IsEqual",
    "IsFalse",
    "IsIdentical",
    "IsInstanceOf",
    "IsNone",
    "IsTrue",
    "LessThan",
    "LogicalNot",
    "StringContains",
    # Exceptions
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
    # Logging
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
    "LogContext",
]
