"""Pydantic models for xunit-core.

This module provides type-safe data models shared by the event facade,
the runner and the result collector, using Pydantic v2 for validation
and serialization.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventKind(str, Enum):
    """Kinds of events emitted through the event facade.

    The value of each member is the event name used in text traces.
    """

    APPLICATION_STARTED = "Application Started"
    APPLICATION_FINISHED = "Application Finished"
    TEST_RUNNER_CONFIGURED = "Test Runner Configured"
    TEST_SUITE_LOADED = "Test Suite Loaded"
    EVENT_FACADE_SEALED = "Event Facade Sealed"
    TEST_RUNNER_STARTED = "Test Runner Started"
    TEST_RUNNER_EXECUTION_STARTED = "Test Runner Execution Started"
    TEST_SUITE_STARTED = "Test Suite Started"
    TEST_PREPARATION_STARTED = "Test Preparation Started"
    TEST_PREPARATION_FAILED = "Test Preparation Failed"
    TEST_PREPARED = "Test Prepared"
    TEST_TRIGGERED_WARNING = "Test Triggered Warning"
    TEST_TRIGGERED_DEPRECATION = "Test Triggered Deprecation"
    TEST_TRIGGERED_NOTICE = "Test Triggered Notice"
    TEST_CONSIDERED_RISKY = "Test Considered Risky"
    TEST_PASSED = "Test Passed"
    TEST_FAILED = "Test Failed"
    TEST_ERRORED = "Test Errored"
    TEST_SKIPPED = "Test Skipped"
    TEST_MARKED_INCOMPLETE = "Test Marked Incomplete"
    TEST_FINISHED = "Test Finished"
    TEST_SUITE_FINISHED = "Test Suite Finished"
    TEST_RUNNER_EXECUTION_FINISHED = "Test Runner Execution Finished"
    TEST_RUNNER_FINISHED = "Test Runner Finished"
    DATA_PROVIDER_METHOD_CALLED = "Data Provider Method Called"
    DATA_PROVIDER_METHOD_FINISHED = "Data Provider Method Finished"
    MOCK_OBJECT_CREATED = "Mock Object Created"
    TEST_STUB_CREATED = "Test Stub Created"


class Event(BaseModel):
    """A single lifecycle event.

    Events are immutable. The sequence number is assigned by the facade
    and reflects emission order.

    Example:
        >>> event.as_string()
        'Test Passed (GreeterTest::test_greeting)'
    """

    kind: EventKind = Field(description="What happened.")
    payload: str = Field(default="", description="Short subject shown in text traces.")
    sequence: int = Field(description="Emission order, starting at 1.")
    occurred_at: float = Field(description="Monotonic timestamp in seconds.")
    test_id: str | None = Field(
        default=None,
        description="Identifier of the test the event belongs to, if any.",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured data (messages, counts, error types).",
    )

    model_config = {"frozen": True}

    def as_string(self) -> str:
        """Render the event as one line of a text trace."""
        if self.payload:
            return f"{self.kind.value} ({self.payload})"
        return self.kind.value


class ClassMethod(BaseModel):
    """Reference to a method on a class, rendered as ``Class::method``."""

    class_name: str
    method_name: str

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.class_name}::{self.method_name}"


class OutcomeStatus(str, Enum):
    """Terminal outcome of a single test."""

    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"
    SKIPPED = "skipped"
    INCOMPLETE = "incomplete"


class Outcome(BaseModel):
    """Result of executing one test.

    The runner builds an Outcome from whatever the test body did and picks
    the lifecycle event to emit from its status.

    Example:
        >>> Outcome.passed().status
        <OutcomeStatus.PASSED: 'passed'>
        >>> Outcome.failed("Failed asserting that false is true.").is_defect
        True
    """

    status: OutcomeStatus
    message: str = ""
    error_type: str | None = None

    @classmethod
    def passed(cls) -> Outcome:
        return cls(status=OutcomeStatus.PASSED)

    @classmethod
    def failed(cls, message: str, error_type: str | None = None) -> Outcome:
        return cls(status=OutcomeStatus.FAILED, message=message, error_type=error_type)

    @classmethod
    def errored(cls, error: BaseException) -> Outcome:
        return cls(
            status=OutcomeStatus.ERRORED,
            message=str(error),
            error_type=error.__class__.__name__,
        )

    @classmethod
    def skipped(cls, message: str = "") -> Outcome:
        return cls(status=OutcomeStatus.SKIPPED, message=message)

    @classmethod
    def incomplete(cls, message: str = "") -> Outcome:
        return cls(status=OutcomeStatus.INCOMPLETE, message=message)

    @property
    def is_passed(self) -> bool:
        return self.status is OutcomeStatus.PASSED

    @property
    def is_defect(self) -> bool:
        return self.status in (OutcomeStatus.FAILED, OutcomeStatus.ERRORED)


class Defect(BaseModel):
    """A failed or errored test, as recorded in the run summary."""

    test_id: str
    status: OutcomeStatus
    message: str = ""


class RunResult(BaseModel):
    """Summary of a finished run.

    Example:
        >>> result = runner.run()
        >>> if not result.was_successful():
        ...     for defect in result.defects:
        ...         print(defect.test_id, defect.message)
    """

    tests: int = 0
    assertions: int = 0
    passed: int = 0
    failed: int = 0
    errored: int = 0
    skipped: int = 0
    incomplete: int = 0
    risky: int = 0
    warnings: int = 0
    deprecations: int = 0
    notices: int = 0
    defects: list[Defect] = Field(default_factory=list)

    def was_successful(self) -> bool:
        """Return True when no test failed or errored."""
        return self.failed == 0 and self.errored == 0

    @property
    def shell_exit_code(self) -> int:
        """Exit code for the command line: 0 success, 1 failures, 2 errors."""
        if self.errored > 0:
            return 2
        if self.failed > 0:
            return 1
        return 0


_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


class RunnerConfig(BaseModel):
    """Configuration for a test run.

    Example:
        >>> config = RunnerConfig(fail_on_warning=True, log_level="debug")
        >>> runner = TestRunner(config)
    """

    fail_on_warning: bool = Field(
        default=False,
        description="Report a test that triggered a warning as Failed.",
    )
    fail_on_deprecation: bool = Field(
        default=False,
        description="Report a test that triggered a deprecation as Failed.",
    )
    report_useless_tests: bool = Field(
        default=True,
        description="Report tests that perform no assertions as risky.",
    )
    enforce_time_limit: bool = Field(
        default=False,
        description="Interrupt tests that exceed their time limit.",
    )
    default_time_limit: float = Field(
        default=0.0,
        ge=0.0,
        description="Time limit in seconds for tests without their own (0 = none).",
    )
    cache_result: bool = Field(
        default=True,
        description="Persist test outcomes to the result cache file.",
    )
    cache_result_file: str = Field(
        default=".xunit.result.cache",
        description="Path of the result cache file.",
    )
    log_events_text: str | None = Field(
        default=None,
        description="Write a text trace of all events to this path.",
    )
    no_output: bool = Field(
        default=False,
        description="Suppress all log output.",
    )
    log_level: str = Field(
        default="warn",
        pattern="^(trace|debug|info|warn|error)$",
        description="Log level (trace, debug, info, warn, error).",
    )

    model_config = {"extra": "forbid"}

    @classmethod
    def from_environment(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> RunnerConfig:
        """Build a configuration from ``XUNIT_*`` environment variables.

        Explicit keyword overrides take precedence over the environment.

        Args:
            environ: Mapping to read from (defaults to os.environ).
            **overrides: Field values that win over the environment.

        Returns:
            A validated RunnerConfig.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "fail_on_warning": _env_flag(env, "XUNIT_FAIL_ON_WARNING", False),
            "fail_on_deprecation": _env_flag(env, "XUNIT_FAIL_ON_DEPRECATION", False),
            "enforce_time_limit": _env_flag(env, "XUNIT_ENFORCE_TIME_LIMIT", False),
            "cache_result": _env_flag(env, "XUNIT_CACHE_RESULT", True),
            "log_level": env.get("XUNIT_LOG_LEVEL", "warn").lower(),
        }
        if "XUNIT_DEFAULT_TIME_LIMIT" in env:
            values["default_time_limit"] = float(env["XUNIT_DEFAULT_TIME_LIMIT"])
        if "XUNIT_CACHE_RESULT_FILE" in env:
            values["cache_result_file"] = env["XUNIT_CACHE_RESULT_FILE"]
        values.update(overrides)
        return cls(**values)


class LogContext(BaseModel):
    """Context fields for structured logging.

    Example:
        >>> context = LogContext(test_id="GreeterTest::test_greeting", phase="prepared")
        >>> log_debug("Test prepared", context)
    """

    test_id: str | None = Field(
        default=None,
        description="Identifier of the running test.",
    )
    suite: str | None = Field(
        default=None,
        description="Name of the enclosing suite.",
    )
    phase: str | None = Field(
        default=None,
        description="Lifecycle phase or runner state.",
    )
    operation: str | None = Field(
        default=None,
        description="Operation being performed.",
    )


__all__ = [
    "EventKind",
    "Event",
    "ClassMethod",
    "OutcomeStatus",
    "Outcome",
    "Defect",
    "RunResult",
    "RunnerConfig",
    "LogContext",
]
