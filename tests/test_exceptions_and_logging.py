"""Exception hierarchy, logging and configuration tests."""

from __future__ import annotations

import pytest
import structlog
from pydantic import ValidationError

from xunit_core import (
    AssertionFailedError,
    ExpectationFailedError,
    InvalidStateTransitionError,
    LogContext,
    MethodCannotBeConfiguredError,
    MockObjectError,
    RunnerConfig,
    RunResult,
    TestRunner,
    UnexpectedInvocationError,
    XUnitError,
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from xunit_core.logging import _normalize_fields


class TestExceptionHierarchy:
    """Tests for the exception hierarchy."""

    def test_unexpected_invocation_is_a_failure(self):
        """Test unexpected invocations are reported as failures, not errors."""
        assert issubclass(UnexpectedInvocationError, ExpectationFailedError)
        assert issubclass(ExpectationFailedError, AssertionFailedError)
        assert issubclass(AssertionFailedError, XUnitError)

    def test_mock_errors(self):
        error = MethodCannotBeConfiguredError("send")
        assert isinstance(error, MockObjectError)
        assert error.method_name == "send"
        assert '"send"' in str(error)

    def test_invalid_state_transition(self):
        error = InvalidStateTransitionError("idle", "sealed")
        assert str(error) == "Cannot transition from idle to sealed"
        assert (error.current, error.target) == ("idle", "sealed")

    def test_to_dict(self):
        assert AssertionFailedError("nope").to_dict() == {
            "error_type": "AssertionFailedError",
            "message": "nope",
        }


class TestLogging:
    """Tests for the structured logging helpers."""

    def test_normalize_dict(self):
        assert _normalize_fields({"tests": 4, "suite": "A"}) == {"tests": "4", "suite": "A"}

    def test_normalize_log_context_drops_unset_fields(self):
        context = LogContext(test_id="A::test_a", phase="prepared")
        assert _normalize_fields(context) == {"test_id": "A::test_a", "phase": "prepared"}

    def test_normalize_none(self):
        assert _normalize_fields(None) == {}

    def test_log_functions_accept_fields(self):
        configure_logging("trace")
        try:
            log_error("error", {"a": 1})
            log_warn("warn", LogContext(suite="A"))
            log_info("info")
            log_debug("debug", {"b": 2})
            log_trace("trace", {"c": 3})
        finally:
            configure_logging("warn")

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("verbose")

    def test_configure_logging_configures_structlog(self):
        structlog.reset_defaults()
        try:
            configure_logging("info")
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()

    def test_runner_leaves_process_logging_alone(self, facade, runner_config):
        """Test configuring a runner does not touch the host's structlog setup."""
        structlog.reset_defaults()
        TestRunner(runner_config, facade).configure()
        assert not structlog.is_configured()


class TestRunnerConfig:
    """Tests for RunnerConfig."""

    def test_defaults(self):
        config = RunnerConfig()
        assert config.cache_result
        assert config.report_useless_tests
        assert not config.fail_on_warning
        assert config.cache_result_file == ".xunit.result.cache"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            RunnerConfig(fail_on_everything=True)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            RunnerConfig(log_level="verbose")

    def test_from_environment(self):
        config = RunnerConfig.from_environment(
            {
                "XUNIT_FAIL_ON_WARNING": "yes",
                "XUNIT_CACHE_RESULT": "0",
                "XUNIT_DEFAULT_TIME_LIMIT": "2.5",
                "XUNIT_LOG_LEVEL": "DEBUG",
            }
        )
        assert config.fail_on_warning
        assert not config.cache_result
        assert config.default_time_limit == 2.5
        assert config.log_level == "debug"

    def test_overrides_win(self):
        config = RunnerConfig.from_environment(
            {"XUNIT_FAIL_ON_WARNING": "true"}, fail_on_warning=False
        )
        assert not config.fail_on_warning


class TestRunResult:
    """Tests for the exit code."""

    @pytest.mark.parametrize(
        ("counts", "exit_code"),
        [
            ({}, 0),
            ({"skipped": 1, "risky": 2}, 0),
            ({"failed": 1}, 1),
            ({"errored": 1}, 2),
            ({"failed": 3, "errored": 1}, 2),
        ],
    )
    def test_shell_exit_code(self, counts, exit_code):
        result = RunResult(**counts)
        assert result.shell_exit_code == exit_code
        assert result.was_successful() is (exit_code == 0)
