"""Test runner that drives a loaded suite through the lifecycle.

The runner is a state machine:

    IDLE -> CONFIGURED -> SUITE_LOADED -> SEALED -> RUNNER_STARTED
         -> EXECUTION_STARTED -> EXECUTION_FINISHED -> RUNNER_FINISHED

and every test goes through its own phases:

    PREPARATION_STARTED -> PREPARED -> OUTCOME -> FINISHED
    PREPARATION_STARTED -> PREPARATION_FAILED -> OUTCOME -> FINISHED

Illegal transitions raise InvalidStateTransitionError and abort the run.
Everything a test body does (failed assertions, errors, skips, exceeded
time limits) is turned into an Outcome and then into lifecycle events;
``Test Finished`` is always emitted.
A KeyboardInterrupt errors the current test, stops the run once every open
suite is finished and is raised again after ``Test Runner Finished``.

Example:
    >>> runner = TestRunner(RunnerConfig(fail_on_warning=True))
    >>> runner.configure()
    >>> runner.load(TestSuiteLoader().load_file("greeter_test.py"))
    >>> runner.seal()
    >>> result = runner.run()
    >>> result.shell_exit_code
    0
"""

from __future__ import annotations

import warnings
from enum import Enum
from typing import Any

from .event_facade import EventFacade
from .event_tracer import TextEventLogger
from .exceptions import (
    AssertionFailedError,
    ExpectationFailedError,
    IncompleteTestError,
    InvalidStateTransitionError,
    SkippedTestError,
)
from .logging import log_debug, log_error, log_info, log_warn
from .metadata import MetadataParser
from .result import ResultCollector
from .result_cache import ResultCache, ResultCacheHandler
from .suite import TestMethod, TestSuite
from .test_case import TestCase
from .timer import Invoker
from .types import EventKind, LogContext, Outcome, OutcomeStatus, RunnerConfig, RunResult


class RunnerState(str, Enum):
    """States of a test run."""

    IDLE = "idle"
    CONFIGURED = "configured"
    SUITE_LOADED = "suite_loaded"
    SEALED = "sealed"
    RUNNER_STARTED = "runner_started"
    EXECUTION_STARTED = "execution_started"
    EXECUTION_FINISHED = "execution_finished"
    RUNNER_FINISHED = "runner_finished"


class LifecyclePhase(str, Enum):
    """Phases of a single test."""

    NOT_STARTED = "not_started"
    PREPARATION_STARTED = "preparation_started"
    PREPARATION_FAILED = "preparation_failed"
    PREPARED = "prepared"
    OUTCOME = "outcome"
    FINISHED = "finished"


RUNNER_TRANSITIONS: dict[RunnerState, frozenset[RunnerState]] = {
    RunnerState.IDLE: frozenset({RunnerState.CONFIGURED}),
    RunnerState.CONFIGURED: frozenset({RunnerState.SUITE_LOADED}),
    RunnerState.SUITE_LOADED: frozenset({RunnerState.SEALED}),
    RunnerState.SEALED: frozenset({RunnerState.RUNNER_STARTED}),
    RunnerState.RUNNER_STARTED: frozenset({RunnerState.EXECUTION_STARTED}),
    RunnerState.EXECUTION_STARTED: frozenset({RunnerState.EXECUTION_FINISHED}),
    RunnerState.EXECUTION_FINISHED: frozenset({RunnerState.RUNNER_FINISHED}),
    RunnerState.RUNNER_FINISHED: frozenset(),
}

TEST_TRANSITIONS: dict[LifecyclePhase, frozenset[LifecyclePhase]] = {
    LifecyclePhase.NOT_STARTED: frozenset({LifecyclePhase.PREPARATION_STARTED}),
    # OUTCOME directly after PREPARATION_STARTED: the test could not be built
    LifecyclePhase.PREPARATION_STARTED: frozenset(
        {LifecyclePhase.PREPARED, LifecyclePhase.PREPARATION_FAILED, LifecyclePhase.OUTCOME}
    ),
    LifecyclePhase.PREPARATION_FAILED: frozenset({LifecyclePhase.OUTCOME}),
    LifecyclePhase.PREPARED: frozenset({LifecyclePhase.OUTCOME}),
    LifecyclePhase.OUTCOME: frozenset({LifecyclePhase.FINISHED}),
    LifecyclePhase.FINISHED: frozenset(),
}


class TestLifecycle:
    """Tracks the phase of one test and rejects illegal transitions."""

    __test__ = False

    def __init__(self, test_id: str) -> None:
        self.test_id = test_id
        self.phase = LifecyclePhase.NOT_STARTED

    def advance(self, target: LifecyclePhase) -> None:
        if target not in TEST_TRANSITIONS[self.phase]:
            raise InvalidStateTransitionError(self.phase.value, target.value)
        self.phase = target


def outcome_for(error: BaseException) -> Outcome:
    """Map an exception raised by a test to its outcome."""
    if isinstance(error, AssertionFailedError):
        return Outcome.failed(str(error), error.__class__.__name__)
    if isinstance(error, SkippedTestError):
        return Outcome.skipped(str(error))
    if isinstance(error, IncompleteTestError):
        return Outcome.incomplete(str(error))
    return Outcome.errored(error)


def warning_event_kind(category: type[Warning]) -> EventKind:
    """Map a warning category to the event that reports it."""
    if issubclass(category, (DeprecationWarning, PendingDeprecationWarning, FutureWarning)):
        return EventKind.TEST_TRIGGERED_DEPRECATION
    if issubclass(category, ResourceWarning):
        return EventKind.TEST_TRIGGERED_NOTICE
    return EventKind.TEST_TRIGGERED_WARNING


class TestRunner:
    """Runs a test suite and reports everything through the event facade.

    The runner registers its own subscribers (result collector, optional
    text event log, optional result cache) while configuring, so it must be
    given a facade that is not sealed yet.

    Example:
        >>> runner = TestRunner(RunnerConfig(), facade)
        >>> result = runner.execute(suite)
        >>> print(result.tests, result.failed)
    """

    __test__ = False

    def __init__(
        self,
        config: RunnerConfig | None = None,
        facade: EventFacade | None = None,
        invoker: Invoker | None = None,
        parser: MetadataParser | None = None,
    ) -> None:
        self._config = config or RunnerConfig()
        self._facade = facade or EventFacade.instance()
        self._invoker = invoker or Invoker()
        self._parser = parser or MetadataParser()
        self._state = RunnerState.IDLE
        self._suite: TestSuite | None = None
        self._suite_stack: list[str] = []
        self._collector = ResultCollector()
        self._interrupt: KeyboardInterrupt | None = None

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def config(self) -> RunnerConfig:
        return self._config

    @property
    def suite_stack(self) -> list[str]:
        """Names of the suites currently open, outermost first."""
        return list(self._suite_stack)

    def configure(self) -> None:
        """Apply the configuration and register the runner's subscribers."""
        self._transition(RunnerState.CONFIGURED)

        self._collector.subscribe(self._facade)
        if self._config.log_events_text:
            self._facade.register_tracer(TextEventLogger(self._config.log_events_text))
        if self._config.cache_result:
            cache = ResultCache(self._config.cache_result_file)
            cache.load()
            ResultCacheHandler(cache).subscribe(self._facade)

        self._facade.emitter().test_runner_configured(self._config.model_dump())
        log_debug("Test runner configured", LogContext(phase=self._state.value))

    def load(self, suite: TestSuite) -> None:
        self._transition(RunnerState.SUITE_LOADED)
        self._suite = suite
        self._facade.emitter().test_suite_loaded(suite.name, suite.count())
        log_info(f"Loaded suite {suite.name}", {"tests": suite.count()})

    def seal(self) -> None:
        """Seal the event facade; no subscriber can be registered afterwards."""
        self._transition(RunnerState.SEALED)
        self._facade.seal()

    def run(self) -> RunResult:
        """Run the loaded suite and return the summary.

        Raises:
            InvalidStateTransitionError: If the runner is not sealed.
        """
        self._transition(RunnerState.RUNNER_STARTED)
        emitter = self._facade.emitter()
        emitter.test_runner_started()

        if self._suite is None:
            raise InvalidStateTransitionError(
                self._state.value, RunnerState.EXECUTION_STARTED.value
            )
        self._transition(RunnerState.EXECUTION_STARTED)
        emitter.test_runner_execution_started(self._suite.count())

        self._run_suite(self._suite)

        self._transition(RunnerState.EXECUTION_FINISHED)
        emitter.test_runner_execution_finished()
        self._transition(RunnerState.RUNNER_FINISHED)
        emitter.test_runner_finished()

        if self._interrupt is not None:
            raise self._interrupt

        result = self._collector.result()
        log_info(
            "Test run finished",
            {
                "tests": result.tests,
                "failed": result.failed,
                "errored": result.errored,
                "exit_code": result.shell_exit_code,
            },
        )
        return result

    def execute(self, suite: TestSuite) -> RunResult:
        """Configure, load, seal and run in one call."""
        self.configure()
        self.load(suite)
        self.seal()
        return self.run()

    def _transition(self, target: RunnerState) -> None:
        if target not in RUNNER_TRANSITIONS[self._state]:
            log_error(
                "Illegal runner transition",
                {"from": self._state.value, "to": target.value},
            )
            raise InvalidStateTransitionError(self._state.value, target.value)
        self._state = target

    def _note_interrupt(self, error: BaseException) -> None:
        """Remember a Ctrl-C so the run stops after the current test."""
        if isinstance(error, KeyboardInterrupt) and self._interrupt is None:
            self._interrupt = error

    # Suites

    def _run_suite(self, suite: TestSuite, class_error: BaseException | None = None) -> None:
        emitter = self._facade.emitter()
        test_count = suite.count()
        emitter.test_suite_started(suite.name, test_count)
        self._suite_stack.append(suite.name)

        if suite.test_class is not None and class_error is None:
            class_error = self._set_up_class(suite.test_class)

        for child in suite.children():
            if self._interrupt is not None:
                break
            if isinstance(child, TestSuite):
                self._run_suite(child, class_error)
            else:
                self._run_test(child, class_error)

        if suite.test_class is not None and class_error is None:
            self._tear_down_class(suite.test_class)

        if not self._suite_stack or self._suite_stack[-1] != suite.name:
            raise InvalidStateTransitionError(
                f"suite {self._suite_stack[-1] if self._suite_stack else '<none>'}",
                f"finish {suite.name}",
            )
        self._suite_stack.pop()
        emitter.test_suite_finished(suite.name, test_count)

    def _set_up_class(self, test_class: type[TestCase]) -> BaseException | None:
        try:
            test_class.set_up_before_class()
        except BaseException as e:
            self._note_interrupt(e)
            log_error(
                f"set_up_before_class failed: {e}",
                {"suite": test_class.__qualname__, "error_type": type(e).__name__},
            )
            return e
        return None

    def _tear_down_class(self, test_class: type[TestCase]) -> None:
        try:
            test_class.tear_down_after_class()
        except BaseException as e:
            self._note_interrupt(e)
            log_error(
                f"tear_down_after_class failed: {e}",
                {"suite": test_class.__qualname__, "error_type": type(e).__name__},
            )

    # Tests

    def _run_test(self, test: TestMethod, class_error: BaseException | None) -> None:
        test_id = test.test_id()
        lifecycle = TestLifecycle(test_id)
        emitter = self._facade.emitter()
        assertion_count = 0

        lifecycle.advance(LifecyclePhase.PREPARATION_STARTED)
        emitter.test_preparation_started(test_id)
        try:
            error = test.provider_error or class_error
            if error is not None:
                outcome = Outcome.errored(error)
            else:
                outcome, assertion_count = self._run_test_case(test, lifecycle)

            lifecycle.advance(LifecyclePhase.OUTCOME)
            self._emit_outcome(test_id, outcome)
            lifecycle.advance(LifecyclePhase.FINISHED)
        finally:
            emitter.test_finished(test_id, assertion_count)

        log_debug(
            f"Test {outcome.status.value}",
            LogContext(test_id=test_id, phase=lifecycle.phase.value),
        )

    def _run_test_case(self, test: TestMethod, lifecycle: TestLifecycle) -> tuple[Outcome, int]:
        test_id = lifecycle.test_id
        emitter = self._facade.emitter()

        try:
            case = test.create(self._facade)
        except BaseException as e:
            self._note_interrupt(e)
            lifecycle.advance(LifecyclePhase.PREPARATION_FAILED)
            emitter.test_preparation_failed(test_id, str(e))
            return Outcome.errored(e), 0

        triggered: list[EventKind] = []

        def on_warning(
            message: Warning | str,
            category: type[Warning],
            filename: str,
            lineno: int,
            file: Any = None,
            line: str | None = None,
        ) -> None:
            kind = warning_event_kind(category)
            triggered.append(kind)
            self._emit_triggered(kind, test_id, str(message), filename, lineno)

        with warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.showwarning = on_warning

            try:
                case.set_up()
            except BaseException as e:
                self._note_interrupt(e)
                lifecycle.advance(LifecyclePhase.PREPARATION_FAILED)
                emitter.test_preparation_failed(test_id, str(e))
                return outcome_for(e), case.number_of_assertions_performed()

            lifecycle.advance(LifecyclePhase.PREPARED)
            emitter.test_prepared(test_id)

            outcome = self._run_body(case, test)

            try:
                case.tear_down()
            except BaseException as e:
                self._note_interrupt(e)
                log_warn(f"tear_down failed: {e}", LogContext(test_id=test_id, phase="tear_down"))
                if outcome.is_passed:
                    outcome = Outcome.errored(e)

        assertion_count = case.number_of_assertions_performed()
        if outcome.is_passed:
            outcome = self._apply_strictness(outcome, triggered)
        if outcome.is_passed and self._is_useless(case, assertion_count):
            emitter.test_considered_risky(test_id, "This test did not perform any assertions")

        return outcome, assertion_count

    def _run_body(self, case: TestCase, test: TestMethod) -> Outcome:
        try:
            self._invoker.invoke(case.run_test_method, self._time_limit_for(test))
        except BaseException as e:
            self._note_interrupt(e)
            return outcome_for(e)

        verification = case.verify_doubles()
        if not verification.is_success:
            return Outcome.failed(verification.message(), ExpectationFailedError.__name__)
        return Outcome.passed()

    def _apply_strictness(self, outcome: Outcome, triggered: list[EventKind]) -> Outcome:
        if self._config.fail_on_warning and EventKind.TEST_TRIGGERED_WARNING in triggered:
            return Outcome.failed("Test triggered a warning and fail_on_warning is enabled")
        if self._config.fail_on_deprecation and EventKind.TEST_TRIGGERED_DEPRECATION in triggered:
            return Outcome.failed("Test triggered a deprecation and fail_on_deprecation is enabled")
        return outcome

    def _is_useless(self, case: TestCase, assertion_count: int) -> bool:
        return (
            self._config.report_useless_tests
            and assertion_count == 0
            and not case.has_expectations_on_doubles()
        )

    def _time_limit_for(self, test: TestMethod) -> float:
        if not self._config.enforce_time_limit:
            return 0.0
        for limit in self._parser.for_method(test.test_class, test.method_name).is_time_limit():
            return limit.seconds
        return self._config.default_time_limit

    def _emit_triggered(
        self, kind: EventKind, test_id: str, message: str, file: str, line: int
    ) -> None:
        emitter = self._facade.emitter()
        if kind is EventKind.TEST_TRIGGERED_DEPRECATION:
            emitter.test_triggered_deprecation(test_id, message, file, line)
        elif kind is EventKind.TEST_TRIGGERED_NOTICE:
            emitter.test_triggered_notice(test_id, message, file, line)
        else:
            emitter.test_triggered_warning(test_id, message, file, line)

    def _emit_outcome(self, test_id: str, outcome: Outcome) -> None:
        emitter = self._facade.emitter()
        if outcome.status is OutcomeStatus.PASSED:
            emitter.test_passed(test_id)
        elif outcome.status is OutcomeStatus.FAILED:
            emitter.test_failed(test_id, outcome.message)
        elif outcome.status is OutcomeStatus.ERRORED:
            emitter.test_errored(test_id, outcome.message, outcome.error_type)
        elif outcome.status is OutcomeStatus.SKIPPED:
            emitter.test_skipped(test_id, outcome.message)
        else:
            emitter.test_marked_incomplete(test_id, outcome.message)


__all__ = [
    "RunnerState",
    "LifecyclePhase",
    "TestLifecycle",
    "TestRunner",
    "RUNNER_TRANSITIONS",
    "TEST_TRANSITIONS",
    "outcome_for",
    "warning_event_kind",
]
