"""Result collector that builds the run summary from lifecycle events.

The collector is an ordinary event subscriber: it never looks at test
objects, only at the events the runner emits.

Example:
    >>> collector = ResultCollector()
    >>> collector.subscribe(facade)
    >>> facade.seal()
    >>> # ... run ...
    >>> collector.result().was_successful()
    True
"""

from __future__ import annotations

from .event_facade import EventFacade
from .logging import log_debug
from .types import Defect, Event, EventKind, OutcomeStatus, RunResult

_OUTCOME_EVENTS = {
    EventKind.TEST_PASSED: OutcomeStatus.PASSED,
    EventKind.TEST_FAILED: OutcomeStatus.FAILED,
    EventKind.TEST_ERRORED: OutcomeStatus.ERRORED,
    EventKind.TEST_SKIPPED: OutcomeStatus.SKIPPED,
    EventKind.TEST_MARKED_INCOMPLETE: OutcomeStatus.INCOMPLETE,
}


class ResultCollector:
    """Counts outcomes, assertions and triggered issues."""

    def __init__(self) -> None:
        self._statuses: dict[OutcomeStatus, int] = dict.fromkeys(OutcomeStatus, 0)
        self._tests = 0
        self._assertions = 0
        self._risky = 0
        self._warnings = 0
        self._deprecations = 0
        self._notices = 0
        self._defects: list[Defect] = []

    def subscribe(self, facade: EventFacade) -> None:
        """Register the collector's handlers on a facade that is not sealed yet."""
        subscribers = {kind: self._on_outcome for kind in _OUTCOME_EVENTS}
        subscribers.update(
            {
                EventKind.TEST_FINISHED: self._on_finished,
                EventKind.TEST_CONSIDERED_RISKY: self._on_risky,
                EventKind.TEST_TRIGGERED_WARNING: self._on_warning,
                EventKind.TEST_TRIGGERED_DEPRECATION: self._on_deprecation,
                EventKind.TEST_TRIGGERED_NOTICE: self._on_notice,
            }
        )
        facade.register_subscribers(subscribers)

    def result(self) -> RunResult:
        return RunResult(
            tests=self._tests,
            assertions=self._assertions,
            passed=self._statuses[OutcomeStatus.PASSED],
            failed=self._statuses[OutcomeStatus.FAILED],
            errored=self._statuses[OutcomeStatus.ERRORED],
            skipped=self._statuses[OutcomeStatus.SKIPPED],
            incomplete=self._statuses[OutcomeStatus.INCOMPLETE],
            risky=self._risky,
            warnings=self._warnings,
            deprecations=self._deprecations,
            notices=self._notices,
            defects=list(self._defects),
        )

    def _on_outcome(self, event: Event) -> None:
        status = _OUTCOME_EVENTS[event.kind]
        self._statuses[status] += 1
        if status in (OutcomeStatus.FAILED, OutcomeStatus.ERRORED):
            self._defects.append(
                Defect(
                    test_id=event.test_id or "",
                    status=status,
                    message=event.details.get("message", ""),
                )
            )

    def _on_finished(self, event: Event) -> None:
        self._tests += 1
        self._assertions += event.details.get("assertion_count", 0)
        log_debug("Test finished", {"test_id": event.test_id, "tests": self._tests})

    def _on_risky(self, event: Event) -> None:
        self._risky += 1

    def _on_warning(self, event: Event) -> None:
        self._warnings += 1

    def _on_deprecation(self, event: Event) -> None:
        self._deprecations += 1

    def _on_notice(self, event: Event) -> None:
        self._notices += 1


__all__ = ["ResultCollector"]
