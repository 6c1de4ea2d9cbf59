"""Persistent cache of test outcomes and durations.

The cache remembers which tests did not pass and how long every test took
in the previous run. It is stored as JSON next to the project and is
written when the runner finishes.

Example:
    >>> cache = ResultCache(".xunit.result.cache")
    >>> cache.load()
    >>> cache.status("GreeterTest::test_greeting")
    <OutcomeStatus.FAILED: 'failed'>
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .event_facade import EventFacade
from .logging import log_debug, log_warn
from .types import Event, EventKind, OutcomeStatus

CACHE_FORMAT_VERSION = 1

_STATUS_EVENTS = {
    EventKind.TEST_PASSED: OutcomeStatus.PASSED,
    EventKind.TEST_FAILED: OutcomeStatus.FAILED,
    EventKind.TEST_ERRORED: OutcomeStatus.ERRORED,
    EventKind.TEST_SKIPPED: OutcomeStatus.SKIPPED,
    EventKind.TEST_MARKED_INCOMPLETE: OutcomeStatus.INCOMPLETE,
}


class CachedResults(BaseModel):
    """On-disk representation of the result cache."""

    version: int = CACHE_FORMAT_VERSION
    defects: dict[str, OutcomeStatus] = Field(
        default_factory=dict,
        description="Status of every test that did not pass, by test id.",
    )
    times: dict[str, float] = Field(
        default_factory=dict,
        description="Duration in seconds of every test, by test id.",
    )


class ResultCache:
    """Reads and writes the result cache file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._data = CachedResults()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        """Read the cache file; a missing or unreadable file yields an empty cache."""
        if not self._path.is_file():
            return
        try:
            self._data = CachedResults.model_validate_json(self._path.read_text(encoding="utf-8"))
        except ValidationError as e:
            log_warn("Ignoring unreadable result cache", {"path": str(self._path), "error": str(e)})
            self._data = CachedResults()
            return
        if self._data.version != CACHE_FORMAT_VERSION:
            log_warn("Ignoring result cache with unknown version", {"path": str(self._path)})
            self._data = CachedResults()

    def persist(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._data.model_dump_json(indent=2), encoding="utf-8")
        log_debug("Result cache written", {"path": str(self._path)})

    def set_status(self, test_id: str, status: OutcomeStatus) -> None:
        if status is OutcomeStatus.PASSED:
            self._data.defects.pop(test_id, None)
        else:
            self._data.defects[test_id] = status

    def status(self, test_id: str) -> OutcomeStatus | None:
        """Return the last non-passing status of a test, or None."""
        return self._data.defects.get(test_id)

    def set_time(self, test_id: str, seconds: float) -> None:
        self._data.times[test_id] = round(seconds, 3)

    def time(self, test_id: str) -> float:
        return self._data.times.get(test_id, 0.0)


class ResultCacheHandler:
    """Subscriber that records outcomes and durations into a ResultCache.

    Durations run from ``Test Prepared`` to ``Test Finished``. The cache is
    persisted on ``Test Runner Finished``.
    """

    def __init__(self, cache: ResultCache) -> None:
        self._cache = cache
        self._started: dict[str, float] = {}

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def subscribe(self, facade: EventFacade) -> None:
        subscribers = {kind: self._on_outcome for kind in _STATUS_EVENTS}
        subscribers.update(
            {
                EventKind.TEST_PREPARED: self._on_prepared,
                EventKind.TEST_FINISHED: self._on_finished,
                EventKind.TEST_RUNNER_FINISHED: self._on_runner_finished,
            }
        )
        facade.register_subscribers(subscribers)

    def _on_prepared(self, event: Event) -> None:
        if event.test_id is not None:
            self._started[event.test_id] = event.occurred_at

    def _on_outcome(self, event: Event) -> None:
        if event.test_id is not None:
            self._cache.set_status(event.test_id, _STATUS_EVENTS[event.kind])

    def _on_finished(self, event: Event) -> None:
        if event.test_id is None:
            return
        started = self._started.pop(event.test_id, None)
        if started is not None:
            self._cache.set_time(event.test_id, event.occurred_at - started)

    def _on_runner_finished(self, event: Event) -> None:
        self._cache.persist()


__all__ = ["CACHE_FORMAT_VERSION", "CachedResults", "ResultCache", "ResultCacheHandler"]
