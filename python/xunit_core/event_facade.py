"""Process-wide event facade for test run lifecycle events.

This module provides the EventFacade class that wraps pyee's EventEmitter
to distribute lifecycle events to subscribers and tracers, and the Emitter
that offers one method per event kind.

The facade has a two-phase lifecycle. Before it is sealed, subscribers and
tracers may be registered and emitted events are buffered. Sealing delivers
the buffered events in order, emits ``Event Facade Sealed`` and freezes the
subscriber set; afterwards events are delivered as they are emitted.

Example:
    >>> from xunit_core import EventFacade, EventKind
    >>>
    >>> facade = EventFacade.instance()
    >>>
    >>> def on_failed(event):
    ...     print(f"{event.test_id} failed: {event.details['message']}")
    ...
    >>> facade.register_subscriber(EventKind.TEST_FAILED, on_failed)
    >>> facade.seal()
    >>> facade.emitter().test_failed("GreeterTest::test_greeting", "nope")
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any, Protocol

from pyee.base import EventEmitter

from .exceptions import EventFacadeIsSealedError
from .logging import log_debug, log_info
from .types import ClassMethod, Event, EventKind

# Channel every event is published on in addition to its own kind
ALL_EVENTS = "*"


def _count(n: int, noun: str = "test") -> str:
    return f"{n} {noun}" if n == 1 else f"{n} {noun}s"


class Tracer(Protocol):
    """Receives every event, regardless of kind."""

    def trace(self, event: Event) -> None: ...


class EventFacade:
    """Registry of event subscribers with a write-once lifecycle.

    The EventFacade is implemented as a singleton so that the runner, the
    data provider resolver and the mock object engine share one event
    stream. Components receive the facade by reference and default to
    the singleton.

    Example:
        >>> facade = EventFacade.instance()
        >>> facade.register_tracer(TextEventLogger("events.txt"))
        >>> facade.seal()
        >>> facade.emitter().test_runner_started()
    """

    _instance: EventFacade | None = None

    def __init__(self) -> None:
        """Initialize the EventFacade.

        Creates a new pyee EventEmitter with no subscribers. Prefer using
        EventFacade.instance() to get the singleton.
        """
        self._emitter = EventEmitter()
        self._sealed = False
        self._deferred: list[Event] = []
        self._sequence = 0
        self._dispatch = Emitter(self)

    @classmethod
    def instance(cls) -> EventFacade:
        """Get the singleton EventFacade instance.

        Example:
            >>> facade = EventFacade.instance()
            >>> assert facade is EventFacade.instance()
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance.

        This is primarily for testing to ensure a clean state between tests.
        Removes all subscribers from the current instance before resetting.
        """
        if cls._instance is not None:
            cls._instance._emitter.remove_all_listeners()
        cls._instance = None

    def emitter(self) -> Emitter:
        """Return the emitter used to publish events through this facade."""
        return self._dispatch

    def register_subscriber(
        self,
        kind: EventKind,
        handler: Callable[[Event], Any],
    ) -> None:
        """Subscribe to one kind of event.

        Args:
            kind: Event kind to subscribe to.
            handler: Callback invoked with the Event.

        Raises:
            EventFacadeIsSealedError: If the facade is already sealed.
        """
        self._ensure_not_sealed()
        self._emitter.on(kind.value, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed to {kind.value}: {handler_name}")

    def register_subscribers(
        self,
        subscribers: dict[EventKind, Callable[[Event], Any]],
    ) -> None:
        """Subscribe several handlers at once."""
        for kind, handler in subscribers.items():
            self.register_subscriber(kind, handler)

    def register_tracer(self, tracer: Tracer) -> None:
        """Register a tracer that receives every event.

        Raises:
            EventFacadeIsSealedError: If the facade is already sealed.
        """
        self._ensure_not_sealed()
        self._emitter.on(ALL_EVENTS, tracer.trace)
        log_debug(f"Registered tracer: {tracer.__class__.__name__}")

    def seal(self) -> None:
        """Freeze the subscriber set and start delivering events.

        Buffered events are delivered in emission order, followed by
        ``Event Facade Sealed``.

        Raises:
            EventFacadeIsSealedError: If the facade was already sealed.
        """
        self._ensure_not_sealed()
        self._sealed = True

        deferred, self._deferred = self._deferred, []
        for event in deferred:
            self._deliver(event)

        self._dispatch.event_facade_sealed()
        log_info("Event facade sealed", {"buffered_events": len(deferred)})

    def dispatch(self, event: Event) -> None:
        """Buffer or deliver an event depending on the sealing state."""
        if not self._sealed:
            self._deferred.append(event)
            return
        self._deliver(event)

    def next_sequence(self) -> int:
        """Return the sequence number for the next event."""
        self._sequence += 1
        return self._sequence

    def listener_count(self, kind: EventKind) -> int:
        """Get the number of subscribers for an event kind."""
        return len(self._emitter.listeners(kind.value))

    def tracer_count(self) -> int:
        """Get the number of registered tracers."""
        return len(self._emitter.listeners(ALL_EVENTS))

    @property
    def is_sealed(self) -> bool:
        """True once seal() has been called."""
        return self._sealed

    @property
    def buffered_event_count(self) -> int:
        """Number of events waiting for the facade to be sealed."""
        return len(self._deferred)

    def _deliver(self, event: Event) -> None:
        self._emitter.emit(event.kind.value, event)
        self._emitter.emit(ALL_EVENTS, event)

    def _ensure_not_sealed(self) -> None:
        if self._sealed:
            raise EventFacadeIsSealedError("The event facade has already been sealed")


class Emitter:
    """Publishes events through an EventFacade, one method per event kind.

    Emission is fire-and-forget; ordering is the caller's responsibility.
    """

    def __init__(self, facade: EventFacade) -> None:
        self._facade = facade

    def _emit(
        self,
        kind: EventKind,
        payload: str = "",
        test_id: str | None = None,
        **details: Any,
    ) -> Event:
        event = Event(
            kind=kind,
            payload=payload,
            sequence=self._facade.next_sequence(),
            occurred_at=time.monotonic(),
            test_id=test_id,
            details=details,
        )
        self._facade.dispatch(event)
        return event

    # Application and runner

    def application_started(self, version: str) -> Event:
        return self._emit(EventKind.APPLICATION_STARTED, f"xunit-core {version}")

    def application_finished(self, shell_exit_code: int) -> Event:
        return self._emit(
            EventKind.APPLICATION_FINISHED,
            f"Shell Exit Code: {shell_exit_code}",
            shell_exit_code=shell_exit_code,
        )

    def test_runner_configured(self, configuration: dict[str, Any]) -> Event:
        return self._emit(EventKind.TEST_RUNNER_CONFIGURED, configuration=configuration)

    def test_suite_loaded(self, suite_name: str, test_count: int) -> Event:
        return self._emit(
            EventKind.TEST_SUITE_LOADED,
            _count(test_count),
            suite=suite_name,
            test_count=test_count,
        )

    def event_facade_sealed(self) -> Event:
        return self._emit(EventKind.EVENT_FACADE_SEALED)

    def test_runner_started(self) -> Event:
        return self._emit(EventKind.TEST_RUNNER_STARTED)

    def test_runner_execution_started(self, test_count: int) -> Event:
        return self._emit(
            EventKind.TEST_RUNNER_EXECUTION_STARTED,
            _count(test_count),
            test_count=test_count,
        )

    def test_runner_execution_finished(self) -> Event:
        return self._emit(EventKind.TEST_RUNNER_EXECUTION_FINISHED)

    def test_runner_finished(self) -> Event:
        return self._emit(EventKind.TEST_RUNNER_FINISHED)

    # Suites

    def test_suite_started(self, suite_name: str, test_count: int) -> Event:
        return self._emit(
            EventKind.TEST_SUITE_STARTED,
            f"{suite_name}, {_count(test_count)}",
            suite=suite_name,
            test_count=test_count,
        )

    def test_suite_finished(self, suite_name: str, test_count: int) -> Event:
        return self._emit(
            EventKind.TEST_SUITE_FINISHED,
            f"{suite_name}, {_count(test_count)}",
            suite=suite_name,
            test_count=test_count,
        )

    # Tests

    def test_preparation_started(self, test_id: str) -> Event:
        return self._emit(EventKind.TEST_PREPARATION_STARTED, test_id, test_id)

    def test_preparation_failed(self, test_id: str, message: str) -> Event:
        return self._emit(EventKind.TEST_PREPARATION_FAILED, test_id, test_id, message=message)

    def test_prepared(self, test_id: str) -> Event:
        return self._emit(EventKind.TEST_PREPARED, test_id, test_id)

    def test_triggered_warning(
        self, test_id: str, message: str, file: str = "", line: int = 0
    ) -> Event:
        return self._emit(
            EventKind.TEST_TRIGGERED_WARNING, test_id, test_id, message=message, file=file, line=line
        )

    def test_triggered_deprecation(
        self, test_id: str, message: str, file: str = "", line: int = 0
    ) -> Event:
        return self._emit(
            EventKind.TEST_TRIGGERED_DEPRECATION,
            test_id,
            test_id,
            message=message,
            file=file,
            line=line,
        )

    def test_triggered_notice(
        self, test_id: str, message: str, file: str = "", line: int = 0
    ) -> Event:
        return self._emit(
            EventKind.TEST_TRIGGERED_NOTICE, test_id, test_id, message=message, file=file, line=line
        )

    def test_considered_risky(self, test_id: str, message: str) -> Event:
        return self._emit(EventKind.TEST_CONSIDERED_RISKY, test_id, test_id, message=message)

    def test_passed(self, test_id: str) -> Event:
        return self._emit(EventKind.TEST_PASSED, test_id, test_id)

    def test_failed(self, test_id: str, message: str) -> Event:
        return self._emit(EventKind.TEST_FAILED, test_id, test_id, message=message)

    def test_errored(self, test_id: str, message: str, error_type: str | None = None) -> Event:
        return self._emit(
            EventKind.TEST_ERRORED, test_id, test_id, message=message, error_type=error_type
        )

    def test_skipped(self, test_id: str, message: str) -> Event:
        return self._emit(EventKind.TEST_SKIPPED, test_id, test_id, message=message)

    def test_marked_incomplete(self, test_id: str, message: str) -> Event:
        return self._emit(EventKind.TEST_MARKED_INCOMPLETE, test_id, test_id, message=message)

    def test_finished(self, test_id: str, assertion_count: int) -> Event:
        return self._emit(
            EventKind.TEST_FINISHED, test_id, test_id, assertion_count=assertion_count
        )

    # Data providers

    def data_provider_method_called(
        self, test_method: ClassMethod, data_provider_method: ClassMethod
    ) -> Event:
        return self._emit(
            EventKind.DATA_PROVIDER_METHOD_CALLED,
            f"{data_provider_method} for test method {test_method}",
            str(test_method),
            data_provider_method=str(data_provider_method),
        )

    def data_provider_method_finished(
        self, test_method: ClassMethod, *called_methods: ClassMethod
    ) -> Event:
        names = [str(method) for method in called_methods]
        return self._emit(
            EventKind.DATA_PROVIDER_METHOD_FINISHED,
            f"{test_method}: {', '.join(names)}",
            str(test_method),
            data_provider_methods=names,
        )

    # Test doubles

    def mock_object_created(self, class_name: str) -> Event:
        return self._emit(EventKind.MOCK_OBJECT_CREATED, class_name)

    def test_stub_created(self, class_name: str) -> Event:
        return self._emit(EventKind.TEST_STUB_CREATED, class_name)


__all__ = ["ALL_EVENTS", "EventFacade", "Emitter", "Tracer"]
