"""Tracers that observe the full event stream.

- EventCollector keeps events in memory (used by tests and the CLI).
- TextEventLogger writes one ``<Event Name> (<payload>)`` line per event,
  the format used for golden-file regression tests of event ordering.
"""

from __future__ import annotations

from pathlib import Path

from .types import Event, EventKind


class EventCollector:
    """Tracer that records every event it receives.

    Example:
        >>> collector = EventCollector()
        >>> facade.register_tracer(collector)
        >>> facade.seal()
        >>> collector.as_strings()
        ['Event Facade Sealed']
    """

    def __init__(self) -> None:
        self._events: list[Event] = []

    def trace(self, event: Event) -> None:
        self._events.append(event)

    @property
    def events(self) -> list[Event]:
        return list(self._events)

    def kinds(self) -> list[EventKind]:
        return [event.kind for event in self._events]

    def as_strings(self) -> list[str]:
        return [event.as_string() for event in self._events]

    def for_test(self, test_id: str) -> list[Event]:
        """Return the events that belong to one test, in emission order."""
        return [event for event in self._events if event.test_id == test_id]

    def clear(self) -> None:
        self._events.clear()


class TextEventLogger:
    """Tracer that appends a text line per event to a file.

    The file is truncated when the logger is created.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text("", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._path

    def trace(self, event: Event) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(event.as_string() + "\n")


__all__ = ["EventCollector", "TextEventLogger"]
