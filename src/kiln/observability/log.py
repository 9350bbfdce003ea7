"""Event log — what happened during a generation run.

Keeps the most recent events of a run in a bounded buffer and answers the
questions asked after a run: which stages ran and how long they took,
which pages were written, and which were slowest.

Thread Safety:
    Every method takes the log's ``threading.Lock``; events are appended
    from the event loop and may be read from any thread.

"""

from __future__ import annotations

import heapq
import threading
from collections import deque
from typing import Any

from kiln.observability.events import GenerateEvent, PageEvent, Stage, StageEvent


class EventLog:
    """Bounded store of generation events.

    Once ``max_events`` is reached the oldest events are dropped.  Page
    events dominate large runs, so the default leaves room for a site of
    tens of thousands of pages.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 50_000) -> None:
        self._max_events = max_events
        self._events: deque[GenerateEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: GenerateEvent) -> None:
        """Record an event."""
        with self._lock:
            self._events.append(event)

    def _snapshot(self) -> list[GenerateEvent]:
        with self._lock:
            return list(self._events)

    def query(
        self,
        *,
        event_type: type | None = None,
        stage: Stage | None = None,
        route: str | None = None,
        limit: int = 100,
    ) -> list[GenerateEvent]:
        """Return matching events, most recent first.

        Args:
            event_type: Only events of this class.
            stage: Only stage events for this pipeline stage.
            route: Only page events whose route contains this substring.
            limit: Maximum number of events returned.

        """
        matches: list[GenerateEvent] = []
        for event in reversed(self._snapshot()):
            if len(matches) == limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if stage is not None and not (isinstance(event, StageEvent) and event.stage == stage):
                continue
            if route is not None and not (isinstance(event, PageEvent) and route in event.route):
                continue
            matches.append(event)
        return matches

    def stages(self) -> list[StageEvent]:
        """Stage events in the order the stages finished."""
        return [e for e in self._snapshot() if isinstance(e, StageEvent)]

    def slowest_pages(self, n: int = 5) -> list[PageEvent]:
        """The *n* pages that took longest to render and write."""
        pages = (e for e in self._snapshot() if isinstance(e, PageEvent))
        return heapq.nlargest(n, pages, key=lambda e: e.duration_ms)

    def recent(self, n: int = 20) -> list[GenerateEvent]:
        """The *n* most recent events, oldest first."""
        return self._snapshot()[-n:]

    def clear(self) -> int:
        """Drop every event and return how many there were."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Summarize the retained events.

        ``pages`` and ``bytes_written`` count page events only; ``failed_stages``
        lists stages recorded with ``ok=False``.
        """
        events = self._snapshot()
        by_type: dict[str, int] = {}
        for event in events:
            name = type(event).__name__
            by_type[name] = by_type.get(name, 0) + 1

        pages = [e for e in events if isinstance(e, PageEvent)]
        return {
            "total": len(events),
            "max_events": self._max_events,
            "by_type": by_type,
            "pages": len(pages),
            "bytes_written": sum(e.size_bytes for e in pages),
            "failed_stages": [
                e.stage for e in events if isinstance(e, StageEvent) and not e.ok
            ],
        }
