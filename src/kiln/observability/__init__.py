"""Generation observability — stage, batch and page events.

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from worker threads.

Quick Start:
    >>> from kiln.observability import EventLog, GenerateCollector
    >>> log = EventLog()
    >>> collector = GenerateCollector(log)
    >>> # Pass collector to Generator; inspect log.query(...) afterwards

"""

from kiln.observability.collector import GenerateCollector
from kiln.observability.events import (
    BatchEvent,
    GenerateEvent,
    PageEvent,
    StageEvent,
    now_ns,
)
from kiln.observability.log import EventLog

__all__ = [
    "BatchEvent",
    "EventLog",
    "GenerateCollector",
    "GenerateEvent",
    "PageEvent",
    "StageEvent",
    "now_ns",
]
