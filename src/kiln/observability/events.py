"""Event model for generation diagnostics.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal

type Stage = Literal[
    "build",
    "clean",
    "copy_assets",
    "resolve_params",
    "expand_routes",
    "render",
    "write_marker",
    "done",
]


@dataclass(frozen=True, slots=True)
class StageEvent:
    """A pipeline stage finished (or was recovered from).

    Attributes:
        stage: Pipeline stage name.
        ok: False when the stage failed but the run continued (cleanup only).
        duration_ms: Time spent in the stage.
        detail: Short human-readable note (counts, error text).
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    stage: Stage
    ok: bool
    duration_ms: float
    detail: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PageEvent:
    """A page was rendered and written.

    Attributes:
        route: Concrete route that was rendered.
        output_path: File the page was written to.
        size_bytes: Size of the written file.
        duration_ms: Render + minify + write time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    route: str
    output_path: str
    size_bytes: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BatchEvent:
    """A batch of routes fully settled.

    Attributes:
        index: Zero-based batch number.
        size: Number of routes in the batch.
        duration_ms: Wall-clock time for the whole batch.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    index: int
    size: int
    duration_ms: float
    timestamp_ns: int


type GenerateEvent = StageEvent | PageEvent | BatchEvent


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
