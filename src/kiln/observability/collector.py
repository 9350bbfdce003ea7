"""Generate collector — records pipeline events into an EventLog.

The generator calls the ``record_*`` helpers as stages, batches and pages
complete; callers inspect the log afterwards.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from kiln.observability.events import (
    BatchEvent,
    PageEvent,
    Stage,
    StageEvent,
    now_ns,
)
from kiln.observability.log import EventLog


class GenerateCollector:
    """Event collector for a generation run.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record_stage(
        self,
        stage: Stage,
        *,
        duration_ms: float,
        ok: bool = True,
        detail: str = "",
    ) -> None:
        """Record a finished pipeline stage."""
        self._log.append(
            StageEvent(
                stage=stage,
                ok=ok,
                duration_ms=duration_ms,
                detail=detail,
                timestamp_ns=now_ns(),
            )
        )

    def record_page(
        self,
        route: str,
        output_path: str,
        *,
        size_bytes: int,
        duration_ms: float,
    ) -> None:
        """Record a rendered and written page."""
        self._log.append(
            PageEvent(
                route=route,
                output_path=output_path,
                size_bytes=size_bytes,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_batch(self, index: int, size: int, duration_ms: float) -> None:
        """Record a settled batch."""
        self._log.append(
            BatchEvent(
                index=index,
                size=size,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
