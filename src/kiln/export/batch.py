"""Batch renderer — bounded-concurrency rendering of concrete routes.

Routes are processed in fixed-size batches.  Inside a batch every route is
rendered, minified and handed to the sink (the output writer) concurrently;
the next batch starts only after the whole batch has settled.  Peak
in-flight renders therefore never exceed the batch size, however many
routes the site has, and a failure is always attributable to a recent batch.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from kiln._errors import KilnError, RenderError, first_error
from kiln._types import ConcreteRoute, ResultSink
from kiln.config import DEFAULT_CONCURRENCY
from kiln.export.minify import minify_page
from kiln.export.renderer import RenderContext, Renderer

# Failed routes listed in an aggregated error message
_MAX_LISTED_FAILURES = 10


@dataclass(frozen=True, slots=True)
class RenderResult:
    """A successfully rendered (and minified) page.

    Attributes:
        route: Concrete route that was rendered.
        html: Final HTML body.
        duration_ms: Render + minify time.

    """

    route: ConcreteRoute
    html: str
    duration_ms: float


@dataclass(frozen=True, slots=True)
class RenderFailure:
    """A route that failed to render when ``fail_fast`` is off."""

    route: ConcreteRoute
    error: KilnError


def iter_batches(
    routes: Sequence[ConcreteRoute],
    size: int,
) -> Iterator[Sequence[ConcreteRoute]]:
    """Yield consecutive slices of *routes* holding at most *size* items."""
    for start in range(0, len(routes), size):
        yield routes[start:start + size]


class BatchRenderer:
    """Drive concrete routes through a renderer in bounded batches.

    Args:
        renderer: Produces HTML for each route.
        batch_size: Routes rendered and written concurrently per batch.
        minify: Run every page through :func:`minify_page`.
        fail_fast: Abort on the first failing route.  When False, failures
            are collected, remaining batches still run, and a single
            :class:`RenderError` naming every failed route is raised at the end.
        on_batch: Called with ``(index, size, duration_ms)`` after each batch.

    """

    __slots__ = ("_batch_size", "_fail_fast", "_minify", "_on_batch", "_renderer")

    def __init__(
        self,
        renderer: Renderer,
        *,
        batch_size: int = DEFAULT_CONCURRENCY,
        minify: bool = True,
        fail_fast: bool = True,
        on_batch: Callable[[int, int, float], None] | None = None,
    ) -> None:
        if batch_size < 1:
            msg = f"batch_size must be at least 1, got {batch_size}"
            raise ValueError(msg)
        self._renderer = renderer
        self._batch_size = batch_size
        self._minify = minify
        self._fail_fast = fail_fast
        self._on_batch = on_batch

    async def run(self, routes: Sequence[ConcreteRoute], sink: ResultSink) -> list[Any]:
        """Render every route and pass each result to *sink*.

        Returns:
            The sink's return values, in route order.

        Raises:
            RenderError: If a route fails to render.
            KilnError: Whatever the sink raises (e.g. ``OutputError``).

        """
        outputs: list[Any] = []
        failures: list[RenderFailure] = []

        for index, batch in enumerate(iter_batches(routes, self._batch_size)):
            t0 = time.perf_counter()
            try:
                async with asyncio.TaskGroup() as tg:
                    tasks = [
                        tg.create_task(self._process(route, sink, failures))
                        for route in batch
                    ]
            except ExceptionGroup as group:
                raise first_error(group)  # noqa: B904

            for task in tasks:
                output = task.result()
                if output is not None:
                    outputs.append(output)

            if self._on_batch is not None:
                self._on_batch(index, len(batch), (time.perf_counter() - t0) * 1000)

        if failures:
            raise _aggregate(failures)
        return outputs

    async def render_route(self, route: ConcreteRoute) -> RenderResult:
        """Render and minify a single route.

        Raises:
            RenderError: If the renderer raises, returns a non-string, or the
                page cannot be minified.

        """
        t0 = time.perf_counter()
        try:
            html = await self._renderer.render(route, RenderContext(generate_mode=True))
        except KilnError:
            raise
        except Exception as exc:
            msg = f"Failed to render {route!r}: {exc}"
            raise RenderError(msg, routes=(route,)) from exc

        if not isinstance(html, str):
            msg = f"Renderer returned {type(html).__name__} for {route!r}, expected str"
            raise RenderError(msg, routes=(route,))

        if self._minify:
            try:
                html = minify_page(html)
            except Exception as exc:
                msg = f"Failed to minify {route!r}: {exc}"
                raise RenderError(msg, routes=(route,)) from exc

        return RenderResult(
            route=route,
            html=html,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )

    async def _process(
        self,
        route: ConcreteRoute,
        sink: ResultSink,
        failures: list[RenderFailure],
    ) -> Any:
        try:
            result = await self.render_route(route)
        except KilnError as exc:
            if self._fail_fast:
                raise
            failures.append(RenderFailure(route=route, error=exc))
            return None
        return await sink(result)


def _aggregate(failures: list[RenderFailure]) -> RenderError:
    """Build a single error naming every failed route."""
    listed = [f"  {f.route}: {f.error}" for f in failures[:_MAX_LISTED_FAILURES]]
    remaining = len(failures) - len(listed)
    if remaining > 0:
        listed.append(f"  ... and {remaining} more")
    msg = f"{len(failures)} route(s) failed to render:\n" + "\n".join(listed)
    error = RenderError(msg, routes=tuple(f.route for f in failures))
    error.__cause__ = failures[0].error
    return error
