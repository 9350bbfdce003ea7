"""Static generation — pre-render an application to a directory of HTML files.

The Generator sequences the whole run; each stage starts only after the
previous one has fully completed::

    build -> clean (best-effort) -> copy assets -> resolve params
          -> expand routes -> {render batch -> write batch}* -> .nojekyll

Every failure except destination cleanup propagates as a ``KilnError``
naming the stage and route; a partial site is never a successful run.
"""

from __future__ import annotations

import contextlib
import sys
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from kiln.export.batch import BatchRenderer, RenderResult
from kiln.export.renderer import Builder, Renderer, run_builder
from kiln.export.writer import ExportedFile, OutputWriter
from kiln.observability.collector import GenerateCollector
from kiln.routes.expander import expand_routes, find_collisions
from kiln.routes.params import resolve_params

if TYPE_CHECKING:
    from kiln.config import GenerateConfig
    from kiln.observability.events import Stage


@dataclass(frozen=True, slots=True)
class GenerateResult:
    """Aggregate result of a generation run.

    Attributes:
        files: All files written, in the order they were produced.
        routes: Concrete routes that were rendered, in table order.
        total_pages: Number of pages written.
        total_assets: Number of asset files copied.
        batches: Number of render batches run.
        collisions: Routes that overwrote a page written by an earlier route.
        duration_ms: Total wall-clock time of the run.
        output_dir: Absolute path to the output directory.

    """

    files: tuple[ExportedFile, ...]
    routes: tuple[str, ...]
    total_pages: int
    total_assets: int
    batches: int
    collisions: tuple[str, ...]
    duration_ms: float
    output_dir: Path


class Generator:
    """Generates a static site from a renderer and a route table.

    Args:
        config: Frozen generation configuration.
        renderer: Produces HTML for each concrete route.  Entered as an async
            context manager for the render stage if it is one.
        routes: Route table; defaults to ``config.routes``.
        builder: Build step run first; ``None`` if the bundle already exists.
        collector: Receives stage, batch and page events.

    """

    def __init__(
        self,
        config: GenerateConfig,
        renderer: Renderer,
        routes: Sequence[str] | None = None,
        *,
        builder: Builder | None = None,
        collector: GenerateCollector | None = None,
    ) -> None:
        self._config = config
        self._renderer = renderer
        self._routes = tuple(routes) if routes is not None else config.routes
        self._builder = builder
        self._collector = collector if collector is not None else GenerateCollector()
        self._batches = 0

    @property
    def collector(self) -> GenerateCollector:
        """The collector receiving this generator's events."""
        return self._collector

    async def generate(self) -> GenerateResult:
        """Run the full pipeline and return the result.

        Raises:
            BuildError: If the build step fails (nothing is cleaned).
            ConfigError: If a dynamic route has no parameters, or a parameter
                object does not fit its route.
            ParamResolutionError: If a parameter producer fails.
            RenderError: If any route fails to render.
            OutputError: If assets or pages cannot be written.

        """
        start = time.perf_counter()
        config = self._config
        writer = OutputWriter(config.output_path)
        self._batches = 0

        # 1. Build
        t0 = time.perf_counter()
        await run_builder(self._builder)
        self._record("build", t0)

        # 2. Clean destination (best-effort)
        t0 = time.perf_counter()
        cleaned = await writer.clean()
        self._record("clean", t0, ok=cleaned)

        # 3. Copy static and built assets
        t0 = time.perf_counter()
        assets = await writer.copy_assets(
            config.static_path, config.build_path, config.assets_dir,
        )
        self._record("copy_assets", t0, detail=f"{len(assets)} files")

        # 4. Resolve route parameters
        t0 = time.perf_counter()
        resolved = await resolve_params(config.route_params)
        self._record("resolve_params", t0, detail=f"{len(resolved)} routes")

        # 5. Expand the route table
        t0 = time.perf_counter()
        routes = expand_routes(self._routes, resolved)
        collisions = find_collisions(routes)
        for route in collisions:
            print(
                f"  Warning: {route} overwrites a page generated by an earlier route",
                file=sys.stderr,
            )
        self._record("expand_routes", t0, detail=f"{len(routes)} routes")

        # 6. Render and write in batches
        t0 = time.perf_counter()
        batch_renderer = BatchRenderer(
            self._renderer,
            batch_size=config.concurrency,
            minify=config.minify,
            fail_fast=config.fail_fast,
            on_batch=self._on_batch,
        )
        async with contextlib.AsyncExitStack() as stack:
            if hasattr(self._renderer, "__aenter__"):
                await stack.enter_async_context(self._renderer)  # type: ignore[arg-type]
            pages = await batch_renderer.run(routes, self._write_page(writer))
        self._record("render", t0, detail=f"{len(pages)} pages")

        # 7. Marker file
        t0 = time.perf_counter()
        marker = await writer.write_marker()
        self._record("write_marker", t0)

        elapsed = (time.perf_counter() - start) * 1000
        self._collector.record_stage("done", duration_ms=elapsed)

        return GenerateResult(
            files=(*assets, *pages, marker),
            routes=routes,
            total_pages=len(pages),
            total_assets=len(assets),
            batches=self._batches,
            collisions=collisions,
            duration_ms=elapsed,
            output_dir=config.output_path,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _write_page(self, writer: OutputWriter):
        """Return the sink that writes a page and records it."""

        async def sink(result: RenderResult) -> ExportedFile:
            exported = await writer.write_page(result)
            self._collector.record_page(
                exported.source_path,
                str(exported.output_path),
                size_bytes=exported.size_bytes,
                duration_ms=exported.duration_ms,
            )
            return exported

        return sink

    def _on_batch(self, index: int, size: int, duration_ms: float) -> None:
        self._batches += 1
        self._collector.record_batch(index, size, duration_ms)

    def _record(self, stage: Stage, t0: float, *, ok: bool = True, detail: str = "") -> None:
        self._collector.record_stage(
            stage,
            duration_ms=(time.perf_counter() - t0) * 1000,
            ok=ok,
            detail=detail,
        )
