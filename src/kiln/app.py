"""Kiln entry points — load config and app, then generate the site.

``generate()`` is the synchronous entry point used by the CLI;
``generate_async()`` is for callers already running an event loop.
Both raise ``KilnError`` subclasses on failure and never exit the process.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from kiln._errors import ConfigError
from kiln._imports import load_object
from kiln.config_loader import load_config

if TYPE_CHECKING:
    from kiln.config import GenerateConfig
    from kiln.export.generator import GenerateResult
    from kiln.export.renderer import Builder, Renderer
    from kiln.observability.collector import GenerateCollector


def generate(
    root: str | Path = ".",
    *,
    renderer: Renderer | None = None,
    routes: Sequence[str] | None = None,
    builder: Builder | None = None,
    collector: GenerateCollector | None = None,
    quiet: bool = False,
    **kwargs: object,
) -> GenerateResult:
    """Generate the static site for the project at *root*.

    Without an explicit *renderer*, the Chirp app named by the ``app``
    config key is rendered in-process, and its GET routes are used as the
    route table unless ``routes`` is configured.

    Args:
        root: Project root directory.
        renderer: Renderer to use instead of the configured Chirp app.
        routes: Route table overriding the configured one.
        builder: Build step overriding the configured one.
        collector: Receives stage, batch and page events.
        quiet: Suppress the banner and summary.
        **kwargs: Override GenerateConfig fields.

    """
    return asyncio.run(generate_async(
        root,
        renderer=renderer,
        routes=routes,
        builder=builder,
        collector=collector,
        quiet=quiet,
        **kwargs,
    ))


async def generate_async(
    root: str | Path = ".",
    *,
    renderer: Renderer | None = None,
    routes: Sequence[str] | None = None,
    builder: Builder | None = None,
    collector: GenerateCollector | None = None,
    quiet: bool = False,
    **kwargs: object,
) -> GenerateResult:
    """Async form of :func:`generate`."""
    from kiln.banner import print_banner, print_summary
    from kiln.export.generator import Generator

    t0 = time.perf_counter()
    config = load_config(Path(root), **kwargs)

    if renderer is None:
        renderer, app_routes = _load_app_renderer(config)
        if routes is None and not config.routes:
            routes = app_routes
    if builder is None and config.builder:
        builder = _load_builder(config)

    table = tuple(routes) if routes is not None else config.routes
    load_ms = (time.perf_counter() - t0) * 1000

    if not quiet:
        print_banner(config, route_count=len(table), load_ms=load_ms)

    generator = Generator(config, renderer, table, builder=builder, collector=collector)
    result = await generator.generate()

    if not quiet:
        print_summary(result)
    return result


def _load_app_renderer(config: GenerateConfig) -> tuple[Renderer, tuple[str, ...]]:
    """Build a ChirpRenderer for the app named in config."""
    from kiln.export.renderer import ChirpRenderer, chirp_routes

    if not config.app:
        msg = "No renderer configured: set 'app' to the 'module:attr' of a Chirp app"
        raise ConfigError(msg)

    app = load_object(config.app, config.root, what="app")
    return ChirpRenderer(app), chirp_routes(app)  # type: ignore[arg-type]


def _load_builder(config: GenerateConfig) -> Builder:
    builder = load_object(config.builder or "", config.root, what="builder")
    if not callable(builder):
        msg = f"builder {config.builder!r} is not callable"
        raise ConfigError(msg)
    return builder  # type: ignore[return-value]
