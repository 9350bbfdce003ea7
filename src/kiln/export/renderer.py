"""Renderer and builder boundaries.

Kiln never decides how a page renders.  It hands each concrete route to a
:class:`Renderer` and writes whatever HTML comes back.  Two adapters are
provided:

- :class:`CallableRenderer` wraps a plain ``func(route, context)``
  (sync or async).
- :class:`ChirpRenderer` renders a Chirp ``App`` in-process through
  ``chirp.testing.TestClient``; no server or socket is involved.

The builder is any zero-argument callable that leaves the compiled bundle
in ``GenerateConfig.build_path``.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

from kiln._errors import BuildError, RenderError

if TYPE_CHECKING:
    from chirp import App
    from chirp.testing import TestClient

# Request header telling the app it is being pre-rendered
GENERATE_HEADER = "x-kiln-generate"


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Context passed to the renderer with every route.

    Attributes:
        generate_mode: True when rendering for static output.

    """

    generate_mode: bool = True


@runtime_checkable
class Renderer(Protocol):
    """Turns a concrete route into an HTML string."""

    async def render(self, route: str, context: RenderContext) -> str: ...


@runtime_checkable
class Builder(Protocol):
    """Compiles the application before generation."""

    def __call__(self) -> Any: ...


class CallableRenderer:
    """Adapt a sync or async ``func(route, context) -> str`` to :class:`Renderer`.

    Sync functions run in a worker thread so the routes of a batch render
    concurrently.
    """

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[str, RenderContext], Any]) -> None:
        self._func = func

    async def render(self, route: str, context: RenderContext) -> str:
        if inspect.iscoroutinefunction(self._func):
            return await self._func(route, context)
        result = await asyncio.to_thread(self._func, route, context)
        if inspect.isawaitable(result):
            result = await result
        return result


class ChirpRenderer:
    """Render routes of a Chirp app through its ASGI interface.

    Must be entered as an async context manager so the app's startup and
    shutdown hooks run exactly once per generation::

        async with ChirpRenderer(app) as renderer:
            html = await renderer.render("/about", RenderContext())

    A response with status >= 400 is a :class:`RenderError`.

    Args:
        app: The Chirp ``App`` to render.

    """

    __slots__ = ("_app", "_client")

    def __init__(self, app: App) -> None:
        self._app = app
        self._client: TestClient | None = None

    async def __aenter__(self) -> Self:
        from chirp.testing import TestClient

        client = TestClient(self._app)
        await client.__aenter__()
        self._client = client
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.__aexit__(*exc_info)

    async def render(self, route: str, context: RenderContext) -> str:
        if self._client is None:
            msg = "ChirpRenderer must be entered with 'async with' before rendering"
            raise RenderError(msg, routes=(route,))

        headers = {GENERATE_HEADER: "1"} if context.generate_mode else {}
        response = await self._client.get(route, headers=headers)
        if response.status >= 400:
            msg = f"GET {route} returned HTTP {response.status}"
            raise RenderError(msg, routes=(route,))
        return response.text


def chirp_routes(app: App) -> tuple[str, ...]:
    """Return the GET route table registered on a Chirp app, in order."""
    routes: list[str] = []
    for pending in app._pending_routes:
        methods = [m.upper() for m in (pending.methods or ["GET"])]
        if "GET" in methods and pending.path not in routes:
            routes.append(pending.path)
    return tuple(routes)


async def run_builder(builder: Builder | None) -> None:
    """Run the build step; a ``None`` builder means the bundle already exists.

    Sync builders run in a worker thread.  A builder returning ``False``
    counts as a failure.

    Raises:
        BuildError: If the builder raises or reports failure.

    """
    if builder is None:
        return
    try:
        if inspect.iscoroutinefunction(builder):
            result = await builder()
        else:
            result = await asyncio.to_thread(builder)
            if inspect.isawaitable(result):
                result = await result
    except Exception as exc:
        msg = f"Build failed: {exc}"
        raise BuildError(msg) from exc
    if result is False:
        msg = "Build failed: builder reported failure"
        raise BuildError(msg)
