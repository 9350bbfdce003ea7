"""Shared test fixtures for kiln."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from kiln.export.renderer import RenderContext

PAGE_TEMPLATE = (
    "<!DOCTYPE html>\n"
    "<html>\n"
    "  <head>\n"
    "    <title>{route}</title>\n"
    "  </head>\n"
    "  <body>\n"
    "    <!-- rendered by the fake renderer -->\n"
    "    <div>\n"
    "      <h1>Page {route}</h1>\n"
    "    </div>\n"
    "  </body>\n"
    "</html>\n"
)


class FakeRenderer:
    """Renderer recording every call and the peak number of in-flight renders."""

    def __init__(self, *, fail: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.contexts: list[RenderContext] = []
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.peak = 0
        self._fail = fail or set()

    async def render(self, route: str, context: RenderContext) -> str:
        self.calls.append(route)
        self.contexts.append(context)
        self.events.append(("start", route))
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await asyncio.sleep(0)
            if route in self._fail:
                msg = f"boom on {route}"
                raise RuntimeError(msg)
            return PAGE_TEMPLATE.format(route=route)
        finally:
            self.in_flight -= 1
            self.events.append(("end", route))


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Create a minimal project with static assets and a built bundle.

    Returns the project root.
    """
    static = tmp_path / "static"
    (static / "img").mkdir(parents=True)
    (static / "robots.txt").write_text("User-agent: *\n")
    (static / "img" / "logo.svg").write_text("<svg></svg>\n")

    built = tmp_path / ".kiln" / "dist"
    built.mkdir(parents=True)
    (built / "app.js").write_text("console.log('app');\n")
    (built / "vendor.js").write_text("console.log('vendor');\n")

    return tmp_path
