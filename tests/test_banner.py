"""Tests for kiln.banner — run banner and summary output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from kiln.banner import print_banner, print_error, print_summary
from kiln.config import GenerateConfig
from kiln.export.generator import GenerateResult


def _result(**kwargs: object) -> GenerateResult:
    defaults: dict[str, object] = {
        "files": (),
        "routes": ("/",),
        "total_pages": 3,
        "total_assets": 4,
        "batches": 1,
        "collisions": (),
        "duration_ms": 1500.0,
        "output_dir": Path("/site/dist"),
    }
    defaults.update(kwargs)
    return GenerateResult(**defaults)  # type: ignore[arg-type]


def _capture(func, *args: object, **kwargs: object) -> str:
    buf = io.StringIO()
    with patch.object(sys, "stderr", buf):
        func(*args, **kwargs)
    return buf.getvalue()


class TestPrintBanner:
    """Tests for the generation banner."""

    def test_banner(self) -> None:
        config = GenerateConfig(root=Path("/site"), concurrency=20)
        output = _capture(print_banner, config, route_count=5, load_ms=42.5)

        assert "kiln" in output
        assert "5 route patterns loaded" in output
        assert "42ms" in output
        assert "concurrency: 20" in output
        assert "_nuxt/" in output
        assert "/site/dist" in output

    def test_single_route(self) -> None:
        config = GenerateConfig(root=Path("/site"))
        output = _capture(print_banner, config, route_count=1)
        assert "1 route pattern loaded" in output

    def test_no_timing_without_load_ms(self) -> None:
        config = GenerateConfig(root=Path("/site"))
        output = _capture(print_banner, config, route_count=2)
        assert "ms" not in output.split("loaded")[1].splitlines()[0]


class TestPrintSummary:
    """Tests for the generation summary."""

    def test_summary(self) -> None:
        output = _capture(print_summary, _result())

        assert "Generated" in output
        assert "3 pages in 1 batch" in output
        assert "Copied 4 assets" in output
        assert "/site/dist" in output
        assert "HTML files generated in 1.5s" in output

    def test_plural_batches(self) -> None:
        output = _capture(print_summary, _result(batches=3))
        assert "in 3 batches" in output

    def test_no_assets_line(self) -> None:
        output = _capture(print_summary, _result(total_assets=0))
        assert "Copied" not in output

    def test_collisions(self) -> None:
        output = _capture(print_summary, _result(collisions=("/a/",)))
        assert "1 route overwrote an earlier page" in output


class TestPrintError:
    def test_message(self) -> None:
        output = _capture(print_error, "Build failed: boom")
        assert "error" in output
        assert "Build failed: boom" in output
