"""Tests for kiln.export.writer — destination cleanup, assets, pages, marker."""

from __future__ import annotations

import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from kiln._errors import OutputError
from kiln.export.batch import RenderResult
from kiln.export.writer import ExportedFile, OutputWriter


def _result(route: str, html: str = "<p>x</p>") -> RenderResult:
    return RenderResult(route=route, html=html, duration_ms=1.0)


class TestExportedFile:
    """ExportedFile — frozen record."""

    def test_frozen(self) -> None:
        ef = ExportedFile("/", Path("/out/index.html"), "page", 10, 1.0)
        with pytest.raises(AttributeError):
            ef.source_path = "/other"  # type: ignore[misc]


class TestClean:
    """OutputWriter.clean — best-effort removal."""

    @pytest.mark.asyncio
    async def test_removes_existing_tree(self, tmp_path: Path) -> None:
        out = tmp_path / "dist"
        (out / "old").mkdir(parents=True)
        (out / "old" / "index.html").write_text("stale")

        assert await OutputWriter(out).clean() is True
        assert not out.exists()

    @pytest.mark.asyncio
    async def test_missing_directory_is_not_a_failure(self, tmp_path: Path) -> None:
        assert await OutputWriter(tmp_path / "nope").clean() is True

    @pytest.mark.asyncio
    async def test_errors_are_ignored(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        out = tmp_path / "dist"
        out.mkdir()
        with patch.object(shutil, "rmtree", side_effect=PermissionError("denied")):
            assert await OutputWriter(out).clean() is False

        assert "Could not clean" in capsys.readouterr().err


class TestCopyAssets:
    """OutputWriter.copy_assets — static at top level, build under asset dir."""

    @pytest.mark.asyncio
    async def test_copies_static_and_built(self, project: Path) -> None:
        out = project / "dist"
        files = await OutputWriter(out).copy_assets(
            project / "static", project / ".kiln" / "dist", "_nuxt",
        )

        assert (out / "robots.txt").read_text() == "User-agent: *\n"
        assert (out / "img" / "logo.svg").exists()
        assert (out / "_nuxt" / "app.js").exists()
        assert (out / "_nuxt" / "vendor.js").exists()
        assert {f.source_path for f in files} == {
            "/robots.txt", "/img/logo.svg", "/_nuxt/app.js", "/_nuxt/vendor.js",
        }
        assert all(f.source_type == "asset" for f in files)

    @pytest.mark.asyncio
    async def test_empty_directories_kept(self, project: Path) -> None:
        (project / "static" / "downloads").mkdir()
        (project / ".kiln" / "dist" / "chunks" / "lazy").mkdir(parents=True)
        out = project / "dist"
        files = await OutputWriter(out).copy_assets(
            project / "static", project / ".kiln" / "dist", "_nuxt",
        )

        assert (out / "downloads").is_dir()
        assert (out / "_nuxt" / "chunks" / "lazy").is_dir()
        assert len(files) == 4

    @pytest.mark.asyncio
    async def test_static_dir_is_optional(self, project: Path) -> None:
        shutil.rmtree(project / "static")
        out = project / "dist"
        files = await OutputWriter(out).copy_assets(
            project / "static", project / ".kiln" / "dist", "_nuxt",
        )
        assert len(files) == 2

    @pytest.mark.asyncio
    async def test_missing_build_is_fatal(self, project: Path) -> None:
        out = project / "dist"
        with pytest.raises(OutputError, match="Built assets not found") as exc_info:
            await OutputWriter(out).copy_assets(
                project / "static", project / "missing", "_nuxt",
            )
        assert exc_info.value.path == project / "missing"

    @pytest.mark.asyncio
    async def test_copy_failure_is_fatal(self, project: Path) -> None:
        out = project / "dist"
        with (
            patch.object(shutil, "copy2", side_effect=OSError("read-only")),
            pytest.raises(OutputError, match="Failed to copy"),
        ):
            await OutputWriter(out).copy_assets(
                project / "static", project / ".kiln" / "dist", "_nuxt",
            )


class TestWritePage:
    """OutputWriter.write_page — <route>/index.html with parents created."""

    @pytest.mark.asyncio
    async def test_writes_nested_page(self, tmp_path: Path) -> None:
        out = tmp_path / "dist"
        exported = await OutputWriter(out).write_page(_result("/users/1", "<p>1</p>"))

        target = out / "users" / "1" / "index.html"
        assert target.read_text() == "<p>1</p>"
        assert exported.output_path == target
        assert exported.source_type == "page"
        assert exported.size_bytes == len(b"<p>1</p>")

    @pytest.mark.asyncio
    async def test_root_page(self, tmp_path: Path) -> None:
        out = tmp_path / "dist"
        await OutputWriter(out).write_page(_result("/"))
        assert (out / "index.html").exists()

    @pytest.mark.asyncio
    async def test_overwrites_existing(self, tmp_path: Path) -> None:
        writer = OutputWriter(tmp_path)
        await writer.write_page(_result("/a", "first"))
        await writer.write_page(_result("/a/", "second"))
        assert (tmp_path / "a" / "index.html").read_text() == "second"

    @pytest.mark.asyncio
    async def test_utf8_encoded(self, tmp_path: Path) -> None:
        exported = await OutputWriter(tmp_path).write_page(_result("/cafe", "café"))
        assert (tmp_path / "cafe" / "index.html").read_bytes() == "café".encode()
        assert exported.size_bytes == 5

    @pytest.mark.asyncio
    async def test_write_failure(self, tmp_path: Path) -> None:
        with (
            patch.object(Path, "write_bytes", side_effect=OSError("no space")),
            pytest.raises(OutputError, match="no space") as exc_info,
        ):
            await OutputWriter(tmp_path).write_page(_result("/a"))
        assert exc_info.value.path == tmp_path / "a" / "index.html"

    @pytest.mark.asyncio
    async def test_file_in_place_of_directory(self, tmp_path: Path) -> None:
        (tmp_path / "users").write_text("not a directory")
        with pytest.raises(OutputError):
            await OutputWriter(tmp_path).write_page(_result("/users/1"))


class TestWriteMarker:
    """OutputWriter.write_marker — empty .nojekyll at the root."""

    @pytest.mark.asyncio
    async def test_empty_marker(self, tmp_path: Path) -> None:
        out = tmp_path / "dist"
        exported = await OutputWriter(out).write_marker()

        marker = out / ".nojekyll"
        assert marker.read_bytes() == b""
        assert exported.source_type == "marker"
