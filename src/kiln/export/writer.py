"""Output writer — everything kiln puts on disk.

Owns the destination tree for a run:

- best-effort cleanup of the destination before generation
- copying static assets (top level) and built assets (asset subdirectory)
- writing one ``<route>/index.html`` per rendered page
- the empty ``.nojekyll`` marker, so hosts such as GitHub Pages serve the
  underscore-prefixed asset directory

Blocking filesystem calls run in worker threads via ``asyncio.to_thread``.
Directory creation is idempotent, so pages sharing ancestors can be written
concurrently.
"""

from __future__ import annotations

import asyncio
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from kiln._errors import OutputError
from kiln.routes.paths import route_to_filepath

if TYPE_CHECKING:
    from kiln.export.batch import RenderResult

MARKER_FILE = ".nojekyll"


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Record of a single file written during generation.

    Attributes:
        source_path: Logical source (route, or ``/``-rooted asset path).
        output_path: Absolute filesystem path to the written file.
        source_type: Category of the written file.
        size_bytes: Size of the written file in bytes.
        duration_ms: Time taken to produce and write this file.

    """

    source_path: str
    output_path: Path
    source_type: Literal["page", "asset", "marker"]
    size_bytes: int
    duration_ms: float


class OutputWriter:
    """Writes generated output under a single destination root.

    Args:
        output_dir: Absolute destination directory.

    """

    __slots__ = ("_output_dir",)

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        """The destination root."""
        return self._output_dir

    async def clean(self) -> bool:
        """Remove the destination tree, ignoring any error.

        Returns:
            False if the tree existed but could not be removed.

        """
        try:
            await asyncio.to_thread(shutil.rmtree, self._output_dir)
        except FileNotFoundError:
            return True
        except OSError as exc:
            print(
                f"  Could not clean {self._output_dir}: {exc}",
                file=sys.stderr,
            )
            return False
        return True

    async def copy_assets(
        self,
        static_path: Path,
        build_path: Path,
        assets_dir: str,
    ) -> tuple[ExportedFile, ...]:
        """Seed the destination with static and built assets.

        Static assets are optional and land at the top level.  Built assets
        are required and land in ``output_dir/assets_dir``.

        Raises:
            OutputError: If the built assets are missing or a copy fails.

        """
        return await asyncio.to_thread(
            self._copy_assets_sync, static_path, build_path, assets_dir,
        )

    def _copy_assets_sync(
        self,
        static_path: Path,
        build_path: Path,
        assets_dir: str,
    ) -> tuple[ExportedFile, ...]:
        results: list[ExportedFile] = []
        if static_path.is_dir():
            results.extend(_copy_tree(static_path, self._output_dir, "/"))

        if not build_path.is_dir():
            msg = f"Built assets not found at {build_path}; did the build step run?"
            raise OutputError(msg, path=build_path)
        results.extend(
            _copy_tree(build_path, self._output_dir / assets_dir, f"/{assets_dir}/")
        )
        return tuple(results)

    async def write_page(self, result: RenderResult) -> ExportedFile:
        """Write a rendered page to ``<output_dir>/<route>/index.html``.

        Existing files are overwritten; two routes mapping to the same file
        leave the last write in place.

        Raises:
            OutputError: If the directory or file cannot be written.

        """
        t0 = time.perf_counter()
        filepath = route_to_filepath(result.route, self._output_dir)
        size = await asyncio.to_thread(_write_bytes, filepath, result.html.encode("utf-8"))
        elapsed = (time.perf_counter() - t0) * 1000

        return ExportedFile(
            source_path=result.route,
            output_path=filepath,
            source_type="page",
            size_bytes=size,
            duration_ms=result.duration_ms + elapsed,
        )

    async def write_marker(self) -> ExportedFile:
        """Write the empty ``.nojekyll`` marker at the destination root."""
        t0 = time.perf_counter()
        filepath = self._output_dir / MARKER_FILE
        await asyncio.to_thread(_write_bytes, filepath, b"")
        return ExportedFile(
            source_path=f"/{MARKER_FILE}",
            output_path=filepath,
            source_type="marker",
            size_bytes=0,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )


def _write_bytes(filepath: Path, data: bytes) -> int:
    """Write *data*, creating parent directories as needed."""
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_bytes(data)
    except OSError as exc:
        msg = f"Failed to write {filepath}: {exc}"
        raise OutputError(msg, path=filepath) from exc
    return len(data)


def _copy_tree(source: Path, dest_root: Path, url_prefix: str) -> list[ExportedFile]:
    """Recursively copy *source* into *dest_root*, one record per file.

    Directories are recreated even when empty.
    """
    results: list[ExportedFile] = []

    for src_file in sorted(source.rglob("*")):
        relative = src_file.relative_to(source)
        dest_file = dest_root / relative
        if src_file.is_dir():
            try:
                dest_file.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                msg = f"Failed to create {dest_file}: {exc}"
                raise OutputError(msg, path=dest_file) from exc
            continue
        if not src_file.is_file():
            continue

        t0 = time.perf_counter()
        try:
            dest_file.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src_file, dest_file)
            size = dest_file.stat().st_size
        except OSError as exc:
            msg = f"Failed to copy {src_file} to {dest_file}: {exc}"
            raise OutputError(msg, path=dest_file) from exc

        results.append(ExportedFile(
            source_path=url_prefix + relative.as_posix(),
            output_path=dest_file,
            source_type="asset",
            size_bytes=size,
            duration_ms=(time.perf_counter() - t0) * 1000,
        ))

    return results
