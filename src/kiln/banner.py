"""Run banner and summary — status output on stderr.

Prints a short header before generation and a summary after it.
Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kiln.config import GenerateConfig
    from kiln.export.generator import GenerateResult


# ---------------------------------------------------------------------------
# ANSI helpers — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_RED = "\033[31m" if _COLOR else ""
_ORANGE = "\033[38;5;214m" if _COLOR else ""


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: GenerateConfig,
    *,
    route_count: int,
    load_ms: float = 0.0,
) -> None:
    """Print the generation banner to stderr.

    Args:
        config: Resolved GenerateConfig.
        route_count: Number of patterns in the route table.
        load_ms: Time spent loading config and app in milliseconds.

    """
    from kiln import __version__

    header = f"  {_ORANGE}{_BOLD}kiln{_RESET} {_DIM}v{__version__}{_RESET}  {_YELLOW}[generate]{_RESET}"
    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
        f"  {_DIM}├─{_RESET} {_plural(route_count, 'route pattern')} loaded{timing}",
        f"  {_DIM}├─{_RESET} concurrency: {config.concurrency}",
        f"  {_DIM}├─{_RESET} assets: {_DIM}{config.build_path}{_RESET} -> {config.assets_dir}/",
        f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}",
        "",
    ]
    print("\n".join(lines), file=sys.stderr)


def print_summary(result: GenerateResult) -> None:
    """Print the generation summary to stderr."""
    lines = [
        "",
        "─" * 41,
        f"  {_GREEN}Generated{_RESET} {_plural(result.total_pages, 'page')} "
        f"in {result.batches} batch{'' if result.batches == 1 else 'es'}",
    ]
    if result.total_assets > 0:
        lines.append(f"  Copied {_plural(result.total_assets, 'asset')}")
    if result.collisions:
        lines.append(
            f"  {_YELLOW}!{_RESET} {_plural(len(result.collisions), 'route')} "
            f"overwrote an earlier page"
        )
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  HTML files generated in {result.duration_ms / 1000:.1f}s")

    print("\n".join(lines), file=sys.stderr)


def print_error(message: str) -> None:
    """Print a fatal diagnostic to stderr."""
    print(f"\n  {_RED}{_BOLD}error{_RESET} {message}\n", file=sys.stderr)
