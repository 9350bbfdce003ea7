"""Kiln CLI — kiln generate.

Entry point for the ``kiln`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the kiln CLI."""
    parser = argparse.ArgumentParser(
        prog="kiln",
        description="Pre-render a server-rendered app into a static site.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # kiln generate
    gen_parser = subparsers.add_parser(
        "generate",
        help="Render every route to static HTML files",
    )
    gen_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    gen_parser.add_argument("--output", default=None, help="Output directory (default: dist)")
    gen_parser.add_argument("--app", default=None, help="Chirp app to render, as module:attr")
    gen_parser.add_argument(
        "--concurrency", type=int, default=None, help="Routes rendered per batch (default: 500)",
    )
    gen_parser.add_argument(
        "--no-minify", action="store_true", help="Write rendered HTML unminified",
    )
    gen_parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Render every route before reporting failures",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from kiln import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from kiln._errors import KilnError
    from kiln.app import generate
    from kiln.banner import print_error

    if args.command == "generate":
        try:
            generate(
                root=args.root,
                output=args.output,
                app=args.app,
                concurrency=args.concurrency,
                minify=False if args.no_minify else None,
                fail_fast=False if args.keep_going else None,
            )
        except KilnError as exc:
            print_error(str(exc))
            sys.exit(1)


if __name__ == "__main__":
    main()
