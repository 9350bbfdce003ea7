"""Path mapping — concrete routes to files under the output root.

Clean URL convention, so static hosts resolve ``/about`` to
``/about/index.html``::

    /               -> index.html
    /about          -> about/index.html
    /docs/intro/    -> docs/intro/index.html
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import urlsplit

from kiln._errors import OutputError
from kiln._types import ConcreteRoute

INDEX_FILE = "index.html"

# Asset subdirectory used when the public path names none
DEFAULT_ASSETS_DIR = "_nuxt"


def route_to_relpath(route: ConcreteRoute) -> str:
    """Return the output path of *route* relative to the output root.

    Query strings and fragments are ignored, empty and ``.`` segments are
    dropped.

    Raises:
        OutputError: If the route contains a ``..`` segment.

    """
    path = route.split("#", 1)[0].split("?", 1)[0]
    segments = [s for s in path.split("/") if s and s != "."]
    if ".." in segments:
        msg = f"Route {route!r} escapes the output directory"
        raise OutputError(msg)
    return str(PurePosixPath(*segments, INDEX_FILE))


def route_to_filepath(route: ConcreteRoute, output_dir: Path) -> Path:
    """Return the absolute output file for *route* under *output_dir*."""
    return output_dir.joinpath(*PurePosixPath(route_to_relpath(route)).parts)


def assets_dirname(public_path: str) -> str:
    """Return the output subdirectory that receives the built assets.

    ``/_nuxt/``                     -> ``_nuxt``
    ``https://cdn.example.com/a/``  -> ``a``
    ``https://cdn.example.com``     -> ``_nuxt``

    """
    if "://" in public_path or public_path.startswith("//"):
        public_path = urlsplit(public_path).path
    segments = [s for s in public_path.split("/") if s and s not in (".", "..")]
    if not segments:
        return DEFAULT_ASSETS_DIR
    return segments[-1]
