"""Route resolution — from a route table to concrete output paths.

Resolves parameter sources, expands dynamic patterns into concrete routes,
and maps each route onto a file under the output root.

Public API::

    from kiln.routes import expand_routes, resolve_params, route_to_relpath

    resolved = await resolve_params({"/users/:id": [{"id": "1"}]})
    routes = expand_routes(["/", "/users/:id"], resolved)
    paths = [route_to_relpath(r) for r in routes]
"""

from kiln.routes.expander import (
    Param,
    compile_pattern,
    expand_routes,
    find_collisions,
    is_dynamic,
    parse_pattern,
)
from kiln.routes.params import (
    AsyncProducer,
    LiteralParams,
    ParamSource,
    ResolvedParams,
    SyncProducer,
    classify_source,
    resolve_params,
)
from kiln.routes.paths import assets_dirname, route_to_filepath, route_to_relpath

__all__ = [
    "AsyncProducer",
    "LiteralParams",
    "Param",
    "ParamSource",
    "ResolvedParams",
    "SyncProducer",
    "assets_dirname",
    "classify_source",
    "compile_pattern",
    "expand_routes",
    "find_collisions",
    "is_dynamic",
    "parse_pattern",
    "resolve_params",
    "route_to_filepath",
    "route_to_relpath",
]
