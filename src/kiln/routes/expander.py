"""Route expansion — the route table plus resolved parameters to concrete routes.

Patterns follow the path-to-regexp conventions used by most JS routers, and
also accept Chirp's brace syntax so a Chirp route table can be used directly::

    /users/:id            named parameter
    /users/:id(\\d+)       named parameter with a custom pattern
    /files/:path*         zero or more segments (sequence value)
    /tags/:tag+           one or more segments (sequence value)
    /posts/:slug?         optional parameter
    /docs/*               unnamed wildcard, keyed by index (0, 1, ...)
    /items/{id:int}       Chirp style, with an optional converter

The final parameter of a pattern is always optional, so a parameter object
lacking it yields the prefix route (``/users/:id`` + ``{}`` -> ``/users``).
"""

from __future__ import annotations

import functools
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from urllib.parse import quote

from kiln._errors import ConfigError
from kiln._types import ConcreteRoute, ParamSet, ParamValue, RoutePattern
from kiln.routes.params import ResolvedParams
from kiln.routes.paths import route_to_relpath

_TOKEN_RE = re.compile(
    r"(\\.)"
    r"|([/.])?"
    r"(?:"
    r":(\w+)(?:\(((?:\\.|[^\\()])+)\))?"
    r"|\(((?:\\.|[^\\()])+)\)"
    r"|\{(\w+)(?::(\w+))?\}"
    r"|(\*)"
    r")"
    r"([+*?])?"
)

# Same regexes as Chirp's path converters
_CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}

_DEFAULT_PATTERN = r"[^/]+?"

# encodeURI's reserved set minus "/", "?" and "#"
_SEGMENT_SAFE = ";,:@&=+$-_.!~*'()"


@dataclass(frozen=True, slots=True)
class Param:
    """A parameter token inside a route pattern.

    Attributes:
        name: Parameter name, or positional index for unnamed groups.
        prefix: Delimiter emitted before the value (``/``, ``.`` or empty).
        pattern: Regex the encoded value must match.
        optional: The parameter may be omitted.
        repeat: The parameter accepts a sequence of values.
        keep_slashes: Values may contain ``/`` unescaped (wildcards).

    """

    name: str | int
    prefix: str
    pattern: str
    optional: bool = False
    repeat: bool = False
    keep_slashes: bool = False


type Token = str | Param


@functools.lru_cache(maxsize=1024)
def parse_pattern(pattern: RoutePattern) -> tuple[Token, ...]:
    """Split *pattern* into literal strings and :class:`Param` tokens.

    Raises:
        ConfigError: On an unknown brace converter.

    """
    tokens: list[Token] = []
    literal = ""
    index = 0
    key = 0

    for match in _TOKEN_RE.finditer(pattern):
        literal += pattern[index:match.start()]
        index = match.end()

        escaped = match.group(1)
        if escaped:
            literal += escaped[1]
            continue

        if literal:
            tokens.append(literal)
            literal = ""

        prefix = match.group(2) or ""
        modifier = match.group(9) or ""
        name, custom, group, brace, converter, star = match.group(3, 4, 5, 6, 7, 8)
        keep_slashes = False

        if name:
            param_name: str | int = name
            regex = custom or _DEFAULT_PATTERN
        elif group:
            param_name, key = key, key + 1
            regex = group
        elif brace:
            param_name = brace
            converter = converter or "str"
            if converter not in _CONVERTERS:
                msg = f"Unknown converter {converter!r} in route {pattern!r}"
                raise ConfigError(msg)
            regex = _CONVERTERS[converter]
            keep_slashes = converter == "path"
        else:
            assert star
            param_name, key = key, key + 1
            regex = ".*"
            keep_slashes = True

        tokens.append(Param(
            name=param_name,
            prefix=prefix,
            pattern=regex,
            optional=modifier in ("?", "*"),
            repeat=modifier in ("+", "*"),
            keep_slashes=keep_slashes,
        ))

    literal += pattern[index:]
    if literal:
        tokens.append(literal)
    return tuple(tokens)


def is_dynamic(pattern: RoutePattern) -> bool:
    """Return True if *pattern* has any parameter or wildcard token."""
    return any(isinstance(token, Param) for token in parse_pattern(pattern))


def compile_pattern(
    pattern: RoutePattern,
    *,
    optional_tail: bool = True,
) -> Callable[[ParamSet], ConcreteRoute]:
    """Compile *pattern* into a function substituting a parameter object.

    Raises:
        ConfigError: From the returned function, when a required parameter
            is missing or a value does not match its pattern.

    """
    tokens = parse_pattern(pattern)
    if optional_tail and tokens and isinstance(tokens[-1], Param):
        tokens = (*tokens[:-1], replace(tokens[-1], optional=True))

    matchers = {
        token.name: re.compile(rf"(?:{token.pattern})\Z")
        for token in tokens
        if isinstance(token, Param)
    }

    def to_path(params: ParamSet) -> ConcreteRoute:
        parts: list[str] = []
        for token in tokens:
            if isinstance(token, str):
                parts.append(token)
                continue

            value = _lookup(params, token.name)
            if value is None:
                if token.optional:
                    continue
                msg = f"Route {pattern!r}: expected parameter {token.name!r} to be defined"
                raise ConfigError(msg)

            if isinstance(value, (list, tuple)):
                if not token.repeat:
                    msg = (
                        f"Route {pattern!r}: parameter {token.name!r} does not "
                        f"repeat, got a sequence"
                    )
                    raise ConfigError(msg)
                if not value:
                    if token.optional:
                        continue
                    msg = f"Route {pattern!r}: parameter {token.name!r} must not be empty"
                    raise ConfigError(msg)
                values = value
            else:
                values = (value,)

            for position, item in enumerate(values):
                segment = _encode(item, keep_slashes=token.keep_slashes)
                if not matchers[token.name].match(segment):
                    msg = (
                        f"Route {pattern!r}: parameter {token.name!r} must match "
                        f"{token.pattern!r}, got {segment!r}"
                    )
                    raise ConfigError(msg)
                parts.append((token.prefix if position == 0 else "/") + segment)

        return "".join(parts) or "/"

    return to_path


def expand_routes(
    routes: Iterable[RoutePattern],
    resolved: ResolvedParams,
) -> tuple[ConcreteRoute, ...]:
    """Expand the route table into concrete routes.

    Static patterns without a ``route_params`` entry are emitted unchanged.
    Everything else emits one route per resolved parameter object; an
    empty parameter list skips the pattern.  Table order and parameter
    order are preserved.

    Raises:
        ConfigError: If a dynamic pattern has no ``route_params`` entry, or a
            parameter object does not fit its pattern.

    """
    concrete: list[ConcreteRoute] = []

    for pattern in routes:
        if pattern not in resolved and not is_dynamic(pattern):
            concrete.append(pattern)
            continue

        params = resolved.get(pattern)
        if params is None:
            msg = (
                f"Could not generate the dynamic route {pattern!r}: "
                f"add its parameters to route_params"
            )
            raise ConfigError(msg)
        if not params:
            continue

        to_path = compile_pattern(pattern)
        concrete.extend(to_path(p) for p in params)

    return tuple(concrete)


def find_collisions(routes: Iterable[ConcreteRoute]) -> tuple[ConcreteRoute, ...]:
    """Return routes whose output file was already claimed by an earlier route."""
    seen: set[str] = set()
    collisions: list[str] = []
    for route in routes:
        relpath = route_to_relpath(route)
        if relpath in seen:
            collisions.append(route)
        seen.add(relpath)
    return tuple(collisions)


def _lookup(params: ParamSet, name: str | int) -> ParamValue | None:
    """Fetch a parameter value; unnamed indexes also match their string form."""
    if name in params:
        return params[name]
    if isinstance(name, int):
        return params.get(str(name))
    return None


def _encode(value: object, *, keep_slashes: bool) -> str:
    """Percent-encode a parameter value for use in a URL path."""
    safe = _SEGMENT_SAFE + "/" if keep_slashes else _SEGMENT_SAFE
    return quote(str(value), safe=safe)
