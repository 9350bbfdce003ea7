"""Parameter resolution — turn route parameter sources into concrete lists.

Each entry of ``route_params`` maps a route pattern to one of:

- a literal list of parameter objects, used as-is;
- a plain callable, invoked once in a worker thread;
- a coroutine function, awaited once on the event loop.

Sources are classified once into a tagged variant, then every producer
runs concurrently.  The first producer failure cancels the rest and aborts
the run with a ``ParamResolutionError`` naming the route.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from kiln._errors import ConfigError, ParamResolutionError, first_error
from kiln._types import ParamProducer, ParamSet, RoutePattern


@dataclass(frozen=True, slots=True)
class LiteralParams:
    """Parameter objects given directly in configuration."""

    values: tuple[ParamSet, ...]


@dataclass(frozen=True, slots=True)
class SyncProducer:
    """Plain callable returning parameter objects (or an awaitable of them)."""

    func: ParamProducer


@dataclass(frozen=True, slots=True)
class AsyncProducer:
    """Coroutine function returning parameter objects."""

    func: Callable[[], Awaitable[Sequence[ParamSet] | None]]


type ParamSource = LiteralParams | SyncProducer | AsyncProducer

# Route pattern -> ordered parameter objects, read-only
type ResolvedParams = Mapping[RoutePattern, tuple[ParamSet, ...]]


def classify_source(route: RoutePattern, source: object) -> ParamSource:
    """Classify a configured parameter source.

    ``None``, ``False`` and empty sequences become an empty
    :class:`LiteralParams`, which suppresses the route.

    Raises:
        ConfigError: If *source* is neither a sequence nor a callable.

    """
    if source is None or source is False:
        return LiteralParams(())
    if isinstance(source, (list, tuple)):
        return LiteralParams(_validate_values(route, source))
    if inspect.iscoroutinefunction(source):
        return AsyncProducer(source)
    if callable(source):
        return SyncProducer(source)
    msg = (
        f"route_params[{route!r}] must be a list of parameter objects or a "
        f"callable returning one, got {type(source).__name__}"
    )
    raise ConfigError(msg)


async def resolve_params(sources: Mapping[RoutePattern, object]) -> ResolvedParams:
    """Resolve every parameter source into a concrete list.

    Returns a new read-only mapping; *sources* is left untouched.

    Raises:
        ConfigError: If a source has an unsupported shape.
        ParamResolutionError: If a producer raises or returns something
            other than a sequence of mappings.

    """
    classified = {route: classify_source(route, src) for route, src in sources.items()}
    resolved: dict[RoutePattern, tuple[ParamSet, ...]] = {}

    try:
        async with asyncio.TaskGroup() as tg:
            tasks = {
                route: tg.create_task(_resolve_one(route, source))
                for route, source in classified.items()
            }
    except ExceptionGroup as group:
        raise first_error(group)  # noqa: B904

    for route, task in tasks.items():
        resolved[route] = task.result()
    return MappingProxyType(resolved)


async def _resolve_one(route: RoutePattern, source: ParamSource) -> tuple[ParamSet, ...]:
    """Resolve a single classified source."""
    if isinstance(source, LiteralParams):
        return source.values

    try:
        if isinstance(source, AsyncProducer):
            value = await source.func()
        else:
            value = await asyncio.to_thread(source.func)
            if inspect.isawaitable(value):
                value = await value
    except Exception as exc:
        msg = f"Could not resolve route_params[{route!r}]: {exc}"
        raise ParamResolutionError(msg, route=route) from exc

    if value is None or value is False:
        return ()
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        msg = (
            f"route_params[{route!r}] producer must return a list of parameter "
            f"objects, got {type(value).__name__}"
        )
        raise ParamResolutionError(msg, route=route)
    try:
        return _validate_values(route, value)
    except ConfigError as exc:
        raise ParamResolutionError(str(exc), route=route) from exc


def _validate_values(route: RoutePattern, values: Sequence[object]) -> tuple[ParamSet, ...]:
    """Check that every parameter object is a mapping."""
    for index, item in enumerate(values):
        if not isinstance(item, Mapping):
            msg = (
                f"route_params[{route!r}][{index}] must be a mapping of "
                f"parameter names to values, got {type(item).__name__}"
            )
            raise ConfigError(msg)
    return tuple(values)  # type: ignore[arg-type]
