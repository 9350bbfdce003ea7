"""Shared type definitions for kiln."""

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

# Route pattern from the route table (e.g., "/users/:id", "/docs/{slug}")
type RoutePattern = str

# Fully substituted route (e.g., "/users/1")
type ConcreteRoute = str

# Value substituted for a single parameter
type ParamValue = str | int | float | Sequence[str | int | float]

# One parameter object, keyed by name or by unnamed-group index
type ParamSet = Mapping[str | int, ParamValue]

# User callable producing parameter objects
type ParamProducer = Callable[[], Sequence[ParamSet] | Awaitable[Sequence[ParamSet]] | None]

# Async sink receiving each rendered page
type ResultSink = Callable[[Any], Awaitable[Any]]
