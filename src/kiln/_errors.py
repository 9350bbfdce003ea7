"""Kiln error hierarchy.

All kiln-specific errors inherit from KilnError for easy catching.
"""

from __future__ import annotations

from pathlib import Path


class KilnError(Exception):
    """Base error for all kiln operations."""


class ConfigError(KilnError):
    """Invalid or missing configuration."""


class ParamResolutionError(ConfigError):
    """A route's parameter source raised or produced an invalid value.

    Attributes:
        route: The route pattern whose parameters could not be resolved.

    """

    def __init__(self, message: str, *, route: str) -> None:
        super().__init__(message)
        self.route = route


class BuildError(KilnError):
    """The application build step failed."""


class RenderError(KilnError):
    """The renderer failed for one or more routes.

    Attributes:
        routes: Every route that failed, in the order they were reported.

    """

    def __init__(self, message: str, *, routes: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.routes = routes

    @property
    def route(self) -> str | None:
        """The first failing route, or *None* if unknown."""
        return self.routes[0] if self.routes else None


class OutputError(KilnError):
    """Copying assets or writing output failed.

    Attributes:
        path: The filesystem path involved, if known.

    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


def first_error(group: BaseExceptionGroup) -> BaseException:
    """Return the first leaf exception of a (possibly nested) group.

    A :class:`KilnError` leaf wins over any other leaf so that the caller
    sees the diagnostic naming the failing route.
    """
    leaves: list[BaseException] = []
    stack: list[BaseException] = [group]
    while stack:
        exc = stack.pop(0)
        if isinstance(exc, BaseExceptionGroup):
            stack[:0] = list(exc.exceptions)
        else:
            leaves.append(exc)
    for exc in leaves:
        if isinstance(exc, KilnError):
            return exc
    return leaves[0]
