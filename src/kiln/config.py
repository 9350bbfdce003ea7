"""Kiln configuration.

GenerateConfig is the central configuration object, frozen after creation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from kiln._errors import ConfigError
from kiln.routes.paths import assets_dirname

# Peak number of routes rendered at once
DEFAULT_CONCURRENCY = 500


@dataclass(frozen=True, slots=True)
class GenerateConfig:
    """Configuration for a static generation run.

    Attributes:
        root: Project root directory.  Always resolved to an absolute path
              on construction.
        output: Destination directory for the generated site.
        static_dir: Directory of static assets copied verbatim to the output root.
        build_dir: Directory where the builder leaves the compiled bundle.
        public_path: Public asset path of the app (``/_nuxt/`` or a CDN URL).
            Decides the name of the asset subdirectory in the output.
        route_params: Route pattern -> parameter source (list, callable or
            coroutine function).  ``None`` or an empty list skips the route.
        routes: Route table used when it is not derived from the app.
        app: Dotted ``module:attr`` path to the Chirp app to render.
        builder: Dotted ``module:attr`` path to a build callable.
        concurrency: Routes rendered and written per batch.
        minify: Run rendered HTML through the minifier.
        fail_fast: Stop on the first render failure instead of collecting
            every failure before aborting.

    """

    root: Path = field(default_factory=Path.cwd)
    output: Path = field(default_factory=lambda: Path("dist"))
    static_dir: str = "static"
    build_dir: str = ".kiln/dist"
    public_path: str = "/_nuxt/"
    route_params: Mapping[str, object] = field(default_factory=dict)
    routes: tuple[str, ...] = ()
    app: str | None = None
    builder: str | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    minify: bool = True
    fail_fast: bool = True

    def __post_init__(self) -> None:
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if not isinstance(self.routes, tuple):
            object.__setattr__(self, "routes", tuple(self.routes))
        if self.concurrency < 1:
            msg = f"concurrency must be at least 1, got {self.concurrency}"
            raise ConfigError(msg)
        self._check_output_path()

    def _check_output_path(self) -> None:
        """Reject destinations that cleanup would delete project files from.

        The output tree is removed before every run, so it must not be the
        project root, an ancestor of it, or a directory holding the static
        assets or the compiled bundle.
        """
        output = self.output_path.resolve()
        if self.root.resolve().is_relative_to(output):
            msg = f"output {str(self.output)!r} must not contain the project root {self.root}"
            raise ConfigError(msg)
        for label, path in (("static_dir", self.static_path), ("build_dir", self.build_path)):
            if path.resolve().is_relative_to(output):
                msg = (
                    f"{label} {path} is inside output {output}; it would be deleted "
                    f"when the output is cleaned"
                )
                raise ConfigError(msg)

    @property
    def output_path(self) -> Path:
        """Absolute path to the output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def static_path(self) -> Path:
        """Absolute path to the static assets directory."""
        return self.root / self.static_dir

    @property
    def build_path(self) -> Path:
        """Absolute path to the compiled bundle."""
        return self.root / self.build_dir

    @property
    def assets_dir(self) -> str:
        """Name of the built-asset subdirectory inside the output."""
        return assets_dirname(self.public_path)
