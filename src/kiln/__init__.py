"""Kiln — pre-render a server-rendered web app into a static site.

Resolves the route table (including parameterized routes) into concrete
routes, renders them in bounded concurrent batches, minifies the HTML and
writes ``<route>/index.html`` files ready for any static host.

Quick start::

    import kiln

    kiln.generate("my-app/")          # uses kiln.yaml / kiln.toml

Programmatic use with any renderer::

    from kiln import CallableRenderer, GenerateConfig, Generator

    config = GenerateConfig(route_params={"/users/:id": [{"id": "1"}]})
    generator = Generator(config, CallableRenderer(render), ["/", "/users/:id"])
    result = await generator.generate()

"""

__version__ = "0.1.0"
__all__ = [
    "CallableRenderer",
    "ChirpRenderer",
    "GenerateConfig",
    "GenerateResult",
    "Generator",
    "KilnError",
    "__version__",
    "generate",
    "generate_async",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import kiln`` fast; heavy modules load on first access.
    """
    if name == "GenerateConfig":
        from kiln.config import GenerateConfig

        return GenerateConfig

    if name == "KilnError":
        from kiln._errors import KilnError

        return KilnError

    if name == "generate":
        from kiln.app import generate

        return generate

    if name == "generate_async":
        from kiln.app import generate_async

        return generate_async

    if name in ("Generator", "GenerateResult"):
        from kiln.export import generator as _generator

        return getattr(_generator, name)

    if name in ("CallableRenderer", "ChirpRenderer"):
        from kiln.export import renderer as _renderer

        return getattr(_renderer, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
