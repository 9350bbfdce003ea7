"""Export layer — static output generation.

Renders every concrete route in bounded batches, minifies the HTML and
writes it under the output root alongside the copied assets.
"""

from kiln.export.batch import BatchRenderer, RenderFailure, RenderResult, iter_batches
from kiln.export.generator import GenerateResult, Generator
from kiln.export.minify import minify_page
from kiln.export.renderer import (
    CallableRenderer,
    ChirpRenderer,
    RenderContext,
    Renderer,
    chirp_routes,
    run_builder,
)
from kiln.export.writer import ExportedFile, OutputWriter

__all__ = [
    "BatchRenderer",
    "CallableRenderer",
    "ChirpRenderer",
    "ExportedFile",
    "GenerateResult",
    "Generator",
    "OutputWriter",
    "RenderContext",
    "RenderFailure",
    "RenderResult",
    "Renderer",
    "chirp_routes",
    "iter_batches",
    "minify_page",
    "run_builder",
]
