"""HTML minification for generated pages.

Generated pages are static and never re-templated, so every page goes
through the same aggressive option set: whitespace collapsed, entities
decoded, inline CSS and JS minified, comments and optional tags dropped.
"""

from __future__ import annotations

import minify_html

# Fixed option set; the output is never re-templated
_OPTIONS: dict[str, bool] = {
    "minify_css": True,
    "minify_js": True,
    "keep_comments": False,
    "keep_closing_tags": False,
    "keep_html_and_head_opening_tags": False,
}


def minify_page(html: str) -> str:
    """Return the minified form of a rendered page."""
    return minify_html.minify(html, **_OPTIONS)
