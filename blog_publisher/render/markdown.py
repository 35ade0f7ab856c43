"""Markdown to HTML conversion with explicit, per-call options."""

from dataclasses import dataclass
from typing import Callable, List, Optional

import markdown

Renderer = Callable[[str], str]


@dataclass(frozen=True)
class RenderOptions:
    """GitHub-flavoured rendering switches.

    gfm enables tables, fenced code and the other `extra` extensions;
    breaks turns single newlines into <br>.
    """
    gfm: bool = True
    breaks: bool = True

    def extensions(self) -> List[str]:
        extensions = ["sane_lists"]
        if self.gfm:
            extensions.append("extra")
        if self.breaks:
            extensions.append("nl2br")
        return extensions


def render_markdown(body: str, options: Optional[RenderOptions] = None) -> str:
    """Render a Markdown body (front-matter already stripped) to HTML."""
    options = options or RenderOptions()
    # A fresh converter per call: Markdown instances keep per-document state
    converter = markdown.Markdown(extensions=options.extensions(), output_format="html")
    return converter.convert(body)


def markdown_renderer(options: Optional[RenderOptions] = None) -> Renderer:
    """Create a render function bound to the given options."""
    def render(body: str) -> str:
        return render_markdown(body, options)
    return render
