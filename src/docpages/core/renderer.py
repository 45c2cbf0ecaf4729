"""Markup rendering.

Turns a content body into HTML by running the transform stages over it.
Rendering is asynchronous because includes are read from disk.
"""

from dataclasses import dataclass
from pathlib import Path

import markdown

from docpages.core.components import BlockComponent, default_components
from docpages.core.transforms import (
    DEFAULT_MAX_INCLUDE_DEPTH,
    DocpagesExtension,
    TocEntry,
    resolve_includes,
)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "md_in_html", "smarty"]


@dataclass(frozen=True)
class RenderedContent:
    """Serialized render output of one content body."""

    html: str
    toc: list[TocEntry]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {"html": self.html, "toc": [entry.to_dict() for entry in self.toc]}


class MarkupRenderer:
    """Renders Markdown/MDX bodies with the fixed stage pipeline.

    A fresh Markdown instance is created per render, so one renderer can be
    shared by concurrently rendered pages.
    """

    def __init__(
        self,
        partials_dir: Path,
        *,
        components: dict[str, BlockComponent] | None = None,
        max_include_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
    ) -> None:
        """Initialize renderer.

        Args:
            partials_dir: Directory that @include paths resolve against
            components: Allowed block components by tag name
                        (default: Tabs, Tab, EnterpriseAlert)
            max_include_depth: Maximum nesting of includes
        """
        self._partials_dir = partials_dir
        self._components = components if components is not None else default_components()
        self._max_include_depth = max_include_depth

    async def render(self, body: str) -> RenderedContent:
        """Render a content body.

        Args:
            body: Markdown body with frontmatter already removed

        Returns:
            RenderedContent with HTML and ToC

        Raises:
            ParseError: If any stage fails (e.g., a missing partial)
        """
        text = await resolve_includes(
            body,
            self._partials_dir,
            max_depth=self._max_include_depth,
        )
        return self.convert(text)

    def convert(self, text: str) -> RenderedContent:
        """Run the parse-time stages over text that has no includes left."""
        extension = DocpagesExtension(self._components)
        md = markdown.Markdown(extensions=[*MARKDOWN_EXTENSIONS, extension])
        html = md.convert(text)
        return RenderedContent(html=html, toc=extension.toc)
