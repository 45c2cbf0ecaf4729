"""Content transform stages.

Stages run in a fixed order:

1. Cross-file inclusion (text, before parsing): ``@include 'file.mdx'``
2. Anchor-link injection (tree): stable ids and permalinks on headings
3. Callout normalization (tree): ``->`` / ``~>`` / ``!>`` / ``=>`` paragraphs
4. Typography (inline): smart quotes, dashes, ellipses via ``smarty``

Stages 2 and 3 are tree processors registered ahead of Python-Markdown's
inline pass, which is where ``smarty`` substitutes typography, so each stage
sees the output of the previous one.
"""

import asyncio
import logging
import re
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from pathlib import Path

from markdown import Markdown
from markdown.extensions import Extension
from markdown.extensions.toc import slugify, unique
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString

from docpages.core.components import BlockComponent, expand_components
from docpages.core.errors import ParseError

logger = logging.getLogger(__name__)

DEFAULT_MAX_INCLUDE_DEPTH = 10

INCLUDE_RE = re.compile(r"""^(?P<indent>[ \t]*)@include\s+(?P<quote>['"])(?P<path>[^'"]+)(?P=quote)\s*$""")
FENCE_RE = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})")

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

CALLOUT_KINDS = {
    "=>": "success",
    "->": "info",
    "~>": "warning",
    "!>": "danger",
}

# Inline markup stripped from raw heading text before slugifying
_HEADING_MARKUP = (
    (re.compile(r"!?\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"<[^>]+>"), ""),
    (re.compile(r"`+"), ""),
    (re.compile(r"\*+"), ""),
)


@dataclass(frozen=True)
class TocEntry:
    """Heading collected during anchor-link injection."""

    level: int
    title: str
    id: str

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for JSON serialization."""
        return {"level": self.level, "title": self.title, "id": self.id}


async def resolve_includes(
    text: str,
    partials_dir: Path,
    *,
    max_depth: int = DEFAULT_MAX_INCLUDE_DEPTH,
) -> str:
    """Splice partial files into text in place of include directives.

    Args:
        text: Markdown text
        partials_dir: Directory partial paths are resolved against
        max_depth: Maximum nesting of includes

    Returns:
        Text with every directive replaced by the partial's content

    Raises:
        ParseError: If a partial is missing, escapes partials_dir, includes
            itself, or nesting exceeds max_depth
    """
    return await _resolve(text, partials_dir.resolve(), max_depth, ())


async def _resolve(
    text: str,
    partials_dir: Path,
    max_depth: int,
    chain: tuple[Path, ...],
) -> str:
    result: list[str] = []
    fence: str | None = None

    for line in text.splitlines(keepends=True):
        fence_match = FENCE_RE.match(line)
        if fence_match is not None:
            marker = fence_match.group("fence")
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence) and not line.strip().strip(marker[0]):
                fence = None
            result.append(line)
            continue

        match = INCLUDE_RE.match(line) if fence is None else None
        if match is None:
            result.append(line)
            continue

        include_path = match.group("path")
        if len(chain) >= max_depth:
            raise ParseError(f"Include depth exceeded {max_depth} at '@include {include_path}'")

        target = _partial_path(partials_dir, include_path)
        if target in chain:
            raise ParseError(f"Circular include of '{include_path}'")

        try:
            content = await asyncio.to_thread(target.read_text, encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ParseError(
                f"Included file not found: '{include_path}' (looked in {partials_dir})"
            ) from e

        logger.debug(f"Resolved include '{include_path}' to {target}")
        content = await _resolve(content, partials_dir, max_depth, (*chain, target))
        if line.endswith("\n") and not content.endswith("\n"):
            content += "\n"
        result.append(_indent(content, match.group("indent")))

    return "".join(result)


def _indent(content: str, indent: str) -> str:
    """Prefix non-blank lines so the partial stays inside its parent block."""
    if not indent:
        return content
    return "".join(
        f"{indent}{line}" if line.strip() else line
        for line in content.splitlines(keepends=True)
    )


def _partial_path(partials_dir: Path, include_path: str) -> Path:
    target = (partials_dir / include_path).resolve()
    if not target.is_relative_to(partials_dir):
        raise ParseError(f"Include path '{include_path}' is outside the partials directory")
    return target


def heading_text(raw: str) -> str:
    """Return plain heading text with inline markup removed."""
    text = raw
    for pattern, replacement in _HEADING_MARKUP:
        text = pattern.sub(replacement, text)
    return " ".join(text.split())


class ComponentPreprocessor(Preprocessor):
    """Expands component tags into Markdown-enabled HTML containers."""

    def __init__(self, md: Markdown, components: dict[str, BlockComponent]) -> None:
        super().__init__(md)
        self._components = components

    def run(self, lines: list[str]) -> list[str]:
        return expand_components(lines, self._components)


class AnchorLinkTreeprocessor(Treeprocessor):
    """Adds linkable ids to headings and records them for the ToC."""

    def __init__(self, md: Markdown) -> None:
        super().__init__(md)
        self.entries: list[TocEntry] = []

    def run(self, root: etree.Element) -> None:
        used_ids: set[str] = set()
        headings = [el for el in root.iter() if el.tag in HEADING_TAGS]

        for heading in headings:
            title = heading_text(heading.text or "")
            anchor_id = unique(slugify(title, "-") or "section", used_ids)

            permalink = etree.Element(
                "a",
                {
                    "class": "__permalink-h",
                    "href": f"#{anchor_id}",
                    "aria-label": f"{anchor_id} permalink",
                },
            )
            permalink.text = AtomicString("»")
            target = etree.Element(
                "a",
                {"class": "__target-h", "id": anchor_id, "aria-hidden": "true"},
            )
            target.tail = heading.text
            heading.text = None
            heading.insert(0, permalink)
            heading.insert(1, target)

            self.entries.append(TocEntry(level=int(heading.tag[1]), title=title, id=anchor_id))


class CalloutTreeprocessor(Treeprocessor):
    """Wraps marker-prefixed paragraphs into alert blocks."""

    def run(self, root: etree.Element) -> None:
        parents = {child: parent for parent in root.iter() for child in parent}

        for paragraph in [el for el in root.iter("p")]:
            text = (paragraph.text or "").lstrip()
            kind = CALLOUT_KINDS.get(text[:2])
            if kind is None or (len(text) > 2 and not text[2].isspace()):
                continue

            parent = parents.get(paragraph)
            if parent is None:
                continue

            paragraph.text = text[2:].lstrip()
            alert = etree.Element(
                "div",
                {"class": f"alert alert-{kind} g-type-body", "role": "alert"},
            )
            alert.tail = paragraph.tail
            paragraph.tail = None

            index = list(parent).index(paragraph)
            parent.remove(paragraph)
            alert.append(paragraph)
            parent.insert(index, alert)


class DocpagesExtension(Extension):
    """Registers component expansion, anchor links and callouts."""

    def __init__(self, components: dict[str, BlockComponent], **kwargs: object) -> None:
        super().__init__(**kwargs)
        self._components = components
        self._anchors: AnchorLinkTreeprocessor | None = None

    @property
    def toc(self) -> list[TocEntry]:
        """Headings collected by the last conversion."""
        return list(self._anchors.entries) if self._anchors else []

    def extendMarkdown(self, md: Markdown) -> None:
        # After fenced code is stashed (25), before raw HTML blocks (20)
        md.preprocessors.register(ComponentPreprocessor(md, self._components), "docpages_components", 22)

        # Ahead of the inline pass (20) where smarty applies typography
        self._anchors = AnchorLinkTreeprocessor(md)
        md.treeprocessors.register(self._anchors, "docpages_anchor_links", 30)
        md.treeprocessors.register(CalloutTreeprocessor(md), "docpages_callouts", 25)
