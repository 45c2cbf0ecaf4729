"""Sidebar navigation.

The navigation order is a hand-authored nested list (JSON or YAML):

    [
      "index",
      {"category": "install", "content": ["overview", "ports"]},
      "-----",
      {"title": "Learn", "href": "https://learn.hashicorp.com/consul"}
    ]

Strings name pages relative to their enclosing category. Titles and paths
are resolved against the frontmatter index to build the sidebar tree.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypedDict

import yaml

from docpages.core.errors import ParseError
from docpages.core.index import FrontmatterEntry, FrontmatterIndex
from docpages.core.types import URLPath

logger = logging.getLogger(__name__)

DIVIDER = "-----"


@dataclass(frozen=True)
class PageNode:
    """A page named relative to its category."""

    name: str

    def to_raw(self) -> object:
        return self.name


@dataclass(frozen=True)
class CategoryNode:
    """A named group of nodes, optionally backed by an index page."""

    name: str
    content: tuple["OrderNode", ...] = ()
    title: str | None = None

    def to_raw(self) -> object:
        raw: dict[str, object] = {"category": self.name}
        if self.title is not None:
            raw["name"] = self.title
        if self.content:
            raw["content"] = [node.to_raw() for node in self.content]
        return raw


@dataclass(frozen=True)
class LinkNode:
    """A direct link, usually to an external site."""

    title: str
    href: str

    def to_raw(self) -> object:
        return {"title": self.title, "href": self.href}


@dataclass(frozen=True)
class DividerNode:
    """A visual separator."""

    def to_raw(self) -> object:
        return DIVIDER


OrderNode = PageNode | CategoryNode | LinkNode | DividerNode


@dataclass(frozen=True)
class NavigationOrder:
    """Parsed navigation order of one collection."""

    nodes: tuple[OrderNode, ...] = ()

    def to_list(self) -> list[object]:
        """Convert back to the authored list form for JSON serialization."""
        return [node.to_raw() for node in self.nodes]


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    path: str
    kind: str
    children: list["NavItemDict"]


@dataclass
class NavItem:
    """Navigation item with children for the sidebar tree."""

    title: str
    path: URLPath
    kind: str = "page"
    children: list["NavItem"] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title, "path": self.path, "kind": self.kind}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def parse_navigation_order(data: object) -> NavigationOrder:
    """Parse the authored structure into typed nodes.

    Raises:
        ParseError: If a node has an unknown shape
    """
    if not isinstance(data, list):
        raise ParseError("Navigation order must be a list")
    return NavigationOrder(nodes=tuple(_parse_node(item) for item in data))


def _parse_node(item: object) -> OrderNode:
    if isinstance(item, str):
        if item == DIVIDER:
            return DividerNode()
        return PageNode(name=item)

    if isinstance(item, dict):
        if "category" in item:
            content = item.get("content", [])
            if not isinstance(content, list):
                raise ParseError(f"Navigation category {item['category']!r}: content must be a list")
            title = item.get("name")
            return CategoryNode(
                name=str(item["category"]),
                content=tuple(_parse_node(child) for child in content),
                title=str(title) if title is not None else None,
            )
        if "href" in item and "title" in item:
            return LinkNode(title=str(item["title"]), href=str(item["href"]))

    raise ParseError(f"Unrecognized navigation node: {item!r}")


def load_navigation_order(path: Path) -> NavigationOrder:
    """Load a navigation order file (.json, .yaml or .yml).

    Raises:
        ParseError: If the file is missing or malformed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ParseError(f"Navigation order file not found: {path}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ParseError(f"Invalid navigation order {path}: {e}") from e

    try:
        return parse_navigation_order(data)
    except ParseError as e:
        raise ParseError(f"{path}: {e}") from e


def build_sidenav(
    order: NavigationOrder,
    index: FrontmatterIndex,
    *,
    url_prefix: str,
    resource_prefix: str,
) -> list[NavItem]:
    """Build the sidebar tree for a collection.

    Args:
        order: Navigation order of the collection
        index: Frontmatter index of the collection
        url_prefix: Page URL prefix (e.g., "docs")
        resource_prefix: Resource path prefix in the index (e.g., "docs")

    Returns:
        List of NavItem trees in authored order
    """
    builder = _SidenavBuilder(index, url_prefix.strip("/"), resource_prefix.strip("/"))
    return builder.build(order.nodes, ())


class _SidenavBuilder:
    def __init__(self, index: FrontmatterIndex, url_prefix: str, resource_prefix: str) -> None:
        self._index = index
        self._url_prefix = url_prefix
        self._resource_prefix = resource_prefix

    def build(self, nodes: tuple[OrderNode, ...], parents: tuple[str, ...]) -> list[NavItem]:
        return [self._build_item(node, parents) for node in nodes]

    def _build_item(self, node: OrderNode, parents: tuple[str, ...]) -> NavItem:
        if isinstance(node, DividerNode):
            return NavItem(title="", path=URLPath(""), kind="divider")

        if isinstance(node, LinkNode):
            return NavItem(title=node.title, path=URLPath(node.href), kind="link")

        parts = (*parents, node.name)

        if isinstance(node, CategoryNode):
            page_parts = parts
            entry = self._lookup(parts)
            if entry is None:
                page_parts = (*parts, "index")
                entry = self._lookup(page_parts)
            title = node.title or _title(entry, node.name)
            return NavItem(
                title=title,
                path=self._url(page_parts) if entry is not None else URLPath(""),
                kind="category",
                children=self.build(node.content, parts),
            )

        entry = self._lookup(parts)
        if entry is None:
            logger.warning(f"No frontmatter for navigation entry {'/'.join(parts)}")
        return NavItem(title=_title(entry, node.name), path=self._url(parts))

    def _lookup(self, parts: tuple[str, ...]) -> FrontmatterEntry | None:
        return self._index.get("/".join((self._resource_prefix, *parts)))

    def _url(self, parts: tuple[str, ...]) -> URLPath:
        return URLPath("/" + "/".join((self._url_prefix, *parts)))


def _title(entry: FrontmatterEntry | None, fallback: str) -> str:
    if entry is None:
        return fallback
    for key in ("sidebar_title", "page_title"):
        value = entry.frontmatter.get(key)
        if isinstance(value, str) and value:
            return value
    return fallback
