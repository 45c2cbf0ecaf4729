"""Page composition.

Combines the rendered body with frontmatter, source path and URL into the
props the documentation layout needs: head metadata, sidebar data and the
"edit this page" resource link.
"""

from dataclasses import dataclass
from typing import Any

from docpages.config import SiteConfig
from docpages.core.errors import ParseError
from docpages.core.index import FrontmatterIndex
from docpages.core.navigation import NavigationOrder, NavItem
from docpages.core.renderer import RenderedContent
from docpages.core.types import URLPath


@dataclass(frozen=True)
class NavigationData:
    """Sidebar inputs shared by every page of a collection."""

    category: str
    index: FrontmatterIndex
    order: NavigationOrder
    items: tuple[NavItem, ...]


@dataclass(frozen=True)
class PageHead:
    """Per-page head metadata."""

    title: str
    description: str
    site_name: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "description": self.description, "siteName": self.site_name}


@dataclass(frozen=True)
class Sidenav:
    """Sidebar props for one page."""

    navigation: NavigationData
    current_page: URLPath

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "category": self.navigation.category,
            "currentPage": self.current_page,
            "data": self.navigation.index.to_list(),
            "order": self.navigation.order.to_list(),
            "items": [item.to_dict() for item in self.navigation.items],
        }


@dataclass(frozen=True)
class ComposedPage:
    """Everything the layout shell needs to render one page."""

    head: PageHead
    sidenav: Sidenav
    resource_url: str
    content: RenderedContent
    frontmatter: dict[str, Any]
    file_path: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "head": self.head.to_dict(),
            "sidenav": self.sidenav.to_dict(),
            "resourceURL": self.resource_url,
            "frontMatter": self.frontmatter,
            "filePath": self.file_path,
            "url": self.url,
            "renderedContent": self.content.to_dict(),
        }


def compose_page(
    *,
    rendered: RenderedContent,
    frontmatter: dict[str, Any],
    file_path: str,
    url: str,
    navigation: NavigationData,
    site: SiteConfig,
) -> ComposedPage:
    """Compose a page from its parts.

    Args:
        rendered: Rendered body
        frontmatter: Page frontmatter (page_title required, description optional)
        file_path: Project-relative source path (e.g., "content/docs/install/overview.mdx")
        url: Page URL without leading slash (e.g., "docs/install/overview")
        navigation: Sidebar data of the page's collection
        site: Site identity

    Returns:
        ComposedPage

    Raises:
        ParseError: If frontmatter has no page_title
    """
    page_title = frontmatter.get("page_title")
    if page_title is None or page_title == "":
        raise ParseError(f"{file_path}: frontmatter is missing 'page_title'")

    description = frontmatter.get("description")

    return ComposedPage(
        head=PageHead(
            title=f"{page_title} | {site.name}",
            description=str(description) if description is not None else "",
            site_name=site.name,
        ),
        sidenav=Sidenav(navigation=navigation, current_page=URLPath(f"/{url}")),
        resource_url=f"{site.resource_url}{file_path}",
        content=rendered,
        frontmatter=frontmatter,
        file_path=file_path,
        url=url,
    )
