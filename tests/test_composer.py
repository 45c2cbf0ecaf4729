"""Tests for page composition."""

import pytest

from docpages.config import SiteConfig
from docpages.core.composer import NavigationData, compose_page
from docpages.core.errors import ParseError
from docpages.core.index import FrontmatterEntry, FrontmatterIndex
from docpages.core.navigation import NavigationOrder, NavItem, PageNode
from docpages.core.renderer import RenderedContent
from docpages.core.transforms import TocEntry
from docpages.core.types import URLPath


@pytest.fixture
def navigation() -> NavigationData:
    """Create sidebar data with a single page."""
    return NavigationData(
        category="docs",
        index=FrontmatterIndex([FrontmatterEntry("docs/install.mdx", {"page_title": "Install"})]),
        order=NavigationOrder((PageNode("install"),)),
        items=(NavItem(title="Install", path=URLPath("/docs/install")),),
    )


@pytest.fixture
def rendered() -> RenderedContent:
    return RenderedContent(html="<h1>Install</h1>", toc=[TocEntry(1, "Install", "install")])


class TestComposePage:
    """Tests for compose_page()."""

    def test__page__gets_head_sidenav_and_resource_url(
        self, navigation: NavigationData, rendered: RenderedContent
    ) -> None:
        """Combine rendered body, frontmatter, path and URL."""
        page = compose_page(
            rendered=rendered,
            frontmatter={"page_title": "Install", "description": "Installing Consul"},
            file_path="content/docs/install.mdx",
            url="docs/install",
            navigation=navigation,
            site=SiteConfig(),
        )

        assert page.head.title == "Install | Consul by HashiCorp"
        assert page.head.description == "Installing Consul"
        assert page.head.site_name == "Consul by HashiCorp"
        assert page.sidenav.current_page == "/docs/install"
        assert page.sidenav.navigation is navigation
        assert page.resource_url == (
            "https://github.com/hashicorp/consul/blob/master/website/content/docs/install.mdx"
        )

    def test__missing_description__is_empty(
        self, navigation: NavigationData, rendered: RenderedContent
    ) -> None:
        """Default the description to an empty string."""
        page = compose_page(
            rendered=rendered,
            frontmatter={"page_title": "Install"},
            file_path="content/docs/install.mdx",
            url="docs/install",
            navigation=navigation,
            site=SiteConfig(name="Example"),
        )

        assert page.head.description == ""
        assert page.head.title == "Install | Example"

    def test__missing_page_title__raises(
        self, navigation: NavigationData, rendered: RenderedContent
    ) -> None:
        """Require page_title in frontmatter."""
        with pytest.raises(ParseError, match="content/docs/install.mdx: frontmatter is missing 'page_title'"):
            compose_page(
                rendered=rendered,
                frontmatter={"description": "No title"},
                file_path="content/docs/install.mdx",
                url="docs/install",
                navigation=navigation,
                site=SiteConfig(),
            )

    def test__to_dict__serializes_page_props(
        self, navigation: NavigationData, rendered: RenderedContent
    ) -> None:
        """Serialize the props passed to the layout."""
        page = compose_page(
            rendered=rendered,
            frontmatter={"page_title": "Install"},
            file_path="content/docs/install.mdx",
            url="docs/install",
            navigation=navigation,
            site=SiteConfig(),
        )

        data = page.to_dict()

        assert data["head"]["siteName"] == "Consul by HashiCorp"
        assert data["sidenav"]["currentPage"] == "/docs/install"
        assert data["sidenav"]["category"] == "docs"
        assert data["sidenav"]["order"] == ["install"]
        assert data["sidenav"]["data"] == [
            {"page_title": "Install", "__resourcePath": "docs/install.mdx"}
        ]
        assert data["frontMatter"] == {"page_title": "Install"}
        assert data["filePath"] == "content/docs/install.mdx"
        assert data["renderedContent"]["toc"] == [{"level": 1, "title": "Install", "id": "install"}]
