"""Tests for the page generation pipeline."""

import dataclasses
import json
from pathlib import Path

import aiohttp
import pytest
from aiohttp import web

from docpages.config import Config, ContentSource
from docpages.core.errors import ContentNotFoundError, ParseError
from docpages.core.fetcher import LocalFetcher
from docpages.core.pipeline import (
    PageGenerator,
    create_fetchers,
    create_renderer,
    load_build_context,
)


def _with_collection(config: Config, name: str, **changes: object) -> Config:
    collection = dataclasses.replace(config.collections[name], **changes)
    return dataclasses.replace(config, collections={**config.collections, name: collection})


async def _generator(config: Config) -> PageGenerator:
    local = LocalFetcher(config.content.root_dir)
    context = await load_build_context(config, local)
    return PageGenerator(context, {ContentSource.LOCAL: local}, create_renderer(config))


class TestLoadBuildContext:
    """Tests for load_build_context()."""

    @pytest.mark.asyncio
    async def test__collections__enumerate_slugs(self, test_config: Config) -> None:
        """Discover every content file of every collection."""
        context = await load_build_context(test_config, LocalFetcher(test_config.content.root_dir))

        assert context.collection("docs").slugs == (("index",), ("install", "overview"))
        assert context.collection("intro").slugs == (("index",),)

    @pytest.mark.asyncio
    async def test__navigation__is_built_from_local_frontmatter(self, test_config: Config) -> None:
        """Resolve sidebar titles from the frontmatter of local files."""
        context = await load_build_context(test_config, LocalFetcher(test_config.content.root_dir))

        items = [item.to_dict() for item in context.collection("docs").navigation.items]
        assert items == [
            {"title": "Documentation", "path": "/docs/index", "kind": "page"},
            {
                "title": "install",
                "path": "",
                "kind": "category",
                "children": [{"title": "Overview", "path": "/docs/install/overview", "kind": "page"}],
            },
            {"title": "", "path": "", "kind": "divider"},
            {"title": "Learn", "path": "https://learn.hashicorp.com/consul", "kind": "link"},
        ]

    @pytest.mark.asyncio
    async def test__generated_index__is_preferred(self, test_config: Config) -> None:
        """Read the frontmatter index data file when it exists."""
        index_path = test_config.content.root_dir / "data" / "docs-frontmatter.json"
        index_path.write_text(
            json.dumps([{"page_title": "Home", "__resourcePath": "docs/index.mdx"}])
        )
        config = _with_collection(test_config, "docs", frontmatter=index_path)

        context = await load_build_context(config, LocalFetcher(config.content.root_dir))

        assert context.collection("docs").navigation.items[0].title == "Home"

    @pytest.mark.asyncio
    async def test__file_list__limits_pages(self, test_config: Config) -> None:
        """Enumerate pages from a generated file list."""
        files_path = test_config.content.root_dir / "data" / "docs-files.json"
        files_path.write_text(json.dumps(["index.mdx"]))
        config = _with_collection(test_config, "docs", files=files_path)

        context = await load_build_context(config, LocalFetcher(config.content.root_dir))

        assert context.collection("docs").slugs == (("index",),)

    @pytest.mark.asyncio
    async def test__missing_navigation_file__raises(self, test_config: Config, tmp_path: Path) -> None:
        """Fail the whole build when a navigation order is missing."""
        config = _with_collection(test_config, "intro", navigation=tmp_path / "missing.json")

        with pytest.raises(ParseError, match="not found"):
            await load_build_context(config, LocalFetcher(config.content.root_dir))


class TestBuildContext:
    """Tests for BuildContext.resolve_url()."""

    @pytest.mark.asyncio
    async def test__known_url__resolves_to_collection_and_slug(self, test_config: Config) -> None:
        """Map a page URL to its collection and slug."""
        context = await load_build_context(test_config, LocalFetcher(test_config.content.root_dir))

        resolved = context.resolve_url("/docs/install/overview/")

        assert resolved is not None
        collection, slug = resolved
        assert collection.name == "docs"
        assert slug == ("install", "overview")

    @pytest.mark.asyncio
    async def test__unknown_url__returns_none(self, test_config: Config) -> None:
        """Return None for URLs that are not pre-rendered pages."""
        context = await load_build_context(test_config, LocalFetcher(test_config.content.root_dir))

        assert context.resolve_url("/docs/install/missing") is None
        assert context.resolve_url("/other/index") is None
        assert context.resolve_url("/") is None


class TestPageGenerator:
    """Tests for PageGenerator.generate()."""

    @pytest.mark.asyncio
    async def test__local_page__is_composed(self, test_config: Config) -> None:
        """Locate, fetch, split, render and compose a page."""
        generator = await _generator(test_config)

        page = await generator.generate("docs", ("install", "overview"))

        assert page.head.title == "Install | Consul by HashiCorp"
        assert page.head.description == "Installing Consul"
        assert page.file_path == "content/docs/install/overview.mdx"
        assert page.url == "docs/install/overview"
        assert page.resource_url.endswith("/website/content/docs/install/overview.mdx")
        assert page.sidenav.current_page == "/docs/install/overview"
        assert page.sidenav.navigation.category == "docs"
        assert 'id="hello"' in page.content.html
        assert 'class="alert alert-info g-type-body"' in page.content.html
        assert "Restart the agents." in page.content.html

    @pytest.mark.asyncio
    async def test__missing_file__raises_not_found(self, test_config: Config) -> None:
        """Propagate fetch errors for slugs without content."""
        generator = await _generator(test_config)

        with pytest.raises(ContentNotFoundError):
            await generator.generate("docs", ("missing",))

    @pytest.mark.asyncio
    async def test__render_error__is_prefixed_with_source_path(self, test_config: Config) -> None:
        """Report which file failed to render."""
        docs = test_config.content.root_dir / "content" / "docs"
        (docs / "broken.mdx").write_text("---\npage_title: Broken\n---\n<Chart>\n</Chart>\n")
        generator = await _generator(test_config)

        with pytest.raises(ParseError, match="content/docs/broken.mdx: .*unknown component"):
            await generator.generate("docs", ("broken",))

    @pytest.mark.asyncio
    async def test__remote_collection__fetches_from_base_url(
        self, test_config: Config, aiohttp_server
    ) -> None:
        """Fetch remote collections from the remote path below the base URL."""
        requested: list[str] = []

        async def handler(request: web.Request) -> web.Response:
            requested.append(request.path)
            return web.Response(text="---\npage_title: Remote Install\n---\n# Remote\n")

        app = web.Application()
        app.router.add_get("/pages/{path:.*}", handler)
        server = await aiohttp_server(app)

        config = _with_collection(
            test_config, "docs", source=ContentSource.REMOTE, remote_path="docs"
        )
        config = dataclasses.replace(
            config,
            remote=dataclasses.replace(config.remote, base_url=str(server.make_url("/pages"))),
        )

        async with aiohttp.ClientSession() as session:
            fetchers = create_fetchers(config, session)
            context = await load_build_context(config, fetchers[ContentSource.LOCAL])
            generator = PageGenerator(context, fetchers, create_renderer(config))
            page = await generator.generate("docs", ("install", "overview"))

        assert requested == ["/pages/docs/install/overview.mdx"]
        assert page.head.title == "Remote Install | Consul by HashiCorp"
        assert page.file_path == "content/docs/install/overview.mdx"
        assert 'id="remote"' in page.content.html
