"""Tests for content fetchers."""

from pathlib import Path

import aiohttp
import pytest
from aiohttp import web

from docpages.core.errors import ContentNotFoundError, FetchError
from docpages.core.fetcher import LocalFetcher, RemoteFetcher


def _content_app() -> web.Application:
    """Serve raw content below /pages, with 404 for anything named missing."""

    async def handler(request: web.Request) -> web.Response:
        path = request.match_info["path"]
        if "missing" in path:
            return web.Response(status=404, text="404: Not Found")
        return web.Response(text=f"---\npage_title: Remote\n---\n# {path}\n")

    app = web.Application()
    app.router.add_get("/pages/{path:.*}", handler)
    return app


class TestLocalFetcher:
    """Tests for LocalFetcher."""

    @pytest.mark.asyncio
    async def test__existing_file__returns_text(self, project_dir: Path) -> None:
        """Read a file relative to the root directory."""
        fetcher = LocalFetcher(project_dir)

        text = await fetcher.fetch("content/intro/index.mdx")

        assert "page_title: Introduction" in text

    @pytest.mark.asyncio
    async def test__missing_file__raises_not_found(self, tmp_path: Path) -> None:
        """Raise ContentNotFoundError with the requested path."""
        fetcher = LocalFetcher(tmp_path)

        with pytest.raises(ContentNotFoundError) as exc_info:
            await fetcher.fetch("content/docs/nope.mdx")

        assert exc_info.value.path == "content/docs/nope.mdx"

    @pytest.mark.asyncio
    async def test__directory__raises_not_found(self, project_dir: Path) -> None:
        """Treat a directory as missing content."""
        fetcher = LocalFetcher(project_dir)

        with pytest.raises(ContentNotFoundError):
            await fetcher.fetch("content/docs")


class TestRemoteFetcher:
    """Tests for RemoteFetcher."""

    def test__url_for__joins_base_and_path(self) -> None:
        """Join without doubling slashes."""
        fetcher = RemoteFetcher("https://example.com/pages/", session=None)  # type: ignore[arg-type]

        assert fetcher.url_for("/docs/index.mdx") == "https://example.com/pages/docs/index.mdx"

    @pytest.mark.asyncio
    async def test__success__returns_body(self, aiohttp_server) -> None:
        """Return the body of a successful response."""
        server = await aiohttp_server(_content_app())

        async with aiohttp.ClientSession() as session:
            fetcher = RemoteFetcher(str(server.make_url("/pages")), session)
            text = await fetcher.fetch("docs/install/overview.mdx")

        assert "# docs/install/overview.mdx" in text

    @pytest.mark.asyncio
    async def test__not_found__raises_by_default(self, aiohttp_server) -> None:
        """Raise FetchError for a 404 response."""
        server = await aiohttp_server(_content_app())

        async with aiohttp.ClientSession() as session:
            fetcher = RemoteFetcher(str(server.make_url("/pages")), session)
            with pytest.raises(FetchError, match="HTTP 404") as exc_info:
                await fetcher.fetch("docs/missing.mdx")

        assert exc_info.value.url.endswith("/pages/docs/missing.mdx")

    @pytest.mark.asyncio
    async def test__not_found__returns_body_when_success_not_required(
        self, aiohttp_server
    ) -> None:
        """Return the error body as content when require_success is off."""
        server = await aiohttp_server(_content_app())

        async with aiohttp.ClientSession() as session:
            fetcher = RemoteFetcher(
                str(server.make_url("/pages")),
                session,
                require_success=False,
            )
            text = await fetcher.fetch("docs/missing.mdx")

        assert text == "404: Not Found"

    @pytest.mark.asyncio
    async def test__connection_error__raises_fetch_error(self) -> None:
        """Wrap network failures in FetchError."""
        async with aiohttp.ClientSession() as session:
            fetcher = RemoteFetcher("http://127.0.0.1:9/pages", session)
            with pytest.raises(FetchError):
                await fetcher.fetch("docs/index.mdx")
