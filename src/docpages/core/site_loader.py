"""Build context loading for the development server.

The server renders pages on demand, so the build context is loaded on first
use and reloaded after content changes.
"""

import asyncio
import logging

import aiohttp

from docpages.config import Config, ContentSource
from docpages.core.fetcher import ContentFetcher
from docpages.core.pipeline import (
    BuildContext,
    PageGenerator,
    create_fetchers,
    create_renderer,
    load_build_context,
)

logger = logging.getLogger(__name__)


class SiteLoader:
    """Loads the build context lazily and hands out page generators."""

    def __init__(self, config: Config) -> None:
        """Initialize loader.

        Args:
            config: Application configuration
        """
        self._config = config
        self._renderer = create_renderer(config)
        self._session: aiohttp.ClientSession | None = None
        self._fetchers: dict[ContentSource, ContentFetcher] | None = None
        self._context: BuildContext | None = None
        self._lock = asyncio.Lock()

    @property
    def config(self) -> Config:
        return self._config

    async def start(self) -> None:
        """Open the HTTP session used for remote content."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._fetchers = create_fetchers(self._config, self._session)

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            self._fetchers = None

    async def load(self) -> BuildContext:
        """Return the build context, loading it if needed.

        Raises:
            RuntimeError: If start() has not been called
            DocpagesError: If shared inputs cannot be loaded
        """
        fetchers = self._require_fetchers()
        async with self._lock:
            if self._context is None:
                logger.info("Loading site content")
                self._context = await load_build_context(
                    self._config,
                    fetchers[ContentSource.LOCAL],
                )
            return self._context

    async def generator(self) -> PageGenerator:
        """Return a page generator bound to the current build context."""
        context = await self.load()
        return PageGenerator(context, self._require_fetchers(), self._renderer)

    def invalidate(self) -> None:
        """Drop the loaded context so the next request reloads it."""
        self._context = None

    def _require_fetchers(self) -> dict[ContentSource, ContentFetcher]:
        if self._fetchers is None:
            raise RuntimeError("SiteLoader.start() must be called before loading")
        return self._fetchers
