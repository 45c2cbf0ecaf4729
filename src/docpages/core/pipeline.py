"""Page generation pipeline.

Slug -> Locator -> Fetcher -> Frontmatter Splitter -> Renderer -> Composer.

Shared inputs (slugs, frontmatter index, navigation order) are loaded once
into an immutable BuildContext and passed to every page generation call.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

import aiohttp

from docpages.config import CollectionConfig, Config, ContentSource
from docpages.core.components import default_components
from docpages.core.composer import ComposedPage, NavigationData, compose_page
from docpages.core.errors import ParseError
from docpages.core.fetcher import ContentFetcher, LocalFetcher, RemoteFetcher
from docpages.core.frontmatter import split_frontmatter
from docpages.core.index import FrontmatterIndex, build_frontmatter_index
from docpages.core.locator import ContentLocator
from docpages.core.navigation import (
    NavigationOrder,
    build_sidenav,
    load_navigation_order,
)
from docpages.core.paths import discover_content_files, enumerate_static_paths, load_file_list
from docpages.core.renderer import MarkupRenderer
from docpages.core.types import Slug

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionContext:
    """Build-time data of one collection."""

    config: CollectionConfig
    locator: ContentLocator
    slugs: tuple[Slug, ...]
    navigation: NavigationData

    @property
    def name(self) -> str:
        return self.config.name

    def has_slug(self, slug: Slug) -> bool:
        """Check whether a slug is one of the pre-rendered pages."""
        return slug in self.slugs


@dataclass(frozen=True)
class BuildContext:
    """Immutable inputs shared by every page of a build."""

    config: Config
    collections: Mapping[str, CollectionContext]

    def collection(self, name: str) -> CollectionContext:
        """Get a collection context by name.

        Raises:
            KeyError: If no collection has this name
        """
        return self.collections[name]

    def resolve_url(self, url: str) -> tuple[CollectionContext, Slug] | None:
        """Map a page URL (e.g., "/docs/install/overview") to its collection and slug.

        Returns:
            (collection, slug) for pre-rendered pages, None otherwise
        """
        path = url.strip("/")
        by_prefix = sorted(
            self.collections.values(),
            key=lambda c: len(c.config.url_prefix),
            reverse=True,
        )
        for collection in by_prefix:
            prefix = collection.config.url_prefix.strip("/")
            if not path.startswith(f"{prefix}/"):
                continue
            slug = tuple(path[len(prefix) + 1 :].split("/"))
            if collection.has_slug(slug):
                return collection, slug
        return None


def create_fetchers(
    config: Config,
    session: aiohttp.ClientSession,
) -> dict[ContentSource, ContentFetcher]:
    """Create one fetcher per content source.

    Args:
        config: Application configuration
        session: Shared HTTP session for remote fetches

    Returns:
        Fetchers keyed by content source
    """
    return {
        ContentSource.LOCAL: LocalFetcher(config.content.root_dir),
        ContentSource.REMOTE: RemoteFetcher(
            config.remote.base_url,
            session,
            require_success=config.remote.require_success,
        ),
    }


def list_collection_files(config: Config, collection: CollectionConfig) -> list[str]:
    """List the content files of a collection.

    Uses the generated file list when one is configured, otherwise discovers
    files in the collection directory.

    Raises:
        FileNotFoundError: If the configured file list doesn't exist
        ParseError: If the file list is malformed
    """
    if collection.files is not None:
        return load_file_list(collection.files)
    return discover_content_files(config.content_dir(collection), config.content.extension)


async def load_collection_context(
    config: Config,
    collection: CollectionConfig,
    local_fetcher: ContentFetcher,
) -> CollectionContext:
    """Load slugs, frontmatter index and navigation of one collection.

    The frontmatter index is read from the generated data file when one is
    configured and present; otherwise it is built from the local content files.

    Args:
        config: Application configuration
        collection: Collection to load
        local_fetcher: Fetcher for local content files

    Returns:
        CollectionContext

    Raises:
        ParseError: If the file list, frontmatter index or navigation order
            is missing or malformed, or two files map to one slug
    """
    extension = config.content.extension
    content_prefix = config.content_prefix(collection)

    try:
        files = list_collection_files(config, collection)
        slugs = enumerate_static_paths(files, extension)
    except (FileNotFoundError, ValueError) as e:
        raise ParseError(f"Collection {collection.name}: {e}") from e
    logger.info(f"Collection {collection.name}: {len(slugs)} page(s)")

    if collection.frontmatter is not None and collection.frontmatter.exists():
        index = FrontmatterIndex.load(collection.frontmatter, extension)
    else:
        logger.debug(f"Building frontmatter index for {collection.name} from {content_prefix}")
        index = await build_frontmatter_index(
            files,
            local_fetcher,
            content_prefix=content_prefix,
            resource_prefix=collection.content_dir,
            extension=extension,
        )

    order = (
        load_navigation_order(collection.navigation)
        if collection.navigation is not None
        else NavigationOrder()
    )
    items = build_sidenav(
        order,
        index,
        url_prefix=collection.url_prefix,
        resource_prefix=collection.content_dir,
    )

    return CollectionContext(
        config=collection,
        locator=ContentLocator(
            content_prefix=content_prefix,
            url_prefix=collection.url_prefix,
            remote_prefix=collection.remote_prefix,
            extension=extension,
        ),
        slugs=tuple(slugs),
        navigation=NavigationData(
            category=collection.category,
            index=index,
            order=order,
            items=tuple(items),
        ),
    )


async def load_build_context(config: Config, local_fetcher: ContentFetcher) -> BuildContext:
    """Load the shared context for every configured collection."""
    collections = {
        name: await load_collection_context(config, collection, local_fetcher)
        for name, collection in config.collections.items()
    }
    return BuildContext(config=config, collections=MappingProxyType(collections))


def create_renderer(config: Config) -> MarkupRenderer:
    """Create the markup renderer with the site's component table."""
    return MarkupRenderer(
        config.partials_dir,
        components=default_components(product=config.site.product.title()),
    )


class PageGenerator:
    """Generates composed pages from slugs."""

    def __init__(
        self,
        context: BuildContext,
        fetchers: Mapping[ContentSource, ContentFetcher],
        renderer: MarkupRenderer,
    ) -> None:
        """Initialize generator.

        Args:
            context: Shared build context
            fetchers: Fetchers keyed by content source
            renderer: Markup renderer
        """
        self._context = context
        self._fetchers = fetchers
        self._renderer = renderer

    @property
    def context(self) -> BuildContext:
        return self._context

    async def generate(self, collection_name: str, slug: Slug) -> ComposedPage:
        """Generate one page.

        Args:
            collection_name: Collection the slug belongs to
            slug: Page slug (e.g., ("install", "overview"))

        Returns:
            ComposedPage ready for the layout

        Raises:
            ContentNotFoundError: Local content file is missing
            FetchError: Remote content could not be retrieved
            ParseError: Frontmatter, rendering or composition failed
        """
        collection = self._context.collection(collection_name)
        location = collection.locator.locate(slug)
        source = collection.config.source

        fetch_path = location.remote_path if source is ContentSource.REMOTE else location.source_path
        text = await self._fetchers[source].fetch(fetch_path)

        try:
            frontmatter, body = split_frontmatter(text)
            rendered = await self._renderer.render(body)
        except ParseError as e:
            raise ParseError(f"{location.source_path}: {e}") from e

        logger.debug(f"Rendered /{location.url}")
        return compose_page(
            rendered=rendered,
            frontmatter=frontmatter,
            file_path=location.source_path,
            url=location.url,
            navigation=collection.navigation,
            site=self._context.config.site,
        )
