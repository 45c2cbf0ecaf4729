"""Static site build.

Pre-renders every enumerated page of every collection into the output
directory:

    out/
    ├── _static/                       # Bundled layout assets
    └── docs/
        └── install/
            └── overview/
                ├── index.html         # Page in the layout shell
                └── page.json          # Composed page props
"""

import asyncio
import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

import aiohttp

from docpages.assets import get_static_dir
from docpages.config import Config, ContentSource
from docpages.core.composer import ComposedPage
from docpages.core.errors import BuildError, PageFailure
from docpages.core.layout import STATIC_URL, render_layout
from docpages.core.pipeline import (
    PageGenerator,
    create_fetchers,
    create_renderer,
    load_build_context,
)
from docpages.core.types import Slug

logger = logging.getLogger(__name__)


@dataclass
class BuildReport:
    """Summary of a successful build."""

    output_dir: Path
    pages: list[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)


class StaticSiteBuilder:
    """Writes every page of a build context to disk."""

    def __init__(
        self,
        generator: PageGenerator,
        output_dir: Path,
        *,
        concurrency: int = 8,
    ) -> None:
        """Initialize builder.

        Args:
            generator: Page generator bound to a build context
            output_dir: Directory to write the site into
            concurrency: Maximum number of pages generated at once
        """
        self._generator = generator
        self._output_dir = output_dir
        self._semaphore = asyncio.Semaphore(concurrency)

    async def build(self) -> BuildReport:
        """Build every enumerated page.

        A failing page does not stop the others; all failures are reported
        together once every page has been attempted.

        Returns:
            BuildReport listing written page URLs

        Raises:
            BuildError: If any page failed
        """
        jobs: list[tuple[str, Slug]] = [
            (collection.name, slug)
            for collection in self._generator.context.collections.values()
            for slug in collection.slugs
        ]
        logger.info(f"Building {len(jobs)} page(s) into {self._output_dir}")

        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._copy_static_assets()

        results = await asyncio.gather(
            *(self._build_page(name, slug) for name, slug in jobs),
            return_exceptions=True,
        )

        report = BuildReport(output_dir=self._output_dir)
        failures: list[PageFailure] = []
        for (name, slug), result in zip(jobs, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                url = self._generator.context.collection(name).locator.url(slug)
                logger.error(f"Failed to build /{url}: {result}")
                failures.append(PageFailure(collection=name, url=url, error=result))
            else:
                report.pages.append(result)

        if failures:
            raise BuildError(failures)

        logger.info(f"Built {report.page_count} page(s)")
        return report

    async def _build_page(self, collection_name: str, slug: Slug) -> str:
        async with self._semaphore:
            page = await self._generator.generate(collection_name, slug)
        await asyncio.to_thread(self._write_page, page)
        return page.url

    def _write_page(self, page: ComposedPage) -> None:
        page_dir = self._output_dir / page.url
        page_dir.mkdir(parents=True, exist_ok=True)
        (page_dir / "index.html").write_text(render_layout(page), encoding="utf-8")
        (page_dir / "page.json").write_text(
            json.dumps(page.to_dict(), ensure_ascii=False, default=str),
            encoding="utf-8",
        )

    def _copy_static_assets(self) -> None:
        target = self._output_dir / STATIC_URL.strip("/")
        shutil.copytree(get_static_dir(), target, dirs_exist_ok=True)


async def build_site(config: Config) -> BuildReport:
    """Build the whole site described by a configuration.

    Args:
        config: Application configuration

    Returns:
        BuildReport

    Raises:
        BuildError: If any page failed
        DocpagesError: If shared inputs (file lists, frontmatter index,
            navigation order) cannot be loaded
    """
    async with aiohttp.ClientSession() as session:
        fetchers = create_fetchers(config, session)
        context = await load_build_context(config, fetchers[ContentSource.LOCAL])
        generator = PageGenerator(context, fetchers, create_renderer(config))
        builder = StaticSiteBuilder(
            generator,
            config.build.output_dir,
            concurrency=config.build.concurrency,
        )
        return await builder.build()
