"""Tests for the frontmatter index."""

import datetime
import json
from pathlib import Path

import pytest

from docpages.core.errors import ContentNotFoundError, ParseError
from docpages.core.fetcher import LocalFetcher
from docpages.core.index import (
    RESOURCE_PATH_KEY,
    FrontmatterEntry,
    FrontmatterIndex,
    build_frontmatter_index,
)


class TestBuildFrontmatterIndex:
    """Tests for build_frontmatter_index()."""

    @pytest.mark.asyncio
    async def test__files__are_indexed_with_resource_path(self, project_dir: Path) -> None:
        """Collect frontmatter of every file in order."""
        index = await build_frontmatter_index(
            ["index.mdx", "install/overview.mdx"],
            LocalFetcher(project_dir),
            content_prefix="content/docs",
            resource_prefix="docs",
        )

        assert [entry.resource_path for entry in index] == [
            "docs/index.mdx",
            "docs/install/overview.mdx",
        ]
        assert index.to_list()[1] == {
            "page_title": "Install",
            "sidebar_title": "Overview",
            "description": "Installing Consul",
            RESOURCE_PATH_KEY: "docs/install/overview.mdx",
        }

    @pytest.mark.asyncio
    async def test__missing_file__raises(self, project_dir: Path) -> None:
        """Propagate fetch errors."""
        with pytest.raises(ContentNotFoundError):
            await build_frontmatter_index(
                ["missing.mdx"],
                LocalFetcher(project_dir),
                content_prefix="content/docs",
                resource_prefix="docs",
            )

    @pytest.mark.asyncio
    async def test__malformed_frontmatter__raises_with_path(self, tmp_path: Path) -> None:
        """Prefix parse errors with the file path."""
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "bad.mdx").write_text("---\npage_title: [\n---\n")

        with pytest.raises(ParseError, match="docs/bad.mdx"):
            await build_frontmatter_index(
                ["bad.mdx"],
                LocalFetcher(tmp_path),
                content_prefix="docs",
                resource_prefix="docs",
            )


class TestFrontmatterIndex:
    """Tests for FrontmatterIndex."""

    def test__get__accepts_path_with_or_without_extension(self) -> None:
        """Look up entries by resource path."""
        entry = FrontmatterEntry("docs/faq.mdx", {"page_title": "FAQ"})
        index = FrontmatterIndex([entry])

        assert index.get("docs/faq.mdx") is entry
        assert index.get("docs/faq") is entry
        assert index.get("/docs/faq") is entry
        assert index.get("docs/missing") is None
        assert len(index) == 1

    def test__dumps__writes_json_with_dates_as_strings(self) -> None:
        """Serialize the generated data file."""
        index = FrontmatterIndex(
            [FrontmatterEntry("docs/faq.mdx", {"page_title": "FAQ", "date": datetime.date(2020, 5, 1)})]
        )

        data = json.loads(index.dumps())

        assert data == [{"page_title": "FAQ", "date": "2020-05-01", RESOURCE_PATH_KEY: "docs/faq.mdx"}]

    def test__load__reads_generated_file(self, tmp_path: Path) -> None:
        """Load entries written by dumps()."""
        path = tmp_path / "docs-frontmatter.json"
        path.write_text(json.dumps([{"page_title": "FAQ", RESOURCE_PATH_KEY: "docs/faq.mdx"}]))

        index = FrontmatterIndex.load(path)

        entry = index.get("docs/faq")
        assert entry is not None
        assert entry.frontmatter == {"page_title": "FAQ"}

    def test__load__entry_without_resource_path__raises(self, tmp_path: Path) -> None:
        """Reject entries without provenance."""
        path = tmp_path / "docs-frontmatter.json"
        path.write_text(json.dumps([{"page_title": "FAQ"}]))

        with pytest.raises(ParseError, match=RESOURCE_PATH_KEY):
            FrontmatterIndex.load(path)

    def test__load__non_array__raises(self, tmp_path: Path) -> None:
        """Reject a file that is not a list of objects."""
        path = tmp_path / "docs-frontmatter.json"
        path.write_text('{"page_title": "FAQ"}')

        with pytest.raises(ParseError, match="JSON array of objects"):
            FrontmatterIndex.load(path)
