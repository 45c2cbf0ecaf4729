"""Frontmatter index consumed by navigation rendering.

One entry per content file: its frontmatter plus the "__resourcePath"
provenance key (e.g., "docs/install/overview.mdx"). The index is built once
per build and only read afterwards.
"""

import asyncio
import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docpages.core.errors import ParseError
from docpages.core.fetcher import ContentFetcher
from docpages.core.frontmatter import split_frontmatter

RESOURCE_PATH_KEY = "__resourcePath"


@dataclass(frozen=True)
class FrontmatterEntry:
    """Frontmatter of one content file with its source path."""

    resource_path: str
    frontmatter: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {**self.frontmatter, RESOURCE_PATH_KEY: self.resource_path}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FrontmatterEntry":
        resource_path = data.get(RESOURCE_PATH_KEY)
        if not isinstance(resource_path, str):
            raise ParseError(f"Frontmatter entry is missing {RESOURCE_PATH_KEY}")
        frontmatter = {k: v for k, v in data.items() if k != RESOURCE_PATH_KEY}
        return cls(resource_path=resource_path, frontmatter=frontmatter)


class FrontmatterIndex:
    """Read-only collection of frontmatter entries with path lookups."""

    __slots__ = ("_by_path", "_entries", "_extension")

    def __init__(self, entries: Iterable[FrontmatterEntry], extension: str = ".mdx") -> None:
        self._entries = tuple(entries)
        self._extension = extension
        self._by_path = {self._key(entry.resource_path): entry for entry in self._entries}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FrontmatterEntry]:
        return iter(self._entries)

    def get(self, resource_path: str) -> FrontmatterEntry | None:
        """Look up an entry by resource path, with or without extension."""
        return self._by_path.get(self._key(resource_path))

    def to_list(self) -> list[dict[str, Any]]:
        """Convert to a list of dictionaries for JSON serialization."""
        return [entry.to_dict() for entry in self._entries]

    def dumps(self) -> str:
        """Serialize as the generated JSON data file.

        Non-JSON scalars from YAML (dates) are written as strings.
        """
        return json.dumps(self.to_list(), indent=2, ensure_ascii=False, default=str) + "\n"

    @classmethod
    def load(cls, path: Path, extension: str = ".mdx") -> "FrontmatterIndex":
        """Load a generated index file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ParseError: If the file is not a JSON array of entries
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid frontmatter index {path}: {e}") from e

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise ParseError(f"Frontmatter index {path} must be a JSON array of objects")
        return cls((FrontmatterEntry.from_dict(item) for item in data), extension)

    def _key(self, resource_path: str) -> str:
        path = resource_path.strip("/")
        if path.endswith(self._extension):
            path = path[: -len(self._extension)]
        return path


async def build_frontmatter_index(
    files: Iterable[str],
    fetcher: ContentFetcher,
    *,
    content_prefix: str,
    resource_prefix: str,
    extension: str = ".mdx",
) -> FrontmatterIndex:
    """Read every content file and collect its frontmatter.

    Args:
        files: Paths relative to the collection directory
        fetcher: Fetcher used to read files
        content_prefix: Fetch path prefix (e.g., "content/docs")
        resource_prefix: Provenance prefix (e.g., "docs")
        extension: Content file extension

    Returns:
        FrontmatterIndex in file order

    Raises:
        ContentNotFoundError, FetchError, ParseError: From the first failing file
    """
    file_list = list(files)
    texts = await asyncio.gather(
        *(fetcher.fetch(f"{content_prefix}/{file_path}") for file_path in file_list)
    )

    entries: list[FrontmatterEntry] = []
    for file_path, text in zip(file_list, texts, strict=True):
        try:
            frontmatter, _ = split_frontmatter(text)
        except ParseError as e:
            raise ParseError(f"{content_prefix}/{file_path}: {e}") from e
        entries.append(
            FrontmatterEntry(resource_path=f"{resource_prefix}/{file_path}", frontmatter=frontmatter)
        )
    return FrontmatterIndex(entries, extension)
