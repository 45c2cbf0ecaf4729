"""Static path enumeration.

Every page is pre-rendered at build time. The set of pages comes from a flat
list of content files, either generated ahead of time or discovered from the
content directory.
"""

import json
from collections.abc import Iterable
from pathlib import Path

from docpages.core.errors import ParseError
from docpages.core.types import Slug


def enumerate_static_paths(files: Iterable[str], extension: str = ".mdx") -> list[Slug]:
    """Convert content file paths to slugs.

    Args:
        files: Paths relative to the collection directory
               (e.g., "install/overview.mdx")
        extension: Content file extension to strip

    Returns:
        Slugs in input order (e.g., ("install", "overview"))

    Raises:
        ValueError: If two files map to the same slug
    """
    slugs: list[Slug] = []
    seen: set[Slug] = set()
    for file_path in files:
        stem = file_path[: -len(extension)] if file_path.endswith(extension) else file_path
        slug = tuple(stem.split("/"))
        if slug in seen:
            raise ValueError(f"Duplicate content file for slug {'/'.join(slug)}: {file_path}")
        seen.add(slug)
        slugs.append(slug)
    return slugs


def load_file_list(path: Path) -> list[str]:
    """Load a generated file list (JSON array of relative paths).

    Raises:
        FileNotFoundError: If the list file doesn't exist
        ParseError: If it is not a JSON array of strings
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid file list {path}: {e}") from e

    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        raise ParseError(f"File list {path} must be a JSON array of strings")
    return data


def discover_content_files(content_dir: Path, extension: str = ".mdx") -> list[str]:
    """List content files below a directory.

    Args:
        content_dir: Collection directory (e.g., content/docs)
        extension: Content file extension

    Returns:
        Sorted POSIX paths relative to content_dir, empty if it doesn't exist
    """
    if not content_dir.is_dir():
        return []
    return sorted(
        path.relative_to(content_dir).as_posix()
        for path in content_dir.rglob(f"*{extension}")
        if path.is_file()
    )
