"""Content location for URL slugs.

Maps a slug to the content source path, the remote fetch path and the page
URL. No validation is done here: an invalid slug simply points at a file that
does not exist and fails in the fetcher.
"""

from dataclasses import dataclass

from docpages.core.types import Slug


@dataclass(frozen=True)
class ContentLocation:
    """Resolved locations of a single content item."""

    slug: Slug
    source_path: str
    remote_path: str
    url: str


class ContentLocator:
    """Builds content paths for one collection.

    All paths are POSIX-style strings relative to their root (project root for
    source paths, the remote base URL for remote paths).
    """

    __slots__ = ("_content_prefix", "_extension", "_remote_prefix", "_url_prefix")

    def __init__(
        self,
        content_prefix: str,
        url_prefix: str,
        remote_prefix: str,
        extension: str = ".mdx",
    ) -> None:
        """Initialize locator.

        Args:
            content_prefix: Source directory prefix (e.g., "content/docs")
            url_prefix: URL prefix of the collection (e.g., "docs")
            remote_prefix: Path prefix below the remote base URL (e.g., "docs")
            extension: Content file extension including the dot
        """
        self._content_prefix = content_prefix.strip("/")
        self._url_prefix = url_prefix.strip("/")
        self._remote_prefix = remote_prefix.strip("/")
        self._extension = extension

    def source_path(self, slug: Slug) -> str:
        """Return the project-relative source path for a slug."""
        return f"{_join(self._content_prefix, slug)}{self._extension}"

    def remote_path(self, slug: Slug) -> str:
        """Return the path of the slug below the remote base URL."""
        return f"{_join(self._remote_prefix, slug)}{self._extension}"

    def url(self, slug: Slug) -> str:
        """Return the page URL without leading slash (e.g., "docs/install")."""
        return _join(self._url_prefix, slug)

    def locate(self, slug: Slug) -> ContentLocation:
        """Resolve all locations of a slug at once."""
        return ContentLocation(
            slug=slug,
            source_path=self.source_path(slug),
            remote_path=self.remote_path(slug),
            url=self.url(slug),
        )


def _join(prefix: str, slug: Slug) -> str:
    joined = "/".join(slug)
    if not prefix:
        return joined
    return f"{prefix}/{joined}" if joined else prefix
