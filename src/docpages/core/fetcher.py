"""Content fetchers.

Two interchangeable ways to retrieve raw content text for a logical path:
from the local project tree or from a fixed branch of a remote repository.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol

import aiohttp

from docpages.core.errors import ContentNotFoundError, FetchError

logger = logging.getLogger(__name__)


class ContentFetcher(Protocol):
    """Retrieves raw content text for a logical path."""

    async def fetch(self, path: str) -> str: ...


class LocalFetcher:
    """Reads content from the local filesystem relative to a root directory."""

    def __init__(self, root_dir: Path) -> None:
        """Initialize fetcher.

        Args:
            root_dir: Project root that content paths are relative to
        """
        self._root_dir = root_dir

    async def fetch(self, path: str) -> str:
        """Read a UTF-8 content file.

        Args:
            path: Path relative to root_dir (e.g., "content/intro/index.mdx")

        Returns:
            File text

        Raises:
            ContentNotFoundError: If the file does not exist
        """
        file_path = self._root_dir / path
        logger.debug(f"Reading {file_path}")
        try:
            return await asyncio.to_thread(file_path.read_text, encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise ContentNotFoundError(path) from e


class RemoteFetcher:
    """Fetches content over HTTP from a fixed base URL.

    No authentication headers are sent. The session is owned by the caller so
    one connection pool is shared by every page of a build.
    """

    def __init__(
        self,
        base_url: str,
        session: aiohttp.ClientSession,
        *,
        require_success: bool = True,
    ) -> None:
        """Initialize fetcher.

        Args:
            base_url: Base URL pointing at a branch of the content repository
            session: Shared aiohttp session
            require_success: Raise FetchError on 4xx/5xx responses. When False,
                the response body is returned as content regardless of status.
        """
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._require_success = require_success

    def url_for(self, path: str) -> str:
        """Return the full URL for a remote path."""
        return f"{self._base_url}/{path.lstrip('/')}"

    async def fetch(self, path: str) -> str:
        """Fetch raw content text.

        Args:
            path: Path below the base URL (e.g., "docs/install/overview.mdx")

        Returns:
            Response body text

        Raises:
            FetchError: On network errors, or non-success status when
                require_success is enabled
        """
        url = self.url_for(path)
        logger.debug(f"Fetching {url}")
        try:
            async with self._session.get(url) as response:
                if not response.ok:
                    if self._require_success:
                        raise FetchError(url, f"HTTP {response.status}")
                    logger.warning(
                        f"Using body of non-success response (HTTP {response.status}) from {url}"
                    )
                return await response.text(encoding="utf-8")
        except (aiohttp.ClientError, TimeoutError) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
