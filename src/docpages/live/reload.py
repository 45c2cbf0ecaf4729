"""WebSocket-based live reload for development mode.

Monitors content and partial files for changes and notifies connected clients
via WebSocket to trigger page reloads.
"""

import asyncio
import json
import logging
import weakref
from collections.abc import Callable
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from docpages.config import Config

logger = logging.getLogger(__name__)

# Broadcast path telling every open page to reload
ALL_PAGES = "*"


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload.

    Coordinates between file system watcher and connected WebSocket clients
    to provide automatic page refresh on source file changes.
    """

    def __init__(
        self,
        watch_dirs: list[Path],
        resolve_url: Callable[[Path], str | None],
        watch_patterns: list[str] | None = None,
        *,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            watch_dirs: Directories to watch for changes
            resolve_url: Maps a changed file to the page URL to reload
            watch_patterns: Glob patterns to watch (default: ["*.mdx", "*.md"])
            on_change: Called before broadcasting, e.g. to drop loaded content
        """
        self._watch_dirs = [d.resolve() for d in watch_dirs]
        self._resolve_url = resolve_url
        self._watch_patterns = watch_patterns or ["*.mdx", "*.md"]
        self._on_change = on_change
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        dirs = [d for d in self._watch_dirs if d.is_dir()]
        if not dirs:
            logger.warning("Live reload: no content directories to watch")
            return
        self._watch_task = asyncio.create_task(self._watch_files(dirs))

    async def stop(self) -> None:
        """Stop the file watcher and close all connections."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        for ws in list(self._connections):
            await ws.close()

    async def handle_websocket(self, request: web.Request) -> web.WebSocketResponse:
        """Handle WebSocket connection for live reload.

        Args:
            request: aiohttp request

        Returns:
            WebSocket response
        """
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self._connections.add(ws)

        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            self._connections.discard(ws)

        return ws

    async def _watch_files(self, dirs: list[Path]) -> None:
        """Watch for file changes and broadcast reload events."""
        async for changes in awatch(*dirs):
            await self.handle_changes(changes)

    async def handle_changes(self, changes: set[tuple[Change, str]]) -> list[str]:
        """Process one batch of file system changes.

        Args:
            changes: (change type, path) pairs as reported by watchfiles

        Returns:
            Page URLs that were broadcast
        """
        urls: list[str] = []
        for change_type, path_str in changes:
            path = Path(path_str)
            if not self._matches_patterns(path):
                continue

            url = self._resolve_url(path)
            if url is None:
                continue
            if change_type == Change.deleted and url != ALL_PAGES:
                # The page is gone, but navigation still has to drop it
                url = ALL_PAGES
            if url not in urls:
                urls.append(url)

        if not urls:
            return urls

        logger.info(f"Content changed: {', '.join(urls)}")
        if self._on_change is not None:
            self._on_change()
        for url in urls:
            await self._broadcast_reload(url)
        return urls

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path matches any watch pattern.

        Args:
            path: Path to check

        Returns:
            True if path is inside a watched directory and matches any pattern
        """
        for watch_dir in self._watch_dirs:
            try:
                relative = path.relative_to(watch_dir)
            except ValueError:
                continue
            if any(relative.match(pattern) for pattern in self._watch_patterns):
                return True
        return False

    async def _broadcast_reload(self, path: str) -> None:
        """Broadcast reload event to all connected clients.

        Args:
            path: Page URL that changed, or "*" for every page
        """
        if not self._connections:
            return

        message = json.dumps({"type": "reload", "path": path})

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_url_resolver(config: Config) -> Callable[[Path], str | None]:
    """Create a function mapping changed files to page URLs.

    Content files map to their page URL ("/docs/install/overview"). Partials
    can be included by any page, so they map to "*".

    Args:
        config: Application configuration

    Returns:
        Resolver returning None for files outside every collection
    """
    extension = config.content.extension
    partials_dir = config.partials_dir.resolve()
    content_dirs = [
        (config.content_dir(collection).resolve(), collection.url_prefix.strip("/"))
        for collection in config.collections.values()
    ]

    def resolve(path: Path) -> str | None:
        if path.is_relative_to(partials_dir):
            return ALL_PAGES
        for content_dir, url_prefix in content_dirs:
            if not path.is_relative_to(content_dir):
                continue
            relative = path.relative_to(content_dir).as_posix()
            if relative.endswith(extension):
                relative = relative[: -len(extension)]
            return f"/{url_prefix}/{relative}"
        return None

    return resolve


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get("/ws/live-reload", manager.handle_websocket)]
