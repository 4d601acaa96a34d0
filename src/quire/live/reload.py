"""WebSocket-based live reload for the preview server.

Watches the content (and layout/static) directories, rebuilds the site when
a watched file changes and notifies connected browsers to reload.
"""

import asyncio
import json
import logging
import weakref
from collections.abc import Callable
from fnmatch import fnmatch
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from quire.errors import QuireError

logger = logging.getLogger(__name__)

LIVE_RELOAD_PATH = "/ws/live-reload"


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload.

    Coordinates between file system watcher, site rebuilds and connected
    WebSocket clients. Rebuilds run in a worker thread, one at a time.
    """

    def __init__(
        self,
        watch_dirs: list[Path],
        watch_patterns: list[str] | None = None,
        *,
        rebuild: Callable[[], object] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            watch_dirs: Directories to watch for changes
            watch_patterns: Glob patterns to watch (default: every file)
            rebuild: Callable run in a worker thread before clients reload
        """
        self._watch_dirs = [d for d in watch_dirs if d.is_dir()]
        self._watch_patterns = watch_patterns
        self._rebuild = rebuild
        self._rebuild_lock = asyncio.Lock()
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None or not self._watch_dirs:
            return
        self._watch_task = asyncio.create_task(self._watch_files())

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

    async def _watch_files(self) -> None:
        """Watch for file changes, rebuild and broadcast reload events."""
        async for changes in awatch(*self._watch_dirs):
            changed = [
                Path(path_str)
                for change_type, path_str in changes
                if self._matches_patterns(Path(path_str))
                and (change_type != Change.deleted or self._rebuild is not None)
            ]
            if not changed:
                continue

            if not await self.rebuild():
                continue

            await self._broadcast_reload(self._to_relative(changed[0]))

    async def rebuild(self) -> bool:
        """Run the rebuild callable in a worker thread.

        Returns:
            True if the rebuild succeeded (or there is nothing to rebuild)
        """
        if self._rebuild is None:
            return True

        async with self._rebuild_lock:
            try:
                await asyncio.to_thread(self._rebuild)
            except (QuireError, OSError, ValueError) as e:
                logger.error(f"Rebuild failed: {e}")
                return False
        return True

    def _matches_patterns(self, path: Path) -> bool:
        """Check if a path lies in a watched directory and matches a pattern.

        Args:
            path: Path to check

        Returns:
            True if path matches any pattern
        """
        relative = self._to_relative(path)
        if relative is None:
            return False
        if self._watch_patterns is None:
            return True
        return any(fnmatch(relative, pattern) for pattern in self._watch_patterns)

    def _to_relative(self, path: Path) -> str | None:
        """Path relative to the watched directory that contains it."""
        for watch_dir in self._watch_dirs:
            try:
                return path.relative_to(watch_dir).as_posix()
            except ValueError:
                continue
        return None

    async def _broadcast_reload(self, path: str | None) -> None:
        """Broadcast reload event to all connected clients.

        Args:
            path: Changed file, relative to its watched directory
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


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    """Create routes for live reload WebSocket.

    Args:
        manager: LiveReloadManager instance

    Returns:
        List of route definitions
    """
    return [web.get(LIVE_RELOAD_PATH, manager.handle_websocket)]
