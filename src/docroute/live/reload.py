"""WebSocket-based live reload for development mode.

Monitors markdown sources and the sidebar file, rebuilds the site on change,
publishes the new build atomically and notifies connected clients. A failed
rebuild keeps the previous build live.
"""

import asyncio
import json
import logging
import weakref
from pathlib import Path

from aiohttp import WSMsgType, web
from watchfiles import Change, awatch

from docroute.core.build import SiteState
from docroute.core.paths import doc_path
from docroute.core.types import DocId

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Manages WebSocket connections and file watching for live reload.

    Coordinates between file system watcher, the live site state and
    connected WebSocket clients.
    """

    def __init__(
        self,
        source_dir: Path,
        state: SiteState,
        watch_patterns: list[str] | None = None,
        *,
        extra_paths: list[Path] | None = None,
    ) -> None:
        """Initialize the live reload manager.

        Args:
            source_dir: Content directory to watch for changes
            state: Live site state to rebuild and swap
            watch_patterns: Glob patterns matched from the right (default: ["*.md", "*.mdx"])
            extra_paths: Additional files that trigger a rebuild (e.g., sidebar file)
        """
        self._source_dir = source_dir.resolve()
        self._state = state
        self._watch_patterns = watch_patterns or ["*.md", "*.mdx"]
        self._extra_paths = [p.resolve() for p in extra_paths or []]
        self._connections: weakref.WeakSet[web.WebSocketResponse] = weakref.WeakSet()
        self._watch_task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
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
        """Handle WebSocket connection for live reload."""
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
        """Watch for file changes, rebuild and broadcast."""
        watch_paths = [self._source_dir, *(p for p in self._extra_paths if p.exists())]
        async for changes in awatch(*watch_paths):
            changed = [Path(p) for _, p in changes if self._is_relevant(Path(p))]
            if not changed:
                continue
            await self.handle_changes(changed, changes)

    async def handle_changes(
        self,
        changed: list[Path],
        changes: set[tuple[Change, str]] | None = None,
    ) -> bool:
        """Rebuild after a batch of changes and notify clients.

        Args:
            changed: Relevant changed paths
            changes: Raw watcher changes, for logging

        Returns:
            True if the new build was published
        """
        logger.debug("Rebuilding after %d change(s): %s", len(changed), changes)
        try:
            await asyncio.to_thread(self._state.rebuild)
        except (ValueError, OSError) as e:
            logger.error("Rebuild failed, keeping previous build: %s", e)
            await self._broadcast({"type": "error", "message": str(e)})
            return False

        for path in changed:
            await self._broadcast({"type": "reload", "path": self._to_doc_path(path)})
        return True

    def _is_relevant(self, path: Path) -> bool:
        """Check if a path is the sidebar file or matches a watch pattern."""
        if path.resolve() in self._extra_paths:
            return True
        try:
            relative = path.relative_to(self._source_dir)
        except ValueError:
            return False

        return any(relative.match(pattern) for pattern in self._watch_patterns)

    def _to_doc_path(self, file_path: Path) -> str:
        """Convert a changed file to the URL path clients should reload."""
        try:
            relative = file_path.relative_to(self._source_dir)
        except ValueError:
            return "/"
        doc_id = DocId(relative.with_suffix("").as_posix())
        entry = self._state.current.routes.by_doc_id(doc_id)
        if entry is not None:
            return entry.path
        return doc_path(
            doc_id,
            route_base_path=self._state.current.config.docs.route_base_path,
        )

    async def _broadcast(self, payload: dict[str, str]) -> None:
        if not self._connections:
            return

        message = json.dumps(payload)

        for ws in list(self._connections):
            if ws.closed:
                continue
            try:
                await ws.send_str(message)
            except ConnectionResetError:
                # Client disconnected mid-send, will be cleaned up by WeakSet
                pass


def create_live_reload_routes(manager: LiveReloadManager) -> list[web.RouteDef]:
    return [web.get("/ws/live-reload", manager.handle_websocket)]
