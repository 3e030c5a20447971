import asyncio
import logging
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from shadowsync.config import SyncConfig
from shadowsync.errors import ShadowSyncError
from shadowsync.rewriter import ManifestPathRewriter

logger = logging.getLogger(__name__)

_WRITE_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class WatchState(StrEnum):
    IDLE = "idle"
    WATCHING = "watching"
    STOPPED = "stopped"


class ManifestEventHandler(FileSystemEventHandler):
    def __init__(self, manifest_name: str, on_change: Callable[[], None]) -> None:
        self._manifest_name = manifest_name
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        # Opened/closed-no-write events come from our own reads of the manifest.
        if event.is_directory or event.event_type not in _WRITE_EVENTS:
            return
        names = {Path(str(event.src_path)).name}
        dest = getattr(event, "dest_path", "")
        if dest:
            names.add(Path(str(dest)).name)
        if self._manifest_name in names:
            self._on_change()


class ChangeWatcher:
    """Keeps the shadow manifest in step with edits to the real one.

    Events from the watchdog thread are pushed onto a bounded queue; the
    debounce task collapses each burst into one rewrite pass.
    """

    def __init__(
        self,
        rewriter: ManifestPathRewriter,
        manifest_dir: Path,
        manifest_path: Path,
        shadow_manifest_path: Path,
        config: SyncConfig | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._config = config or SyncConfig()
        self._rewriter = rewriter
        self._manifest_dir = Path(manifest_dir)
        self._manifest_path = Path(manifest_path)
        self._shadow_manifest_path = Path(shadow_manifest_path)
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._task: asyncio.Task[None] | None = None
        self._state = WatchState.IDLE
        self.passes = 0

    @property
    def state(self) -> WatchState:
        return self._state

    async def start(self) -> None:
        if self._state is not WatchState.IDLE:
            raise RuntimeError(f"watcher cannot start from state {self._state}")
        loop = asyncio.get_running_loop()

        await asyncio.to_thread(self._rewrite_pass)
        if self._state is not WatchState.IDLE:
            return

        queue: asyncio.Queue[None] = asyncio.Queue(maxsize=self._config.watch_queue_size)

        def offer() -> None:
            if self._state is not WatchState.WATCHING:
                return
            try:
                queue.put_nowait(None)
            except asyncio.QueueFull:
                pass

        def notify() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(offer)

        handler = ManifestEventHandler(self._config.manifest_file_name, notify)
        observer = self._observer_factory()
        observer.schedule(handler, str(self._manifest_dir), recursive=False)
        observer.start()
        self._observer = observer
        self._task = loop.create_task(self._run(queue), name=f"watch {self._manifest_dir}")
        self._state = WatchState.WATCHING
        logger.debug("watching %s", self._manifest_dir)

    def stop(self) -> None:
        if self._state is WatchState.STOPPED:
            return
        self._state = WatchState.STOPPED
        if self._task is not None:
            self._task.cancel()
        if self._observer is not None:
            self._observer.stop()
            if self._observer.is_alive():
                self._observer.join()
            self._observer = None
        logger.debug("stopped watching %s", self._manifest_dir)

    async def wait_closed(self) -> None:
        if self._task is None:
            return
        await asyncio.wait({self._task})

    def is_alive(self) -> bool:
        return self._state is WatchState.WATCHING and self._task is not None and not self._task.done()

    async def _run(self, queue: asyncio.Queue[None]) -> None:
        loop = asyncio.get_running_loop()
        while True:
            await queue.get()
            # Flush after a quiet window, or once the burst has run for the max wait.
            deadline = loop.time() + self._config.debounce_max_seconds
            while True:
                timeout = min(self._config.debounce_seconds, deadline - loop.time())
                if timeout <= 0:
                    break
                try:
                    await asyncio.wait_for(queue.get(), timeout=timeout)
                except TimeoutError:
                    break
            await asyncio.to_thread(self._rewrite_pass)

    def _rewrite_pass(self) -> None:
        try:
            self._rewriter.rewrite(self._manifest_dir, self._manifest_path, self._shadow_manifest_path)
        except ShadowSyncError as err:
            logger.error("failed to edit manifest dependency paths: %s", err)
        except Exception:
            logger.exception("unexpected error while editing manifest dependency paths")
        finally:
            self.passes += 1
