from __future__ import annotations

import asyncio
from collections.abc import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler


class FakeObserver:
    """Stands in for a watchdog observer; tests dispatch events by hand."""

    def __init__(self) -> None:
        self.handler: FileSystemEventHandler | None = None
        self.path: str | None = None
        self.recursive: bool | None = None
        self.started = False
        self.stopped = False

    def schedule(self, handler: FileSystemEventHandler, path: str, recursive: bool = False) -> None:
        self.handler, self.path, self.recursive = handler, path, recursive

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def is_alive(self) -> bool:
        return False

    def join(self, timeout: float | None = None) -> None:
        pass

    async def fire(self, event: FileSystemEvent) -> None:
        assert self.handler is not None
        # events arrive from the observer thread in real life
        await asyncio.to_thread(self.handler.dispatch, event)


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
