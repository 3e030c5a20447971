"""Tests for the debounced manifest watcher."""

from __future__ import annotations

import asyncio
import logging
import threading
import tomllib
from pathlib import Path

import pytest
import pytest_asyncio
from watchdog.events import FileModifiedEvent, FileMovedEvent, FileOpenedEvent

from shadowsync.config import SyncConfig
from shadowsync.rewriter import ManifestPathRewriter
from shadowsync.watcher import ChangeWatcher, WatchState

from tests.helpers import FakeObserver, wait_until

FAST = SyncConfig(debounce_seconds=0.1)


class StubRewriter:
    """Rewriter stand-in whose calls fail or block on demand."""

    def __init__(self, failures: dict[int, Exception] | None = None, gate: threading.Event | None = None) -> None:
        self.calls = 0
        self._failures = failures or {}
        self._gate = gate

    def rewrite(self, manifest_dir: Path, manifest_path: Path, shadow_manifest_path: Path) -> None:
        self.calls += 1
        if self._gate is not None:
            self._gate.wait(timeout=3.0)
        failure = self._failures.get(self.calls)
        if failure is not None:
            raise failure


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def shadow_manifest(tmp_path: Path) -> Path:
    shadow = tmp_path / "shadow"
    shadow.mkdir()
    return shadow / "Forc.toml"


@pytest_asyncio.fixture
async def make_watcher(project: Path, shadow_manifest: Path, observer: FakeObserver):
    created: list[ChangeWatcher] = []

    def factory(config: SyncConfig = FAST, rewriter=None) -> ChangeWatcher:
        watcher = ChangeWatcher(
            rewriter or ManifestPathRewriter(config),
            project,
            project / "Forc.toml",
            shadow_manifest,
            config=config,
            observer_factory=lambda: observer,
        )
        created.append(watcher)
        return watcher

    yield factory
    for watcher in created:
        watcher.stop()
        await watcher.wait_closed()


class TestChangeWatcher:
    @pytest.mark.asyncio
    async def test_start_runs_one_pass_immediately(self, make_watcher, observer, shadow_manifest, project):
        watcher = make_watcher()
        assert watcher.state is WatchState.IDLE
        await watcher.start()

        assert watcher.state is WatchState.WATCHING
        assert watcher.passes == 1
        assert shadow_manifest.exists()
        assert observer.started
        assert observer.path == str(project)
        assert observer.recursive is False

    @pytest.mark.asyncio
    async def test_initial_pass_does_not_block_the_loop(self, make_watcher, observer):
        gate = threading.Event()
        watcher = make_watcher(rewriter=StubRewriter(gate=gate))
        starting = asyncio.create_task(watcher.start())

        await asyncio.sleep(0.05)
        assert not starting.done()
        assert watcher.state is WatchState.IDLE

        gate.set()
        await starting
        assert watcher.state is WatchState.WATCHING
        assert watcher.passes == 1

    @pytest.mark.asyncio
    async def test_stop_during_initial_pass_never_starts_observer(self, make_watcher, observer):
        gate = threading.Event()
        watcher = make_watcher(rewriter=StubRewriter(gate=gate))
        starting = asyncio.create_task(watcher.start())
        await asyncio.sleep(0.05)

        watcher.stop()
        gate.set()
        await starting

        assert watcher.state is WatchState.STOPPED
        assert not observer.started
        assert not watcher.is_alive()

    @pytest.mark.asyncio
    async def test_burst_collapses_into_one_pass(self, make_watcher, observer, project):
        watcher = make_watcher()
        await watcher.start()
        manifest = str(project / "Forc.toml")

        for _ in range(5):
            await observer.fire(FileModifiedEvent(manifest))

        await wait_until(lambda: watcher.passes == 2)
        await asyncio.sleep(0.3)
        assert watcher.passes == 2

    @pytest.mark.asyncio
    async def test_endless_burst_flushes_at_max_wait(self, make_watcher, observer, project):
        config = SyncConfig(debounce_seconds=0.2, debounce_max_seconds=0.5)
        watcher = make_watcher(config)
        await watcher.start()
        manifest = str(project / "Forc.toml")

        loop = asyncio.get_running_loop()
        give_up = loop.time() + 3.0
        # Events arrive faster than the quiet window, so only the max wait can flush.
        while watcher.passes < 2 and loop.time() < give_up:
            await observer.fire(FileModifiedEvent(manifest))
            await asyncio.sleep(0.05)

        assert watcher.passes >= 2

    @pytest.mark.asyncio
    async def test_edit_is_propagated(self, make_watcher, observer, project, shadow_manifest):
        watcher = make_watcher()
        await watcher.start()

        manifest = project / "Forc.toml"
        manifest.write_text(manifest.read_text() + 'extra = { path = "../foo" }\n')
        await observer.fire(FileModifiedEvent(str(manifest)))

        await wait_until(lambda: "extra" in shadow_manifest.read_text())
        deps = tomllib.loads(shadow_manifest.read_text())["dependencies"]
        assert deps["extra"]["path"] == str((project.parent / "foo").resolve())

    @pytest.mark.asyncio
    async def test_save_via_rename_triggers(self, make_watcher, observer, project):
        watcher = make_watcher()
        await watcher.start()

        await observer.fire(FileMovedEvent(str(project / ".Forc.toml.swp"), str(project / "Forc.toml")))
        await wait_until(lambda: watcher.passes == 2)

    @pytest.mark.asyncio
    async def test_unrelated_events_ignored(self, make_watcher, observer, project):
        watcher = make_watcher()
        await watcher.start()

        await observer.fire(FileModifiedEvent(str(project / "README.md")))
        await observer.fire(FileOpenedEvent(str(project / "Forc.toml")))
        await asyncio.sleep(0.3)
        assert watcher.passes == 1

    @pytest.mark.asyncio
    async def test_failed_pass_is_logged_and_watching_continues(
        self, make_watcher, observer, project, shadow_manifest, caplog
    ):
        watcher = make_watcher()
        await watcher.start()
        manifest = project / "Forc.toml"
        good = manifest.read_text()

        manifest.write_text("[project\n")
        with caplog.at_level(logging.ERROR, logger="shadowsync.watcher"):
            await observer.fire(FileModifiedEvent(str(manifest)))
            await wait_until(lambda: watcher.passes == 2)
        assert "failed to edit manifest dependency paths" in caplog.text
        assert watcher.is_alive()

        manifest.write_text(good.replace("core", "corelib"))
        await observer.fire(FileModifiedEvent(str(manifest)))
        await wait_until(lambda: "corelib" in shadow_manifest.read_text())

    @pytest.mark.asyncio
    async def test_unexpected_error_is_logged_and_watching_continues(self, make_watcher, observer, project, caplog):
        rewriter = StubRewriter(failures={2: ValueError("boom")})
        watcher = make_watcher(rewriter=rewriter)
        await watcher.start()
        manifest = str(project / "Forc.toml")

        with caplog.at_level(logging.ERROR, logger="shadowsync.watcher"):
            await observer.fire(FileModifiedEvent(manifest))
            await wait_until(lambda: watcher.passes == 2)
        assert "unexpected error while editing manifest dependency paths" in caplog.text
        assert "boom" in caplog.text
        assert watcher.is_alive()

        await observer.fire(FileModifiedEvent(manifest))
        await wait_until(lambda: rewriter.calls == 3)
        assert watcher.is_alive()

    @pytest.mark.asyncio
    async def test_failed_initial_pass_still_starts(self, make_watcher, project):
        (project / "Forc.toml").write_text("[project\n")
        watcher = make_watcher()
        await watcher.start()
        assert watcher.state is WatchState.WATCHING

    @pytest.mark.asyncio
    async def test_stop_is_idempotent_and_final(self, make_watcher, observer, project):
        watcher = make_watcher()
        await watcher.start()
        watcher.stop()
        watcher.stop()
        await watcher.wait_closed()

        assert watcher.state is WatchState.STOPPED
        assert observer.stopped
        assert not watcher.is_alive()

        await observer.fire(FileModifiedEvent(str(project / "Forc.toml")))
        await asyncio.sleep(0.3)
        assert watcher.passes == 1

    @pytest.mark.asyncio
    async def test_cannot_start_twice(self, make_watcher):
        watcher = make_watcher()
        await watcher.start()
        with pytest.raises(RuntimeError):
            await watcher.start()

    @pytest.mark.asyncio
    async def test_stop_before_start(self, make_watcher, observer):
        watcher = make_watcher()
        watcher.stop()
        assert watcher.state is WatchState.STOPPED
        assert not observer.stopped
        with pytest.raises(RuntimeError):
            await watcher.start()
        assert not observer.started
