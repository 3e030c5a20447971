import logging
import shutil
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from shadowsync.config import SyncConfig
from shadowsync.copier import SelectiveCopier
from shadowsync.errors import (
    CanonicalizeFailedError,
    CantExtractProjectNameError,
    CopyContentsFailedError,
    ManifestFileNotFoundError,
    ShadowSyncError,
    SpanRebuildError,
    TempDirFailedError,
)
from shadowsync.manifest import find_manifest_dir, load_manifest
from shadowsync.registry import Directory, DirectoryRegistry
from shadowsync.rewriter import ManifestPathRewriter
from shadowsync.spans import SourceResolver, Span
from shadowsync.translate import is_under_shadow_root, translate_path, translate_span, translate_url
from shadowsync.watcher import ChangeWatcher

logger = logging.getLogger(__name__)


class SyncWorkspace:
    """One session's shadow copy of a Forc project.

    The real project lives under the manifest root, the copy under the
    shadow root. Both are held in ``directories``; until both are set,
    anything that needs them raises instead of guessing.
    """

    def __init__(
        self,
        config: SyncConfig | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._config = config or SyncConfig()
        self.directories = DirectoryRegistry()
        self._copier = SelectiveCopier(self._config)
        self._rewriter = ManifestPathRewriter(self._config)
        self._observer_factory = observer_factory
        self._watcher: ChangeWatcher | None = None
        self._watcher_lock = threading.Lock()

    @property
    def config(self) -> SyncConfig:
        return self._config

    @property
    def watcher(self) -> ChangeWatcher | None:
        return self._watcher

    def create_from_workspace(self, manifest_dir: Path) -> None:
        found = find_manifest_dir(Path(manifest_dir), self._config.manifest_file_name)
        if found is None:
            raise ManifestFileNotFoundError(manifest_dir)
        try:
            manifest = load_manifest(found / self._config.manifest_file_name)
        except ShadowSyncError as err:
            raise ManifestFileNotFoundError(manifest_dir) from err
        if not manifest.is_package:
            raise ManifestFileNotFoundError(manifest_dir)

        try:
            real_dir = manifest.dir.resolve(strict=True)
        except (OSError, RuntimeError) as err:
            raise CanonicalizeFailedError(manifest.dir) from err

        project_name = real_dir.name
        if not project_name:
            raise CantExtractProjectNameError(real_dir)

        try:
            temp_dir = Path(tempfile.mkdtemp(prefix=self._config.shadow_dir_prefix))
        except OSError as err:
            raise TempDirFailedError(str(err)) from err
        try:
            shadow_dir = temp_dir.resolve(strict=True) / project_name
        except (OSError, RuntimeError) as err:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise CanonicalizeFailedError(temp_dir) from err

        self.directories.set_many({Directory.MANIFEST: real_dir, Directory.SHADOW: shadow_dir})
        logger.debug("shadow root for %s is %s", real_dir, shadow_dir)

    def resync(self) -> None:
        """Overwrite the shadow tree with the current state of the workspace."""
        self.clone_manifest_dir_to_shadow()
        manifest_path = self.manifest_path()
        shadow_manifest_path = self.shadow_manifest_path()
        if manifest_path is not None and shadow_manifest_path is not None:
            self._rewriter.rewrite(self.manifest_dir(), manifest_path, shadow_manifest_path)

    def clone_manifest_dir_to_shadow(self) -> None:
        source, target = self.manifest_dir(), self.shadow_dir()
        try:
            self._copier.copy(source, target)
        except OSError as err:
            raise CopyContentsFailedError(str(err)) from err

    async def watch_and_sync(self) -> ChangeWatcher:
        """Rewrite the shadow manifest once, then keep watching the real one."""
        manifest_dir = self.manifest_dir()
        shadow_dir = self.shadow_dir()
        watcher = ChangeWatcher(
            self._rewriter,
            manifest_dir,
            manifest_dir / self._config.manifest_file_name,
            shadow_dir / self._config.manifest_file_name,
            config=self._config,
            observer_factory=self._observer_factory,
        )
        with self._watcher_lock:
            previous, self._watcher = self._watcher, watcher
        if previous is not None:
            previous.stop()
        await watcher.start()
        return watcher

    def stop_watching(self) -> None:
        with self._watcher_lock:
            watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()

    def teardown(self) -> None:
        """Remove the shadow tree. Cleanup is best effort and never raises."""
        self.stop_watching()
        shadow = self.directories.snapshot().get(Directory.SHADOW)
        self.directories.clear()
        if shadow is None:
            return
        temp_dir = shadow.parent
        if not temp_dir.name.startswith(self._config.shadow_dir_prefix):
            return
        try:
            shutil.rmtree(temp_dir)
        except OSError as err:
            logger.debug("could not remove %s: %s", temp_dir, err)

    def manifest_dir(self) -> Path:
        return self.directories.get(Directory.MANIFEST)

    def shadow_dir(self) -> Path:
        return self.directories.get(Directory.SHADOW)

    def manifest_path(self) -> Path | None:
        if not self.directories.contains(Directory.MANIFEST):
            return None
        return self.manifest_dir() / self._config.manifest_file_name

    def shadow_manifest_path(self) -> Path | None:
        if not self.directories.contains(Directory.SHADOW):
            return None
        return self.shadow_dir() / self._config.manifest_file_name

    def is_in_shadow(self, location: Path | str) -> bool:
        return is_under_shadow_root(location, self._config.shadow_dir_prefix)

    def to_shadow_path(self, path: Path) -> Path:
        return translate_path(path, self.manifest_dir(), self.shadow_dir())

    def to_real_path(self, path: Path) -> Path:
        return translate_path(path, self.shadow_dir(), self.manifest_dir())

    def to_shadow_url(self, url: str) -> str:
        """Point a client url at the same file inside the shadow tree."""
        return translate_url(url, self.manifest_dir(), self.shadow_dir())

    def to_real_url(self, url: str) -> str:
        return translate_url(url, self.shadow_dir(), self.manifest_dir())

    def to_real_span(self, span: Span, sources: SourceResolver) -> Span:
        """Re-home a shadow span onto the real file; other spans pass through."""
        path = sources.path_of(span.source_id)
        if path is None:
            raise SpanRebuildError(f"<source {span.source_id}>")
        if not self.is_in_shadow(path):
            return span
        return translate_span(span, sources, self.shadow_dir(), self.manifest_dir())

    def map_to_real_if_in_shadow(self, url: str) -> str:
        # Urls outside the shadow tree point at dependencies and stay as they are.
        if not self.is_in_shadow(url):
            return url
        return self.to_real_url(url)
