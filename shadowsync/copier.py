import logging
from pathlib import Path

from shadowsync.config import SyncConfig
from shadowsync.utils.file_ops import atomic_copy

logger = logging.getLogger(__name__)


class SelectiveCopier:
    """Mirror only the files a Forc build needs: sources, manifest and lockfile.

    Target directories are created on demand, so subtrees holding nothing
    relevant never show up in the mirror.
    """

    def __init__(self, config: SyncConfig | None = None) -> None:
        self._config = config or SyncConfig()

    def copy(self, source_dir: Path, target_dir: Path) -> bool:
        copied = False
        for entry in sorted(Path(source_dir).iterdir()):
            if entry.is_symlink() and entry.is_dir():
                continue
            if entry.is_dir():
                if self.copy(entry, Path(target_dir) / entry.name):
                    copied = True
                continue
            if not entry.is_file() or not self._config.is_relevant_file(entry.name):
                continue
            if not copied:
                Path(target_dir).mkdir(parents=True, exist_ok=True)
                copied = True
            atomic_copy(entry, Path(target_dir) / entry.name)
            logger.debug("copied %s", entry)
        return copied
