import threading
from enum import StrEnum
from pathlib import Path

from shadowsync.errors import DirectoryError, ManifestDirNotFoundError, TempDirNotFoundError


class Directory(StrEnum):
    MANIFEST = "manifest"
    SHADOW = "shadow"


_NOT_FOUND: dict[Directory, type[DirectoryError]] = {
    Directory.MANIFEST: ManifestDirNotFoundError,
    Directory.SHADOW: TempDirNotFoundError,
}


class DirectoryRegistry:
    """Per-session map from a directory role to its absolute path.

    Safe to share between threads; every access takes the internal lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._paths: dict[Directory, Path] = {}

    def set(self, role: Directory, path: Path) -> None:
        with self._lock:
            self._paths[role] = Path(path)

    def set_many(self, entries: dict[Directory, Path]) -> None:
        with self._lock:
            for role, path in entries.items():
                self._paths[role] = Path(path)

    def get(self, role: Directory) -> Path:
        with self._lock:
            path = self._paths.get(role)
        if path is None:
            raise _NOT_FOUND[role]()
        return path

    def contains(self, role: Directory) -> bool:
        with self._lock:
            return role in self._paths

    def snapshot(self) -> dict[Directory, Path]:
        with self._lock:
            return dict(self._paths)

    def clear(self) -> None:
        with self._lock:
            self._paths.clear()
