"""Error types raised while building and translating a shadow workspace."""

from pathlib import Path


class ShadowSyncError(Exception):
    """Base class for every error raised by shadowsync."""


class DirectoryError(ShadowSyncError):
    """Something went wrong resolving, creating or translating a directory."""


class ManifestDirNotFoundError(DirectoryError):
    def __init__(self) -> None:
        super().__init__("manifest directory is not registered for this session")


class TempDirNotFoundError(DirectoryError):
    def __init__(self) -> None:
        super().__init__("shadow directory is not registered for this session")


class CanonicalizeFailedError(DirectoryError):
    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(f"unable to canonicalize path: {self.path}")


class TempDirFailedError(DirectoryError):
    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(f"unable to create temporary directory: {error}")


class CantExtractProjectNameError(DirectoryError):
    def __init__(self, dir: Path | str) -> None:
        self.dir = str(dir)
        super().__init__(f"unable to extract a project name from {self.dir}")


class PathNotUnderRootError(DirectoryError):
    """Stripping a root prefix failed because the path lives elsewhere."""

    def __init__(self, path: Path | str, root: Path | str) -> None:
        self.path = str(path)
        self.root = str(root)
        super().__init__(f"{self.path} is not under {self.root}")


class CopyContentsFailedError(DirectoryError):
    def __init__(self, error: str) -> None:
        self.error = error
        super().__init__(f"failed to copy workspace contents: {error}")


class SpanRebuildError(DirectoryError):
    def __init__(self, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(f"unable to resolve a source id for {self.path}")


class InvalidFileUrlError(DirectoryError):
    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"not an absolute file url: {url}")


class DocumentError(ShadowSyncError):
    """Reading, parsing or writing the manifest failed."""


class ManifestFileNotFoundError(DocumentError):
    def __init__(self, dir: Path | str) -> None:
        self.dir = str(dir)
        super().__init__(f"no package manifest found in {self.dir}")


class ManifestReadError(DocumentError):
    def __init__(self, path: Path | str, error: str) -> None:
        self.path = str(path)
        self.error = error
        super().__init__(f"unable to read {self.path}: {error}")


class ManifestParseError(DocumentError):
    def __init__(self, path: Path | str, error: str) -> None:
        self.path = str(path)
        self.error = error
        super().__init__(f"failed to parse {self.path}: {error}")


class UnableToWriteFileError(DocumentError):
    def __init__(self, path: Path | str, error: str) -> None:
        self.path = str(path)
        self.error = error
        super().__init__(f"unable to write {self.path}: {error}")
