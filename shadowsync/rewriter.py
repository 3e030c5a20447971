"""Rewrite relative dependency paths in a copied manifest.

Two parses of the same text are kept apart on purpose: the strict schema
decides which entries carry a relative ``path``, and the tomlkit document
applies the change while keeping every other byte of the file as it was.
"""

import logging
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import InlineTable, Table
from tomlkit.toml_document import TOMLDocument

from shadowsync.config import SyncConfig
from shadowsync.errors import (
    CanonicalizeFailedError,
    ManifestParseError,
    ManifestReadError,
    UnableToWriteFileError,
)
from shadowsync.manifest import Dependency, DependencyDetails, PackageManifest, parse_manifest
from shadowsync.utils.file_ops import atomic_write_text

logger = logging.getLogger(__name__)


class ManifestPathRewriter:
    def __init__(self, config: SyncConfig | None = None) -> None:
        self._config = config or SyncConfig()

    def rewrite(self, manifest_real_dir: Path, manifest_real_path: Path, manifest_shadow_path: Path) -> None:
        text = self._read(manifest_real_path)

        try:
            doc = tomlkit.parse(text)
        except TOMLKitError as err:
            raise ManifestParseError(manifest_real_path, str(err)) from err
        manifest = parse_manifest(text, manifest_real_path)

        if isinstance(manifest, PackageManifest):
            for table_name, deps in manifest.dependency_tables().items():
                if deps:
                    self._rewrite_table(doc, table_name, deps, Path(manifest_real_dir))

        try:
            atomic_write_text(Path(manifest_shadow_path), tomlkit.dumps(doc))
        except OSError as err:
            raise UnableToWriteFileError(manifest_shadow_path, str(err)) from err
        logger.debug("wrote shadow manifest %s", manifest_shadow_path)

    @staticmethod
    def _read(path: Path) -> str:
        try:
            # newline="" keeps CRLF manifests byte-identical
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as err:
            raise ManifestReadError(path, str(err)) from err

    @staticmethod
    def _rewrite_table(
        doc: TOMLDocument,
        table_name: str,
        deps: dict[str, Dependency],
        manifest_dir: Path,
    ) -> None:
        table = doc.get(table_name)
        if not isinstance(table, (Table, InlineTable)):
            return
        for name, dep in deps.items():
            if not isinstance(dep, DependencyDetails) or not dep.has_relative_path():
                continue
            target = manifest_dir / dep.path
            try:
                absolute = target.resolve(strict=True)
            # symlink loops raise RuntimeError before 3.13
            except (OSError, RuntimeError) as err:
                raise CanonicalizeFailedError(target) from err

            entry = table.get(name)
            if isinstance(entry, (Table, InlineTable)):
                entry["path"] = str(absolute)
                logger.debug("%s.%s path -> %s", table_name, name, absolute)
