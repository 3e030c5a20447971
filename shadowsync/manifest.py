"""Strict reader for the parts of ``Forc.toml`` that shadowsync cares about.

The models reject malformed dependency entries but tolerate project keys
they do not know about, since only dependency paths are acted upon.
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shadowsync.config import MANIFEST_FILE_NAME
from shadowsync.errors import ManifestParseError, ManifestReadError


class DependencyDetails(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str | None = None
    git: str | None = None
    branch: str | None = None
    tag: str | None = None
    rev: str | None = None
    version: str | None = None
    package: str | None = None
    ipfs: str | None = None
    namespace: str | None = None
    salt: str | None = None

    def has_relative_path(self) -> bool:
        return self.path is not None and not Path(self.path).is_absolute()


Dependency = str | DependencyDetails


class Project(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    entry: str = "main.sw"
    authors: list[str] = Field(default_factory=list)
    license: str | None = None


class PackageManifest(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    project: Project
    dependencies: dict[str, Dependency] = Field(default_factory=dict)
    contract_dependencies: dict[str, Dependency] = Field(
        default_factory=dict, alias="contract-dependencies"
    )

    def dependency_tables(self) -> dict[str, dict[str, Dependency]]:
        """Dependency tables keyed by their name in the TOML document."""
        return {
            "dependencies": self.dependencies,
            "contract-dependencies": self.contract_dependencies,
        }


class Workspace(BaseModel):
    model_config = ConfigDict(extra="allow")

    members: list[str] = Field(default_factory=list)


class WorkspaceManifest(BaseModel):
    model_config = ConfigDict(extra="allow")

    workspace: Workspace


Manifest = PackageManifest | WorkspaceManifest


@dataclass(frozen=True)
class ManifestFile:
    path: Path
    manifest: Manifest

    @property
    def dir(self) -> Path:
        return self.path.parent

    @property
    def is_package(self) -> bool:
        return isinstance(self.manifest, PackageManifest)


def parse_manifest(text: str, path: Path) -> Manifest:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as err:
        raise ManifestParseError(path, str(err)) from err

    if "workspace" in data and "project" in data:
        raise ManifestParseError(path, "a manifest cannot declare both [project] and [workspace]")
    try:
        if "workspace" in data:
            return WorkspaceManifest.model_validate(data)
        return PackageManifest.model_validate(data)
    except ValidationError as err:
        raise ManifestParseError(path, str(err)) from err


def load_manifest(path: Path) -> ManifestFile:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ManifestReadError(path, str(err)) from err
    return ManifestFile(path=path, manifest=parse_manifest(text, path))


def find_manifest_dir(start: Path, manifest_name: str = MANIFEST_FILE_NAME) -> Path | None:
    """Walk from ``start`` up to the filesystem root looking for a manifest."""
    start = Path(start).absolute()
    for candidate in (start, *start.parents):
        if (candidate / manifest_name).is_file():
            return candidate
    return None
