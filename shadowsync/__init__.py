from shadowsync.config import SyncConfig
from shadowsync.registry import Directory, DirectoryRegistry
from shadowsync.spans import SourceId, SourceRegistry, SourceResolver, Span
from shadowsync.copier import SelectiveCopier
from shadowsync.manifest import ManifestFile, PackageManifest, WorkspaceManifest, load_manifest
from shadowsync.rewriter import ManifestPathRewriter
from shadowsync.watcher import ChangeWatcher, WatchState
from shadowsync.workspace import SyncWorkspace
from shadowsync.translate import is_under_shadow_root, translate_path, translate_span, translate_url

__all__ = [
    "SyncConfig",
    "Directory",
    "DirectoryRegistry",
    "SourceId",
    "SourceRegistry",
    "SourceResolver",
    "Span",
    "SelectiveCopier",
    "ManifestFile",
    "PackageManifest",
    "WorkspaceManifest",
    "load_manifest",
    "ManifestPathRewriter",
    "ChangeWatcher",
    "WatchState",
    "SyncWorkspace",
    "is_under_shadow_root",
    "translate_path",
    "translate_span",
    "translate_url",
]
