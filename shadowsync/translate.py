"""Move locations between the real project tree and its shadow copy.

Every function here is pure apart from the source lookup in
``translate_span``. A location keeps the same bytes; only the root it is
expressed under changes.
"""

from pathlib import Path

from shadowsync.config import SHADOW_DIR_PREFIX
from shadowsync.errors import PathNotUnderRootError, SpanRebuildError
from shadowsync.spans import SourceResolver, Span
from shadowsync.utils.urls import path_from_url, url_from_path


def translate_path(path: Path, from_root: Path, to_root: Path) -> Path:
    try:
        relative = Path(path).relative_to(from_root)
    except ValueError as err:
        raise PathNotUnderRootError(path, from_root) from err
    return Path(to_root) / relative


def translate_url(url: str, from_root: Path, to_root: Path) -> str:
    return url_from_path(translate_path(path_from_url(url), from_root, to_root))


def translate_span(span: Span, sources: SourceResolver, from_root: Path, to_root: Path) -> Span:
    path = sources.path_of(span.source_id)
    if path is None:
        raise SpanRebuildError(f"<source {span.source_id}>")
    converted = translate_path(path, from_root, to_root)
    source_id = sources.resolve_or_create(converted)
    if source_id is None:
        raise SpanRebuildError(converted)
    return span.with_source(source_id)


def is_under_shadow_root(location: Path | str, prefix: str = SHADOW_DIR_PREFIX) -> bool:
    # Works without a registry, the prefix is baked into the temp dir name.
    return prefix in str(location)
