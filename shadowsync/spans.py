import threading
from dataclasses import dataclass, replace
from pathlib import Path
from typing import NewType, Protocol

SourceId = NewType("SourceId", int)


@dataclass(frozen=True)
class Span:
    source_id: SourceId
    start: int
    end: int

    def with_source(self, source_id: SourceId) -> "Span":
        return replace(self, source_id=source_id)


class SourceResolver(Protocol):
    """Hands out root-scoped source ids; two copies of a file get different ids."""

    def resolve_or_create(self, path: Path) -> SourceId | None: ...

    def path_of(self, source_id: SourceId) -> Path | None: ...


class SourceRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids: dict[Path, SourceId] = {}
        self._paths: dict[SourceId, Path] = {}

    def resolve_or_create(self, path: Path) -> SourceId | None:
        path = Path(path)
        if not path.is_absolute():
            return None
        with self._lock:
            source_id = self._ids.get(path)
            if source_id is None:
                source_id = SourceId(len(self._ids))
                self._ids[path] = source_id
                self._paths[source_id] = path
            return source_id

    def path_of(self, source_id: SourceId) -> Path | None:
        with self._lock:
            return self._paths.get(source_id)
