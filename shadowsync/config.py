from dataclasses import dataclass


MANIFEST_FILE_NAME = "Forc.toml"
LOCK_FILE_NAME = "Forc.lock"
SOURCE_EXTENSION = "sw"
SHADOW_DIR_PREFIX = "SWAY_LSP_TEMP_DIR"
DEBOUNCE_SECONDS = 0.5
DEBOUNCE_MAX_SECONDS = 2.0
WATCH_QUEUE_SIZE = 10


@dataclass(frozen=True)
class SyncConfig:
    manifest_file_name: str = MANIFEST_FILE_NAME
    lock_file_name: str = LOCK_FILE_NAME
    source_extension: str = SOURCE_EXTENSION
    shadow_dir_prefix: str = SHADOW_DIR_PREFIX
    debounce_seconds: float = DEBOUNCE_SECONDS
    debounce_max_seconds: float = DEBOUNCE_MAX_SECONDS
    watch_queue_size: int = WATCH_QUEUE_SIZE

    def is_relevant_file(self, name: str) -> bool:
        return (
            name.endswith(f".{self.source_extension}")
            or name == self.manifest_file_name
            or name == self.lock_file_name
        )
