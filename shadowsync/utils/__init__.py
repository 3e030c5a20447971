from shadowsync.utils.file_ops import atomic_copy, atomic_write_text
from shadowsync.utils.urls import path_from_url, url_from_path

__all__ = ["atomic_copy", "atomic_write_text", "path_from_url", "url_from_path"]
