import os
import shutil
import tempfile
from pathlib import Path


def _temp_sibling(target: Path) -> tuple[int, Path]:
    fd, name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    return fd, Path(name)


def atomic_write_text(target: Path, content: str) -> None:
    """Write ``content`` to ``target`` so readers only ever see the old or the new file."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = _temp_sibling(target)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def atomic_copy(source: Path, target: Path) -> None:
    fd, tmp = _temp_sibling(target)
    os.close(fd)
    try:
        shutil.copyfile(source, tmp)
        shutil.copymode(source, tmp)
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
