from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

from shadowsync.errors import InvalidFileUrlError


def path_from_url(url: str) -> Path:
    parsed = urlparse(url)
    if parsed.scheme != "file" or parsed.netloc not in ("", "localhost"):
        raise InvalidFileUrlError(url)
    # url2pathname also percent-decodes
    path = Path(url2pathname(parsed.path))
    if not path.is_absolute():
        raise InvalidFileUrlError(url)
    return path


def url_from_path(path: Path) -> str:
    try:
        return Path(path).as_uri()
    except ValueError as err:
        raise InvalidFileUrlError(str(path)) from err
