"""Local asset URLs understood by the viewer.

A path becomes ``asset://localhost/<encoded>``. Every byte of the
filesystem encoding of the path is percent-encoded except ASCII
alphanumerics and ``- _ . ! ~ * ' ( )``; the viewer resolves paths with
exactly this exception set, so ``/`` is encoded too. Names that are not
valid UTF-8 keep their raw bytes and decode back to the same path.
"""

import os
from urllib.parse import quote, unquote_to_bytes, urlsplit

ASSET_SCHEME = "asset"
ASSET_HOST = "localhost"

# quote() never encodes alphanumerics and "_.-~"; the rest is listed here.
_SAFE_CHARS = "!*'()"


def encode_path(path: str) -> str:
    """Percent-encode a path for use inside an asset URL."""
    return quote(os.fsencode(str(path)), safe=_SAFE_CHARS)


def decode_path(encoded: str) -> str:
    return os.fsdecode(unquote_to_bytes(encoded))


def to_asset_url(path) -> str:
    """Convert a local path into an ``asset://localhost/...`` URL."""
    return f"{ASSET_SCHEME}://{ASSET_HOST}/{encode_path(str(path))}"


def from_asset_url(url: str) -> str:
    """Recover the local path from an asset URL.

    Raises:
        ValueError: If the URL is not an asset URL.
    """
    parts = urlsplit(url)
    if parts.scheme != ASSET_SCHEME or parts.netloc != ASSET_HOST:
        raise ValueError(f"Not an asset URL: {url}")
    return decode_path(parts.path[1:])
