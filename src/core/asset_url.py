"""Object key derivation for public asset URLs.

This module centralizes how a stored image URL maps to the key the
object storage service addresses it by. Lifecycle and reconciliation
code share it so both agree on the same key for the same URL.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from core.constants import ASSET_DOMAIN_MARKER, ASSET_PATH_DELIMITER

_VERSION_SEGMENT = re.compile(r"^v\d+$")


def derive_object_key(url: str | None) -> str | None:
    """Derive the storage object key from a public asset URL.

    Example::

        https://res.cloudinary.com/demo/image/upload/v1234/trk-inventory/barang/a.jpg
        -> trk-inventory/barang/a

    Args:
        url: Public asset URL.

    Returns:
        Object key, or ``None`` when the URL lacks the storage domain
        or the upload delimiter, or leaves nothing after derivation.
    """
    if not url or ASSET_DOMAIN_MARKER not in url:
        return None
    path = urlsplit(url).path
    if ASSET_PATH_DELIMITER not in path:
        return None
    tail = path.split(ASSET_PATH_DELIMITER, 1)[1]
    segments = [
        segment for segment in tail.split("/") if segment and not _VERSION_SEGMENT.match(segment)
    ]
    if not segments:
        return None
    segments[-1] = _strip_extension(segments[-1])
    if not segments[-1]:
        return None
    return "/".join(segments)


def is_asset_url(value: str | None) -> bool:
    """Return whether a value is a fully-qualified http(s) URL."""
    if not value:
        return False
    parsed = urlsplit(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _strip_extension(segment: str) -> str:
    stem, dot, _ = segment.rpartition(".")
    if not dot:
        return segment
    return stem
