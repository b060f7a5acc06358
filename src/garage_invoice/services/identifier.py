from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit


LISTING_ID_RE = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)


def extract_listing_id(url: str) -> Optional[str]:
    """Return the last UUID-shaped token in the URL's path, or ``None``.

    Listing paths look like ``/listing/1998-pierce-ladder-<uuid>``; the slug
    can contain hex-like runs, so the trailing match wins. Anything that does
    not parse as an absolute URL yields ``None`` rather than raising.
    """
    try:
        parts = urlsplit(url)
    except (TypeError, ValueError):
        return None
    if not parts.scheme or not parts.netloc:
        return None
    matches = LISTING_ID_RE.findall(parts.path)
    return matches[-1] if matches else None
