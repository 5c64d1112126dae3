"""Public share links.

A share identifier resolves to exactly one URL shape,
``<origin>/share/<id>``; there is no other addressing scheme.
"""

from __future__ import annotations

from urllib.parse import unquote, urlsplit

SHARE_PATH_PREFIX = "/share/"


def build_share_link(file_id: str, origin: str) -> str:
    """Build the public link for a file.

    Args:
        file_id: File identifier.
        origin: Scheme and host the UI is served from.

    Returns:
        Share URL.
    """
    if not file_id:
        raise ValueError("file_id must be non-empty")
    return f"{origin.rstrip('/')}{SHARE_PATH_PREFIX}{file_id}"


def parse_share_link(url: str) -> str:
    """Extract the file identifier from a share URL.

    Raises:
        ValueError: If the URL is not a share link.
    """
    path = urlsplit(url).path
    if not path.startswith(SHARE_PATH_PREFIX):
        raise ValueError(f"Not a share link: {url}")
    file_id = unquote(path[len(SHARE_PATH_PREFIX):]).strip("/")
    if not file_id or "/" in file_id:
        raise ValueError(f"Not a share link: {url}")
    return file_id
