"""chunkshare value objects."""

import re
from typing import NewType

# Type-safe identifiers
FileId = NewType('FileId', str)
Principal = NewType('Principal', str)

ANONYMOUS = Principal("anonymous")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: str) -> str:
    """Make a filename safe for use inside an identifier and a URL path.

    Args:
        filename: Owner-supplied display name.

    Returns:
        Name with every character outside ``[A-Za-z0-9._-]`` replaced by ``-``.
    """
    return _UNSAFE_CHARS.sub("-", filename) or "file"


def create_file_id(filename: str, timestamp_ns: int) -> FileId:
    """Create a file ID.

    Args:
        filename: Display name of the file.
        timestamp_ns: Declaration time in nanoseconds.

    Returns:
        File ID of the form ``<filename>_<timestamp>``.
    """
    return FileId(f"{sanitize_filename(filename)}_{timestamp_ns}")


def filename_from_file_id(file_id: str) -> str:
    """Recover a best-effort filename from a file ID.

    Drops the trailing ``_<timestamp>`` segment; falls back to the raw ID
    when there is nothing left.
    """
    head, sep, _ = file_id.rpartition("_")
    if not sep or not head:
        return file_id
    return head


def is_anonymous(principal: str) -> bool:
    return not principal or principal == ANONYMOUS
