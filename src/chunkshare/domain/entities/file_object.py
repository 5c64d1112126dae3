"""File metadata entities.

Two distinct shapes describe a stored file:

* ``FileObject`` is the authoritative record, only visible to the owner.
* ``ReconstructedFileObject`` is a best-effort view rebuilt from chunk bytes
  for non-owners of a shared file. Owner and upload time are not recoverable
  from chunks, so it never claims them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def preview_kind(content_type: str) -> str:
    """Classify a media type for preview rendering.

    Returns:
        "image", "video" or "other".
    """
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("video/"):
        return "video"
    return "other"


@dataclass
class FileObject:
    """Authoritative metadata of an uploaded file."""

    id: str
    filename: str
    content_type: str
    owner: str
    size: int
    chunk_count: int
    uploaded: datetime = field(default_factory=utcnow)
    download_count: int = 0
    is_shared: bool = False
    finalized: bool = False

    @property
    def authoritative(self) -> bool:
        return True

    @property
    def preview_kind(self) -> str:
        return preview_kind(self.content_type)


@dataclass
class ReconstructedFileObject:
    """Degraded metadata rebuilt from a shared file's chunks.

    ``size`` is summed from chunk payloads and ``content_type`` is sniffed,
    so both can differ from what the owner declared. ``filename`` falls back
    to the raw identifier when it cannot be recovered.
    """

    id: str
    filename: str
    content_type: str
    size: int
    chunk_count: int
    uploaded: datetime = field(default_factory=utcnow)  # Reconstruction time
    owner: Optional[str] = None
    download_count: int = 0
    is_shared: bool = True

    @property
    def authoritative(self) -> bool:
        return False

    @property
    def preview_kind(self) -> str:
        return preview_kind(self.content_type)
