"""Inbound ports - API contract of the file share core.

Inbound ports define the interface that user-facing surfaces (a web UI,
a CLI) use to upload, read and share files.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Callable, Optional, Protocol

from chunkshare.domain.entities.chunk import ChunkInfo
from chunkshare.domain.entities.file_object import FileObject
from chunkshare.domain.entities.results import FileContent, FileMetadata, UploadResult


# =============================================================================
# File Share Port
# =============================================================================


class FileSharePort(Protocol):
    """Protocol for the file share core, bound to one caller.

    Example:
        result = files.upload("cat.png", "image/png", data)
        link = files.share_link(result.file_id)
        content = files.download(files.parse_share_link(link))
    """

    @abstractmethod
    def upload(
        self,
        filename: str,
        content_type: str,
        data: bytes,
        on_progress: Optional[Callable[[int], None]] = None,
        share: Optional[bool] = None,
    ) -> UploadResult:
        """Upload a file in chunks, finalize it and optionally share it."""
        ...

    @abstractmethod
    def resume_upload(
        self,
        file_id: str,
        data: bytes,
        from_index: int,
        on_progress: Optional[Callable[[int], None]] = None,
        share: Optional[bool] = None,
    ) -> UploadResult:
        """Re-send chunks ``from_index`` onwards of a declared file and finalize."""
        ...

    @abstractmethod
    def list_uploads(self) -> list[FileObject]:
        """List the caller's files."""
        ...

    @abstractmethod
    def resolve_metadata(self, file_id: str) -> FileMetadata:
        """Owner record, or reconstructed metadata for a shared file."""
        ...

    @abstractmethod
    def read(self, file_id: str) -> FileContent:
        """Reassemble a readable file without counting a download."""
        ...

    @abstractmethod
    def download(self, file_id: str) -> FileContent:
        """Reassemble a readable file and count the download."""
        ...

    @abstractmethod
    def record_download(self, file_id: str) -> None:
        """Count a download of a readable file."""
        ...

    @abstractmethod
    def chunk_info(self, file_id: str) -> ChunkInfo:
        """Stored size and declared chunk count of a readable file."""
        ...

    @abstractmethod
    def delete(self, file_id: str) -> None:
        """Delete an owned file."""
        ...

    @abstractmethod
    def share_link(self, file_id: str) -> str:
        """Public link for a file."""
        ...

    @abstractmethod
    def parse_share_link(self, url: str) -> str:
        """File id named by a public link."""
        ...

    @abstractmethod
    def upload_stats(self) -> tuple[int, int]:
        """Total uploads and the caller's upload count."""
        ...


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "FileSharePort",
]
