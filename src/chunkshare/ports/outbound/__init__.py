"""Outbound ports - the storage gateway the core depends on.

The storage gateway is the remote durable store holding file metadata and
chunks. The core treats it as the single source of truth and never keeps
chunk bytes beyond the current operation.

Every gateway instance acts on behalf of one principal (the "implicit
caller"); it is passed explicitly to whatever needs it.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Protocol

from chunkshare.domain.entities.chunk import Chunk, ChunkInfo
from chunkshare.domain.entities.file_object import FileObject


# =============================================================================
# Gateway Errors
# =============================================================================


class GatewayError(Exception):
    """Raised when the gateway rejects an operation."""

    pass


class UnknownObjectError(GatewayError):
    """Raised when an operation names an id the store does not hold."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"Unknown file: {file_id}")


class NotOwnerError(GatewayError):
    """Raised when a mutation is attempted by someone other than the owner."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"Caller does not own file: {file_id}")


class UnauthenticatedError(GatewayError):
    """Raised when the anonymous principal calls an authenticated operation."""

    pass


class InvalidChunkError(GatewayError):
    """Raised when a chunk write has an out-of-range index or wrong size."""

    pass


# =============================================================================
# Storage Gateway Port
# =============================================================================


class StorageGatewayPort(Protocol):
    """Protocol for the remote durable store.

    All calls are blocking, one-at-a-time request/response operations.
    Transport failures raise ``chunkshare.domain.errors.GatewayUnavailable``.

    Idempotency:
        ``write_chunk`` to an existing ``(id, index)`` overwrites it.

    Example:
        file_id = gateway.declare("cat.png", "image/png", 1200, 1)
        gateway.write_chunk(file_id, 0, data, len(data), 1)
        gateway.finalize(file_id)
        gateway.publish(file_id)
    """

    @property
    @abstractmethod
    def principal(self) -> str:
        """Identity the gateway acts for."""
        ...

    @abstractmethod
    def declare(self, filename: str, content_type: str, size: int, chunk_count: int) -> str:
        """Declare a new file and mint its id.

        Args:
            filename: Display name.
            content_type: Declared MIME type.
            size: Total byte length.
            chunk_count: Declared number of chunks.

        Returns:
            Fresh file id.

        Raises:
            UnauthenticatedError: If the caller is anonymous.
        """
        ...

    @abstractmethod
    def write_chunk(
        self,
        file_id: str,
        chunk_index: int,
        data: bytes,
        size: int,
        chunk_count: int,
    ) -> None:
        """Store one chunk, overwriting any previous write to the same index.

        Raises:
            UnknownObjectError: If the id is unknown.
            NotOwnerError: If the caller does not own the file.
            InvalidChunkError: If index or size is invalid.
        """
        ...

    @abstractmethod
    def finalize(self, file_id: str) -> None:
        """Mark the upload complete. Does not verify chunk presence.

        Raises:
            UnknownObjectError: If the id is unknown.
            NotOwnerError: If the caller does not own the file.
        """
        ...

    @abstractmethod
    def publish(self, file_id: str) -> None:
        """Make the file readable by anyone.

        Raises:
            UnknownObjectError: If the id is unknown.
            NotOwnerError: If the caller does not own the file.
        """
        ...

    @abstractmethod
    def get_owned_objects(self) -> list[FileObject]:
        """List the caller's files (empty if none).

        Raises:
            UnauthenticatedError: If the caller is anonymous.
        """
        ...

    @abstractmethod
    def is_published(self, file_id: str) -> bool:
        """Return True if the file is shared; False for unknown ids."""
        ...

    @abstractmethod
    def get_chunks(self, file_id: str) -> list[Chunk]:
        """Return every stored chunk of a file, in no particular order.

        Unknown ids (and unpublished files of other owners) yield ``[]``.
        """
        ...

    @abstractmethod
    def delete_object(self, file_id: str) -> None:
        """Delete a file and all its chunks atomically.

        Raises:
            UnknownObjectError: If the id is unknown.
            NotOwnerError: If the caller does not own the file.
        """
        ...

    @abstractmethod
    def record_download(self, file_id: str) -> None:
        """Increment the file's download counter.

        Raises:
            UnknownObjectError: If the id is unknown.
        """
        ...

    @abstractmethod
    def get_chunk_info(self, file_id: str) -> Optional[ChunkInfo]:
        """Return stored size and declared chunk count, or None if unknown."""
        ...

    @abstractmethod
    def get_total_uploads(self) -> int:
        """Return the number of files in the store."""
        ...

    @abstractmethod
    def get_user_upload_count(self, principal: str) -> int:
        """Return the number of files owned by ``principal``."""
        ...


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    "StorageGatewayPort",
    "GatewayError",
    "UnknownObjectError",
    "NotOwnerError",
    "UnauthenticatedError",
    "InvalidChunkError",
]
