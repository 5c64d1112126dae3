"""Chunk entity for chunked file storage."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Chunk:
    """One indexed byte-payload fragment of a file."""

    file_id: str
    chunk_index: int
    data: bytes
    size: int
    chunk_count: int  # Declared total for the file, sent with every write

    def is_consistent(self) -> bool:
        """Check declared size and index against the payload.

        Returns:
            True if ``size == len(data)`` and the index is in range.
        """
        return self.size == len(self.data) and 0 <= self.chunk_index < self.chunk_count

    def head(self, length: int = 12) -> bytes:
        """Return the first ``length`` payload bytes (for sniffing)."""
        return bytes(self.data[:length])


@dataclass
class ChunkInfo:
    """Stored byte total and declared chunk count of an object."""

    size: int
    chunk_count: int
