"""Reassembly of a complete chunk set into one buffer."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from chunkshare.domain.entities.chunk import Chunk
from chunkshare.domain.errors import IncompleteObject

logger = logging.getLogger(__name__)


def declared_chunk_count(chunks: Iterable[Chunk]) -> int:
    """Chunk count declared by the chunks themselves (largest wins)."""
    return max((chunk.chunk_count for chunk in chunks), default=0)


def reassemble(
    file_id: str,
    chunks: Iterable[Chunk],
    chunk_count: Optional[int] = None,
    expected_size: Optional[int] = None,
) -> bytes:
    """Concatenate chunk payloads in ascending index order.

    Args:
        file_id: File the chunks belong to (for error reporting).
        chunks: Stored chunks, any order.
        chunk_count: Declared number of chunks. Defaults to the count the
            chunks carry.
        expected_size: Declared total size, checked when given.

    Returns:
        The original bytes.

    Raises:
        IncompleteObject: If any index in ``[0, chunk_count)`` is missing,
            a chunk's size disagrees with its payload, or the total differs
            from ``expected_size``.
    """
    by_index: dict[int, Chunk] = {}
    for chunk in chunks:
        by_index[chunk.chunk_index] = chunk

    if chunk_count is None:
        chunk_count = declared_chunk_count(by_index.values())
    if chunk_count <= 0:
        raise IncompleteObject(file_id, reason="no chunks stored")

    missing = [index for index in range(chunk_count) if index not in by_index]
    if missing:
        raise IncompleteObject(file_id, missing)

    ordered = [by_index[index] for index in range(chunk_count)]
    for chunk in ordered:
        if chunk.size != len(chunk.data):
            raise IncompleteObject(
                file_id,
                reason=f"chunk {chunk.chunk_index} holds {len(chunk.data)} bytes, declared {chunk.size}",
            )

    data = b"".join(chunk.data for chunk in ordered)

    if expected_size is not None and len(data) != expected_size:
        raise IncompleteObject(
            file_id,
            reason=f"reassembled {len(data)} bytes, declared {expected_size}",
        )

    extra = sorted(index for index in by_index if index >= chunk_count)
    if extra:
        logger.warning(f"Ignoring chunks {extra} of {file_id} beyond declared count {chunk_count}")

    return data
