"""Chunk splitter."""

from __future__ import annotations

import math
from typing import Iterator

DEFAULT_CHUNK_SIZE = 500_000


def chunk_count_for(size: int, chunk_size: int) -> int:
    """Number of chunks a buffer of ``size`` bytes splits into.

    An empty buffer still counts as one (empty) chunk so that every file
    has ``chunk_count >= 1``.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    return max(1, math.ceil(size / chunk_size))


def split_chunks(data: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[tuple[int, bytes]]:
    """Split data into ordered ``(index, bytes)`` pairs.

    Every chunk is ``chunk_size`` long except possibly the last.

    Args:
        data: Data to split.
        chunk_size: Size bound per chunk.

    Yields:
        ``(index, chunk_bytes)`` in ascending index order.

    Raises:
        ValueError: If ``chunk_size <= 0``.
    """
    count = chunk_count_for(len(data), chunk_size)
    view = memoryview(data)
    for index in range(count):
        offset = index * chunk_size
        yield index, bytes(view[offset:offset + chunk_size])


def chunk_at(data: bytes, index: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bytes:
    """Return the bytes of a single chunk (used when resuming an upload)."""
    count = chunk_count_for(len(data), chunk_size)
    if not 0 <= index < count:
        raise IndexError(f"Chunk index {index} out of range [0, {count})")
    offset = index * chunk_size
    return bytes(data[offset:offset + chunk_size])
