"""In-memory storage gateway.

``InMemoryObjectStore`` is a process-local durable store: it keeps every
declared file and chunk until deletion. ``InMemoryStorageGateway`` is a view
of it bound to one principal, implementing ``StorageGatewayPort``.

Each store operation runs under a single store lock, so writes to one index
are atomic and delete removes metadata and chunks together. There is no
multi-writer token: concurrent writers to one id interleave, last write per
index wins.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from chunkshare.domain.entities.chunk import Chunk, ChunkInfo
from chunkshare.domain.entities.file_object import FileObject
from chunkshare.domain.value_objects.identifiers import create_file_id, is_anonymous
from chunkshare.ports.outbound import (
    InvalidChunkError,
    NotOwnerError,
    UnauthenticatedError,
    UnknownObjectError,
)


logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    """Store-side state of one file."""

    metadata: FileObject
    chunks: dict[int, Chunk] = field(default_factory=dict)

    @property
    def stored_size(self) -> int:
        return sum(len(chunk.data) for chunk in self.chunks.values())


class InMemoryObjectStore:
    """Thread-safe in-memory store shared by every principal's gateway.

    Example:
        store = InMemoryObjectStore()
        alice = store.gateway_for("alice")
        file_id = alice.declare("cat.png", "image/png", 3, 1)
    """

    def __init__(self, clock_ns: Callable[[], int] = time.time_ns):
        """Initialize store.

        Args:
            clock_ns: Source of declaration timestamps (nanoseconds).
        """
        self._files: dict[str, StoredFile] = {}
        self._lock = threading.Lock()
        self._clock_ns = clock_ns

    def gateway_for(self, principal: str) -> "InMemoryStorageGateway":
        """Return a gateway acting for ``principal``."""
        return InMemoryStorageGateway(self, principal)

    # Operations (principal passed explicitly)

    def declare(self, principal: str, filename: str, content_type: str, size: int, chunk_count: int) -> str:
        self._require_authenticated(principal)
        if chunk_count < 1:
            raise InvalidChunkError(f"chunk_count must be at least 1, got {chunk_count}")
        if size < 0:
            raise InvalidChunkError(f"size must be non-negative, got {size}")

        with self._lock:
            timestamp = self._clock_ns()
            file_id = create_file_id(filename, timestamp)
            while file_id in self._files:
                timestamp += 1
                file_id = create_file_id(filename, timestamp)

            self._files[file_id] = StoredFile(
                metadata=FileObject(
                    id=file_id,
                    filename=filename,
                    content_type=content_type,
                    owner=principal,
                    size=size,
                    chunk_count=chunk_count,
                )
            )

        logger.debug(f"Declared {file_id} for {principal}")
        return file_id

    def write_chunk(
        self,
        principal: str,
        file_id: str,
        chunk_index: int,
        data: bytes,
        size: int,
        chunk_count: int,
    ) -> None:
        self._require_authenticated(principal)
        with self._lock:
            stored = self._owned(principal, file_id)
            declared = stored.metadata.chunk_count
            if chunk_count != declared:
                raise InvalidChunkError(
                    f"Chunk count {chunk_count} disagrees with declared {declared} for {file_id}"
                )
            chunk = Chunk(
                file_id=file_id,
                chunk_index=chunk_index,
                data=bytes(data),
                size=size,
                chunk_count=declared,
            )
            if not chunk.is_consistent():
                raise InvalidChunkError(
                    f"Chunk {chunk_index} of {file_id} invalid: "
                    f"size {size}, payload {len(data)}, range [0, {declared})"
                )
            if stored.metadata.finalized:
                logger.warning(f"Chunk {chunk_index} written to finalized {file_id}")
            stored.chunks[chunk_index] = chunk

    def finalize(self, principal: str, file_id: str) -> None:
        self._require_authenticated(principal)
        with self._lock:
            stored = self._owned(principal, file_id)
            stored.metadata.finalized = True
            missing = stored.metadata.chunk_count - len(stored.chunks)
        if missing:
            logger.warning(f"Finalized {file_id} with {missing} chunks missing")

    def publish(self, principal: str, file_id: str) -> None:
        self._require_authenticated(principal)
        with self._lock:
            self._owned(principal, file_id).metadata.is_shared = True

    def get_owned_objects(self, principal: str) -> list[FileObject]:
        self._require_authenticated(principal)
        with self._lock:
            return [
                replace(stored.metadata)
                for stored in self._files.values()
                if stored.metadata.owner == principal
            ]

    def is_published(self, principal: str, file_id: str) -> bool:
        with self._lock:
            stored = self._files.get(file_id)
            return stored is not None and stored.metadata.is_shared

    def get_chunks(self, principal: str, file_id: str) -> list[Chunk]:
        with self._lock:
            stored = self._files.get(file_id)
            if stored is None:
                return []
            if not stored.metadata.is_shared and stored.metadata.owner != principal:
                return []
            return [replace(chunk) for chunk in stored.chunks.values()]

    def delete_object(self, principal: str, file_id: str) -> None:
        self._require_authenticated(principal)
        with self._lock:
            self._owned(principal, file_id)
            del self._files[file_id]
        logger.debug(f"Deleted {file_id}")

    def record_download(self, principal: str, file_id: str) -> None:
        with self._lock:
            self._get(file_id).metadata.download_count += 1

    def get_chunk_info(self, principal: str, file_id: str) -> Optional[ChunkInfo]:
        with self._lock:
            stored = self._files.get(file_id)
            if stored is None:
                return None
            if not stored.metadata.is_shared and stored.metadata.owner != principal:
                return None
            return ChunkInfo(size=stored.stored_size, chunk_count=stored.metadata.chunk_count)

    def get_total_uploads(self) -> int:
        with self._lock:
            return len(self._files)

    def get_user_upload_count(self, principal: str) -> int:
        with self._lock:
            return sum(1 for stored in self._files.values() if stored.metadata.owner == principal)

    # Internals (caller holds the lock)

    def _get(self, file_id: str) -> StoredFile:
        stored = self._files.get(file_id)
        if stored is None:
            raise UnknownObjectError(file_id)
        return stored

    def _owned(self, principal: str, file_id: str) -> StoredFile:
        stored = self._get(file_id)
        if stored.metadata.owner != principal:
            raise NotOwnerError(file_id)
        return stored

    @staticmethod
    def _require_authenticated(principal: str) -> None:
        if is_anonymous(principal):
            raise UnauthenticatedError("Anonymous callers may not perform this operation")

    # Test helpers
    def get_file(self, file_id: str) -> StoredFile | None:
        """Get stored state for testing."""
        return self._files.get(file_id)

    def clear(self) -> None:
        """Clear all files (for testing)."""
        with self._lock:
            self._files.clear()


class InMemoryStorageGateway:
    """``StorageGatewayPort`` over an ``InMemoryObjectStore`` for one principal."""

    def __init__(self, store: InMemoryObjectStore, principal: str):
        self._store = store
        self._principal = principal

    @property
    def principal(self) -> str:
        return self._principal

    def declare(self, filename: str, content_type: str, size: int, chunk_count: int) -> str:
        return self._store.declare(self._principal, filename, content_type, size, chunk_count)

    def write_chunk(self, file_id: str, chunk_index: int, data: bytes, size: int, chunk_count: int) -> None:
        self._store.write_chunk(self._principal, file_id, chunk_index, data, size, chunk_count)

    def finalize(self, file_id: str) -> None:
        self._store.finalize(self._principal, file_id)

    def publish(self, file_id: str) -> None:
        self._store.publish(self._principal, file_id)

    def get_owned_objects(self) -> list[FileObject]:
        return self._store.get_owned_objects(self._principal)

    def is_published(self, file_id: str) -> bool:
        return self._store.is_published(self._principal, file_id)

    def get_chunks(self, file_id: str) -> list[Chunk]:
        return self._store.get_chunks(self._principal, file_id)

    def delete_object(self, file_id: str) -> None:
        self._store.delete_object(self._principal, file_id)

    def record_download(self, file_id: str) -> None:
        self._store.record_download(self._principal, file_id)

    def get_chunk_info(self, file_id: str) -> Optional[ChunkInfo]:
        return self._store.get_chunk_info(self._principal, file_id)

    def get_total_uploads(self) -> int:
        return self._store.get_total_uploads()

    def get_user_upload_count(self, principal: str) -> int:
        return self._store.get_user_upload_count(principal)
