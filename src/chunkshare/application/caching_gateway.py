"""Storage gateway decorator backed by ``ReadThroughCache``.

Lookups go through the cache; mutations pass straight to the wrapped
gateway and then invalidate the entries they affect. Chunk reads are never
cached.

Only positive answers are cached for ``is_published`` and ``get_chunk_info``.
The cache is per principal, so a publish or upload made by someone else
must become visible without an invalidation from this instance. The owned
listing carries download counters that other principals change; callers
that need them current call ``expire_owned_objects`` first.
"""

from __future__ import annotations

from typing import Optional

from chunkshare.application.cache import ALL, CHUNK_INFO, IS_PUBLISHED, OWNED_OBJECTS, ReadThroughCache
from chunkshare.domain.entities.chunk import Chunk, ChunkInfo
from chunkshare.domain.entities.file_object import FileObject
from chunkshare.ports.outbound import StorageGatewayPort


class CachingGateway:
    """``StorageGatewayPort`` that caches lookups of another gateway."""

    def __init__(self, gateway: StorageGatewayPort, cache: ReadThroughCache):
        self._gateway = gateway
        self._cache = cache

    @property
    def principal(self) -> str:
        return self._gateway.principal

    @property
    def cache(self) -> ReadThroughCache:
        return self._cache

    # Lookups

    def get_owned_objects(self) -> list[FileObject]:
        owned = self._cache.get_or_load(OWNED_OBJECTS, ALL, self._gateway.get_owned_objects)
        return list(owned)

    def expire_owned_objects(self) -> None:
        """Force the next ``get_owned_objects`` to reach the gateway."""
        self._cache.invalidate_operation(OWNED_OBJECTS)

    def is_published(self, file_id: str) -> bool:
        return self._cache.get_or_load(
            IS_PUBLISHED,
            file_id,
            lambda: self._gateway.is_published(file_id),
            keep=bool,
        )

    def get_chunk_info(self, file_id: str) -> Optional[ChunkInfo]:
        return self._cache.get_or_load(
            CHUNK_INFO,
            file_id,
            lambda: self._gateway.get_chunk_info(file_id),
            keep=lambda info: info is not None,
        )

    def get_chunks(self, file_id: str) -> list[Chunk]:
        return self._gateway.get_chunks(file_id)

    def get_total_uploads(self) -> int:
        return self._gateway.get_total_uploads()

    def get_user_upload_count(self, principal: str) -> int:
        return self._gateway.get_user_upload_count(principal)

    # Mutations

    def declare(self, filename: str, content_type: str, size: int, chunk_count: int) -> str:
        file_id = self._gateway.declare(filename, content_type, size, chunk_count)
        self._cache.invalidate(file_id)
        return file_id

    def write_chunk(self, file_id: str, chunk_index: int, data: bytes, size: int, chunk_count: int) -> None:
        self._gateway.write_chunk(file_id, chunk_index, data, size, chunk_count)
        self._cache.invalidate(file_id)

    def finalize(self, file_id: str) -> None:
        self._gateway.finalize(file_id)
        self._cache.invalidate(file_id)

    def publish(self, file_id: str) -> None:
        self._gateway.publish(file_id)
        self._cache.invalidate(file_id)

    def delete_object(self, file_id: str) -> None:
        self._gateway.delete_object(file_id)
        self._cache.invalidate(file_id)

    def record_download(self, file_id: str) -> None:
        self._gateway.record_download(file_id)
        self._cache.invalidate(file_id)
