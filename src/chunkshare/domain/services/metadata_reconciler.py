"""Best-effort metadata reconstruction for shared files.

Used when the caller cannot retrieve the authoritative record (they are
not the owner) but the file is published. The result is a
``ReconstructedFileObject``:

* ``size`` is the sum of stored chunk payload lengths;
* ``content_type`` is sniffed from the lowest-index chunk;
* ``filename`` is recovered from the id, or is the raw id;
* ``owner`` is withheld and ``uploaded`` is the reconstruction time;
* ``download_count`` is not tracked and reads 0.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from chunkshare.domain.entities.chunk import Chunk
from chunkshare.domain.entities.file_object import ReconstructedFileObject, utcnow
from chunkshare.domain.errors import NotFound
from chunkshare.domain.services.content_sniffer import SNIFF_LENGTH, sniff_content_type
from chunkshare.domain.services.reassembler import declared_chunk_count
from chunkshare.domain.value_objects.identifiers import filename_from_file_id
from chunkshare.ports.outbound import StorageGatewayPort

logger = logging.getLogger(__name__)


def reconstruct_metadata(
    file_id: str,
    chunks: Sequence[Chunk],
    now: Optional[datetime] = None,
) -> ReconstructedFileObject:
    """Build degraded metadata from a file's stored chunks.

    Args:
        file_id: File identifier.
        chunks: Every stored chunk of the file, any order.
        now: Timestamp to report as ``uploaded``.

    Raises:
        NotFound: If there are no chunks.
    """
    if not chunks:
        raise NotFound(file_id, "no chunks stored")

    first = min(chunks, key=lambda chunk: chunk.chunk_index)
    return ReconstructedFileObject(
        id=file_id,
        filename=filename_from_file_id(file_id),
        content_type=sniff_content_type(first.head(SNIFF_LENGTH)),
        size=sum(len(chunk.data) for chunk in chunks),
        chunk_count=declared_chunk_count(chunks),
        uploaded=now or utcnow(),
    )


class MetadataReconciler:
    """Rebuilds metadata of shared files through the storage gateway."""

    def __init__(
        self,
        gateway: StorageGatewayPort,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize reconciler.

        Args:
            gateway: Storage gateway acting for the caller.
            clock: Source of the approximate ``uploaded`` time.
        """
        self._gateway = gateway
        self._clock = clock

    def reconcile(
        self,
        file_id: str,
        chunks: Optional[Sequence[Chunk]] = None,
    ) -> ReconstructedFileObject:
        """Reconstruct metadata for a shared file.

        Args:
            file_id: File identifier.
            chunks: Chunks already fetched in this operation, if any.

        Raises:
            NotFound: If the file is not shared or has no chunks.
        """
        if not self._gateway.is_published(file_id):
            raise NotFound(file_id, "file is not shared")

        if chunks is None:
            chunks = self._gateway.get_chunks(file_id)

        metadata = reconstruct_metadata(file_id, chunks, now=self._clock())
        logger.debug(
            f"Reconstructed metadata for {file_id}: "
            f"{metadata.size} bytes in {len(chunks)} chunks as {metadata.content_type}"
        )
        return metadata
