"""Upload orchestration.

Drives the write protocol against the storage gateway, strictly in order:

1. declare  - mint an id with size and chunk count fixed;
2. transfer - write chunks ``0..chunk_count-1`` one at a time, reporting
   progress after each acknowledged write;
3. finalize - signal completion;
4. publish  - optional, makes the file readable by anyone.

A failing step aborts the rest. Chunk failures surface as
``ChunkUploadFailed`` and are never retried here; ``resume`` continues an
interrupted upload from a given index without re-declaring.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from chunkshare.domain.entities.results import UploadResult
from chunkshare.domain.errors import ChunkUploadFailed, GatewayUnavailable, PermissionDenied, ValidationError
from chunkshare.domain.services.chunk_splitter import DEFAULT_CHUNK_SIZE, chunk_at, chunk_count_for
from chunkshare.domain.services.content_sniffer import OCTET_STREAM, SNIFF_LENGTH, sniff_content_type
from chunkshare.domain.services.gateway_errors import to_core_error
from chunkshare.ports.outbound import GatewayError, StorageGatewayPort, UnauthenticatedError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

DEFAULT_MAX_FILE_SIZE = 2000 * 1024


def progress_percent(written: int, total: int) -> int:
    """Percentage of chunks written, rounded half up."""
    return (200 * written + total) // (2 * total)


@dataclass
class UploadPolicy:
    """Caller-side policy checked before contacting the store."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_type_prefixes: tuple[str, ...] = field(default=("image/", "video/"))

    def validate(self, filename: str, content_type: str, size: int) -> None:
        """Reject uploads the policy does not allow.

        Raises:
            ValidationError: On empty name, oversize file or disallowed type.
        """
        if self.chunk_size <= 0:
            raise ValidationError(f"Chunk size must be positive, got {self.chunk_size}")
        if not filename:
            raise ValidationError("Filename must not be empty")
        if size < 0:
            raise ValidationError(f"Size must be non-negative, got {size}")
        if size > self.max_file_size:
            raise ValidationError(
                f"File size {size} exceeds the limit of {self.max_file_size} bytes"
            )
        if self.allowed_type_prefixes and not any(
            content_type.startswith(prefix) for prefix in self.allowed_type_prefixes
        ):
            allowed = ", ".join(self.allowed_type_prefixes)
            raise ValidationError(f"Content type {content_type!r} not allowed (allowed: {allowed})")


class UploadOrchestrator:
    """Runs the declare/transfer/finalize/publish sequence for one file at a time.

    Holds no per-upload state beyond the running call; one instance can
    serve many sequential uploads.
    """

    def __init__(self, gateway: StorageGatewayPort, policy: Optional[UploadPolicy] = None):
        """Initialize orchestrator.

        Args:
            gateway: Storage gateway acting for the uploader.
            policy: Upload policy; defaults to ``UploadPolicy()``.
        """
        self._gateway = gateway
        self.policy = policy or UploadPolicy()

    def effective_content_type(self, declared: str, data: bytes) -> str:
        """Declared type, or the sniffed type when none was declared.

        A declared type that disagrees with the sniffed one is kept but logged.
        """
        sniffed = sniff_content_type(data[:SNIFF_LENGTH])
        if not declared:
            return sniffed
        if sniffed != OCTET_STREAM and sniffed != declared:
            logger.warning(f"Declared content type {declared} but payload sniffs as {sniffed}")
        return declared

    def upload(
        self,
        filename: str,
        content_type: str,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
        publish: bool = False,
    ) -> UploadResult:
        """Upload a file.

        Args:
            filename: Display name.
            content_type: Declared MIME type ("" to sniff).
            data: File bytes.
            on_progress: Called with 1..100 after each acknowledged chunk.
            publish: Publish after finalize.

        Returns:
            Upload result with the new file id.

        Raises:
            ValidationError: If the policy rejects the file.
            PermissionDenied: If the gateway refuses to declare for this caller.
            ChunkUploadFailed: If a chunk write fails.
            GatewayUnavailable: If the transport is down at declare/finalize/publish.
        """
        content_type = self.effective_content_type(content_type, data)
        self.policy.validate(filename, content_type, len(data))

        chunk_count = chunk_count_for(len(data), self.policy.chunk_size)
        try:
            file_id = self._gateway.declare(filename, content_type, len(data), chunk_count)
        except UnauthenticatedError as exc:
            raise PermissionDenied(filename, "anonymous callers cannot upload") from exc
        except GatewayError as exc:
            raise to_core_error(exc, filename) from exc

        logger.info(f"Declared {file_id}: {len(data)} bytes in {chunk_count} chunks")
        return self._complete(file_id, data, 0, chunk_count, on_progress, publish)

    def resume(
        self,
        file_id: str,
        data: bytes,
        from_index: int,
        on_progress: Optional[ProgressCallback] = None,
        publish: bool = False,
    ) -> UploadResult:
        """Continue an interrupted upload of an already-declared file.

        Re-sends chunks ``from_index..chunk_count-1`` and finalizes. The
        same bytes and chunk size as the original upload must be used.

        Raises:
            ValueError: If ``from_index`` is outside the chunk range.
            ChunkUploadFailed: If a chunk write fails.
        """
        chunk_count = chunk_count_for(len(data), self.policy.chunk_size)
        if not 0 <= from_index < chunk_count:
            raise ValueError(f"from_index {from_index} out of range [0, {chunk_count})")
        logger.info(f"Resuming {file_id} at chunk {from_index} of {chunk_count}")
        return self._complete(file_id, data, from_index, chunk_count, on_progress, publish)

    def _complete(
        self,
        file_id: str,
        data: bytes,
        from_index: int,
        chunk_count: int,
        on_progress: Optional[ProgressCallback],
        publish: bool,
    ) -> UploadResult:
        for index in range(from_index, chunk_count):
            payload = chunk_at(data, index, self.policy.chunk_size)
            self._write_chunk(file_id, index, payload, chunk_count)
            if on_progress is not None:
                on_progress(progress_percent(index + 1, chunk_count))

        self._call(self._gateway.finalize, file_id)
        if publish:
            self._call(self._gateway.publish, file_id)

        return UploadResult(
            file_id=file_id,
            chunk_count=chunk_count,
            size=len(data),
            progress=100,
            shared=publish,
        )

    def _write_chunk(self, file_id: str, index: int, payload: bytes, chunk_count: int) -> None:
        try:
            self._gateway.write_chunk(file_id, index, payload, len(payload), chunk_count)
        except (GatewayError, GatewayUnavailable) as exc:
            logger.warning(f"Chunk {index} of {file_id} failed: {exc}")
            raise ChunkUploadFailed(file_id, index, str(exc)) from exc

    @staticmethod
    def _call(operation: Callable[[str], None], file_id: str) -> None:
        try:
            operation(file_id)
        except GatewayError as exc:
            raise to_core_error(exc, file_id) from exc
