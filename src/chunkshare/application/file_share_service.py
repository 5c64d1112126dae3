"""File share service.

The application facade over the storage gateway. It wires the domain
services together for one caller:

* write path: policy check, chunked upload, finalize, optional publish;
* read path: access check, one batched chunk fetch, reassembly;
* metadata: owner record, or a reconstruction for shared files.

A service is bound to one gateway (and so one principal). It keeps no
chunk bytes between calls.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import structlog
from opentelemetry import trace

from chunkshare.application.cache import ReadThroughCache
from chunkshare.application.caching_gateway import CachingGateway
from chunkshare.domain.entities.chunk import ChunkInfo
from chunkshare.domain.entities.file_object import FileObject, utcnow
from chunkshare.domain.entities.results import FileContent, FileMetadata, UploadResult
from chunkshare.domain.errors import ChunkShareError, NotFound
from chunkshare.domain.services.access_control import ShareAccessController
from chunkshare.domain.services.gateway_errors import to_core_error
from chunkshare.domain.services.metadata_reconciler import MetadataReconciler, reconstruct_metadata
from chunkshare.domain.services.reassembler import reassemble
from chunkshare.domain.services.upload_orchestrator import UploadOrchestrator, UploadPolicy
from chunkshare.domain.value_objects.share_link import build_share_link, parse_share_link
from chunkshare.infrastructure.config import Config
from chunkshare.ports.outbound import GatewayError, StorageGatewayPort

ProgressCallback = Callable[[int], None]


class FileShareService:
    """Upload, read and share files through a storage gateway.

    Example:
        service = FileShareService(gateway, get_config())
        result = service.upload("cat.png", "image/png", data)
        link = service.share_link(result.file_id)
    """

    def __init__(
        self,
        gateway: StorageGatewayPort,
        config: Config,
        metrics: Optional[Any] = None,
        cache: Optional[ReadThroughCache] = None,
        tracer: Optional[trace.Tracer] = None,
    ):
        """Initialize service.

        Args:
            gateway: Storage gateway acting for the caller.
            config: Application configuration.
            metrics: ``ChunkShareMetrics`` instance; metrics are skipped when None.
            cache: Lookup cache; a private one is created when None.
            tracer: OpenTelemetry tracer; the global tracer when None.
        """
        self._config = config
        self._metrics = metrics
        self._gateway = CachingGateway(
            gateway,
            cache if cache is not None else ReadThroughCache(metrics=metrics, ttl_seconds=config.cache.ttl_seconds),
        )
        self._tracer = tracer or trace.get_tracer("chunkshare")
        self._logger = structlog.get_logger(__name__).bind(principal=gateway.principal)

        upload = config.upload
        self._orchestrator = UploadOrchestrator(
            self._gateway,
            UploadPolicy(
                chunk_size=upload.chunk_size,
                max_file_size=upload.max_file_size,
                allowed_type_prefixes=tuple(upload.allowed_type_prefixes),
            ),
        )
        self._access = ShareAccessController(self._gateway)
        self._reconciler = MetadataReconciler(self._gateway)

    @property
    def principal(self) -> str:
        return self._gateway.principal

    @property
    def cache(self) -> ReadThroughCache:
        return self._gateway.cache

    # Write path

    def upload(
        self,
        filename: str,
        content_type: str,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
        share: Optional[bool] = None,
    ) -> UploadResult:
        """Upload a file in chunks and finalize it.

        Args:
            filename: Display name.
            content_type: Declared MIME type ("" to sniff from the payload).
            data: File bytes.
            on_progress: Called with the percentage of chunks written.
            share: Publish after finalize; ``None`` follows ``upload.share_on_upload``.

        Raises:
            ValidationError: If the upload policy rejects the file.
            PermissionDenied: If the caller may not upload.
            ChunkUploadFailed: If a chunk write fails; resume from its index.
            GatewayUnavailable: If the gateway cannot be reached.
        """
        publish = self._config.upload.share_on_upload if share is None else share
        start = time.perf_counter()

        with self._operation("upload", filename) as span:
            try:
                result = self._orchestrator.upload(filename, content_type, data, on_progress, publish=publish)
            except ChunkShareError as exc:
                if self._metrics is not None:
                    self._metrics.uploads_failed.labels(error_type=type(exc).__name__).inc()
                raise
            span.set_attribute("chunkshare.file_id", result.file_id)
            span.set_attribute("chunkshare.chunk_count", result.chunk_count)

        self._record_upload(result, result.chunk_count, len(data), time.perf_counter() - start)
        self._logger.info(
            "upload_completed",
            file_id=result.file_id,
            size=result.size,
            chunk_count=result.chunk_count,
            shared=result.shared,
        )
        return result

    def resume_upload(
        self,
        file_id: str,
        data: bytes,
        from_index: int,
        on_progress: Optional[ProgressCallback] = None,
        share: Optional[bool] = None,
    ) -> UploadResult:
        """Continue an interrupted upload from ``from_index``.

        ``data`` must be the same bytes given to the failed ``upload``.

        Raises:
            ValueError: If ``from_index`` is outside the chunk range.
            ChunkUploadFailed: If a chunk write fails again.
        """
        publish = self._config.upload.share_on_upload if share is None else share
        start = time.perf_counter()

        with self._operation("resume_upload", file_id):
            result = self._orchestrator.resume(file_id, data, from_index, on_progress, publish=publish)

        resent = result.chunk_count - from_index
        resent_bytes = max(0, len(data) - from_index * self._config.upload.chunk_size)
        self._record_upload(result, resent, resent_bytes, time.perf_counter() - start)
        self._logger.info(
            "upload_resumed",
            file_id=file_id,
            from_index=from_index,
            chunk_count=result.chunk_count,
            shared=result.shared,
        )
        return result

    def delete(self, file_id: str) -> None:
        """Delete an owned file and all its chunks.

        Raises:
            NotFound: If the id is unknown.
            PermissionDenied: If the caller does not own the file.
        """
        with self._operation("delete", file_id):
            self._gateway.delete_object(file_id)

        if self._metrics is not None:
            self._metrics.deletes.inc()
        self._logger.info("file_deleted", file_id=file_id)

    # Read path

    def list_uploads(self) -> list[FileObject]:
        """Return the caller's files, fetched fresh from the gateway.

        Raises:
            PermissionDenied: If the caller is anonymous.
        """
        with self._operation("list_uploads", self.principal):
            self._gateway.expire_owned_objects()
            return self._gateway.get_owned_objects()

    def resolve_metadata(self, file_id: str) -> FileMetadata:
        """Return the owner record, or reconstructed metadata for a shared file.

        The owner record is fetched fresh so its download count is current.

        Raises:
            NotFound: If the caller does not own the file and it is not shared.
        """
        with self._operation("resolve_metadata", file_id) as span:
            self._gateway.expire_owned_objects()
            owned = self._access.find_owned(file_id)
            if owned is not None:
                span.set_attribute("chunkshare.view", "owner")
                return owned

            metadata = self._reconciler.reconcile(file_id)
            span.set_attribute("chunkshare.view", "shared")

        if self._metrics is not None:
            self._metrics.reconstructions.inc()
        self._logger.info(
            "metadata_reconstructed",
            file_id=file_id,
            size=metadata.size,
            content_type=metadata.content_type,
        )
        return metadata

    def read(self, file_id: str) -> FileContent:
        """Fetch and reassemble a file the caller may read.

        Does not touch the download counter; see ``download``.

        Raises:
            PermissionDenied: If the caller does not own the file and it is not shared.
            NotFound: If the file has been removed.
            IncompleteObject: If chunks are missing or sizes disagree.
        """
        start = time.perf_counter()

        with self._operation("read", file_id) as span:
            decision = self._access.authorize_read(file_id)
            span.set_attribute("chunkshare.view", decision.view.value)

            chunks = self._gateway.get_chunks(file_id)
            if decision.is_owner:
                owned = decision.metadata if chunks else self._recheck_owned(file_id)
                metadata: FileMetadata = owned
                data = reassemble(
                    file_id,
                    chunks,
                    chunk_count=owned.chunk_count,
                    expected_size=owned.size,
                )
            else:
                if not chunks:
                    raise NotFound(file_id, "no chunks stored")
                data = reassemble(file_id, chunks)
                metadata = reconstruct_metadata(file_id, chunks, now=utcnow())
            span.set_attribute("chunkshare.size", len(data))

        if self._metrics is not None:
            self._metrics.reads.labels(view=decision.view.value).inc()
            self._metrics.bytes_downloaded.inc(len(data))
            self._metrics.read_latency.observe(time.perf_counter() - start)
        self._logger.info(
            "file_read",
            file_id=file_id,
            view=decision.view.value,
            size=len(data),
            chunk_count=len(chunks),
        )
        return FileContent(metadata=metadata, data=data)

    def download(self, file_id: str) -> FileContent:
        """Read a file and count the download once the read has succeeded."""
        content = self.read(file_id)
        self.record_download(file_id)
        return content

    def record_download(self, file_id: str) -> None:
        """Increment the download counter of a file the caller may read.

        Raises:
            PermissionDenied: If the caller may not read the file.
        """
        with self._operation("record_download", file_id):
            self._access.authorize_read(file_id)
            self._gateway.record_download(file_id)

        if self._metrics is not None:
            self._metrics.downloads_recorded.inc()

    def chunk_info(self, file_id: str) -> ChunkInfo:
        """Return stored size and declared chunk count of a readable file.

        Raises:
            PermissionDenied: If the caller may not read the file.
            NotFound: If the store no longer holds the file.
        """
        with self._operation("chunk_info", file_id):
            self._access.authorize_read(file_id)
            info = self._gateway.get_chunk_info(file_id)
        if info is None:
            raise NotFound(file_id)
        return info

    def upload_stats(self) -> tuple[int, int]:
        """Return (total uploads in the store, uploads owned by the caller)."""
        with self._operation("upload_stats", self.principal):
            return (
                self._gateway.get_total_uploads(),
                self._gateway.get_user_upload_count(self.principal),
            )

    # Share links

    def share_link(self, file_id: str) -> str:
        """Public link for ``file_id`` under the configured origin."""
        return build_share_link(file_id, self._config.share.origin)

    @staticmethod
    def parse_share_link(url: str) -> str:
        """Recover the file id from a share link.

        Raises:
            ValueError: If ``url`` is not a share link.
        """
        return parse_share_link(url)

    # Helpers

    def _recheck_owned(self, file_id: str) -> FileObject:
        """Re-fetch the owner record when an owned file returned no chunks.

        The cached listing may predate a delete made through another client.
        """
        self._gateway.expire_owned_objects()
        owned = self._access.find_owned(file_id)
        if owned is None:
            self._gateway.cache.invalidate(file_id)
            raise NotFound(file_id, "file was deleted")
        return owned

    @contextmanager
    def _operation(self, name: str, subject: str) -> Iterator[trace.Span]:
        """Span around one operation; gateway errors leave as core errors."""
        with self._tracer.start_as_current_span(f"chunkshare.{name}") as span:
            span.set_attribute("chunkshare.principal", self.principal)
            span.set_attribute("chunkshare.subject", subject)
            try:
                yield span
            except GatewayError as exc:
                error = to_core_error(exc, subject)
                self._record_error(name, subject, error)
                raise error from exc
            except ChunkShareError as exc:
                self._record_error(name, subject, exc)
                raise

    def _record_error(self, operation: str, subject: str, error: ChunkShareError) -> None:
        error_type = type(error).__name__
        if self._metrics is not None:
            self._metrics.request_errors.labels(operation=operation, error_type=error_type).inc()
        self._logger.warning(
            "operation_failed",
            operation=operation,
            subject=subject,
            error_type=error_type,
            error=str(error),
        )

    def _record_upload(self, result: UploadResult, chunks: int, size: int, elapsed: float) -> None:
        if self._metrics is None:
            return
        self._metrics.uploads_completed.labels(shared=str(result.shared).lower()).inc()
        self._metrics.chunks_written.inc(chunks)
        self._metrics.bytes_uploaded.inc(size)
        self._metrics.upload_latency.observe(elapsed)
