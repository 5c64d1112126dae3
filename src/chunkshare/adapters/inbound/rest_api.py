"""FastAPI REST adapter exposing the storage gateway.

Serves the gateway operation set over HTTP on top of an
``InMemoryObjectStore``. The calling principal comes from the
``X-Principal`` header (absent means anonymous); authenticating that
header is the deployment's concern.

Usage:
    from chunkshare.adapters.inbound.rest_api import create_app

    app = create_app()
    # Or: python -m chunkshare.adapters.inbound.rest_api
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest

from chunkshare.adapters.outbound.memory_gateway import InMemoryObjectStore, InMemoryStorageGateway
from chunkshare.adapters.wire import (
    ChunkInfoResponse,
    ChunkListResponse,
    ChunkModel,
    CountResponse,
    DeclareRequest,
    DeclareResponse,
    FileListResponse,
    FileObjectModel,
    HealthResponse,
    PRINCIPAL_HEADER,
    SharedResponse,
    WriteChunkRequest,
    decode_bytes,
)
from chunkshare.domain.value_objects.identifiers import ANONYMOUS
from chunkshare.ports.outbound import (
    GatewayError,
    InvalidChunkError,
    NotOwnerError,
    UnauthenticatedError,
    UnknownObjectError,
)

_ERROR_STATUS: list[tuple[type[GatewayError], int]] = [
    (UnknownObjectError, status.HTTP_404_NOT_FOUND),
    (NotOwnerError, status.HTTP_403_FORBIDDEN),
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (InvalidChunkError, 422),
]


def status_for(exc: GatewayError) -> int:
    """HTTP status for a gateway error."""
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def create_app(
    store: InMemoryObjectStore | None = None,
    registry: CollectorRegistry = REGISTRY,
) -> FastAPI:
    """Create FastAPI application with storage gateway endpoints.

    Args:
        store: Optional store instance; a fresh one is created otherwise.
        registry: Prometheus registry served on ``/metrics``.

    Returns:
        Configured FastAPI application.
    """
    store = store or InMemoryObjectStore()

    app = FastAPI(
        title="chunkshare gateway",
        description="Chunked file storage with owner and shared views",
        version="0.1.0",
    )
    app.state.store = store

    def get_gateway(
        x_principal: Optional[str] = Header(default=None, alias=PRINCIPAL_HEADER),
    ) -> InMemoryStorageGateway:
        return store.gateway_for(x_principal or ANONYMOUS)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return JSONResponse(status_code=status_for(exc), content={"detail": str(exc)})

    # Health endpoints
    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check():
        """Check gateway health status."""
        return HealthResponse(status="healthy")

    @app.get("/metrics", tags=["System"])
    async def get_metrics():
        """Export metrics in Prometheus text format."""
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.get("/stats/uploads", response_model=CountResponse, tags=["System"])
    async def total_uploads(gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Count all stored files."""
        return CountResponse(count=gateway.get_total_uploads())

    @app.get("/users/{principal:path}/uploads/count", response_model=CountResponse, tags=["System"])
    async def user_upload_count(principal: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Count files owned by a principal."""
        return CountResponse(count=gateway.get_user_upload_count(principal))

    # File endpoints
    @app.post(
        "/files",
        response_model=DeclareResponse,
        status_code=status.HTTP_201_CREATED,
        tags=["Files"],
    )
    async def declare_file(request: DeclareRequest, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Declare a new file and mint its id."""
        file_id = gateway.declare(
            request.filename,
            request.content_type,
            request.size,
            request.chunk_count,
        )
        return DeclareResponse(id=file_id)

    @app.get("/files", response_model=FileListResponse, tags=["Files"])
    async def list_owned_files(gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """List the caller's files."""
        files = gateway.get_owned_objects()
        return FileListResponse(
            files=[FileObjectModel.from_entity(obj) for obj in files],
            count=len(files),
        )

    @app.put(
        "/files/{file_id:path}/chunks/{chunk_index}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["Chunks"],
    )
    async def write_chunk(
        file_id: str,
        chunk_index: int,
        request: WriteChunkRequest,
        gateway: InMemoryStorageGateway = Depends(get_gateway),
    ):
        """Write one chunk (overwrites an earlier write to the same index)."""
        try:
            data = decode_bytes(request.data_base64)
        except ValueError:
            raise HTTPException(
                status_code=422,
                detail="Invalid base64 data",
            )
        gateway.write_chunk(file_id, chunk_index, data, request.size, request.chunk_count)

    @app.post("/files/{file_id:path}/finalize", status_code=status.HTTP_204_NO_CONTENT, tags=["Files"])
    async def finalize_file(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Mark an upload complete."""
        gateway.finalize(file_id)

    @app.post("/files/{file_id:path}/share", status_code=status.HTTP_204_NO_CONTENT, tags=["Files"])
    async def share_file(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Publish a file."""
        gateway.publish(file_id)

    @app.get("/files/{file_id:path}/shared", response_model=SharedResponse, tags=["Files"])
    async def is_file_shared(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Check whether a file is published."""
        return SharedResponse(shared=gateway.is_published(file_id))

    @app.get("/files/{file_id:path}/chunks", response_model=ChunkListResponse, tags=["Chunks"])
    async def get_file_chunks(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Get every stored chunk of a file."""
        chunks = gateway.get_chunks(file_id)
        return ChunkListResponse(
            chunks=[ChunkModel.from_entity(chunk) for chunk in chunks],
            count=len(chunks),
        )

    @app.get("/files/{file_id:path}/chunk-info", response_model=ChunkInfoResponse, tags=["Chunks"])
    async def get_chunk_info(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Get stored size and declared chunk count."""
        info = gateway.get_chunk_info(file_id)
        if info is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"File {file_id} not found",
            )
        return ChunkInfoResponse.from_entity(info)

    @app.post("/files/{file_id:path}/downloads", status_code=status.HTTP_204_NO_CONTENT, tags=["Files"])
    async def record_download(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Increment the download counter."""
        gateway.record_download(file_id)

    @app.delete("/files/{file_id:path}", status_code=status.HTTP_204_NO_CONTENT, tags=["Files"])
    async def delete_file(file_id: str, gateway: InMemoryStorageGateway = Depends(get_gateway)):
        """Delete a file and all its chunks."""
        gateway.delete_object(file_id)

    return app


def run_server(
    store: InMemoryObjectStore | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    """Run the gateway REST server.

    Args:
        store: Store to serve; a fresh one is created otherwise.
        host: Host to bind to; defaults to ``server.host`` from config.
        port: Port to bind to; defaults to ``server.port`` from config.
    """
    import uvicorn

    from chunkshare.infrastructure.config import get_config
    from chunkshare.infrastructure.logging import setup_logging

    config = get_config()
    setup_logging(config.observability.log_level, config.observability.log_format)
    uvicorn.run(
        create_app(store),
        host=host or config.server.host,
        port=port or config.server.port,
    )


if __name__ == "__main__":
    run_server()
