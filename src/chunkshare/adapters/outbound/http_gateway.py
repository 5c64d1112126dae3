"""HTTP storage gateway client.

Implements ``StorageGatewayPort`` against the REST service in
``chunkshare.adapters.inbound.rest_api`` using ``httpx``. The client is
passed in by construction (any ``httpx.Client``, including FastAPI's
``TestClient``); nothing is shared at module level.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from chunkshare.adapters.wire import (
    ChunkInfoResponse,
    ChunkListResponse,
    CountResponse,
    DeclareResponse,
    FileListResponse,
    PRINCIPAL_HEADER,
    SharedResponse,
    encode_bytes,
)
from chunkshare.domain.entities.chunk import Chunk, ChunkInfo
from chunkshare.domain.entities.file_object import FileObject
from chunkshare.domain.errors import GatewayUnavailable
from chunkshare.domain.value_objects.identifiers import ANONYMOUS, is_anonymous
from chunkshare.ports.outbound import (
    GatewayError,
    InvalidChunkError,
    NotOwnerError,
    UnauthenticatedError,
    UnknownObjectError,
)

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    """Quote one URL path segment, including any slash."""
    return quote(value, safe="")


class HttpStorageGateway:
    """``StorageGatewayPort`` over HTTP for one principal.

    Example:
        client = httpx.Client(base_url="http://127.0.0.1:9000", timeout=30.0)
        gateway = HttpStorageGateway(client, principal="alice")
        file_id = gateway.declare("cat.png", "image/png", 3, 1)
    """

    def __init__(self, client: httpx.Client, principal: str = ANONYMOUS):
        """Initialize HTTP gateway.

        Args:
            client: HTTP client with ``base_url`` pointing at the gateway service.
            principal: Identity sent with every request.
        """
        self._client = client
        self._principal = principal

    @classmethod
    def connect(cls, base_url: str, principal: str = ANONYMOUS, timeout_seconds: float = 30.0) -> "HttpStorageGateway":
        """Create a gateway with its own ``httpx.Client``."""
        client = httpx.Client(base_url=base_url, timeout=timeout_seconds)
        return cls(client, principal)

    @property
    def principal(self) -> str:
        return self._principal

    @property
    def client(self) -> httpx.Client:
        return self._client

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # Operations

    def declare(self, filename: str, content_type: str, size: int, chunk_count: int) -> str:
        response = self._request(
            "POST",
            "/files",
            json={
                "filename": filename,
                "content_type": content_type,
                "size": size,
                "chunk_count": chunk_count,
            },
        )
        return DeclareResponse.model_validate(response.json()).id

    def write_chunk(self, file_id: str, chunk_index: int, data: bytes, size: int, chunk_count: int) -> None:
        self._request(
            "PUT",
            f"/files/{_segment(file_id)}/chunks/{chunk_index}",
            file_id=file_id,
            json={
                "data_base64": encode_bytes(data),
                "size": size,
                "chunk_count": chunk_count,
            },
        )

    def finalize(self, file_id: str) -> None:
        self._request("POST", f"/files/{_segment(file_id)}/finalize", file_id=file_id)

    def publish(self, file_id: str) -> None:
        self._request("POST", f"/files/{_segment(file_id)}/share", file_id=file_id)

    def get_owned_objects(self) -> list[FileObject]:
        response = self._request("GET", "/files")
        return [model.to_entity() for model in FileListResponse.model_validate(response.json()).files]

    def is_published(self, file_id: str) -> bool:
        response = self._request("GET", f"/files/{_segment(file_id)}/shared", file_id=file_id)
        return SharedResponse.model_validate(response.json()).shared

    def get_chunks(self, file_id: str) -> list[Chunk]:
        response = self._request("GET", f"/files/{_segment(file_id)}/chunks", file_id=file_id)
        return [model.to_entity() for model in ChunkListResponse.model_validate(response.json()).chunks]

    def delete_object(self, file_id: str) -> None:
        self._request("DELETE", f"/files/{_segment(file_id)}", file_id=file_id)

    def record_download(self, file_id: str) -> None:
        self._request("POST", f"/files/{_segment(file_id)}/downloads", file_id=file_id)

    def get_chunk_info(self, file_id: str) -> Optional[ChunkInfo]:
        try:
            response = self._request("GET", f"/files/{_segment(file_id)}/chunk-info", file_id=file_id)
        except UnknownObjectError:
            return None
        return ChunkInfoResponse.model_validate(response.json()).to_entity()

    def get_total_uploads(self) -> int:
        response = self._request("GET", "/stats/uploads")
        return CountResponse.model_validate(response.json()).count

    def get_user_upload_count(self, principal: str) -> int:
        response = self._request("GET", f"/users/{_segment(principal)}/uploads/count")
        return CountResponse.model_validate(response.json()).count

    # Transport

    def _request(self, method: str, path: str, file_id: str = "", **kwargs: Any) -> httpx.Response:
        headers = {}
        if not is_anonymous(self._principal):
            headers[PRINCIPAL_HEADER] = self._principal

        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            logger.warning(f"Gateway transport failed for {method} {path}: {exc}")
            raise GatewayUnavailable(f"Storage gateway unreachable: {exc}") from exc

        if response.is_success:
            return response
        raise self._error_for(response, file_id)

    @staticmethod
    def _error_for(response: httpx.Response, file_id: str) -> Exception:
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail", response.text) if isinstance(body, dict) else response.text

        code = response.status_code
        if code == 404:
            return UnknownObjectError(file_id)
        if code == 403:
            return NotOwnerError(file_id)
        if code == 401:
            return UnauthenticatedError(str(detail))
        if code == 422:
            return InvalidChunkError(str(detail))
        if code in (502, 503, 504):
            return GatewayUnavailable(f"Storage gateway returned {code}: {detail}")
        return GatewayError(f"Storage gateway returned {code}: {detail}")
