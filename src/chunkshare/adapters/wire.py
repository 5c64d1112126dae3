"""Wire models shared by the REST service and the HTTP gateway.

Chunk payloads travel base64-encoded inside JSON.
"""

from __future__ import annotations

import base64
from datetime import datetime

from pydantic import BaseModel, Field

from chunkshare.domain.entities.chunk import Chunk, ChunkInfo
from chunkshare.domain.entities.file_object import FileObject

PRINCIPAL_HEADER = "X-Principal"


def encode_bytes(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_bytes(data_base64: str) -> bytes:
    """Decode base64 payload.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    return base64.b64decode(data_base64, validate=True)


class DeclareRequest(BaseModel):
    """Request to declare a new file."""

    filename: str = Field(..., min_length=1, description="Display name")
    content_type: str = Field(default="application/octet-stream", description="MIME type")
    size: int = Field(..., ge=0, description="Total byte length")
    chunk_count: int = Field(..., ge=1, description="Declared number of chunks")


class DeclareResponse(BaseModel):
    """Freshly minted file id."""

    id: str


class WriteChunkRequest(BaseModel):
    """Request to write one chunk."""

    data_base64: str = Field(..., description="Base64-encoded chunk payload")
    size: int = Field(..., ge=0, description="Payload length")
    chunk_count: int = Field(..., ge=1, description="Declared number of chunks")


class FileObjectModel(BaseModel):
    """Authoritative file metadata."""

    id: str
    filename: str
    content_type: str
    owner: str
    size: int
    chunk_count: int
    uploaded: datetime
    download_count: int
    is_shared: bool
    finalized: bool

    @classmethod
    def from_entity(cls, obj: FileObject) -> "FileObjectModel":
        return cls(
            id=obj.id,
            filename=obj.filename,
            content_type=obj.content_type,
            owner=obj.owner,
            size=obj.size,
            chunk_count=obj.chunk_count,
            uploaded=obj.uploaded,
            download_count=obj.download_count,
            is_shared=obj.is_shared,
            finalized=obj.finalized,
        )

    def to_entity(self) -> FileObject:
        return FileObject(
            id=self.id,
            filename=self.filename,
            content_type=self.content_type,
            owner=self.owner,
            size=self.size,
            chunk_count=self.chunk_count,
            uploaded=self.uploaded,
            download_count=self.download_count,
            is_shared=self.is_shared,
            finalized=self.finalized,
        )


class FileListResponse(BaseModel):
    """Caller's files."""

    files: list[FileObjectModel]
    count: int


class SharedResponse(BaseModel):
    """Published flag of a file."""

    shared: bool


class ChunkModel(BaseModel):
    """One stored chunk."""

    file_id: str
    chunk_index: int
    data_base64: str
    size: int
    chunk_count: int

    @classmethod
    def from_entity(cls, chunk: Chunk) -> "ChunkModel":
        return cls(
            file_id=chunk.file_id,
            chunk_index=chunk.chunk_index,
            data_base64=encode_bytes(chunk.data),
            size=chunk.size,
            chunk_count=chunk.chunk_count,
        )

    def to_entity(self) -> Chunk:
        return Chunk(
            file_id=self.file_id,
            chunk_index=self.chunk_index,
            data=decode_bytes(self.data_base64),
            size=self.size,
            chunk_count=self.chunk_count,
        )


class ChunkListResponse(BaseModel):
    """Stored chunks of a file."""

    chunks: list[ChunkModel]
    count: int


class ChunkInfoResponse(BaseModel):
    """Stored size and declared chunk count."""

    size: int
    chunk_count: int

    @classmethod
    def from_entity(cls, info: ChunkInfo) -> "ChunkInfoResponse":
        return cls(size=info.size, chunk_count=info.chunk_count)

    def to_entity(self) -> ChunkInfo:
        return ChunkInfo(size=self.size, chunk_count=self.chunk_count)


class CountResponse(BaseModel):
    """A single count."""

    count: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "0.1.0"
