"""Domain entities."""

from chunkshare.domain.entities.chunk import Chunk, ChunkInfo
from chunkshare.domain.entities.file_object import FileObject, ReconstructedFileObject
from chunkshare.domain.entities.results import FileContent, FileMetadata, UploadResult

__all__ = [
    "Chunk",
    "ChunkInfo",
    "FileObject",
    "ReconstructedFileObject",
    "FileMetadata",
    "FileContent",
    "UploadResult",
]
