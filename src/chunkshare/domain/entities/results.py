"""Results returned by the upload and read paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from chunkshare.domain.entities.file_object import FileObject, ReconstructedFileObject

FileMetadata = Union[FileObject, ReconstructedFileObject]


@dataclass
class UploadResult:
    """Outcome of a completed upload sequence."""

    file_id: str
    chunk_count: int
    size: int
    progress: int = 100
    shared: bool = False


@dataclass
class FileContent:
    """A reassembled file and the metadata it was read under."""

    metadata: FileMetadata
    data: bytes

    @property
    def filename(self) -> str:
        return self.metadata.filename

    @property
    def media_type(self) -> str:
        return self.metadata.content_type

    @property
    def preview_kind(self) -> str:
        return self.metadata.preview_kind

    @property
    def size(self) -> int:
        return len(self.data)
