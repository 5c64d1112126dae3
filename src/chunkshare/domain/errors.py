"""Errors surfaced by the chunkshare core to its immediate caller.

Every failure of a core operation is one of these. Nothing here is retried
internally; the docstring of each class says how a caller may recover.
"""

from __future__ import annotations

from typing import Iterable


class ChunkShareError(Exception):
    """Base class for all core errors."""

    pass


class ValidationError(ChunkShareError):
    """Declared size/type/name rejected by upload policy.

    Raised before the storage gateway is contacted. User-correctable.
    """

    pass


class ChunkUploadFailed(ChunkShareError):
    """A chunk write failed mid-sequence.

    Writes are idempotent per index, so the caller may resume by re-sending
    ``index`` and every later index for ``file_id``.
    """

    def __init__(self, file_id: str, index: int, reason: str = ""):
        self.file_id = file_id
        self.index = index
        self.reason = reason
        message = f"Chunk {index} of {file_id} failed to upload"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class IncompleteObject(ChunkShareError):
    """Chunks are missing (or sizes disagree) at read time."""

    def __init__(self, file_id: str, missing: Iterable[int] = (), reason: str = ""):
        self.file_id = file_id
        self.missing = sorted(missing)
        if not reason:
            reason = f"missing chunk indices {self.missing}"
        self.reason = reason
        super().__init__(f"Object {file_id} is incomplete: {reason}")


class NotFound(ChunkShareError):
    """Unknown id, or the object is not shared with the caller."""

    def __init__(self, file_id: str, reason: str = ""):
        self.file_id = file_id
        message = f"File {file_id} not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PermissionDenied(ChunkShareError):
    """Caller may not read or mutate this object. Not retryable."""

    def __init__(self, file_id: str, reason: str = ""):
        self.file_id = file_id
        message = f"Access to {file_id} denied"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class GatewayUnavailable(ChunkShareError):
    """Transport to the storage gateway is not ready.

    Callers should wait and retry the whole operation.
    """

    pass


__all__ = [
    "ChunkShareError",
    "ValidationError",
    "ChunkUploadFailed",
    "IncompleteObject",
    "NotFound",
    "PermissionDenied",
    "GatewayUnavailable",
]
