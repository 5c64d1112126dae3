"""Translation of storage gateway rejections into core errors."""

from __future__ import annotations

from chunkshare.domain.errors import ChunkShareError, NotFound, PermissionDenied, ValidationError
from chunkshare.ports.outbound import (
    GatewayError,
    InvalidChunkError,
    NotOwnerError,
    UnauthenticatedError,
    UnknownObjectError,
)


def to_core_error(exc: GatewayError, file_id: str) -> ChunkShareError:
    """Map a gateway error onto the core taxonomy.

    Args:
        exc: Error raised by the gateway.
        file_id: File the failed operation addressed.

    Returns:
        Core error to raise (chain it with ``from exc``).
    """
    if isinstance(exc, UnknownObjectError):
        return NotFound(file_id)
    if isinstance(exc, NotOwnerError):
        return PermissionDenied(file_id, "caller is not the owner")
    if isinstance(exc, UnauthenticatedError):
        return PermissionDenied(file_id, "caller is not authenticated")
    if isinstance(exc, InvalidChunkError):
        return ValidationError(str(exc))
    return ChunkShareError(str(exc))
