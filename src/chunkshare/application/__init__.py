"""Application layer - the file share facade and its lookup cache."""

from chunkshare.application.cache import ReadThroughCache
from chunkshare.application.caching_gateway import CachingGateway
from chunkshare.application.file_share_service import FileShareService

__all__ = [
    "CachingGateway",
    "FileShareService",
    "ReadThroughCache",
]
