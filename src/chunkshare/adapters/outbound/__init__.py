"""Outbound adapters - implementations of the storage gateway port.

Provides an in-process store for development and tests, and an HTTP client
for a remote gateway service.
"""

from chunkshare.adapters.outbound.http_gateway import HttpStorageGateway
from chunkshare.adapters.outbound.memory_gateway import (
    InMemoryObjectStore,
    InMemoryStorageGateway,
    StoredFile,
)

__all__ = [
    # HTTP
    "HttpStorageGateway",
    # In-memory
    "InMemoryObjectStore",
    "InMemoryStorageGateway",
    "StoredFile",
]
