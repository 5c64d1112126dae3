"""chunkshare - chunked file storage with owner and shared views."""

__version__ = "0.1.0"
