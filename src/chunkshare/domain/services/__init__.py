"""Domain services."""

from chunkshare.domain.services.access_control import (
    AccessDecision,
    AccessView,
    ShareAccessController,
    can_read,
)
from chunkshare.domain.services.chunk_splitter import chunk_count_for, split_chunks
from chunkshare.domain.services.content_sniffer import sniff_content_type
from chunkshare.domain.services.metadata_reconciler import MetadataReconciler, reconstruct_metadata
from chunkshare.domain.services.reassembler import reassemble
from chunkshare.domain.services.upload_orchestrator import UploadOrchestrator, UploadPolicy

__all__ = [
    "AccessDecision",
    "AccessView",
    "ShareAccessController",
    "can_read",
    "chunk_count_for",
    "split_chunks",
    "sniff_content_type",
    "MetadataReconciler",
    "reconstruct_metadata",
    "reassemble",
    "UploadOrchestrator",
    "UploadPolicy",
]
