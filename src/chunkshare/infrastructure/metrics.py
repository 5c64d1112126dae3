"""Prometheus metrics for chunkshare."""

from prometheus_client import Counter, Gauge, Histogram, Info, CollectorRegistry, REGISTRY


class ChunkShareMetrics:
    """Metrics collector for the upload and read paths."""

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        # Upload Operations
        self.uploads_completed = Counter(
            "chunkshare_uploads_completed_total",
            "Total uploads finalized",
            ["shared"],
            registry=registry,
        )
        self.uploads_failed = Counter(
            "chunkshare_uploads_failed_total",
            "Total uploads aborted",
            ["error_type"],
            registry=registry,
        )
        self.chunks_written = Counter(
            "chunkshare_chunks_written_total",
            "Total chunks acknowledged by the gateway",
            registry=registry,
        )
        self.bytes_uploaded = Counter(
            "chunkshare_bytes_uploaded_total",
            "Total bytes uploaded",
            registry=registry,
        )

        # Read Operations
        self.reads = Counter(
            "chunkshare_reads_total",
            "Total successful reads",
            ["view"],
            registry=registry,
        )
        self.bytes_downloaded = Counter(
            "chunkshare_bytes_downloaded_total",
            "Total bytes reassembled for readers",
            registry=registry,
        )
        self.reconstructions = Counter(
            "chunkshare_metadata_reconstructions_total",
            "Total metadata reconstructions for shared files",
            registry=registry,
        )
        self.downloads_recorded = Counter(
            "chunkshare_downloads_recorded_total",
            "Total download counter increments",
            registry=registry,
        )
        self.deletes = Counter(
            "chunkshare_deletes_total",
            "Total files deleted",
            registry=registry,
        )

        # Cache
        self.cache_hits = Counter(
            "chunkshare_cache_hits_total",
            "Read-through cache hits",
            ["operation"],
            registry=registry,
        )
        self.cache_misses = Counter(
            "chunkshare_cache_misses_total",
            "Read-through cache misses",
            ["operation"],
            registry=registry,
        )
        self.cache_entries = Gauge(
            "chunkshare_cache_entries",
            "Entries currently held in the read-through cache",
            registry=registry,
        )

        # Latency
        self.upload_latency = Histogram(
            "chunkshare_upload_latency_seconds",
            "Upload sequence latency",
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
            registry=registry,
        )
        self.read_latency = Histogram(
            "chunkshare_read_latency_seconds",
            "Read and reassembly latency",
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
            registry=registry,
        )

        # Error Metrics
        self.request_errors = Counter(
            "chunkshare_request_errors_total",
            "Total core errors raised to callers",
            ["operation", "error_type"],
            registry=registry,
        )

        # System Info
        self.system_info = Info(
            "chunkshare",
            "chunkshare system information",
            registry=registry,
        )


_metrics: ChunkShareMetrics | None = None


def get_metrics() -> ChunkShareMetrics:
    """Get the singleton metrics instance."""
    global _metrics
    if _metrics is None:
        _metrics = ChunkShareMetrics()
    return _metrics
