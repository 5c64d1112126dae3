"""Dependency injection container for chunkshare."""

from dataclasses import dataclass
from typing import Any

import structlog
from opentelemetry import trace

from chunkshare.adapters.outbound.http_gateway import HttpStorageGateway
from chunkshare.application.cache import ReadThroughCache
from chunkshare.application.file_share_service import FileShareService
from chunkshare.domain.value_objects.identifiers import ANONYMOUS
from chunkshare.infrastructure.config import Config, get_config
from chunkshare.infrastructure.logging import setup_logging, get_logger
from chunkshare.infrastructure.metrics import get_metrics
from chunkshare.infrastructure.tracing import setup_tracing
from chunkshare.ports.outbound import StorageGatewayPort


@dataclass
class Container:
    """Dependency injection container for chunkshare components."""

    config: Config
    logger: structlog.stdlib.BoundLogger
    tracer: trace.Tracer
    metrics: Any  # ChunkShareMetrics

    _instance: "Container | None" = None

    @classmethod
    def create(cls, config: Config | None = None) -> "Container":
        """Create and initialize the container with all dependencies."""
        if cls._instance is not None:
            return cls._instance

        config = config or get_config()
        setup_logging(config.observability.log_level, config.observability.log_format)
        logger = get_logger("chunkshare")
        tracer = setup_tracing(config.observability)
        metrics = get_metrics()

        cls._instance = cls(
            config=config,
            logger=logger,
            tracer=tracer,
            metrics=metrics,
        )

        logger.info(
            "chunkshare_container_initialized",
            environment=config.observability.environment,
            chunk_size=config.upload.chunk_size,
            share_on_upload=config.upload.share_on_upload,
        )

        return cls._instance

    @classmethod
    def get(cls) -> "Container":
        """Get the singleton container instance."""
        if cls._instance is None:
            return cls.create()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the container (useful for testing)."""
        cls._instance = None

    def create_service(self, gateway: StorageGatewayPort) -> FileShareService:
        """Build a facade bound to ``gateway`` with this container's wiring.

        Each service gets its own cache: cached entries are per principal.
        """
        return FileShareService(
            gateway=gateway,
            config=self.config,
            metrics=self.metrics,
            cache=ReadThroughCache(metrics=self.metrics, ttl_seconds=self.config.cache.ttl_seconds),
            tracer=self.tracer,
        )

    def create_http_gateway(self, principal: str = ANONYMOUS) -> HttpStorageGateway:
        """Connect to the remote gateway service configured under ``gateway``.

        The caller owns the returned gateway and should ``close`` it.
        """
        return HttpStorageGateway.connect(
            self.config.gateway.base_url,
            principal,
            self.config.gateway.timeout_seconds,
        )


def get_container() -> Container:
    """Get the dependency injection container."""
    return Container.get()
