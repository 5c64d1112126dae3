"""Pytest configuration and shared fixtures for chunkshare tests."""

import pytest
from unittest.mock import patch

from prometheus_client import CollectorRegistry

from chunkshare.adapters.outbound.memory_gateway import InMemoryObjectStore, InMemoryStorageGateway
from chunkshare.application.file_share_service import FileShareService
from chunkshare.domain.value_objects.identifiers import ANONYMOUS
from chunkshare.infrastructure.config import Config
from chunkshare.infrastructure.container import Container
from chunkshare.infrastructure.metrics import ChunkShareMetrics

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture(autouse=True)
def reset_container():
    """Reset the DI container before each test."""
    Container.reset()
    yield
    Container.reset()


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration."""
    return Config()


@pytest.fixture
def registry() -> CollectorRegistry:
    """Provide an isolated metrics registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> ChunkShareMetrics:
    """Provide metrics bound to the isolated registry."""
    return ChunkShareMetrics(registry=registry)


@pytest.fixture
def store() -> InMemoryObjectStore:
    """Provide an empty in-memory store."""
    return InMemoryObjectStore()


@pytest.fixture
def owner_gateway(store: InMemoryObjectStore) -> InMemoryStorageGateway:
    """Gateway acting for the uploading principal."""
    return store.gateway_for("alice")


@pytest.fixture
def stranger_gateway(store: InMemoryObjectStore) -> InMemoryStorageGateway:
    """Gateway acting for another authenticated principal."""
    return store.gateway_for("bob")


@pytest.fixture
def anonymous_gateway(store: InMemoryObjectStore) -> InMemoryStorageGateway:
    """Gateway acting for the anonymous principal."""
    return store.gateway_for(ANONYMOUS)


@pytest.fixture
def owner_service(owner_gateway, test_config, metrics) -> FileShareService:
    """Facade for the uploading principal."""
    return FileShareService(owner_gateway, test_config, metrics=metrics)


@pytest.fixture
def stranger_service(stranger_gateway, test_config, metrics) -> FileShareService:
    """Facade for another authenticated principal."""
    return FileShareService(stranger_gateway, test_config, metrics=metrics)


@pytest.fixture
def anonymous_service(anonymous_gateway, test_config, metrics) -> FileShareService:
    """Facade for the anonymous principal."""
    return FileShareService(anonymous_gateway, test_config, metrics=metrics)


@pytest.fixture
def png_data() -> bytes:
    """Provide a small PNG-looking payload."""
    return PNG_MAGIC + b"pixels" * 100


@pytest.fixture
def container(test_config: Config) -> Container:
    """Provide a configured container for testing."""
    with patch("chunkshare.infrastructure.container.get_config", return_value=test_config):
        return Container.create()


# Pytest markers
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
