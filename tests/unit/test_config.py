"""Unit tests for chunkshare configuration."""

import pytest
from chunkshare.infrastructure.config import (
    CacheConfig,
    Config,
    GatewayConfig,
    ObservabilityConfig,
    UploadConfig,
    get_config,
)


@pytest.mark.unit
class TestConfig:
    """Test configuration loading and validation."""

    def test_default_config(self):
        """Test default configuration values."""
        config = Config()
        assert config.upload.share_on_upload is True
        assert config.server.port == 9000
        assert config.share.origin == "http://localhost:3000"

    def test_upload_config_defaults(self):
        """Test upload policy defaults."""
        upload_config = UploadConfig()
        assert upload_config.chunk_size == 500_000
        assert upload_config.max_file_size == 2000 * 1024
        assert upload_config.allowed_type_prefixes == ["image/", "video/"]

    def test_observability_defaults(self):
        """Test observability defaults."""
        observability = ObservabilityConfig()
        assert observability.log_format == "json"
        assert observability.otlp_endpoint == ""

    def test_section_env_override(self, monkeypatch):
        """Test section env prefixes."""
        monkeypatch.setenv("CHUNKSHARE_UPLOAD_CHUNK_SIZE", "1024")
        monkeypatch.setenv("CHUNKSHARE_SHARE_ORIGIN", "https://files.example.com")
        config = Config()
        assert config.upload.chunk_size == 1024
        assert config.share.origin == "https://files.example.com"

    def test_cache_config(self, monkeypatch):
        """Test cache TTL default and validation."""
        assert CacheConfig().ttl_seconds == 30.0
        monkeypatch.setenv("CHUNKSHARE_CACHE_TTL_SECONDS", "0")
        with pytest.raises(ValueError):
            CacheConfig()

    def test_rejects_non_positive_chunk_size(self, monkeypatch):
        """Test chunk size validation."""
        monkeypatch.setenv("CHUNKSHARE_UPLOAD_CHUNK_SIZE", "0")
        with pytest.raises(ValueError):
            UploadConfig()

    def test_get_config_is_cached(self):
        """Test that get_config returns one instance."""
        assert get_config() is get_config()


@pytest.mark.unit
class TestContainer:
    """Test dependency wiring."""

    def test_container_is_singleton(self, container):
        from chunkshare.infrastructure.container import Container

        assert Container.get() is container

    def test_create_service_binds_gateway(self, container, owner_gateway):
        service = container.create_service(owner_gateway)
        assert service.principal == "alice"
        assert len(service.cache) == 0

    def test_create_service_uses_cache_ttl(self):
        from chunkshare.adapters.outbound.memory_gateway import InMemoryObjectStore
        from chunkshare.infrastructure.container import Container

        container = Container.create(Config(cache=CacheConfig(ttl_seconds=5.0)))
        service = container.create_service(InMemoryObjectStore().gateway_for("alice"))
        assert service.cache.ttl_seconds == 5.0

    def test_create_http_gateway_from_config(self):
        from chunkshare.infrastructure.container import Container

        config = Config(gateway=GatewayConfig(base_url="http://gateway.internal:9100", timeout_seconds=5.0))
        container = Container.create(config)
        gateway = container.create_http_gateway("alice")
        try:
            assert gateway.principal == "alice"
            assert gateway.client.base_url.host == "gateway.internal"
            assert gateway.client.base_url.port == 9100
            assert gateway.client.timeout.read == 5.0
        finally:
            gateway.close()
