"""Configuration management for chunkshare using Pydantic Settings."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UploadConfig(BaseSettings):
    """Upload policy configuration."""

    model_config = SettingsConfigDict(env_prefix="CHUNKSHARE_UPLOAD_")

    chunk_size: int = Field(default=500_000, gt=0)
    max_file_size: int = Field(default=2000 * 1024, ge=0)  # 2000KB
    allowed_type_prefixes: list[str] = Field(default_factory=lambda: ["image/", "video/"])
    share_on_upload: bool = True


class GatewayConfig(BaseSettings):
    """Storage gateway client configuration."""

    model_config = SettingsConfigDict(env_prefix="CHUNKSHARE_GATEWAY_")

    base_url: str = "http://127.0.0.1:9000"
    timeout_seconds: float = 30.0


class CacheConfig(BaseSettings):
    """Lookup cache configuration."""

    model_config = SettingsConfigDict(env_prefix="CHUNKSHARE_CACHE_")

    ttl_seconds: float = Field(default=30.0, gt=0)


class ShareConfig(BaseSettings):
    """Public share link configuration."""

    model_config = SettingsConfigDict(env_prefix="CHUNKSHARE_SHARE_")

    origin: str = "http://localhost:3000"


class ServerConfig(BaseSettings):
    """Gateway REST server configuration."""

    model_config = SettingsConfigDict(env_prefix="CHUNKSHARE_SERVER_")

    host: str = "0.0.0.0"
    port: int = 9000


class ObservabilityConfig(BaseSettings):
    """Observability configuration."""

    model_config = SettingsConfigDict(env_prefix="CHUNKSHARE_OBSERVABILITY_")

    log_level: str = "info"
    log_format: str = "json"
    otlp_endpoint: str = ""
    environment: str = "development"


class Config(BaseSettings):
    """Root configuration for chunkshare."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNKSHARE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    upload: UploadConfig = Field(default_factory=UploadConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    share: ShareConfig = Field(default_factory=ShareConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config()
