# SPDX-License-Identifier: MIT
"""Registry server configuration."""

from dataclasses import dataclass, field

DEFAULT_DATA_DIR = "/.privateterraformregistry/data"
DEFAULT_MAX_UPLOAD_SIZE = 32 << 20


class ConfigError(Exception):
    """Raised when an environment variable holds an unusable value."""


@dataclass
class StorageConfig:
    """Archive storage configuration."""

    data_dir: str = DEFAULT_DATA_DIR
    snapshot_name: str = "data.json"
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE


@dataclass
class ServerConfig:
    """Listen endpoint and HTTP timeouts passed to uvicorn."""

    host: str = "0.0.0.0"
    port: int = 8080
    timeout_keep_alive: int = 5
    timeout_graceful_shutdown: int | None = None


@dataclass
class RegistryConfig:
    """Main registry configuration."""

    title: str = "Private Terraform Registry"
    description: str = "Private registry implementing the Terraform module protocol"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    # Advertised by service discovery; protocol routes are also served at /v1
    modules_path: str = "/terraform/modules/v1/"
    legacy_prefix: str = "/v1"
    docs_url: str | None = "/docs"
    openapi_url: str | None = "/openapi.json"

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Create configuration from environment variables."""
        import os

        config = cls()

        # Storage
        if data_dir := os.getenv("DATA_DIR"):
            config.storage.data_dir = data_dir
        if max_size := os.getenv("TF_REGISTRY_MAX_UPLOAD_SIZE"):
            config.storage.max_upload_size = _positive_int("TF_REGISTRY_MAX_UPLOAD_SIZE", max_size)

        # Server
        if host := os.getenv("TF_REGISTRY_HOST"):
            config.server.host = host
        if port := os.getenv("TF_REGISTRY_PORT"):
            config.server.port = _positive_int("TF_REGISTRY_PORT", port)
        if keep_alive := os.getenv("TF_REGISTRY_KEEP_ALIVE"):
            config.server.timeout_keep_alive = _positive_int("TF_REGISTRY_KEEP_ALIVE", keep_alive)

        # Logging
        if log_level := os.getenv("LOG_LEVEL"):
            config.log_level = log_level.upper()
        config.debug = os.getenv("TF_REGISTRY_DEBUG", "").lower() == "true"

        return config


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
