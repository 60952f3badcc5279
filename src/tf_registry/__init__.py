# SPDX-License-Identifier: MIT
"""Private registry server for Terraform modules."""

__version__ = "0.1.0"

from .app import create_app
from .config import ConfigError, RegistryConfig, ServerConfig, StorageConfig
from .errors import (
    APIError,
    ArchiveNotFoundError,
    ErrorCode,
    InvalidIdentityError,
    InvalidRequestError,
    PayloadTooLargeError,
    SnapshotCorruptError,
    SnapshotError,
    SnapshotIOError,
    StorageIOError,
    StorageUnavailableError,
)
from .identity import ModuleIdentity, is_valid_semver
from .index import ModuleIndex
from .pipeline import UploadPipeline, UploadResult
from .snapshot import SnapshotStore
from .storage import ModuleStorage, path_of

__all__ = [
    # App factory
    "create_app",
    # Configuration
    "ConfigError",
    "RegistryConfig",
    "ServerConfig",
    "StorageConfig",
    # Core
    "ModuleIdentity",
    "ModuleIndex",
    "ModuleStorage",
    "SnapshotStore",
    "UploadPipeline",
    "UploadResult",
    "is_valid_semver",
    "path_of",
    # Errors
    "APIError",
    "ArchiveNotFoundError",
    "ErrorCode",
    "InvalidIdentityError",
    "InvalidRequestError",
    "PayloadTooLargeError",
    "SnapshotCorruptError",
    "SnapshotError",
    "SnapshotIOError",
    "StorageIOError",
    "StorageUnavailableError",
]
