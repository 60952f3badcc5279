# SPDX-License-Identifier: MIT
"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import RegistryConfig
from .errors import SnapshotCorruptError, add_error_handlers
from .index import ModuleIndex
from .models import HealthResponse
from .pipeline import UploadPipeline
from .snapshot import SnapshotStore
from .storage import ModuleStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the snapshot into the index before serving requests."""
    snapshot: SnapshotStore = app.state.snapshot

    logger.info("loading modules into memory", extra={"path": str(snapshot.path)})
    try:
        snapshot.load()
    except SnapshotCorruptError:
        logger.exception("cannot start with a corrupt snapshot")
        raise

    logger.info("registry ready", extra={"modules": len(app.state.index)})
    yield


def create_app(config: RegistryConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Registry configuration. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = RegistryConfig.from_env()

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        debug=config.debug,
        docs_url=config.docs_url,
        openapi_url=config.openapi_url,
        lifespan=lifespan,
    )

    # Components are built once and shared by every request
    index = ModuleIndex()
    storage = ModuleStorage(config.storage.data_dir)
    snapshot = SnapshotStore(config.storage.data_dir, index, filename=config.storage.snapshot_name)

    app.state.config = config
    app.state.index = index
    app.state.storage = storage
    app.state.snapshot = snapshot
    app.state.pipeline = UploadPipeline(storage, index, snapshot, config.storage.max_upload_size)

    add_error_handlers(app)

    from .routes import archives, discovery, modules

    app.include_router(discovery.router, tags=["discovery"])
    app.include_router(modules.router, prefix=config.legacy_prefix, tags=["modules"])
    modules_prefix = config.modules_path.rstrip("/")
    if modules_prefix and modules_prefix != config.legacy_prefix:
        app.include_router(modules.router, prefix=modules_prefix, include_in_schema=False)
    app.include_router(archives.router, tags=["archives"])

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=config.version, modules=len(index))

    return app
