# SPDX-License-Identifier: MIT
"""Pytest fixtures for registry tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tf_registry import (
    ModuleIdentity,
    ModuleIndex,
    ModuleStorage,
    RegistryConfig,
    SnapshotStore,
    UploadPipeline,
    create_app,
)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Storage root that does not exist yet, like a fresh deployment."""
    return tmp_path / "data"


@pytest.fixture
def test_config(data_dir: Path) -> RegistryConfig:
    """Create test configuration rooted in a temporary directory."""
    config = RegistryConfig()
    config.storage.data_dir = str(data_dir)
    return config


@pytest.fixture
def app(test_config: RegistryConfig) -> FastAPI:
    """Create test FastAPI application."""
    return create_app(test_config)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with the application lifespan running."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            yield client


@pytest.fixture
def identity() -> ModuleIdentity:
    return ModuleIdentity(namespace="acme", name="vpc", system="aws", version="1.0.0")


@pytest.fixture
def index() -> ModuleIndex:
    return ModuleIndex()


@pytest.fixture
def storage(data_dir: Path) -> ModuleStorage:
    return ModuleStorage(data_dir)


@pytest.fixture
def snapshot(data_dir: Path, index: ModuleIndex) -> SnapshotStore:
    return SnapshotStore(data_dir, index)


@pytest.fixture
def pipeline(storage: ModuleStorage, index: ModuleIndex, snapshot: SnapshotStore) -> UploadPipeline:
    return UploadPipeline(storage, index, snapshot, max_upload_size=1024)


async def upload(client: AsyncClient, coordinates: str, content: bytes, field: str = "file"):
    """POST an archive to /modules/{coordinates} as multipart form data."""
    return await client.post(
        f"/modules/{coordinates}",
        files={field: ("archive.tar.gz", content, "application/gzip")},
    )
