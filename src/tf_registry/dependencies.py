# SPDX-License-Identifier: MIT
"""FastAPI dependencies exposing the registry components on app.state."""

from fastapi import Request

from .config import RegistryConfig
from .index import ModuleIndex
from .pipeline import UploadPipeline
from .storage import ModuleStorage


def get_config(request: Request) -> RegistryConfig:
    return request.app.state.config


def get_index(request: Request) -> ModuleIndex:
    return request.app.state.index


def get_storage(request: Request) -> ModuleStorage:
    return request.app.state.storage


def get_pipeline(request: Request) -> UploadPipeline:
    return request.app.state.pipeline
