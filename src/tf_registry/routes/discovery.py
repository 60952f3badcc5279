# SPDX-License-Identifier: MIT
"""Terraform service discovery endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import RegistryConfig
from ..dependencies import get_config
from ..models import ServiceDiscovery

router = APIRouter()


@router.get("/.well-known/terraform.json", response_model=ServiceDiscovery)
async def service_discovery(config: Annotated[RegistryConfig, Depends(get_config)]) -> ServiceDiscovery:
    """Advertise the base path of the module registry API."""
    return ServiceDiscovery(modules_v1=config.modules_path)
