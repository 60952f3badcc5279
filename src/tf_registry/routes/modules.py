# SPDX-License-Identifier: MIT
"""Module registry protocol endpoints.

Endpoints (relative to the protocol prefix):
    GET {namespace}/{name}/{system}/versions            - version list
    GET {namespace}/{name}/{system}/{version}/download  - download location
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from ..dependencies import get_index
from ..index import ModuleIndex
from ..models import VersionsResponse

router = APIRouter()

DOWNLOAD_HEADER = "X-Terraform-Get"


def download_location(namespace: str, name: str, system: str, version: str) -> str:
    """Path announced in the X-Terraform-Get header.

    System and name are swapped relative to the /v1 and /modules paths.
    """
    return f"/modules/{namespace}/{system}/{name}/{version}"


@router.get("/{namespace}/{name}/{system}/versions", response_model=VersionsResponse)
async def list_versions(
    namespace: str,
    name: str,
    system: str,
    index: Annotated[ModuleIndex, Depends(get_index)],
) -> VersionsResponse:
    """List available versions of a module, in upload order."""
    return VersionsResponse.from_versions(index.versions(namespace, name, system))


@router.get("/{namespace}/{name}/{system}/{version}/download", status_code=204)
async def resolve_download(namespace: str, name: str, system: str, version: str) -> Response:
    """Point the client at the archive for a module version."""
    return Response(
        status_code=204,
        headers={DOWNLOAD_HEADER: download_location(namespace, name, system, version)},
    )
