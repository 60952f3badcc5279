# SPDX-License-Identifier: MIT
"""Module archive upload and download endpoints."""

import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, Response
from starlette.datastructures import FormData, UploadFile
from starlette.formparsers import MultiPartException, MultiPartParser

from ..dependencies import get_pipeline, get_storage
from ..errors import InvalidRequestError, PayloadTooLargeError
from ..identity import ModuleIdentity
from ..pipeline import UploadPipeline
from ..storage import ModuleStorage

logger = logging.getLogger(__name__)

router = APIRouter()

ARCHIVE_FIELD = "file"
ARCHIVE_MEDIA_TYPE = "application/gzip"


def _declared_length(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


async def _bounded(stream: AsyncIterator[bytes], limit: int) -> AsyncIterator[bytes]:
    received = 0
    async for chunk in stream:
        received += len(chunk)
        if received > limit:
            raise PayloadTooLargeError(limit)
        yield chunk


async def _read_form(request: Request, limit: int) -> FormData:
    """Parse the multipart body, never reading more than limit bytes."""
    content_type = request.headers.get("content-type", "").lower()
    if not content_type.startswith("multipart/form-data"):
        raise InvalidRequestError("Upload must be sent as multipart/form-data")

    # Reject before reading the body when the client already declared its size
    declared = _declared_length(request)
    if declared is not None and declared > limit:
        raise PayloadTooLargeError(limit)

    parser = MultiPartParser(request.headers, _bounded(request.stream(), limit))
    try:
        return await parser.parse()
    except MultiPartException as e:
        raise InvalidRequestError(e.message) from e


@router.post("/modules/{namespace}/{name}/{system}/{version}")
async def upload_module(
    namespace: str,
    name: str,
    system: str,
    version: str,
    request: Request,
    pipeline: Annotated[UploadPipeline, Depends(get_pipeline)],
) -> Response:
    """Upload the archive for a module version.

    The archive is sent as multipart form data in the ``file`` field.
    Re-uploading an existing version replaces its archive.
    """
    identity = ModuleIdentity(namespace=namespace, name=name, system=system, version=version).validate()
    logger.info("uploading module", extra={"coordinates": str(identity)})

    form = await _read_form(request, pipeline.max_upload_size)
    try:
        archive = form.get(ARCHIVE_FIELD)
        if not isinstance(archive, UploadFile):
            raise InvalidRequestError(f"Multipart field '{ARCHIVE_FIELD}' with the module archive is required")
        await run_in_threadpool(pipeline.upload, identity, archive.file)
    finally:
        await form.close()

    return Response(status_code=200)


@router.get("/modules/{namespace}/{name}/{system}/{version}")
async def download_module(
    namespace: str,
    name: str,
    system: str,
    version: str,
    storage: Annotated[ModuleStorage, Depends(get_storage)],
) -> FileResponse:
    """Download the archive for a module version."""
    identity = ModuleIdentity(namespace=namespace, name=name, system=system, version=version).validate()
    archive = storage.archive_path(identity)
    return FileResponse(
        path=archive,
        media_type=ARCHIVE_MEDIA_TYPE,
        filename=f"{namespace}-{name}-{system}-{version}.tar.gz",
    )
