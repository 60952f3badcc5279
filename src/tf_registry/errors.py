# SPDX-License-Identifier: MIT
"""Registry exception classes and FastAPI error handlers."""

import logging
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode:
    """Error codes returned in the ``error.code`` field of a response."""

    INVALID_IDENTITY = "INVALID_IDENTITY"
    INVALID_REQUEST = "INVALID_REQUEST"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    ARCHIVE_NOT_FOUND = "ARCHIVE_NOT_FOUND"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    STORAGE_IO_ERROR = "STORAGE_IO_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_STATUS_CODES = {
    ErrorCode.INVALID_IDENTITY: 400,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.ARCHIVE_NOT_FOUND: 404,
    ErrorCode.STORAGE_UNAVAILABLE: 500,
    ErrorCode.STORAGE_IO_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


@dataclass
class APIError(Exception):
    """Base exception for errors surfaced to HTTP clients.

    Attributes:
        code: Error code from ErrorCode class
        message: Human-readable error message
    """

    code: str
    message: str

    def __str__(self) -> str:
        return self.message

    @property
    def status_code(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_STATUS_CODES.get(self.code, 500)

    def to_response(self) -> dict:
        """Convert to API response format."""
        return {"error": {"code": self.code, "message": self.message}}


class InvalidIdentityError(APIError):
    """A module coordinate is empty, unsafe, or the version is not semver."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(code=ErrorCode.INVALID_IDENTITY, message=message)
        self.field = field


class InvalidRequestError(APIError):
    """The request body is malformed."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message)


class PayloadTooLargeError(APIError):
    """Upload exceeds the configured ceiling."""

    def __init__(self, limit: int):
        super().__init__(
            code=ErrorCode.PAYLOAD_TOO_LARGE,
            message=f"Upload exceeds the maximum size of {limit} bytes",
        )
        self.limit = limit


class ArchiveNotFoundError(APIError):
    """No archive has been uploaded for the requested module version."""

    def __init__(self, coordinates: str):
        super().__init__(
            code=ErrorCode.ARCHIVE_NOT_FOUND,
            message=f"Module '{coordinates}' not found",
        )


class StorageUnavailableError(APIError):
    """The destination directory could not be created."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.STORAGE_UNAVAILABLE, message=message)


class StorageIOError(APIError):
    """Reading, writing or renaming an archive failed."""

    def __init__(self, message: str):
        super().__init__(code=ErrorCode.STORAGE_IO_ERROR, message=message)


class SnapshotError(Exception):
    """Base class for snapshot failures. Never sent to clients."""


class SnapshotCorruptError(SnapshotError):
    """The snapshot file could not be parsed or holds an invalid module."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Snapshot {path} is corrupt: {reason}")


class SnapshotIOError(SnapshotError):
    """The snapshot file could not be written."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write snapshot {path}: {reason}")


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions."""
    fields = {"path": request.url.path, "code": exc.code}
    if exc.status_code >= 500:
        logger.error(exc.message, extra=fields)
    elif exc.code != ErrorCode.ARCHIVE_NOT_FOUND:
        logger.warning(exc.message, extra=fields)

    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


def add_error_handlers(app: FastAPI) -> None:
    """Register error handlers with the FastAPI application."""
    app.add_exception_handler(APIError, api_error_handler)
