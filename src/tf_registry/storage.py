# SPDX-License-Identifier: MIT
"""On-disk archive layout.

Every module version owns exactly one archive at::

    <root>/<namespace>/<name>/<system>/<version>/archive.tar.gz

Archives are written to a temporary sibling file and renamed into place, so a
reader either sees the previous archive or the complete new one.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from .errors import (
    ArchiveNotFoundError,
    PayloadTooLargeError,
    StorageIOError,
    StorageUnavailableError,
)
from .identity import ModuleIdentity

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "archive.tar.gz"
DIRECTORY_MODE = 0o755
CHUNK_SIZE = 64 * 1024


def path_of(identity: ModuleIdentity, root: str | os.PathLike) -> Path:
    """Return the archive path for a module version under root."""
    return (
        Path(root)
        / identity.namespace
        / identity.name
        / identity.system
        / identity.version
        / ARCHIVE_NAME
    )


class ModuleStorage:
    """Filesystem store for module archives rooted at a data directory."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)

    def path_of(self, identity: ModuleIdentity) -> Path:
        return path_of(identity, self.root)

    def prepare(self, identity: ModuleIdentity) -> Path:
        """Create the directory that will hold the archive.

        Returns:
            The archive path

        Raises:
            StorageUnavailableError: If the directory cannot be created
        """
        archive = self.path_of(identity)
        try:
            archive.parent.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Cannot create storage directory {archive.parent}: {e.strerror or e}"
            ) from e
        return archive

    def write_archive(self, identity: ModuleIdentity, stream: BinaryIO, limit: int | None = None) -> int:
        """Copy stream into the archive path for identity.

        An existing archive is replaced. Nothing is left behind at the
        destination if the copy fails or exceeds limit.

        Args:
            identity: Module version being stored
            stream: Binary file-like object positioned at the start of the archive
            limit: Maximum number of bytes accepted, or None for no ceiling

        Returns:
            Number of bytes written

        Raises:
            StorageUnavailableError: If the destination directory cannot be created
            PayloadTooLargeError: If the stream holds more than limit bytes
            StorageIOError: If reading, writing or renaming fails
        """
        archive = self.prepare(identity)

        try:
            fd, tmp_name = tempfile.mkstemp(dir=archive.parent, prefix=f".{ARCHIVE_NAME}.", suffix=".tmp")
        except OSError as e:
            raise StorageIOError(f"Cannot create temporary file in {archive.parent}: {e}") from e

        written = 0
        try:
            with os.fdopen(fd, "wb") as out:
                for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
                    written += len(chunk)
                    if limit is not None and written > limit:
                        raise PayloadTooLargeError(limit)
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, archive)
        except OSError as e:
            _discard(tmp_name)
            raise StorageIOError(f"Failed to write archive {archive}: {e}") from e
        except BaseException:
            _discard(tmp_name)
            raise

        logger.debug("archive written", extra={"path": str(archive), "bytes": written})
        return written

    def exists(self, identity: ModuleIdentity) -> bool:
        return self.path_of(identity).is_file()

    def archive_path(self, identity: ModuleIdentity) -> Path:
        """Return the path of an uploaded archive.

        Raises:
            ArchiveNotFoundError: If no archive exists for identity
        """
        archive = self.path_of(identity)
        if not archive.is_file():
            raise ArchiveNotFoundError(str(identity))
        return archive

    def scan(self) -> Iterator[ModuleIdentity]:
        """Yield the identity of every valid archive under root, in path order.

        Directories that do not decode to a valid identity are skipped.
        """
        if not self.root.is_dir():
            return
        for archive in sorted(self.root.glob(f"*/*/*/*/{ARCHIVE_NAME}")):
            if not archive.is_file():
                continue
            namespace, name, system, version = archive.relative_to(self.root).parts[:4]
            identity = ModuleIdentity(namespace=namespace, name=name, system=system, version=version)
            if identity.is_valid:
                yield identity
            else:
                logger.warning("skipping archive with invalid coordinates", extra={"path": str(archive)})


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass
