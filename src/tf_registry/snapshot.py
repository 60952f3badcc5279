# SPDX-License-Identifier: MIT
"""Durable snapshot of the module index.

The snapshot is a single JSON document under the storage root. It is read
once at startup and rewritten after every successful upload. Writes go to a
temporary sibling file that is renamed over the target, so the file on disk
is always a complete document.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from pathlib import Path

from pydantic import ValidationError

from .errors import InvalidIdentityError, SnapshotCorruptError, SnapshotIOError
from .index import ModuleIndex
from .models import SnapshotDocument, SnapshotRecord
from .storage import ModuleStorage

logger = logging.getLogger(__name__)

SNAPSHOT_NAME = "data.json"


class SnapshotStore:
    """Loads and saves a ModuleIndex to ``<root>/data.json``."""

    def __init__(self, root: str | os.PathLike, index: ModuleIndex, filename: str = SNAPSHOT_NAME):
        self.path = Path(root) / filename
        self.index = index
        self._write_lock = threading.Lock()

    def load(self) -> int:
        """Append every module in the snapshot to the index.

        A missing snapshot file leaves the index untouched.

        Returns:
            Number of modules read from the snapshot

        Raises:
            SnapshotCorruptError: If the file cannot be read or parsed, or a
                record is not a valid module identity
        """
        if not self.path.exists():
            logger.info("no snapshot found, starting with an empty index", extra={"path": str(self.path)})
            return 0

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise SnapshotCorruptError(self.path, f"unreadable: {e}") from e

        try:
            document = SnapshotDocument.model_validate_json(raw)
        except ValidationError as e:
            raise SnapshotCorruptError(self.path, _summarize(e)) from e

        identities = []
        for position, record in enumerate(document.modules):
            try:
                identities.append(record.to_identity().validate())
            except InvalidIdentityError as e:
                raise SnapshotCorruptError(self.path, f"modules[{position}]: {e}") from e

        for identity in identities:
            self.index.add(identity)

        logger.info("snapshot loaded", extra={"path": str(self.path), "modules": len(identities)})
        return len(identities)

    def save(self) -> None:
        """Rewrite the snapshot from the current index.

        Saves are serialized, and each one captures the index after taking
        the write lock, so the last save to finish holds the latest state.

        Raises:
            SnapshotIOError: If the file cannot be written
        """
        with self._write_lock:
            document = SnapshotDocument(
                modules=[SnapshotRecord.from_identity(i) for i in self.index.identities()]
            )
            payload = document.model_dump_json(indent=2)
            try:
                _atomic_write_text(self.path, payload + "\n")
            except OSError as e:
                raise SnapshotIOError(self.path, str(e)) from e

        logger.debug("snapshot saved", extra={"path": str(self.path), "modules": len(document.modules)})

    def rebuild(self, storage: ModuleStorage) -> int:
        """Replace the index with the archives found on disk and save it.

        Returns:
            Number of modules indexed
        """
        identities = list(storage.scan())
        self.index.replace(identities)
        self.save()
        logger.info("index rebuilt from storage", extra={"root": str(storage.root), "modules": len(identities)})
        return len(identities)


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def _summarize(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "document"
    return f"{location}: {first.get('msg', 'invalid')}"
