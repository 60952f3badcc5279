# SPDX-License-Identifier: MIT
"""Upload pipeline: validate, store, register, persist."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import BinaryIO

from .errors import SnapshotIOError
from .identity import ModuleIdentity
from .index import ModuleIndex
from .snapshot import SnapshotStore
from .storage import ModuleStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""

    identity: ModuleIdentity
    size: int
    created: bool
    snapshot_saved: bool


@dataclass
class _IdentityLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    # threads holding or waiting on lock, guarded by UploadPipeline._locks_guard
    users: int = 0


class UploadPipeline:
    """Writes an uploaded archive to storage and records it in the index.

    The steps run in a fixed order so the index never advertises an archive
    that is not on disk:

    1. validate the identity
    2. copy the archive, bounded by max_upload_size
    3. add the identity to the index
    4. save the snapshot (failure is logged, the upload still succeeds)

    Uploads of the same identity are serialized; distinct identities upload
    in parallel.
    """

    def __init__(
        self,
        storage: ModuleStorage,
        index: ModuleIndex,
        snapshot: SnapshotStore,
        max_upload_size: int,
    ):
        self.storage = storage
        self.index = index
        self.snapshot = snapshot
        self.max_upload_size = max_upload_size
        self._locks: dict[ModuleIdentity, _IdentityLock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _locked(self, identity: ModuleIdentity) -> Iterator[None]:
        """Hold the lock for identity; the entry is dropped once nobody uses it."""
        with self._locks_guard:
            entry = self._locks.get(identity)
            if entry is None:
                entry = self._locks[identity] = _IdentityLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[identity]

    def upload(self, identity: ModuleIdentity, stream: BinaryIO) -> UploadResult:
        """Store the archive read from stream as identity.

        Raises:
            InvalidIdentityError: If the identity is invalid
            PayloadTooLargeError: If the archive exceeds max_upload_size
            StorageUnavailableError: If the destination directory cannot be created
            StorageIOError: If the archive cannot be written
        """
        identity.validate()
        fields = {"coordinates": str(identity)}

        with self._locked(identity):
            size = self.storage.write_archive(identity, stream, limit=self.max_upload_size)
            created = self.index.add(identity)
            if not created:
                logger.info("module re-uploaded, archive replaced", extra=fields)

            snapshot_saved = True
            try:
                self.snapshot.save()
            except SnapshotIOError:
                snapshot_saved = False
                logger.exception("snapshot save failed after upload", extra=fields)

        logger.info("module uploaded", extra={**fields, "bytes": size})
        return UploadResult(identity=identity, size=size, created=created, snapshot_saved=snapshot_saved)
