# SPDX-License-Identifier: MIT
"""In-memory index of uploaded module versions."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator

from .identity import ModuleIdentity


class ModuleIndex:
    """Ordered, duplicate-free collection of module identities.

    Insertion order is preserved; it drives version listings and the order of
    records in the snapshot. Every operation runs under one lock, so readers
    see the index either before or after a concurrent ``add``.
    """

    def __init__(self, identities: Iterable[ModuleIdentity] = ()) -> None:
        self._lock = threading.RLock()
        # dict keys keep insertion order and give O(1) membership
        self._entries: dict[ModuleIdentity, None] = {}
        for identity in identities:
            self.add(identity)

    def add(self, identity: ModuleIdentity) -> bool:
        """Append identity to the index.

        Returns:
            True if the identity was new, False if it was already indexed
        """
        with self._lock:
            if identity in self._entries:
                return False
            self._entries[identity] = None
            return True

    def versions(self, namespace: str, name: str, system: str) -> list[str]:
        """Return versions of one module in index order."""
        with self._lock:
            return [i.version for i in self._entries if i.matches(namespace, name, system)]

    def identities(self) -> list[ModuleIdentity]:
        """Return a copy of every identity in index order."""
        with self._lock:
            return list(self._entries)

    def replace(self, identities: Iterable[ModuleIdentity]) -> None:
        """Swap the whole content of the index in one step."""
        fresh = dict.fromkeys(identities)
        with self._lock:
            self._entries = fresh

    def __iter__(self) -> Iterator[ModuleIdentity]:
        return iter(self.identities())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._entries
