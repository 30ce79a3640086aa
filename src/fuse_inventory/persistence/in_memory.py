"""In-memory implementation of the SnapshotStore.

This module provides a store with the same locking, validation and
notification behaviour as the file-backed one, but no I/O. Suitable for
tests and for embedding callers that do not need durability.
"""

import threading
from typing import Optional

from fuse_inventory.models.snapshot import Snapshot
from fuse_inventory.persistence.store import SnapshotStore


class InMemorySnapshotStore(SnapshotStore):
    """Snapshot store whose durable state is a single in-memory reference.

    Args:
        initial: The state returned by the first load. Defaults to an
            empty snapshot.
    """

    def __init__(self, initial: Optional[Snapshot] = None):
        super().__init__()
        self._durable = initial if initial is not None else Snapshot.empty()

    def _read(self, cancel: Optional[threading.Event]) -> Snapshot:
        return self._durable

    def _write(
        self, snapshot: Snapshot, cancel: Optional[threading.Event]
    ) -> None:
        self._durable = snapshot
