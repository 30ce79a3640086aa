"""Snapshot store contract.

The store is the only way to change the inventory. It owns the current
Snapshot, serializes every load/update/save through one lock, validates
each candidate before publishing it, and tells subscribers about every
snapshot it commits.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from fuse_inventory.errors import (
    OperationCancelled,
    SnapshotValidationError,
    StoreLoadError,
)
from fuse_inventory.models.snapshot import Snapshot
from fuse_inventory.observability.logging import get_logger
from fuse_inventory.persistence.migrations import migrate_dependency_targets
from fuse_inventory.validation.validator import validate_snapshot

logger = get_logger(__name__)

SnapshotTransform = Callable[[Snapshot], Snapshot]
SnapshotSubscriber = Callable[[Snapshot], None]


def check_cancelled(cancel: Optional[threading.Event]) -> None:
    """Raises OperationCancelled if the caller has set its cancel event."""
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("Store operation cancelled")


class SnapshotStore(ABC):
    """Single-writer, multi-reader holder of the current Snapshot.

    Reads of ``current`` take no lock: the cached reference is only ever
    swapped to a snapshot that has been fully built and validated.
    """

    def __init__(self) -> None:
        # Re-entrant so a subscriber may call back into update().
        self._lock = threading.RLock()
        self._cache: Optional[Snapshot] = None
        self._subscribers: list[SnapshotSubscriber] = []

    @abstractmethod
    def _read(self, cancel: Optional[threading.Event]) -> Snapshot:
        """Reads the durable state into a snapshot, without validating it."""
        pass  # pragma: no cover

    @abstractmethod
    def _write(
        self, snapshot: Snapshot, cancel: Optional[threading.Event]
    ) -> None:
        """Persists an already validated snapshot."""
        pass  # pragma: no cover

    @property
    def current(self) -> Optional[Snapshot]:
        """The published snapshot, or None before the first load."""
        return self._cache

    def get(self, cancel: Optional[threading.Event] = None) -> Snapshot:
        """Returns the current snapshot, loading it on first use."""
        cached = self._cache
        if cached is not None:
            return cached
        with self._lock:
            if self._cache is not None:
                return self._cache
            return self.load(cancel)

    def load(self, cancel: Optional[threading.Event] = None) -> Snapshot:
        """Reads, migrates and validates the durable state.

        Raises:
            StoreLoadError: If the durable state violates integrity. The
                process must not serve such data.
            OperationCancelled: If ``cancel`` is set before loading finishes.
        """
        with self._lock:
            check_cancelled(cancel)
            snapshot = migrate_dependency_targets(self._read(cancel))

            errors = validate_snapshot(snapshot)
            if errors:
                logger.error(
                    "Stored data failed validation",
                    extra={"extra_fields": {"violations": errors}},
                )
                raise StoreLoadError(errors)

            self._cache = snapshot
            logger.info(
                "Snapshot loaded",
                extra={
                    "extra_fields": {
                        "applications": len(snapshot.applications),
                        "users": len(snapshot.security.users),
                    }
                },
            )
            return snapshot

    def update(
        self,
        transform: SnapshotTransform,
        cancel: Optional[threading.Event] = None,
    ) -> Snapshot:
        """Applies ``transform`` to the current snapshot and commits the result.

        The lock is held for the whole read/compute/commit cycle, so
        concurrent updates never interleave: each transform sees the
        result of the previous one.

        Returns:
            The committed snapshot.

        Raises:
            SnapshotValidationError: If the transformed snapshot is invalid;
                nothing is changed.
        """
        with self._lock:
            current = self._cache if self._cache is not None else self.load(cancel)
            return self.save(transform(current), cancel)

    def save(
        self, snapshot: Snapshot, cancel: Optional[threading.Event] = None
    ) -> Snapshot:
        """Validates and commits a snapshot.

        Raises:
            SnapshotValidationError: If ``snapshot`` is invalid. The previous
                snapshot and the durable state are left untouched.
        """
        with self._lock:
            check_cancelled(cancel)
            errors = validate_snapshot(snapshot)
            if errors:
                logger.warning(
                    "Rejected snapshot commit",
                    extra={"extra_fields": {"violations": errors}},
                )
                raise SnapshotValidationError(errors)

            self._write(snapshot, cancel)
            self._cache = snapshot
            logger.debug("Snapshot committed")
            self._notify(snapshot)
            return snapshot

    def subscribe(self, callback: SnapshotSubscriber) -> Callable[[], None]:
        """Registers a callback invoked with every committed snapshot.

        Returns:
            A function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, snapshot: Snapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception:
                # The commit already happened; a subscriber cannot undo it.
                logger.exception("Snapshot subscriber failed")
