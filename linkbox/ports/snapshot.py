"""
Snapshot persistence interface.

The whole Store is saved and loaded as one serialized value under a single
well-known key. There is no partial or incremental persistence.
"""

from __future__ import annotations

from typing import Protocol

from linkbox.domain.entities import Store


class SnapshotStorePort(Protocol):
    def load(self) -> Store | None:
        """
        Return the saved snapshot, or None if absent.

        A corrupt or unreadable snapshot is reported as absent, never raised.
        """
        ...

    def save(self, store: Store) -> None:
        """Persist the snapshot. Best effort: failures are logged, not raised."""
        ...

    def reset(self) -> Store:
        """Discard the saved snapshot and return (and save) a fresh seed."""
        ...
