"""
In-memory snapshot adapter.

Keeps the serialized snapshot text rather than the Store object, so loads
go through the same decoding (and the same corruption handling) as files.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from linkbox.adapters.snapshot_codec import SnapshotFormatError, decode_snapshot, encode_snapshot
from linkbox.domain.entities import Store

logger = logging.getLogger(__name__)


class InMemorySnapshotStore:
    def __init__(self, seed: Callable[[], Store], text: str | None = None) -> None:
        self.seed = seed
        self.text = text
        self.save_count = 0

    def load(self) -> Store | None:
        if self.text is None:
            return None
        try:
            return decode_snapshot(self.text)
        except SnapshotFormatError as e:
            logger.warning("Discarding unreadable in-memory snapshot: %s", e)
            return None

    def save(self, store: Store) -> None:
        self.text = encode_snapshot(store)
        self.save_count += 1

    def reset(self) -> Store:
        self.text = None
        fresh = self.seed()
        self.save(fresh)
        return fresh
