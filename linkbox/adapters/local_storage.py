"""
Local Filesystem Snapshot Adapter.

Implements SnapshotStorePort with one JSON file per key, the file-backed
counterpart of the browser's key-value storage.

Key behaviors:
- load() reports a missing, unreadable or corrupt snapshot as None
- save() writes a temp file and renames it over the old snapshot, so a
  reader never sees a half-written file; failures are logged, not raised
- reset() deletes the snapshot and saves a fresh seed
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from linkbox.adapters.snapshot_codec import SnapshotFormatError, decode_snapshot, encode_snapshot
from linkbox.domain.entities import Store

logger = logging.getLogger(__name__)

DEFAULT_KEY = "linkbox-store"


class LocalSnapshotStore:
    """
    Local filesystem implementation of SnapshotStorePort.

    Example key: "linkbox-store" -> {base_path}/linkbox-store.json
    """

    def __init__(
        self,
        base_path: str | Path,
        seed: Callable[[], Store],
        *,
        key: str = DEFAULT_KEY,
        create_dirs: bool = True,
    ) -> None:
        """
        Initialize the snapshot store.

        Args:
            base_path: Directory holding snapshot files
            seed: Factory for the default snapshot used by reset()
            key: Storage key; the file name without extension
            create_dirs: Whether to create base_path if it doesn't exist
        """
        self.base_path = Path(base_path)
        self.seed = seed
        self.key = key

        if create_dirs:
            self.base_path.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        # Sanitize key to prevent directory traversal
        safe_key = self.key.replace("..", "").replace("/", "_").lstrip(".")
        return self.base_path / f"{safe_key}.json"

    def load(self) -> Store | None:
        path = self.path
        if not path.exists():
            return None

        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot read snapshot %s: %s", path, e)
            return None

        try:
            return decode_snapshot(text)
        except SnapshotFormatError as e:
            logger.warning("Discarding unreadable snapshot %s: %s", path, e)
            return None

    def save(self, store: Store) -> None:
        path = self.path
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            tmp_path.write_text(encode_snapshot(store), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError:
            logger.exception("Failed to save snapshot to %s", path)

    def reset(self) -> Store:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot remove snapshot %s: %s", self.path, e)

        fresh = self.seed()
        self.save(fresh)
        logger.info("Snapshot %s reset to seed data", self.key)
        return fresh


def create_local_snapshot_store(
    seed: Callable[[], Store],
    base_path: str | Path | None = None,
    *,
    env_var: str = "LINKBOX_DATA_DIR",
    default_path: str = "./data",
    key: str = DEFAULT_KEY,
) -> LocalSnapshotStore:
    """
    Factory function to create LocalSnapshotStore from config.

    Args:
        seed: Factory for the default snapshot
        base_path: Explicit data directory (overrides env var)
        env_var: Environment variable name for the data directory
        default_path: Default directory if not configured
        key: Storage key

    Returns:
        Configured LocalSnapshotStore instance
    """
    if base_path is None:
        base_path = os.environ.get(env_var, default_path)

    return LocalSnapshotStore(base_path, seed, key=key)
