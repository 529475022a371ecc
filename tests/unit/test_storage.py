"""
Snapshot persistence tests: codec, local file store and in-memory store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from linkbox.adapters.local_storage import LocalSnapshotStore, create_local_snapshot_store
from linkbox.adapters.memory_storage import InMemorySnapshotStore
from linkbox.adapters.snapshot_codec import (
    SCHEMA_VERSION,
    SnapshotFormatError,
    decode_snapshot,
    encode_snapshot,
)
from linkbox.domain.entities import Store


@pytest.fixture
def file_store(tmp_path: Path, seed_store: Store) -> LocalSnapshotStore:
    return LocalSnapshotStore(tmp_path / "data", lambda: seed_store)


# --- Codec ---


class TestCodec:
    def test_envelope(self, seed_store: Store) -> None:
        payload = json.loads(encode_snapshot(seed_store))

        assert payload["schemaVersion"] == SCHEMA_VERSION
        assert set(payload["store"]) == {
            "ops",
            "clients",
            "processes",
            "investments",
            "convos",
            "rounds",
        }
        convo = payload["store"]["convos"]["cv_1_m1"]
        assert convo["investmentRefs"][:2] == [282700, 282701]
        assert convo["messages"][1]["from"]["address"] == "admin@landmark.com"

    def test_round_trip(self, seed_store: Store) -> None:
        assert decode_snapshot(encode_snapshot(seed_store)) == seed_store

    def test_legacy_bare_store(self) -> None:
        legacy = {
            "ops": {"ops1": {"id": "ops1", "firstName": "N", "lastName": "P", "email": "n@a.com"}},
            "clients": {"c1": {"id": "c1", "name": "IFC", "opsOwnerId": "ops1"}},
            "processes": {
                "1": {
                    "id": 1,
                    "firmName": "Landmark",
                    "clientId": "c1",
                    "convoIds": ["cv_1_a"],
                    "investmentIds": [7],
                    "createdAt": "2025-01-01T00:00:00Z",
                    "lastActivityAt": "2025-01-02T00:00:00Z",
                }
            },
            "investments": {
                "7": {
                    "id": 7,
                    "clientId": "c1",
                    "investingEntity": "Trust",
                    "fundName": "Fund",
                    "status": "linked",
                    "firmProcessId": 1,
                    "lastActivityAt": "2025-01-02T00:00:00Z",
                }
            },
            "convos": {
                "cv_1_a": {
                    "id": "cv_1_a",
                    "processId": 1,
                    "aliasEmail": "n.p-abcde@x.com",
                    "subject": "Hi",
                    "investmentRefs": [7],
                    "messageCount": 1,
                    "lastActivityAt": "2025-01-02T00:00:00Z",
                    "state": "CLOSED",
                    "messages": [
                        {
                            "id": "m1",
                            "ts": "2025-01-02T00:00:00Z",
                            "from": "Arch <n.p-abcde@x.com>",
                            "fromRole": "OPS",
                            "to": ["Admin <admin@fund.com>"],
                            "direction": "OUT",
                            "body": "Hello",
                        }
                    ],
                }
            },
            "rounds": {},
        }
        store = decode_snapshot(json.dumps(legacy))

        assert store.processes[1].fund_name == "Landmark"
        assert store.investments[7].status == "linked"
        message = store.convos["cv_1_a"].messages[0]
        assert message.sender.display_name == "Arch"
        assert message.to[0].address == "admin@fund.com"

    @pytest.mark.parametrize(
        "text",
        [
            "{not json",
            "[]",
            '{"schemaVersion": 99, "store": {}}',
            '{"schemaVersion": "1", "store": {}}',
            '{"schemaVersion": 1, "store": {"processes": {"1": {"id": "x"}}}}',
        ],
    )
    def test_rejects_bad_snapshots(self, text: str) -> None:
        with pytest.raises(SnapshotFormatError):
            decode_snapshot(text)


# --- Local file store ---


class TestLocalSnapshotStore:
    def test_missing_is_none(self, file_store: LocalSnapshotStore) -> None:
        assert file_store.load() is None

    def test_save_and_load(self, file_store: LocalSnapshotStore, seed_store: Store) -> None:
        file_store.save(seed_store)

        assert file_store.path.name == "linkbox-store.json"
        assert not file_store.path.with_name("linkbox-store.json.tmp").exists()
        assert file_store.load() == seed_store

    def test_corrupt_snapshot_is_absent(
        self, file_store: LocalSnapshotStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        file_store.path.write_text("{corrupt", encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert file_store.load() is None
        assert "Discarding unreadable snapshot" in caplog.text

    def test_newer_schema_is_absent(self, file_store: LocalSnapshotStore) -> None:
        file_store.path.write_text('{"schemaVersion": 2, "store": {}}', encoding="utf-8")
        assert file_store.load() is None

    def test_reset_replaces_saved_snapshot(
        self, file_store: LocalSnapshotStore, seed_store: Store
    ) -> None:
        file_store.save(Store())
        fresh = file_store.reset()

        assert fresh is seed_store
        assert file_store.load() == seed_store

    def test_key_is_sanitized(self, tmp_path: Path) -> None:
        store = LocalSnapshotStore(tmp_path, Store, key="../../etc/passwd")
        assert store.path.parent == tmp_path
        assert store.path.name == "__etc_passwd.json"

    def test_save_failure_is_logged(
        self, tmp_path: Path, seed_store: Store, caplog: pytest.LogCaptureFixture
    ) -> None:
        store = LocalSnapshotStore(tmp_path / "missing", Store, create_dirs=False)

        with caplog.at_level(logging.ERROR):
            store.save(seed_store)
        assert "Failed to save snapshot" in caplog.text

    def test_factory_uses_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LINKBOX_DATA_DIR", str(tmp_path / "env"))
        store = create_local_snapshot_store(Store)

        assert store.base_path == tmp_path / "env"
        assert store.base_path.is_dir()

    def test_factory_explicit_path_wins(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("LINKBOX_DATA_DIR", str(tmp_path / "env"))
        store = create_local_snapshot_store(Store, tmp_path / "explicit", key="other")

        assert store.path == tmp_path / "explicit" / "other.json"


# --- In-memory store ---


class TestInMemorySnapshotStore:
    def test_empty_is_none(self, seed_store: Store) -> None:
        assert InMemorySnapshotStore(lambda: seed_store).load() is None

    def test_save_counts(self, seed_store: Store) -> None:
        store = InMemorySnapshotStore(lambda: seed_store)
        store.save(seed_store)
        store.save(seed_store)

        assert store.save_count == 2
        assert store.load() == seed_store

    def test_corrupt_text_is_absent(self, seed_store: Store) -> None:
        assert InMemorySnapshotStore(lambda: seed_store, text="garbage").load() is None

    def test_reset(self, seed_store: Store) -> None:
        store = InMemorySnapshotStore(lambda: seed_store, text="garbage")
        assert store.reset() is seed_store
        assert store.load() == seed_store
