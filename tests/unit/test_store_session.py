"""
StoreSession tests: snapshot lifecycle, commits and rejections.
"""

from __future__ import annotations

import logging

import pytest

from linkbox.adapters.memory_storage import InMemorySnapshotStore
from linkbox.components.store import EmailDraft, StoreMutator
from linkbox.domain.entities import Store
from linkbox.services.store_session import StoreSession


class TestLifecycle:
    def test_open_falls_back_to_seed(
        self, session: StoreSession, snapshots: InMemorySnapshotStore
    ) -> None:
        store = session.open()

        assert sorted(store.processes) == [1, 2]
        assert session.index.referencing(282700) == {"cv_1_m1"}
        assert snapshots.save_count == 0

    def test_index_opens_the_session(self, session: StoreSession) -> None:
        index = session.index

        assert index.referencing(283009) == {"cv_2_m2"}
        assert session.index is index
        assert sorted(session.store.convos) == ["cv_1_m1", "cv_1_m2", "cv_2_m1", "cv_2_m2"]

    def test_open_empty_when_seeding_disabled(
        self, snapshots: InMemorySnapshotStore, mutator: StoreMutator
    ) -> None:
        session = StoreSession(snapshots, mutator, Store, seed_on_missing=False)
        assert session.store == Store()

    def test_open_loads_saved_snapshot(
        self, snapshots: InMemorySnapshotStore, mutator: StoreMutator, seed_store: Store
    ) -> None:
        saved = seed_store.replace(rounds={})
        snapshots.save(saved)

        session = StoreSession(snapshots, mutator, lambda: seed_store)
        assert session.store == saved

    def test_corrupt_snapshot_uses_seed(
        self, mutator: StoreMutator, seed_store: Store
    ) -> None:
        snapshots = InMemorySnapshotStore(lambda: seed_store, text="{oops")
        session = StoreSession(snapshots, mutator, lambda: seed_store)
        assert session.store is seed_store

    def test_reset(self, session: StoreSession, snapshots: InMemorySnapshotStore) -> None:
        session.set_investment_status(283000, "in_progress")
        store = session.reset()

        assert store.investments[283000].status == "linked"
        assert session.store is store
        assert snapshots.load() == store


class TestApply:
    def test_commit_saves_and_reindexes(
        self, session: StoreSession, snapshots: InMemorySnapshotStore
    ) -> None:
        before = session.store
        output = session.set_investment_refs("cv_1_m2", [282706, 290000])

        assert output.success
        assert session.store is output.store
        assert session.store is not before
        assert session.index.referencing(290000) == {"cv_1_m2"}
        assert session.index.referencing(282707) == frozenset()
        assert snapshots.save_count == 1
        assert snapshots.load() == session.store

    def test_rejection_changes_nothing(
        self,
        session: StoreSession,
        snapshots: InMemorySnapshotStore,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        before = session.store
        with caplog.at_level(logging.INFO):
            output = session.set_investment_status(290000, "linked")

        assert not output.success
        assert session.store is before
        assert snapshots.save_count == 0
        assert "investment_unassigned" in caplog.text

    def test_noop_is_not_saved(
        self, session: StoreSession, snapshots: InMemorySnapshotStore
    ) -> None:
        output = session.set_investment_status(282700, "linked")

        assert output.success
        assert snapshots.save_count == 0

    def test_operations_chain(self, session: StoreSession) -> None:
        created = session.create_process(
            "Apollo", "Acme", EmailDraft(to="admin@apollo.com", body="Hello"), [290000]
        )
        process_id = created.created_id
        convo = session.create_conversation(
            process_id, EmailDraft(to="admin@apollo.com", subject="More", body="Two")
        )
        session.firm_reply(convo.created_id, "Received")
        session.reply(convo.created_id, "Thanks")
        session.add_investments(process_id, [290001], convo.created_id)
        session.move_conversations([convo.created_id], process_id, 1)
        session.remove_investments(1, [290001])

        store = session.store
        moved = store.convos[convo.created_id]
        assert moved.process_id == 1
        assert moved.message_count == 3
        assert moved.state == "PENDING_FUND"
        assert store.investments[290000].status == "in_progress"
        assert store.investments[290001].status is None
