"""
StoreSession - The single writer of the Store.

Holds the current snapshot and its reference index, applies one mutation
at a time and hands every accepted snapshot to the snapshot store. Readers
get immutable snapshots; a snapshot they hold is never changed under them.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from linkbox.components.store import (
    AddInvestmentsInput,
    CreateConversationInput,
    CreateProcessInput,
    EmailDraft,
    FirmReplyInput,
    MoveConversationsInput,
    OpsReplyInput,
    RemoveInvestmentsInput,
    SetInvestmentRefsInput,
    SetInvestmentStatusInput,
    StoreMutationInput,
    StoreMutationOutput,
    StoreMutator,
    run,
)
from linkbox.domain.entities import InvestmentStatus, Store
from linkbox.domain.integrity import RefIndex
from linkbox.ports.snapshot import SnapshotStorePort

logger = logging.getLogger(__name__)


class StoreSession:
    def __init__(
        self,
        snapshots: SnapshotStorePort,
        mutator: StoreMutator,
        seed: Callable[[], Store],
        *,
        seed_on_missing: bool = True,
    ):
        self.snapshots = snapshots
        self.mutator = mutator
        self.seed = seed
        self.seed_on_missing = seed_on_missing
        self._store: Store | None = None
        self._index: RefIndex | None = None
        # One writer at a time; mutations themselves are pure.
        self._lock = threading.RLock()

    # --- Lifecycle ---

    def open(self) -> Store:
        """Load the saved snapshot, falling back to seed (or empty) data."""
        with self._lock:
            store = self.snapshots.load()
            if store is None:
                logger.info("No usable snapshot, starting from %s data",
                            "seed" if self.seed_on_missing else "empty")
                store = self.seed() if self.seed_on_missing else Store()
            self._set(store)
            return store

    def reset(self) -> Store:
        """Discard saved data and start over from the seed."""
        with self._lock:
            store = self.snapshots.reset()
            self._set(store)
            return store

    def _set(self, store: Store) -> RefIndex:
        self._store = store
        self._index = RefIndex.build(store)
        return self._index

    @property
    def store(self) -> Store:
        if self._store is None:
            return self.open()
        return self._store

    @property
    def index(self) -> RefIndex:
        with self._lock:
            if self._index is None:
                return self._set(self.open())
            return self._index

    # --- Mutations ---

    def apply(self, input_data: StoreMutationInput) -> StoreMutationOutput:
        """
        Apply one mutation and commit the result.

        Rejected mutations leave the session and the saved snapshot as they
        were. An accepted mutation that changed nothing is not re-saved.
        """
        with self._lock:
            current = self.store
            output = run(input_data, self.mutator, current, self.index)
            op = type(input_data).__name__

            if not output.success:
                logger.info(
                    "Rejected %s: %s", op, ", ".join(e.code for e in output.errors)
                )
                return output

            if output.store is not current:
                self._set(output.store)
                self.snapshots.save(output.store)
                logger.info("Committed %s", op)
            return output

    def create_process(
        self,
        fund_name: str,
        client_name: str,
        email: EmailDraft,
        investment_ids: Iterable[int] = (),
    ) -> StoreMutationOutput:
        return self.apply(
            CreateProcessInput(fund_name, client_name, email, tuple(investment_ids))
        )

    def create_conversation(
        self, process_id: int, email: EmailDraft, investment_refs: Iterable[int] = ()
    ) -> StoreMutationOutput:
        return self.apply(CreateConversationInput(process_id, email, tuple(investment_refs)))

    def reply(self, convo_id: str, body: str, to: str | None = None) -> StoreMutationOutput:
        return self.apply(OpsReplyInput(convo_id, body, to))

    def firm_reply(
        self, convo_id: str, body: str, sender: str | None = None
    ) -> StoreMutationOutput:
        return self.apply(FirmReplyInput(convo_id, body, sender))

    def set_investment_refs(
        self, convo_id: str, investment_refs: Iterable[int]
    ) -> StoreMutationOutput:
        return self.apply(SetInvestmentRefsInput(convo_id, tuple(investment_refs)))

    def set_investment_status(
        self, investment_id: int, status: InvestmentStatus
    ) -> StoreMutationOutput:
        return self.apply(SetInvestmentStatusInput(investment_id, status))

    def move_conversations(
        self, convo_ids: Iterable[str], from_process_id: int, to_process_id: int
    ) -> StoreMutationOutput:
        return self.apply(
            MoveConversationsInput(tuple(convo_ids), from_process_id, to_process_id)
        )

    def add_investments(
        self, process_id: int, investment_ids: Iterable[int], convo_id: str | None = None
    ) -> StoreMutationOutput:
        return self.apply(AddInvestmentsInput(process_id, tuple(investment_ids), convo_id))

    def remove_investments(
        self, process_id: int, investment_ids: Iterable[int]
    ) -> StoreMutationOutput:
        return self.apply(RemoveInvestmentsInput(process_id, tuple(investment_ids)))
