"""
Reference index and invariant checks for the Store graph.

Conversation -> investment references are the only stored linkage, so the
reverse direction (which conversations mention an investment) is kept as a
secondary index. It is rebuilt from a snapshot, never persisted.

Invariants checked:
- An investment's status is None exactly when no conversation references it.
- A conversation's stored state matches the investment-driven derivation,
  unless a message reopened it (soft).
- Process convo_ids and conversation process_id agree in both directions.
- A conversation's message_count equals its number of messages.
- Referenced investments belong to the owning process's client (soft).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from linkbox.domain.entities import Store
from linkbox.domain.state import derive_state, reopened_by_message


@dataclass(frozen=True)
class RefIndex:
    """Investment id -> ids of the conversations referencing it."""

    _refs: Mapping[int, frozenset[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, store: Store) -> RefIndex:
        refs: dict[int, set[str]] = {}
        for convo in store.convos.values():
            for inv_id in convo.investment_refs:
                refs.setdefault(inv_id, set()).add(convo.id)
        return cls(MappingProxyType({k: frozenset(v) for k, v in refs.items()}))

    def referencing(self, investment_id: int) -> frozenset[str]:
        return self._refs.get(investment_id, frozenset())

    def is_referenced(self, investment_id: int) -> bool:
        return investment_id in self._refs

    def with_refs(self, convo_id: str, old: Iterable[int], new: Iterable[int]) -> RefIndex:
        """Return an index reflecting one conversation's references changing."""
        refs = dict(self._refs)
        for inv_id in set(old) - set(new):
            remaining = refs.get(inv_id, frozenset()) - {convo_id}
            if remaining:
                refs[inv_id] = remaining
            else:
                refs.pop(inv_id, None)
        for inv_id in set(new):
            refs[inv_id] = refs.get(inv_id, frozenset()) | {convo_id}
        return RefIndex(MappingProxyType(refs))

    def __len__(self) -> int:
        return len(self._refs)


@dataclass(frozen=True)
class InvariantViolation:
    """One broken invariant, located by entity."""

    code: str
    entity_id: str
    message: str
    soft: bool = False


def check_invariants(store: Store, index: RefIndex | None = None) -> list[InvariantViolation]:
    """
    Report every invariant violation in the snapshot.

    Dangling references are tolerated and not reported; they are filtered at
    read time.
    """
    index = index or RefIndex.build(store)
    violations: list[InvariantViolation] = []

    for inv in store.investments.values():
        referenced = index.is_referenced(inv.id)
        if referenced and inv.status is None:
            violations.append(
                InvariantViolation(
                    code="status_missing",
                    entity_id=str(inv.id),
                    message=f"Investment {inv.id} is referenced but has no status",
                )
            )
        elif not referenced and inv.status is not None:
            violations.append(
                InvariantViolation(
                    code="status_unreferenced",
                    entity_id=str(inv.id),
                    message=f"Investment {inv.id} has status '{inv.status}' but no conversation references it",
                )
            )

    for convo in store.convos.values():
        expected = derive_state(convo, store)
        if expected != convo.state and reopened_by_message(convo, store):
            violations.append(
                InvariantViolation(
                    code="state_reopened",
                    entity_id=convo.id,
                    message=(
                        f"Conversation {convo.id} was reopened to {convo.state} by a message, "
                        f"derivation gives {expected}"
                    ),
                    soft=True,
                )
            )
        elif expected != convo.state:
            violations.append(
                InvariantViolation(
                    code="state_stale",
                    entity_id=convo.id,
                    message=f"Conversation {convo.id} is {convo.state}, derivation gives {expected}",
                )
            )

        if convo.message_count != len(convo.messages):
            violations.append(
                InvariantViolation(
                    code="message_count",
                    entity_id=convo.id,
                    message=(
                        f"Conversation {convo.id} counts {convo.message_count} messages "
                        f"but holds {len(convo.messages)}"
                    ),
                )
            )

        process = store.processes.get(convo.process_id)
        if process is None or convo.id not in process.convo_ids:
            violations.append(
                InvariantViolation(
                    code="process_link",
                    entity_id=convo.id,
                    message=f"Conversation {convo.id} is not listed by process {convo.process_id}",
                )
            )
            continue

        for inv_id in convo.investment_refs:
            inv = store.investments.get(inv_id)
            if inv is not None and inv.client_id != process.client_id:
                violations.append(
                    InvariantViolation(
                        code="client_mismatch",
                        entity_id=convo.id,
                        message=(
                            f"Conversation {convo.id} references investment {inv_id} "
                            f"of client {inv.client_id}, process client is {process.client_id}"
                        ),
                        soft=True,
                    )
                )

    for process in store.processes.values():
        for convo_id in process.convo_ids:
            convo = store.convos.get(convo_id)
            if convo is not None and convo.process_id != process.id:
                violations.append(
                    InvariantViolation(
                        code="process_link",
                        entity_id=convo_id,
                        message=(
                            f"Process {process.id} lists conversation {convo_id} "
                            f"which belongs to process {convo.process_id}"
                        ),
                    )
                )

    return violations
