"""
StoreMutator - Whole-snapshot mutations of the linking-process graph.

Every method takes the current Store snapshot and returns a Mutation
holding a new snapshot. Only the branches an operation touches are
rebuilt; all other entries are shared with the input snapshot. Nothing is
ever modified in place.

Key behaviors:
- Validation failures reject the whole operation: the input snapshot is
  returned together with the reasons, and no partial change is made
- Investment status is None exactly when no conversation references it;
  every change of references restores this at its boundaries
- Conversation state is re-derived after any change of references or
  statuses, for every conversation that can be affected
- Message appends apply the direction-driven transition and nothing else
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import NamedTuple

from linkbox.components.mail import alias_for_ops, build_preview, resolve_firm_address
from linkbox.domain.entities import (
    CONVO_STATES,
    INVESTMENT_STATUSES,
    Client,
    Convo,
    EmailAddress,
    EmailMsg,
    FundProcess,
    Investment,
    OpsMember,
    Store,
)
from linkbox.domain.integrity import RefIndex
from linkbox.domain.state import derive_state, message_transition, rederive_states
from linkbox.ports.clock import ClockPort
from linkbox.ports.tokens import TokenPort

from .models import (
    DEFAULT_CONFIG,
    AddInvestmentsInput,
    AppendMessageInput,
    CreateConversationInput,
    CreateProcessInput,
    EmailDraft,
    FirmReplyInput,
    MoveConversationsInput,
    MutationConfig,
    OpsReplyInput,
    RemoveInvestmentsInput,
    SetInvestmentRefsInput,
    SetInvestmentStatusInput,
    StoreValidationError,
)

_CLIENT_ID = re.compile(r"^c(\d+)$")


class Mutation(NamedTuple):
    """Result of one mutation: the new snapshot, or the old one plus errors."""

    store: Store
    errors: list[StoreValidationError]
    created_id: str | int | None = None

    @property
    def success(self) -> bool:
        return not self.errors


# --- Validation Helpers ---


def _required(field: str, value: str | None) -> list[StoreValidationError]:
    if value is None or not value.strip():
        return [
            StoreValidationError(
                code="required",
                message=f"Field '{field}' is required",
                field=field,
            )
        ]
    return []


def _not_found(kind: str, entity_id: object, field: str) -> StoreValidationError:
    return StoreValidationError(
        code=f"{kind}_not_found",
        message=f"{kind.capitalize()} {entity_id} not found",
        field=field,
    )


def _missing_investments(
    store: Store, investment_ids: Iterable[int], field: str
) -> list[StoreValidationError]:
    return [
        _not_found("investment", inv_id, field)
        for inv_id in investment_ids
        if inv_id not in store.investments
    ]


def _dedupe(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def _address(raw: str) -> EmailAddress:
    return EmailAddress.model_validate(raw.strip())


def _addresses(raw: Iterable[str]) -> list[EmailAddress]:
    return [_address(r) for r in raw if r.strip()]


def _first_ops(store: Store) -> OpsMember | None:
    if not store.ops:
        return None
    return store.ops[min(store.ops)]


# --- Mutator ---


class StoreMutator:
    """
    Applies validated mutations to Store snapshots.

    The clock and token source are the only inputs besides the snapshot, so
    with fixed fakes every method is deterministic.
    """

    def __init__(
        self,
        clock: ClockPort,
        tokens: TokenPort,
        config: MutationConfig = DEFAULT_CONFIG,
    ) -> None:
        self.clock = clock
        self.tokens = tokens
        self.config = config

    # --- Id allocation ---

    def _next_process_id(self, store: Store) -> int:
        return max(store.processes, default=0) + 1

    def _next_client_id(self, store: Store) -> str:
        suffixes = [
            int(match.group(1))
            for client_id in store.clients
            if (match := _CLIENT_ID.match(client_id))
        ]
        n = max(suffixes, default=0) + 1
        while f"c{n}" in store.clients:
            n += 1
        return f"c{n}"

    def _new_convo_id(self, store: Store, process_id: int) -> str:
        while True:
            convo_id = f"cv_{process_id}_{self.tokens.token(self.config.id_token_length)}"
            if convo_id not in store.convos:
                return convo_id

    def _new_message_id(self) -> str:
        return f"m_{self.tokens.token(self.config.message_id_token_length)}"

    # --- Shared building blocks ---

    def _affinity_errors(
        self, store: Store, client_id: str, investment_ids: Iterable[int], field: str
    ) -> list[StoreValidationError]:
        if not self.config.enforce_client_affinity:
            return []
        return [
            StoreValidationError(
                code="client_mismatch",
                message=(
                    f"Investment {inv_id} belongs to client "
                    f"{store.investments[inv_id].client_id}, not {client_id}"
                ),
                field=field,
            )
            for inv_id in investment_ids
            if inv_id in store.investments and store.investments[inv_id].client_id != client_id
        ]

    def _resulting_state_errors(
        self, store: Store, convo: Convo, state: str | None
    ) -> list[StoreValidationError]:
        """An explicit state must be known and agree with the derivation."""
        if state is None:
            return []
        if state not in CONVO_STATES:
            return [
                StoreValidationError(
                    code="invalid_state",
                    message=f"Unknown conversation state '{state}'",
                    field="resulting_state",
                )
            ]
        expected = derive_state(convo.model_copy(update={"state": state}), store)
        if expected != state:
            return [
                StoreValidationError(
                    code="invalid_state",
                    message=(
                        f"State {state} contradicts the investments of {convo.id}, "
                        f"derivation gives {expected}"
                    ),
                    field="resulting_state",
                )
            ]
        return []

    def _outbound_message(
        self,
        alias_email: str,
        to: list[EmailAddress],
        body: str,
        now: datetime,
        cc: list[EmailAddress] | None = None,
        bcc: list[EmailAddress] | None = None,
    ) -> EmailMsg:
        return EmailMsg(
            id=self._new_message_id(),
            ts=now,
            sender=EmailAddress(address=alias_email, display_name=self.config.ops_display_name),
            from_role="OPS",
            to=to,
            cc=cc or [],
            bcc=bcc or [],
            direction="OUT",
            body=body.strip(),
        )

    def _new_convo(
        self,
        store: Store,
        ops: OpsMember,
        process_id: int,
        draft: EmailDraft,
        subject: str,
        now: datetime,
    ) -> Convo:
        alias = alias_for_ops(
            ops, self.tokens, self.config.alias_domain, self.config.alias_token_length
        )
        message = self._outbound_message(
            alias,
            [_address(draft.to)],
            draft.body,
            now,
            cc=_addresses(draft.cc),
            bcc=_addresses(draft.bcc),
        )
        return Convo(
            id=self._new_convo_id(store, process_id),
            process_id=process_id,
            alias_email=alias,
            subject=subject,
            participants=["ADMIN"],
            investment_refs=[],
            message_count=1,
            last_activity_at=now,
            preview=build_preview(draft.body, self.config.preview_length),
            state=message_transition("NO_RESPONSE", message),
            messages=[message],
        )

    def _apply_refs(
        self,
        store: Store,
        changes: Mapping[str, list[int]],
        index: RefIndex,
        now: datetime,
    ) -> Store:
        """
        Replace the references of several conversations at once.

        Existing statuses are kept, so re-linking never resets progress.
        Investments that become referenced without a status start as
        in_progress; investments no conversation references any longer lose
        their status. Affected conversations are re-derived afterwards.
        """
        convos = dict(store.convos)
        touched: set[int] = set()
        for convo_id, new_refs in changes.items():
            convo = convos[convo_id]
            touched.update(convo.investment_refs)
            touched.update(new_refs)
            index = index.with_refs(convo_id, convo.investment_refs, new_refs)
            convos[convo_id] = convo.model_copy(update={"investment_refs": list(new_refs)})

        investments: dict[int, Investment] = {}
        rederive: set[str] = set(changes)
        for inv_id in touched:
            inv = store.investments.get(inv_id)
            if inv is None:
                continue
            referenced = index.is_referenced(inv_id)
            if referenced and inv.status is None:
                investments[inv_id] = inv.model_copy(
                    update={"status": "in_progress", "last_activity_at": now}
                )
            elif not referenced and inv.status is not None:
                investments[inv_id] = inv.model_copy(
                    update={"status": None, "last_activity_at": now}
                )
            else:
                continue
            rederive.update(index.referencing(inv_id))

        branches: dict[str, object] = {"convos": convos}
        if investments:
            branches["investments"] = {**store.investments, **investments}
        return rederive_states(store.replace(**branches), rederive)

    # --- Operations ---

    def create_process(
        self, store: Store, input_data: CreateProcessInput, index: RefIndex | None = None
    ) -> Mutation:
        """
        Open a process for a new client with one outbound conversation.

        Selected investments are referenced by the new conversation and set
        to in_progress.
        """
        draft = input_data.initial_email
        errors = (
            _required("fund_name", input_data.fund_name)
            + _required("client_name", input_data.client_name)
            + _required("to", draft.to)
            + _required("body", draft.body)
        )
        selected = _dedupe(input_data.selected_investment_ids)
        errors += _missing_investments(store, selected, "selected_investment_ids")

        ops = _first_ops(store)
        if ops is None:
            errors.append(
                StoreValidationError(
                    code="no_ops_member",
                    message="No operations member is available to own the client",
                )
            )
        if errors or ops is None:
            return Mutation(store, errors)

        index = index or RefIndex.build(store)
        now = self.clock.now()

        client = Client(
            id=self._next_client_id(store),
            name=input_data.client_name.strip(),
            ops_owner_id=ops.id,
        )
        process_id = self._next_process_id(store)
        convo = self._new_convo(
            store,
            ops,
            process_id,
            draft,
            draft.subject.strip() or self.config.default_subject,
            now,
        )
        process = FundProcess(
            id=process_id,
            fund_name=input_data.fund_name.strip(),
            client_id=client.id,
            convo_ids=[convo.id],
            round_ids=[],
            created_at=now,
            last_activity_at=now,
        )

        store = store.replace(
            clients={**store.clients, client.id: client},
            processes={**store.processes, process.id: process},
            convos={**store.convos, convo.id: convo},
        )
        store = self._apply_refs(store, {convo.id: selected}, index, now)

        # Selection always (re)starts work on the chosen investments.
        restarted = {
            inv_id: store.investments[inv_id].model_copy(
                update={"status": "in_progress", "last_activity_at": now}
            )
            for inv_id in selected
            if store.investments[inv_id].status != "in_progress"
        }
        if restarted:
            store = store.replace(investments={**store.investments, **restarted})
            affected = {cid for inv_id in restarted for cid in index.referencing(inv_id)}
            store = rederive_states(store, affected | {convo.id})

        return Mutation(store, [], process_id)

    def create_conversation(
        self, store: Store, input_data: CreateConversationInput, index: RefIndex | None = None
    ) -> Mutation:
        """Start a conversation in a process with one outbound message."""
        process = store.processes.get(input_data.process_id)
        draft = input_data.email
        if process is None:
            return Mutation(store, [_not_found("process", input_data.process_id, "process_id")])

        refs = _dedupe(input_data.investment_refs)
        errors = (
            _required("to", draft.to)
            + _required("subject", draft.subject)
            + _required("body", draft.body)
            + _missing_investments(store, refs, "investment_refs")
            + self._affinity_errors(store, process.client_id, refs, "investment_refs")
        )
        ops = _first_ops(store)
        if ops is None:
            errors.append(
                StoreValidationError(
                    code="no_ops_member",
                    message="No operations member is available to send from",
                )
            )
        if errors or ops is None:
            return Mutation(store, errors)

        index = index or RefIndex.build(store)
        now = self.clock.now()

        convo = self._new_convo(store, ops, process.id, draft, draft.subject.strip(), now)
        process = process.model_copy(
            update={"convo_ids": [*process.convo_ids, convo.id], "last_activity_at": now}
        )
        store = store.replace(
            convos={**store.convos, convo.id: convo},
            processes={**store.processes, process.id: process},
        )
        store = self._apply_refs(store, {convo.id: refs}, index, now)
        return Mutation(store, [], convo.id)

    def append_message(self, store: Store, input_data: AppendMessageInput) -> Mutation:
        """
        Append a message and apply the direction-driven state transition.

        Investment-driven derivation is not run here; it only vets an
        explicit resulting_state. Message ids are unique within a thread.
        """
        convo = store.convos.get(input_data.convo_id)
        if convo is None:
            return Mutation(store, [_not_found("conversation", input_data.convo_id, "convo_id")])

        message = input_data.message
        errors = _required("body", message.body)
        if not message.to or any(not addr.address.strip() for addr in message.to):
            errors += _required("to", None)
        if any(m.id == message.id for m in convo.messages):
            errors.append(
                StoreValidationError(
                    code="duplicate_message",
                    message=f"Message {message.id} is already in conversation {convo.id}",
                    field="message",
                )
            )
        errors += self._resulting_state_errors(store, convo, input_data.resulting_state)
        if errors:
            return Mutation(store, errors)

        state = input_data.resulting_state or message_transition(
            convo.state,
            message,
            override_closed=self.config.message_overrides_closed,
        )
        participants = convo.participants
        if message.direction == "IN" and message.from_role != "OPS":
            if message.from_role not in participants:
                participants = [*participants, message.from_role]

        messages = [*convo.messages, message]
        convo = convo.model_copy(
            update={
                "messages": messages,
                "message_count": len(messages),
                "last_activity_at": max(convo.last_activity_at, message.ts),
                "participants": participants,
                "state": state,
            }
        )
        branches: dict[str, object] = {"convos": {**store.convos, convo.id: convo}}

        process = store.processes.get(convo.process_id)
        if process is not None and message.ts > process.last_activity_at:
            process = process.model_copy(update={"last_activity_at": message.ts})
            branches["processes"] = {**store.processes, process.id: process}

        return Mutation(store.replace(**branches), [], message.id)

    def send_ops_reply(self, store: Store, input_data: OpsReplyInput) -> Mutation:
        """Reply from the ops alias to the firm (or an explicit recipient)."""
        convo = store.convos.get(input_data.convo_id)
        if convo is None:
            return Mutation(store, [_not_found("conversation", input_data.convo_id, "convo_id")])

        errors = _required("body", input_data.body)
        if input_data.to is not None:
            errors += _required("to", input_data.to)
        if errors:
            return Mutation(store, errors)

        if input_data.to is not None:
            recipient = _address(input_data.to)
        else:
            recipient = resolve_firm_address(convo, self.config.fallback_firm_email)

        message = self._outbound_message(
            convo.alias_email,
            [recipient],
            input_data.body,
            self.clock.now(),
            cc=_addresses(input_data.cc),
            bcc=_addresses(input_data.bcc),
        )
        return self.append_message(store, AppendMessageInput(convo.id, message))

    def send_firm_reply(self, store: Store, input_data: FirmReplyInput) -> Mutation:
        """Record a reply written as the external firm, addressed to the alias."""
        convo = store.convos.get(input_data.convo_id)
        if convo is None:
            return Mutation(store, [_not_found("conversation", input_data.convo_id, "convo_id")])

        errors = _required("body", input_data.body)
        if input_data.sender is not None:
            errors += _required("sender", input_data.sender)
        if errors:
            return Mutation(store, errors)

        if input_data.sender is not None:
            sender = _address(input_data.sender)
        else:
            sender = resolve_firm_address(convo, self.config.fallback_firm_email)

        message = EmailMsg(
            id=self._new_message_id(),
            ts=self.clock.now(),
            sender=sender,
            from_role="ADMIN",
            to=[EmailAddress(address=convo.alias_email)],
            direction="IN",
            body=input_data.body.strip(),
        )
        return self.append_message(store, AppendMessageInput(convo.id, message))

    def set_investment_refs(
        self, store: Store, input_data: SetInvestmentRefsInput, index: RefIndex | None = None
    ) -> Mutation:
        """Replace a conversation's investment references and re-derive its state."""
        convo = store.convos.get(input_data.convo_id)
        if convo is None:
            return Mutation(store, [_not_found("conversation", input_data.convo_id, "convo_id")])

        refs = _dedupe(input_data.investment_refs)
        errors = _missing_investments(store, refs, "investment_refs")
        process = store.processes.get(convo.process_id)
        if process is not None:
            added = [inv_id for inv_id in refs if inv_id not in convo.investment_refs]
            errors += self._affinity_errors(store, process.client_id, added, "investment_refs")
        if errors:
            return Mutation(store, errors)

        if refs == convo.investment_refs:
            return Mutation(store, [])

        index = index or RefIndex.build(store)
        return Mutation(self._apply_refs(store, {convo.id: refs}, index, self.clock.now()), [])

    def set_investment_status(
        self, store: Store, input_data: SetInvestmentStatusInput, index: RefIndex | None = None
    ) -> Mutation:
        """
        Set an investment's status and re-derive every conversation that
        references it.
        """
        if input_data.status not in INVESTMENT_STATUSES:
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="invalid_status",
                        message=f"Unknown investment status '{input_data.status}'",
                        field="status",
                    )
                ],
            )

        inv = store.investments.get(input_data.investment_id)
        if inv is None:
            return Mutation(
                store, [_not_found("investment", input_data.investment_id, "investment_id")]
            )

        index = index or RefIndex.build(store)
        if not index.is_referenced(inv.id):
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="investment_unassigned",
                        message=f"Investment {inv.id} is not referenced by any conversation",
                        field="investment_id",
                    )
                ],
            )

        if inv.status == input_data.status:
            return Mutation(store, [])

        inv = inv.model_copy(
            update={"status": input_data.status, "last_activity_at": self.clock.now()}
        )
        store = store.replace(investments={**store.investments, inv.id: inv})
        return Mutation(rederive_states(store, index.referencing(inv.id)), [])

    def move_conversations(
        self, store: Store, input_data: MoveConversationsInput, index: RefIndex | None = None
    ) -> Mutation:
        """
        Reassign conversations to another process.

        Their investments follow implicitly, since process membership is
        derived from conversation references.
        """
        convo_ids = list(dict.fromkeys(input_data.convo_ids))
        if not convo_ids:
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="empty_selection",
                        message="Select at least one conversation to move",
                        field="convo_ids",
                    )
                ],
            )

        source = store.processes.get(input_data.from_process_id)
        target = store.processes.get(input_data.to_process_id)
        errors: list[StoreValidationError] = []
        if source is None:
            errors.append(_not_found("process", input_data.from_process_id, "from_process_id"))
        if target is None:
            errors.append(_not_found("process", input_data.to_process_id, "to_process_id"))
        if source is None or target is None:
            return Mutation(store, errors)

        if source.id == target.id:
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="same_process",
                        message="Source and target process are the same",
                        field="to_process_id",
                    )
                ],
            )

        for convo_id in convo_ids:
            convo = store.convos.get(convo_id)
            if convo is None or convo_id not in source.convo_ids:
                errors.append(
                    StoreValidationError(
                        code="conversation_not_in_process",
                        message=f"Conversation {convo_id} is not part of process {source.id}",
                        field="convo_ids",
                    )
                )
            else:
                errors += self._affinity_errors(
                    store, target.client_id, convo.investment_refs, "convo_ids"
                )
        if errors:
            return Mutation(store, errors)

        moving = set(convo_ids)
        now = self.clock.now()
        source = source.model_copy(
            update={"convo_ids": [cid for cid in source.convo_ids if cid not in moving]}
        )
        target = target.model_copy(
            update={
                "convo_ids": [cid for cid in target.convo_ids if cid not in moving] + convo_ids,
                "last_activity_at": now,
            }
        )
        moved = {
            cid: store.convos[cid].model_copy(update={"process_id": target.id})
            for cid in convo_ids
        }
        store = store.replace(
            processes={**store.processes, source.id: source, target.id: target},
            convos={**store.convos, **moved},
        )
        return Mutation(store, [])

    def add_investments_to_process(
        self, store: Store, input_data: AddInvestmentsInput, index: RefIndex | None = None
    ) -> Mutation:
        """
        Add investments to a process by referencing them from one of its
        conversations: the given one, or the most recently active.
        """
        ids = _dedupe(input_data.investment_ids)
        if not ids:
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="empty_selection",
                        message="Select at least one investment to add",
                        field="investment_ids",
                    )
                ],
            )

        process = store.processes.get(input_data.process_id)
        if process is None:
            return Mutation(store, [_not_found("process", input_data.process_id, "process_id")])

        errors = _missing_investments(store, ids, "investment_ids")
        errors += self._affinity_errors(store, process.client_id, ids, "investment_ids")
        if errors:
            return Mutation(store, errors)

        candidates = [store.convos[cid] for cid in process.convo_ids if cid in store.convos]
        if input_data.convo_id is not None:
            convo = store.convos.get(input_data.convo_id)
            if convo is None or convo.id not in process.convo_ids:
                return Mutation(
                    store,
                    [
                        StoreValidationError(
                            code="conversation_not_in_process",
                            message=(
                                f"Conversation {input_data.convo_id} is not part of "
                                f"process {process.id}"
                            ),
                            field="convo_id",
                        )
                    ],
                )
        elif candidates:
            convo = max(candidates, key=lambda c: c.last_activity_at)
        else:
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="no_conversation",
                        message=f"Process {process.id} has no conversation to reference investments",
                        field="process_id",
                    )
                ],
            )

        refs = _dedupe([*convo.investment_refs, *ids])
        if refs == convo.investment_refs:
            return Mutation(store, [])

        index = index or RefIndex.build(store)
        return Mutation(self._apply_refs(store, {convo.id: refs}, index, self.clock.now()), [])

    def remove_investments_from_process(
        self, store: Store, input_data: RemoveInvestmentsInput, index: RefIndex | None = None
    ) -> Mutation:
        """
        Strip investments from every conversation of a process.

        An investment left unreferenced everywhere loses its status; one still
        referenced from another process keeps it.
        """
        ids = set(input_data.investment_ids)
        if not ids:
            return Mutation(
                store,
                [
                    StoreValidationError(
                        code="empty_selection",
                        message="Select at least one investment to remove",
                        field="investment_ids",
                    )
                ],
            )

        process = store.processes.get(input_data.process_id)
        if process is None:
            return Mutation(store, [_not_found("process", input_data.process_id, "process_id")])

        errors = _missing_investments(store, _dedupe(input_data.investment_ids), "investment_ids")
        if errors:
            return Mutation(store, errors)

        changes = {
            convo.id: [inv_id for inv_id in convo.investment_refs if inv_id not in ids]
            for cid in process.convo_ids
            if (convo := store.convos.get(cid)) is not None and ids & set(convo.investment_refs)
        }
        if not changes:
            return Mutation(store, [])

        index = index or RefIndex.build(store)
        return Mutation(self._apply_refs(store, changes, index, self.clock.now()), [])
