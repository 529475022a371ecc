from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from pathlib import Path

from linkbox.adapters.clock import SystemClock
from linkbox.adapters.local_storage import LocalSnapshotStore
from linkbox.adapters.tokens import Base32TokenSource
from linkbox.app_shell.config import resolve_data_dir
from linkbox.components.store import MutationConfig, StoreMutator
from linkbox.ports.clock import ClockPort
from linkbox.ports.snapshot import SnapshotStorePort
from linkbox.ports.tokens import TokenPort
from linkbox.rules.models import Rules
from linkbox.services.seed import seed_demo
from linkbox.services.store_session import StoreSession


def mutation_config(rules: Rules) -> MutationConfig:
    return MutationConfig(
        ops_display_name=rules.mail.ops_display_name,
        alias_domain=rules.mail.alias_domain,
        alias_token_length=rules.mail.alias_token_length,
        fallback_firm_email=rules.mail.fallback_firm_email,
        default_subject=rules.mail.default_subject,
        preview_length=rules.mail.preview_length,
        id_token_length=rules.conversations.id_token_length,
        message_overrides_closed=rules.conversations.message_overrides_closed,
        enforce_client_affinity=rules.conversations.enforce_client_affinity,
    )


@dataclass
class LinkboxContext:
    session: StoreSession
    snapshots: SnapshotStorePort
    rules: Rules
    clock: ClockPort
    tokens: TokenPort

    @classmethod
    def create(
        cls,
        rules: Rules,
        data_dir: str | Path | None = None,
        *,
        snapshots: SnapshotStorePort | None = None,
        clock: ClockPort | None = None,
        tokens: TokenPort | None = None,
    ) -> LinkboxContext:
        clock = clock or SystemClock()
        tokens = tokens or Base32TokenSource()
        seed = partial(seed_demo, clock, tokens, rules.mail.alias_domain)

        if snapshots is None:
            snapshots = LocalSnapshotStore(
                data_dir if data_dir is not None else resolve_data_dir(rules),
                seed,
                key=rules.storage.key,
            )

        mutator = StoreMutator(clock, tokens, mutation_config(rules))
        session = StoreSession(
            snapshots, mutator, seed, seed_on_missing=rules.storage.seed_on_missing
        )
        return cls(
            session=session,
            snapshots=snapshots,
            rules=rules,
            clock=clock,
            tokens=tokens,
        )
