from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from linkbox.adapters.memory_storage import InMemorySnapshotStore
from linkbox.components.store import StoreMutator
from linkbox.domain.entities import Store
from linkbox.rules.loader import load_rules
from linkbox.rules.models import Rules
from linkbox.services.seed import seed_demo
from linkbox.services.store_session import StoreSession

PROJECT_ROOT = Path(__file__).parent.parent
NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class SequentialTokens:
    """Deterministic tokens: 00001, 00002, ... padded to the requested length."""

    def __init__(self) -> None:
        self.count = 0

    def token(self, length: int) -> str:
        self.count += 1
        return str(self.count).zfill(length)[-length:]


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def tokens() -> SequentialTokens:
    return SequentialTokens()


@pytest.fixture
def mutator(clock: FixedClock, tokens: SequentialTokens) -> StoreMutator:
    return StoreMutator(clock, tokens)


@pytest.fixture
def seed_store(clock: FixedClock, tokens: SequentialTokens) -> Store:
    return seed_demo(clock, tokens)


@pytest.fixture
def snapshots(clock: FixedClock, tokens: SequentialTokens) -> InMemorySnapshotStore:
    return InMemorySnapshotStore(lambda: seed_demo(clock, tokens))


@pytest.fixture
def session(
    snapshots: InMemorySnapshotStore,
    mutator: StoreMutator,
    clock: FixedClock,
    tokens: SequentialTokens,
) -> StoreSession:
    return StoreSession(snapshots, mutator, lambda: seed_demo(clock, tokens))


@pytest.fixture
def rules_path() -> Path:
    """The real rules.yaml at the project root."""
    return PROJECT_ROOT / "rules.yaml"


@pytest.fixture
def rules(rules_path: Path) -> Rules:
    return load_rules(rules_path)
