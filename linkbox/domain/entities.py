from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from linkbox.domain.addresses import format_address, parse_address

# --- Enums / Literals ---
InvestmentStatus = Literal["linked", "in_progress", "archived"]
ConvoState = Literal["NO_RESPONSE", "PENDING_FUND", "PENDING_ARCH", "CLOSED"]
SenderRole = Literal["OPS", "ADMIN", "FUND", "CLIENT"]
Direction = Literal["IN", "OUT"]

INVESTMENT_STATUSES: tuple[InvestmentStatus, ...] = ("linked", "in_progress", "archived")
CONVO_STATES: tuple[ConvoState, ...] = ("NO_RESPONSE", "PENDING_FUND", "PENDING_ARCH", "CLOSED")


class Entity(BaseModel):
    # Persisted with the camelCase keys of the browser snapshot format.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# --- People ---

class OpsMember(Entity):
    id: str
    first_name: str
    last_name: str
    email: str

class Client(Entity):
    id: str
    name: str
    ops_owner_id: str

# --- Processes & Investments ---

class FundProcess(Entity):
    id: int
    fund_name: str
    client_id: str
    convo_ids: list[str] = Field(default_factory=list)
    round_ids: list[str] = Field(default_factory=list)
    created_at: datetime
    last_activity_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _legacy_firm_name(cls, data: Any) -> Any:
        # Older snapshots named the fund "firmName".
        if isinstance(data, dict) and "firmName" in data and "fundName" not in data:
            data = {**data, "fundName": data["firmName"]}
        return data

class Investment(Entity):
    id: int
    client_id: str
    investing_entity: str
    fund_name: str
    status: InvestmentStatus | None = None  # None = referenced by no conversation
    last_activity_at: datetime

# --- Mail ---

class EmailAddress(Entity):
    address: str
    display_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            address, display_name = parse_address(data)
            return {"address": address, "displayName": display_name}
        return data

    def __str__(self) -> str:
        return format_address(self.address, self.display_name)

class EmailMsg(Entity):
    id: str
    ts: datetime
    sender: EmailAddress = Field(alias="from")
    from_role: SenderRole
    to: list[EmailAddress]
    cc: list[EmailAddress] = Field(default_factory=list)
    bcc: list[EmailAddress] = Field(default_factory=list)
    direction: Direction
    body: str

class Convo(Entity):
    id: str
    process_id: int
    alias_email: str
    subject: str
    participants: list[str] = Field(default_factory=list)
    investment_refs: list[int] = Field(default_factory=list)
    round_id: str | None = None
    message_count: int = 0
    last_activity_at: datetime
    preview: str = ""
    state: ConvoState = "NO_RESPONSE"
    messages: list[EmailMsg] = Field(default_factory=list)

class Round(Entity):
    id: str
    process_id: int
    label: str
    sent_at: datetime
    investment_ids: list[int] = Field(default_factory=list)
    convo_ids: list[str] = Field(default_factory=list)

# --- Aggregate root ---

class Store(Entity):
    ops: dict[str, OpsMember] = Field(default_factory=dict)
    clients: dict[str, Client] = Field(default_factory=dict)
    processes: dict[int, FundProcess] = Field(default_factory=dict)
    investments: dict[int, Investment] = Field(default_factory=dict)
    convos: dict[str, Convo] = Field(default_factory=dict)
    rounds: dict[str, Round] = Field(default_factory=dict)

    def replace(self, **branches: Any) -> "Store":
        """
        Return a new snapshot with the given top-level mappings swapped in.

        Only the named branches are new objects; every other mapping, and
        every entry the caller did not rebuild, is shared with this snapshot.
        """
        return self.model_copy(update=branches)
