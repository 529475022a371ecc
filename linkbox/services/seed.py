"""
Demo seed data.

Builds the default snapshot used on first start, after a reset, and when a
saved snapshot cannot be read. The data satisfies every store invariant:
referenced investments carry a status, unreferenced ones do not, and each
conversation's state agrees with its investments.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from linkbox.components.mail import alias_for_ops
from linkbox.domain.entities import (
    Client,
    Convo,
    EmailAddress,
    EmailMsg,
    FundProcess,
    Investment,
    InvestmentStatus,
    OpsMember,
    Round,
    Store,
)
from linkbox.ports.clock import ClockPort
from linkbox.ports.tokens import TokenPort

ALIAS_DOMAIN = "archinvestorservices.com"

_CYCLE: tuple[InvestmentStatus, ...] = ("linked", "in_progress", "archived")


def _msg(
    msg_id: str,
    ts: datetime,
    sender: EmailAddress,
    to: str,
    body: str,
    *,
    inbound: bool,
) -> EmailMsg:
    return EmailMsg(
        id=msg_id,
        ts=ts,
        sender=sender,
        from_role="ADMIN" if inbound else "OPS",
        to=[EmailAddress(address=to)],
        direction="IN" if inbound else "OUT",
        body=body,
    )


def seed_demo(clock: ClockPort, tokens: TokenPort, alias_domain: str = ALIAS_DOMAIN) -> Store:
    now = clock.now()

    def days_ago(days: int) -> datetime:
        return now - timedelta(days=days)

    ops1 = OpsMember(id="ops1", first_name="Neha", last_name="Patel", email="neha.patel@arch.com")
    client1 = Client(id="c1", name="IFC Advisors", ops_owner_id=ops1.id)
    client2 = Client(id="c2", name="Foothill Capital", ops_owner_id=ops1.id)

    # --- Investments ---

    invs: list[Investment] = []
    for i in range(10):
        invs.append(
            Investment(
                id=282700 + i,
                client_id=client1.id,
                investing_entity="Holte Living Trust" if i % 2 == 0 else "IFC Advisors LP",
                fund_name="Landmark XVI" if i < 5 else "Landmark Co-Invest A",
                status=_CYCLE[i % 3],
                last_activity_at=days_ago(15 - i),
            )
        )
    for i in range(10):
        # The first five are fully resolved so their mailer thread is closed.
        status: InvestmentStatus = (
            ("linked" if i % 2 == 0 else "archived") if i < 5 else _CYCLE[(i + 1) % 3]
        )
        invs.append(
            Investment(
                id=283000 + i,
                client_id=client2.id,
                investing_entity="Foothill Holdings LLC" if i % 2 == 0 else "Cypress Family Trust",
                fund_name="GSO Capital Solutions III" if i < 6 else "GSO Special Situations",
                status=status,
                last_activity_at=days_ago(10 - i),
            )
        )

    unassigned_entities = ("Meridian Capital Partners", "Summit Investment Group", "Crosswind Holdings")
    for i in range(6):
        invs.append(
            Investment(
                id=290000 + i,
                client_id=client1.id,
                investing_entity=unassigned_entities[i % 3],
                fund_name="Opportunity Fund IV" if i < 3 else "Growth Capital Fund II",
                last_activity_at=days_ago(20 - i),
            )
        )
    for i in range(4):
        invs.append(
            Investment(
                id=291000 + i,
                client_id=client2.id,
                investing_entity="Pinnacle Asset Management" if i % 2 == 0 else "Ridgeline Partners",
                fund_name="Strategic Ventures Fund" if i < 2 else "Capital Opportunities III",
                last_activity_at=days_ago(18 - i),
            )
        )

    # --- Conversations ---

    alias1 = alias_for_ops(ops1, tokens, alias_domain)
    alias2 = alias_for_ops(ops1, tokens, alias_domain)
    alias3 = alias_for_ops(ops1, tokens, alias_domain)
    alias4 = alias_for_ops(ops1, tokens, alias_domain)
    landmark = EmailAddress(address="admin@landmark.com", display_name="Landmark Admin")
    gso = EmailAddress(address="admin@gso.com", display_name="GSO Admin")

    convos = [
        Convo(
            id="cv_1_m1",
            process_id=1,
            alias_email=alias1,
            subject="Linking Mailer - Round 1",
            participants=["ADMIN"],
            investment_refs=[282700 + i for i in range(6)],
            round_id="r1_1",
            message_count=2,
            last_activity_at=days_ago(13),
            preview="Automated mailer sent to fund admin for 6 investments.",
            state="PENDING_FUND",
            messages=[
                _msg(
                    "m1",
                    days_ago(14),
                    EmailAddress(address=alias1, display_name="Holte Living Trust via Arch"),
                    landmark.address,
                    "Important: Investor Request for Portal Access\n\n"
                    "Please add test-landmark@archdocuments.com to your records for the "
                    "investments listed. Once completed, confirm here.",
                    inbound=False,
                ),
                _msg(
                    "m2",
                    days_ago(13),
                    landmark,
                    alias1,
                    "Thanks, received. We will review internally and circle back once "
                    "access has been provisioned.",
                    inbound=True,
                ),
            ],
        ),
        Convo(
            id="cv_1_m2",
            process_id=1,
            alias_email=alias2,
            subject="Linking Mailer - Round 2",
            participants=["ADMIN"],
            investment_refs=[282706, 282707, 282708, 282709],
            message_count=1,
            last_activity_at=days_ago(6),
            preview="Follow-up mailer for the Co-Invest A positions.",
            state="NO_RESPONSE",
            messages=[
                _msg(
                    "m1",
                    days_ago(6),
                    EmailAddress(address=alias2, display_name="Arch"),
                    landmark.address,
                    "Requesting portal access for four Landmark Co-Invest A positions.",
                    inbound=False,
                ),
            ],
        ),
        Convo(
            id="cv_2_m1",
            process_id=2,
            alias_email=alias3,
            subject="Linking Mailer - Round 1",
            participants=["ADMIN"],
            investment_refs=[283000 + i for i in range(5)],
            round_id="r1_2",
            message_count=2,
            last_activity_at=days_ago(11),
            preview="Automated mailer sent for 5 investments.",
            state="CLOSED",
            messages=[
                _msg(
                    "m1",
                    days_ago(12),
                    EmailAddress(address=alias3, display_name="Arch"),
                    gso.address,
                    "Requesting portal access for five investments (Round 1).",
                    inbound=False,
                ),
                _msg(
                    "m2",
                    days_ago(11),
                    gso,
                    alias3,
                    "Completed. You should see invites for all five positions.",
                    inbound=True,
                ),
            ],
        ),
        Convo(
            id="cv_2_m2",
            process_id=2,
            alias_email=alias4,
            subject="Special Situations access",
            participants=["ADMIN"],
            investment_refs=[283000 + i for i in range(5, 10)],
            message_count=2,
            last_activity_at=days_ago(2),
            preview="Access request for the Special Situations positions.",
            state="PENDING_ARCH",
            messages=[
                _msg(
                    "m1",
                    days_ago(4),
                    EmailAddress(address=alias4, display_name="Arch"),
                    gso.address,
                    "Requesting portal access for the remaining five positions.",
                    inbound=False,
                ),
                _msg(
                    "m2",
                    days_ago(2),
                    gso,
                    alias4,
                    "We need the signed subscription page before we can grant access.",
                    inbound=True,
                ),
            ],
        ),
    ]

    # --- Processes & Rounds ---

    p1 = FundProcess(
        id=1,
        fund_name="Landmark Equity Partners",
        client_id=client1.id,
        convo_ids=["cv_1_m1", "cv_1_m2"],
        round_ids=["r1_1"],
        created_at=days_ago(30),
        last_activity_at=days_ago(1),
    )
    p2 = FundProcess(
        id=2,
        fund_name="Blackstone GSO",
        client_id=client2.id,
        convo_ids=["cv_2_m1", "cv_2_m2"],
        round_ids=["r1_2"],
        created_at=days_ago(20),
        last_activity_at=days_ago(2),
    )
    r1_p1 = Round(
        id="r1_1",
        process_id=p1.id,
        label="Round 1",
        sent_at=days_ago(14),
        investment_ids=[282700 + i for i in range(6)],
        convo_ids=["cv_1_m1"],
    )
    r1_p2 = Round(
        id="r1_2",
        process_id=p2.id,
        label="Round 1",
        sent_at=days_ago(12),
        investment_ids=[283000 + i for i in range(5)],
        convo_ids=["cv_2_m1"],
    )

    return Store(
        ops={ops1.id: ops1},
        clients={client1.id: client1, client2.id: client2},
        processes={p1.id: p1, p2.id: p2},
        investments={inv.id: inv for inv in invs},
        convos={convo.id: convo for convo in convos},
        rounds={r1_p1.id: r1_p1, r1_p2.id: r1_p2},
    )
