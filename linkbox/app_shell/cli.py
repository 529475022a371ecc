import argparse
import logging
import os
import sys
from pathlib import Path

from linkbox.app_shell.config import configure_logging, validate_ops_rules
from linkbox.app_shell.context import LinkboxContext
from linkbox.components.investments import (
    filter_investments_by_status,
    get_conversation_investments,
    get_process_counts,
    get_process_investments,
)
from linkbox.components.sorting import sort_conversations_by_priority, sort_investments
from linkbox.components.status import format_status
from linkbox.components.store import EmailDraft, StoreMutationOutput
from linkbox.domain.entities import INVESTMENT_STATUSES
from linkbox.domain.integrity import check_invariants
from linkbox.rules.loader import load_rules

logger = logging.getLogger("cli")

RULES_PATH = os.environ.get("LINKBOX_RULES_PATH", "rules.yaml")


def get_context(args: argparse.Namespace) -> LinkboxContext:
    rules_path = Path(args.rules)
    if not rules_path.exists():
        logger.error(f"Rules file {rules_path} not found.")
        sys.exit(1)

    rules = load_rules(rules_path)
    configure_logging(rules)
    validate_ops_rules(rules)
    return LinkboxContext.create(rules, args.data_dir)


def report(output: StoreMutationOutput) -> None:
    if not output.success:
        for error in output.errors:
            where = f" ({error.field})" if error.field else ""
            print(f"Error [{error.code}]{where}: {error.message}", file=sys.stderr)
        sys.exit(1)

    if output.created_id is not None:
        print(f"OK: {output.created_id}")
    else:
        print("OK")


# --- Read commands ---


def handle_processes(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    store = ctx.session.store
    for process in sorted(store.processes.values(), key=lambda p: p.id):
        client = store.clients.get(process.client_id)
        counts = get_process_counts(store, process.id)
        print(
            f"{process.id:>4}  {process.fund_name:<30} "
            f"{client.name if client else process.client_id:<20} "
            f"convos={len(process.convo_ids)}  linked {counts.linked}/{counts.total}"
        )


def handle_show(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    store = ctx.session.store
    process = store.processes.get(args.process_id)
    if process is None:
        logger.error(f"Process {args.process_id} not found.")
        sys.exit(1)

    print(f"Process {process.id}: {process.fund_name}")
    print("Conversations:")
    convos = [store.convos[cid] for cid in process.convo_ids if cid in store.convos]
    for convo in sort_conversations_by_priority(convos):
        print(
            f"  {convo.id}  [{convo.state}] {convo.subject}  "
            f"investments={len(convo.investment_refs)} messages={convo.message_count}"
        )

    investments = get_conversation_investments(
        get_process_investments(store, process.id), args.convo, store
    )
    investments = filter_investments_by_status(investments, args.status)
    print("Investments:")
    for inv in sort_investments(investments, args.sort, args.direction):
        print(
            f"  {inv.id}  {format_status(inv.status):<12} "
            f"{inv.investing_entity} / {inv.fund_name}"
        )


def handle_check(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    violations = check_invariants(ctx.session.store, ctx.session.index)
    for v in violations:
        print(f"{'WARN' if v.soft else 'FAIL'} [{v.code}] {v.message}")

    if any(not v.soft for v in violations):
        sys.exit(1)
    print("Store is consistent.")


# --- Write commands ---


def handle_new_process(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    email = EmailDraft(to=args.to, subject=args.subject, body=args.body)
    report(ctx.session.create_process(args.fund, args.client, email, args.investment))


def handle_new_convo(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    email = EmailDraft(to=args.to, subject=args.subject, body=args.body)
    report(ctx.session.create_conversation(args.process_id, email, args.investment))


def handle_reply(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.reply(args.convo_id, args.body, args.to))


def handle_firm_reply(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.firm_reply(args.convo_id, args.body, args.sender))


def handle_link(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.set_investment_refs(args.convo_id, args.investment_ids))


def handle_status(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.set_investment_status(args.investment_id, args.status))


def handle_move(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.move_conversations(args.convo_ids, args.source, args.target))


def handle_add_investments(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.add_investments(args.process_id, args.investment_ids, args.convo))


def handle_remove_investments(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    report(ctx.session.remove_investments(args.process_id, args.investment_ids))


def handle_reset(ctx: LinkboxContext, args: argparse.Namespace) -> None:
    store = ctx.session.reset()
    print(f"Reset to seed data: {len(store.processes)} processes, {len(store.convos)} conversations.")


HANDLERS = {
    "processes": handle_processes,
    "show": handle_show,
    "check": handle_check,
    "new-process": handle_new_process,
    "new-convo": handle_new_convo,
    "reply": handle_reply,
    "firm-reply": handle_firm_reply,
    "link": handle_link,
    "status": handle_status,
    "move": handle_move,
    "add-investments": handle_add_investments,
    "remove-investments": handle_remove_investments,
    "reset": handle_reset,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Linkbox fund-linking tracker")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    parser.add_argument("--data-dir", help="Directory holding the saved snapshot")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # read
    subparsers.add_parser("processes", help="List processes")

    show_parser = subparsers.add_parser("show", help="Show a process")
    show_parser.add_argument("process_id", type=int)
    show_parser.add_argument("--convo", help="Only investments of this conversation")
    show_parser.add_argument("--status", choices=INVESTMENT_STATUSES)
    show_parser.add_argument(
        "--sort", choices=["id", "entity", "fund", "status", "last_activity"]
    )
    show_parser.add_argument("--direction", choices=["asc", "desc"], default="asc")

    subparsers.add_parser("check", help="Verify store invariants")

    # new-process
    np_parser = subparsers.add_parser("new-process", help="Open a process for a new client")
    np_parser.add_argument("--fund", required=True, help="Fund name")
    np_parser.add_argument("--client", required=True, help="Client name")
    np_parser.add_argument("--to", required=True, help="Fund admin address")
    np_parser.add_argument("--subject", default="")
    np_parser.add_argument("--body", required=True)
    np_parser.add_argument("--investment", type=int, action="append", default=[])

    # new-convo
    nc_parser = subparsers.add_parser("new-convo", help="Start a conversation in a process")
    nc_parser.add_argument("process_id", type=int)
    nc_parser.add_argument("--to", required=True)
    nc_parser.add_argument("--subject", required=True)
    nc_parser.add_argument("--body", required=True)
    nc_parser.add_argument("--investment", type=int, action="append", default=[])

    # replies
    reply_parser = subparsers.add_parser("reply", help="Reply from the ops alias")
    reply_parser.add_argument("convo_id")
    reply_parser.add_argument("body")
    reply_parser.add_argument("--to", help="Override the firm recipient")

    firm_parser = subparsers.add_parser("firm-reply", help="Record a reply as the firm")
    firm_parser.add_argument("convo_id")
    firm_parser.add_argument("body")
    firm_parser.add_argument("--sender", help="Override the firm sender address")

    # investments
    link_parser = subparsers.add_parser("link", help="Replace a conversation's investments")
    link_parser.add_argument("convo_id")
    link_parser.add_argument("investment_ids", type=int, nargs="*")

    status_parser = subparsers.add_parser("status", help="Set an investment's status")
    status_parser.add_argument("investment_id", type=int)
    status_parser.add_argument("status", choices=INVESTMENT_STATUSES)

    add_parser = subparsers.add_parser("add-investments", help="Add investments to a process")
    add_parser.add_argument("process_id", type=int)
    add_parser.add_argument("investment_ids", type=int, nargs="+")
    add_parser.add_argument("--convo", help="Conversation to reference them from")

    remove_parser = subparsers.add_parser(
        "remove-investments", help="Remove investments from a process"
    )
    remove_parser.add_argument("process_id", type=int)
    remove_parser.add_argument("investment_ids", type=int, nargs="+")

    # move
    move_parser = subparsers.add_parser("move", help="Move conversations between processes")
    move_parser.add_argument("--from", dest="source", type=int, required=True)
    move_parser.add_argument("--to", dest="target", type=int, required=True)
    move_parser.add_argument("convo_ids", nargs="+")

    # reset
    subparsers.add_parser("reset", help="Discard saved data and reload the demo seed")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    ctx = get_context(args)
    HANDLERS[args.command](ctx, args)


if __name__ == "__main__":
    main()
