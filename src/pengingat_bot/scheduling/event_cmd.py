"""CLI handler for `pengingat-bot event` subcommand."""

import argparse
import sys

from pengingat_bot import config
from pengingat_bot.errors import PengingatError
from pengingat_bot.scheduling.events import Event, EventStore


def _store() -> EventStore:
    return EventStore(config.DB_PATH)


def _fmt(e: Event) -> str:
    return f"{e.date} {e.time}  to {e.recipient_id}"


def run_event_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="pengingat-bot event")
    sub = parser.add_subparsers(dest="action")

    add_p = sub.add_parser("add", help="Schedule a reminder event")
    add_p.add_argument("--to", required=True, help="Recipient handle")
    add_p.add_argument("--date", required=True, help="DD-MM-YYYY")
    add_p.add_argument("--time", required=True, help="HH:MM (24-hour)")
    add_p.add_argument("--message", "-m", required=True, help="Reminder note")

    list_p = sub.add_parser("list", help="Show pending events")
    list_p.add_argument("--to", default=None, help="Only this recipient")

    cancel_p = sub.add_parser("cancel", help="Cancel an event by ID")
    cancel_p.add_argument("id", type=int, help="Event ID")

    args = parser.parse_args(argv)

    try:
        if args.action == "add":
            _handle_add(args)
        elif args.action == "list":
            _handle_list(args.to)
        elif args.action == "cancel":
            _handle_cancel(args.id)
        else:
            parser.print_help()
            sys.exit(1)
    except PengingatError as e:
        print(f"error: {e}")
        sys.exit(1)


def _handle_add(args: argparse.Namespace) -> None:
    event = _store().insert(
        Event(recipient_id=args.to, date=args.date, time=args.time, note=args.message)
    )
    print(f"scheduled {event.id}: {_fmt(event)} -- {event.note}")


def _handle_list(recipient_id: str | None) -> None:
    events = _store().list_events(recipient_id)
    if not events:
        print("no pending events")
        return
    for e in events:
        print(f"  {e.id:>4}  {_fmt(e):32s}  {e.note}")


def _handle_cancel(event_id: int) -> None:
    if _store().remove_event(event_id):
        print(f"cancelled {event_id}")
    else:
        print(f"event {event_id} not found")
        sys.exit(1)
