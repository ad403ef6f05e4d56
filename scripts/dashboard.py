#!/usr/bin/env python3
"""
Console dashboard for the care coordination service.

Usage:
    python scripts/dashboard.py inventory [--watch]
    python scripts/dashboard.py schedule [--watch]
    python scripts/dashboard.py stats
    python scripts/dashboard.py chat
    python scripts/dashboard.py init-db

Reads go straight to the database (DB_URL); chat goes through the API
(CARECOORD_API_URL, CARECOORD_ACCESS_TOKEN).
"""

import argparse
import asyncio

from carecoord.client import ChatProxyClient
from carecoord.db.changes.feed import get_change_feed
from carecoord.db.changes.listener import PostgresChangeListener
from carecoord.db.chat_messages.model import ChatRole
from carecoord.db.config import get_db_settings
from carecoord.db.database import close_db, init_db
from carecoord.views import (
    ChatInterface,
    DatabaseDataSource,
    InventoryView,
    ScheduleView,
    StatsAggregator,
)


def print_inventory(view: InventoryView) -> None:
    print(f"Inventory ({len(view.items)} items)")
    print("-" * 40)
    for item in view.items:
        flag = "  LOW STOCK" if item.is_low_stock else ""
        print(f"  {item.name}: {item.quantity:g} {item.unit} [{item.category}]{flag}")
    print()


def print_schedule(view: ScheduleView) -> None:
    print("Upcoming services")
    print("-" * 40)
    if view.is_empty:
        print("  No upcoming events scheduled")
    for event in view.upcoming:
        print(
            f"  {event.date.isoformat()} {event.time.strftime('%H:%M')} "
            f"{event.location} ({event.status.value})"
        )
    if view.completed:
        print()
        print("Recently completed")
        print("-" * 40)
        for event in view.completed:
            print(
                f"  {event.date.isoformat()} {event.location}: "
                f"{event.recorded_attendance} attended"
            )
    print()


async def watch_forever(view, render) -> None:
    """Re-render after every reload until interrupted."""
    listener = PostgresChangeListener(
        get_change_feed(), get_db_settings().get_listener_dsn()
    )
    await listener.start()
    view.on_update = render
    try:
        async with view:
            await asyncio.Event().wait()
    finally:
        await listener.stop()


async def show_view(view, render, watch: bool) -> None:
    if watch:
        await watch_forever(view, render)
        return
    await view.refresh()
    render(view)


async def show_stats(source: DatabaseDataSource) -> None:
    stats = await StatsAggregator(source).load()
    print("Dashboard")
    print("-" * 40)
    print(f"  Total items:        {stats.total_items}")
    print(f"  Low stock items:    {stats.low_stock_items}")
    print(f"  Upcoming events:    {stats.upcoming_events}")
    print(f"  Total quantity:     {stats.total_quantity:g}")
    print(f"  Average attendance: {stats.average_attendance}")


async def run_chat() -> None:
    async with ChatProxyClient() as client:
        chat = ChatInterface(client)
        await chat.start()
        for entry in chat.transcript:
            print(f"{entry.role.value}> {entry.content}")

        print("Type a message, or an empty line to quit.")
        while True:
            text = await asyncio.to_thread(input, "you> ")
            if not text.strip():
                break
            if await chat.submit(text):
                reply = chat.transcript[-1]
                if reply.role is ChatRole.ASSISTANT:
                    print(f"assistant> {reply.content}")
            elif chat.notification is not None:
                print(f"{chat.notification.title}: {chat.notification.message}")
                chat.dismiss_notification()


async def run(args: argparse.Namespace) -> None:
    source = DatabaseDataSource()
    try:
        if args.command == "inventory":
            await show_view(InventoryView(source), print_inventory, args.watch)
        elif args.command == "schedule":
            await show_view(ScheduleView(source), print_schedule, args.watch)
        elif args.command == "stats":
            await show_stats(source)
        elif args.command == "chat":
            await run_chat()
        elif args.command == "init-db":
            await init_db()
            print("Database tables and change triggers installed")
    finally:
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Care coordination console dashboard")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("inventory", "Show inventory levels"),
        ("schedule", "Show upcoming and recently completed services"),
    ):
        subparser = subparsers.add_parser(name, help=help_text)
        subparser.add_argument(
            "--watch",
            action="store_true",
            help="Keep running and re-render on every database change",
        )
    subparsers.add_parser("stats", help="Show summary statistics")
    subparsers.add_parser("chat", help="Chat with the assistant")
    subparsers.add_parser("init-db", help="Create tables and change triggers")

    args = parser.parse_args()
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
