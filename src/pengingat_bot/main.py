"""Entry point for pengingat-bot."""

from __future__ import annotations

import asyncio
import atexit
import logging
import os
import signal
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import discord

from pengingat_bot.config import DATA_DIR, DB_PATH

if TYPE_CHECKING:
    from pengingat_bot.bot import ReminderBot

PID_FILE = DATA_DIR / "bot.pid"


HELP = """\
pengingat-bot -- personal reminder bot with an assistant fallback

commands:
  pengingat-bot                Run the bot
  pengingat-bot event add      Schedule a reminder event
  pengingat-bot event list     Show pending events
  pengingat-bot event cancel   Cancel an event by ID
  pengingat-bot help           Show this help message

examples:
  pengingat-bot event add --to 123456789 --date 01-01-2099 --time 09:00 -m "Meeting"
  pengingat-bot event list --to 123456789
"""

log = logging.getLogger(__name__)


def _check_already_running() -> None:
    PID_FILE.parent.mkdir(parents=True, exist_ok=True)
    if PID_FILE.exists():
        pid = int(PID_FILE.read_text().strip())
        proc_cmdline = Path(f"/proc/{pid}/cmdline")
        if proc_cmdline.exists() and "pengingat-bot" in proc_cmdline.read_bytes().decode(errors="replace"):
            print(f"pengingat-bot is already running (pid {pid})")
            raise SystemExit(1)
    PID_FILE.write_text(str(os.getpid()))
    atexit.register(PID_FILE.unlink, missing_ok=True)


def _dispatch_subcommand() -> bool:
    """Route CLI subcommands. Returns True if handled."""
    if len(sys.argv) < 2:
        return False
    cmd = sys.argv[1]
    rest = sys.argv[2:]
    if cmd in ("help", "--help", "-h"):
        print(HELP)
        return True
    if cmd == "event":
        from pengingat_bot.scheduling.event_cmd import run_event_command

        run_event_command(rest)
        return True
    return False


async def _run(bot: ReminderBot) -> None:
    """Run until SIGINT/SIGTERM, then close the transport session."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop.set)

    try:
        await bot.start()
        await stop.wait()
        log.info("shutdown requested")
    finally:
        await bot.stop()


def main() -> None:
    if _dispatch_subcommand():
        return

    token = os.environ.get("DISCORD_TOKEN")
    if not token:
        print("Set DISCORD_TOKEN in .env")
        raise SystemExit(1)

    _check_already_running()
    discord.utils.setup_logging(level=logging.INFO)

    from pengingat_bot.assistant import ClaudeAssistant
    from pengingat_bot.bot import ReminderBot
    from pengingat_bot.discord_transport import DiscordTransport
    from pengingat_bot.errors import ConnectivityError, PersistenceError
    from pengingat_bot.scheduling import EventStore

    bot = ReminderBot(DiscordTransport(token), EventStore(DB_PATH), ClaudeAssistant())
    try:
        asyncio.run(_run(bot))
    except (ConnectivityError, PersistenceError) as e:
        log.critical("startup failed: %s", e)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
