"""User-configurable values loaded from environment variables."""

import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()

_REQUIRED = ("ANTHROPIC_API_KEY",)
_missing = [var for var in _REQUIRED if not os.environ.get(var)]
if _missing:
    print(f"Missing required env vars: {', '.join(_missing)}", file=sys.stderr)
    print("Set them in .env or your environment.", file=sys.stderr)
    raise SystemExit(1)

# Reminders are matched against one fixed civil calendar.
TZ: ZoneInfo = ZoneInfo(os.environ.get("PENGINGAT_TIMEZONE") or "Asia/Jakarta")

TICK_SECONDS: int = int(os.environ.get("PENGINGAT_TICK_SECONDS") or 5)
# Slots are whole minutes; a tick of 60s or more can step over one.
if not 1 <= TICK_SECONDS <= 59:
    print(
        f"PENGINGAT_TICK_SECONDS must be between 1 and 59, got {TICK_SECONDS}",
        file=sys.stderr,
    )
    raise SystemExit(1)

MODEL: str = os.environ.get("PENGINGAT_MODEL") or "haiku"

DATA_DIR = Path.home() / ".pengingat-bot"
DB_PATH: Path = Path(os.environ.get("PENGINGAT_DB_PATH") or DATA_DIR / "events.db")
