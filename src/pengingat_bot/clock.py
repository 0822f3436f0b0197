"""Civil date/time helpers for the single configured calendar.

Dates and times are carried around as fixed-format strings (``DD-MM-YYYY`` and
``HH:MM``) and matched by string equality. Parsing only happens to validate
input before it is stored.
"""

import re
from datetime import date, datetime, time

from pengingat_bot.config import TZ
from pengingat_bot.errors import ValidationError

DATE_FORMAT = "%d-%m-%Y"
TIME_FORMAT = "%H:%M"

_DATE_RE = re.compile(r"\d{2}-\d{2}-\d{4}")
_TIME_RE = re.compile(r"\d{2}:\d{2}")


def now() -> datetime:
    return datetime.now(TZ)


def today() -> date:
    return now().date()


def civil_now(at: datetime | None = None) -> tuple[str, str]:
    """Return ``(date, time)`` keys for `at` (default: now), minute precision."""
    moment = (at or now()).astimezone(TZ)
    return moment.strftime(DATE_FORMAT), moment.strftime(TIME_FORMAT)


def parse_civil_date(value: str) -> date:
    if not _DATE_RE.fullmatch(value):
        raise ValidationError(
            f"Tanggal tidak valid: {value!r} (gunakan format DD-MM-YYYY)"
        )
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Tanggal tidak valid: {e}") from e


def parse_civil_time(value: str) -> time:
    if not _TIME_RE.fullmatch(value):
        raise ValidationError(
            f"Waktu notifikasi tidak valid: {value!r} (gunakan format HH:MM)"
        )
    try:
        return datetime.strptime(value, TIME_FORMAT).time()
    except ValueError as e:
        raise ValidationError(f"Waktu notifikasi tidak valid: {e}") from e
