"""Free-form date/time fragments from cinema listings -> local datetimes.

Listings mix orders and separators ("12 paź 2025 18:30", "2025-10-12T18:30:00",
"pt. 12.10 | 18:30"). Tokens are classified one by one:

* the first integer <= 31 is the day, unless a year is already known without a
  month (ISO order, "2025-10-12");
* the next integer <= 31 is the month;
* an integer in 2001..9999 is the year, longer numbers are ignored;
* a word following the day is a Polish month name (first three letters);
* HH:MM[:SS] is the time.

Month-first dates ("10/12/2025" meaning October 12th) are read day-first.
"""

from __future__ import annotations

import re
from datetime import MAXYEAR, MINYEAR, datetime, timedelta

from models import Venue

DELIMITERS_RE = re.compile(r"[ \n\t\-./_',T]+")
INT_RE = re.compile(r"[+-]?\d+")
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3])(:[0-5][0-9])+$")

POLISH_MONTHS = {
    "sty": 1, "lut": 2, "mar": 3, "kwi": 4,
    "maj": 5, "cze": 6, "lip": 7, "sie": 8,
    "wrz": 9, "paz": 10, "paź": 10, "lis": 11, "gru": 12,
}


def map_month(word: str) -> int:
    """Polish month name or abbreviation -> 1..12, 0 when unknown."""
    return POLISH_MONTHS.get(word[:3].lower(), 0)


def parse_datetime(
    raw: str, venue: Venue | None = None, now: datetime | None = None
) -> datetime:
    # venue is accepted so per-venue quirks can be added without touching callers
    now = now or datetime.now()
    day = month = year = hour = minute = 0

    for token in DELIMITERS_RE.split(raw):
        if not token:
            continue
        if INT_RE.fullmatch(token):
            value = int(token)
            if day == 0 and value <= 31 and not (year != 0 and month == 0):
                day = value
            elif month == 0 and value <= 31:
                month = value
            elif year == 0 and 2000 < value <= MAXYEAR:
                year = value
        elif day != 0 and month == 0:
            month = map_month(token)
        elif TIME_RE.match(token):
            parts = token.split(":")
            hour, minute = int(parts[0]), int(parts[1])

    if year == 0:
        year = now.year
        # schedules only look forward: an earlier month belongs to next year
        if month < now.month:
            year += 1

    return _build(year, month, day, hour, minute)


def _build(year: int, month: int, day: int, hour: int, minute: int) -> datetime:
    """datetime(year, month, day, ...) with out-of-range parts rolled over.

    Month 0 is December of the previous year, day 0 the last day of the
    previous month, day 31 of a 30-day month the 1st of the next one.
    Anything past either end of the calendar is pinned to datetime.min/max.
    """
    y, m = divmod(year * 12 + month - 1, 12)
    if y > MAXYEAR:
        return datetime.max
    if y < MINYEAR:
        return datetime.min
    try:
        return datetime(y, m + 1, 1, hour, minute) + timedelta(days=day - 1)
    except OverflowError:
        return datetime.max if day > 1 else datetime.min
