from __future__ import annotations

import unicodedata
from datetime import date

from models import Bucket, Showing, TitleRecord, Venue

POLISH_ALPHABET = "AĄBCĆDEĘFGHIJKLŁMNŃOÓPQRSŚTUVWXYZŹŻ"
_RANK = {ch: i for i, ch in enumerate(POLISH_ALPHABET)}


def _char_key(ch: str) -> tuple[tuple[int, int], int]:
    upper = ch.upper()
    if upper in _RANK:
        return (1, _RANK[upper]), 0
    base = unicodedata.normalize("NFD", upper)[0]
    if base in _RANK:
        # foreign accented letters count as their base letter, accent breaks ties
        return (1, _RANK[base]), 1
    return (0, ord(ch)), 0


def polish_sort_key(title: str) -> tuple[list[tuple[int, int]], list[int]]:
    """Alphabetical order of the Polish alphabet: Ą after A, Ł after L, ..."""
    keys = [_char_key(ch) for ch in title]
    return [primary for primary, _ in keys], [accent for _, accent in keys]


def write_title(lines: list[str], title: str, showings: list[Showing], record: TitleRecord | None) -> None:
    header = f"|{title}|"
    if record and record.secondary_title and record.secondary_title.upper() != title:
        header += f" / {record.secondary_title}"
    lines.append(header)
    if record and record.catalog_url:
        lines.append(record.catalog_url)

    last_day: date | None = None
    for showing in showings:
        day = showing.time.date()
        if day != last_day:
            lines.append(f"======{day:%d/%m/%Y}======")
            last_day = day
        line = f"{showing.venue.display_name}  {showing.time:%H:%M}"
        if showing.url:
            line += f"  {showing.url}"
        lines.append(line)
    lines.append("")


def format_summary(
    buckets: dict[Bucket, dict[str, list[Showing]]],
    received: dict[Venue, bool],
    records: dict[str, TitleRecord] | None = None,
) -> str:
    records = records or {}
    lines: list[str] = []
    total = 0

    for bucket in Bucket:
        titles = buckets.get(bucket) or {}
        if not titles:
            continue
        lines.append(bucket.heading)
        for title in sorted(titles, key=polish_sort_key):
            write_title(lines, title, titles[title], records.get(title))
        total += len(titles)

    lines.append(f"TOTAL: {total}")

    missing = [venue for venue, ok in received.items() if not ok]
    if missing:
        lines.append("RESULTS NOT RECEIVED FROM:")
        lines.extend(venue.display_name for venue in missing)

    return "\n".join(lines) + "\n"
