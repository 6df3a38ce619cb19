from __future__ import annotations

from datetime import date, datetime

from models import Bucket, Showing, TitleRecord, Venue
from summary import format_summary, polish_sort_key


def test_polish_alphabetical_order():
    titles = ["ZORRO", "ŁÓDŹ", "LATO", "ĄB", "AZ", "ÉTÉ", "EZ", "ŻUK", "ŹRÓDŁO", "2046"]
    assert sorted(titles, key=polish_sort_key) == [
        "2046", "AZ", "ĄB", "ÉTÉ", "EZ", "LATO", "ŁÓDŹ", "ZORRO", "ŹRÓDŁO", "ŻUK",
    ]


def test_format_summary():
    kika = Showing(Venue.KIKA, datetime(2026, 10, 18, 18, 0), "https://bilety.kinokika.pl/1")
    mikro = Showing(Venue.MIKRO, datetime(2026, 10, 18, 20, 30))
    later = Showing(Venue.KIKA, datetime(2026, 10, 19, 9, 5))
    buckets = {
        Bucket.NEW_TODAY: {"ŁABĘDŹ": [mikro], "DIUNA": [kika, mikro, later]},
        Bucket.YESTERDAY: {},
        Bucket.LAST_WEEK: {},
        Bucket.EARLIER: {"ANORA": [later]},
    }
    received = {Venue.KIKA: True, Venue.MIKRO: True, Venue.SFINKS: False, Venue.KIJOW: False}
    records = {
        "DIUNA": TitleRecord("DIUNA", date(2026, 10, 17), date(2026, 10, 17), "Dune", "Diuna-2021-1"),
    }

    text = format_summary(buckets, received, records)

    assert text == (
        "||TODAY||\n"
        "|DIUNA| / Dune\n"
        "https://www.filmweb.pl/film/Diuna-2021-1\n"
        "======18/10/2026======\n"
        "Kino Kika  18:00  https://bilety.kinokika.pl/1\n"
        "Kino Mikro  20:30\n"
        "======19/10/2026======\n"
        "Kino Kika  09:05\n"
        "\n"
        "|ŁABĘDŹ|\n"
        "======18/10/2026======\n"
        "Kino Mikro  20:30\n"
        "\n"
        "||ALL OTHERS||\n"
        "|ANORA|\n"
        "======19/10/2026======\n"
        "Kino Kika  09:05\n"
        "\n"
        "TOTAL: 3\n"
        "RESULTS NOT RECEIVED FROM:\n"
        "Kino Sfinks\n"
        "Kino Kijów\n"
    )


def test_no_missing_section_when_everyone_answered():
    text = format_summary({}, {Venue.KIKA: True})
    assert text == "TOTAL: 0\n"
