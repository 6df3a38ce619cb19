from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class Venue(Enum):
    AGRAFKA = "Kino Agrafka"
    CCITY_BONARKA = "Cinema City Bonarka"
    CCITY_KAZIMIERZ = "Cinema City Kazimierz"
    CCITY_ZAKOPIANKA = "Cinema City Zakopianka"
    KIJOW = "Kino Kijów"
    KIKA = "Kino Kika"
    MIKRO = "Kino Mikro"
    POD_BARANAMI = "Kino Pod Baranami"
    MULTIKINO = "Multikino"
    PARADOX = "Kino Paradox"
    SFINKS = "Kino Sfinks"

    @property
    def display_name(self) -> str:
        return self.value


class Bucket(Enum):
    """How long a title has been continuously listed."""

    NEW_TODAY = "TODAY"
    YESTERDAY = "YESTERDAY"
    LAST_WEEK = "LAST WEEK"
    EARLIER = "ALL OTHERS"

    @property
    def heading(self) -> str:
        return f"||{self.value}||"


@dataclass(frozen=True)
class Showing:
    venue: Venue
    time: datetime          # naive, local time
    url: str | None = None  # booking link


@dataclass
class SourceResult:
    venue: Venue
    titles: dict[str, list[Showing]] = field(default_factory=dict)

    @property
    def showing_count(self) -> int:
        return sum(len(s) for s in self.titles.values())


@dataclass
class TitleRecord:
    title: str              # canonical title, primary key
    first_seen: date
    last_seen: date
    secondary_title: str | None = None
    catalog_ref: str | None = None   # "<slug>-<year>-<id>"

    @property
    def catalog_url(self) -> str | None:
        if not self.catalog_ref:
            return None
        return f"https://www.filmweb.pl/film/{self.catalog_ref}"
