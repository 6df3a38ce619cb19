"""Repertoire pages scraped straight from the cinemas' HTML.

Every site is one row of SITE_RULES: where the repertoire lives, which element
wraps a single showing, and how to read the title, the raw date/time text and
the booking link out of that element. HtmlAdapter is the only code path.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from itertools import repeat
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from cinemas.base import BaseAdapter
from dates import parse_datetime
from models import Showing, Venue

logger = logging.getLogger(__name__)

MAX_DEPTH = 2       # start page + pages linked from it
PAGE_WORKERS = 4


def text_of(el: Tag, selector: str) -> str:
    """Concatenated text of every match, like jQuery's .text()."""
    return "".join(match.get_text() for match in el.select(selector))


def first_text(selector: str) -> Callable[[Tag, dict], str]:
    def extract(el: Tag, page: dict) -> str:
        match = el.select_one(selector)
        return match.get_text() if match else ""
    return extract


def all_text(selector: str) -> Callable[[Tag, dict], str]:
    def extract(el: Tag, page: dict) -> str:
        return text_of(el, selector)
    return extract


# --- raw date/time extractors -------------------------------------------------

def _ticketing_date(el: Tag, page: dict) -> str:
    # "<div class=date>\n  pt.\n  17.10\n  18:30</div>": date and time are the last two lines
    lines = text_of(el, "div.date").split("\n")
    return " ".join(lines[-2:])


def _mikro_date(el: Tag, page: dict) -> str:
    # the date separator only precedes the first showing of each day
    separator = el.select_one("div.repertoire-separator")
    if separator is not None:
        page["last_date"] = separator.get_text()
    return f"{page.get('last_date', '')} {text_of(el, 'p.repertoire-item-hour')}"


def _paradox_date(el: Tag, page: dict) -> str:
    return f"{el.get('data-date', '')} {text_of(el, 'div.item-time')}"


def _pod_baranami_date(el: Tag, page: dict) -> str | None:
    link = el.select_one("span a")
    if link is None or not link.get("onclick"):
        return None  # no booking, not a real showing
    # buy('...', '...', '2025-10-17', '...', '...', '...', '...')
    day = link["onclick"].split(",")[-5]
    return f"{day} {link.get_text()}"


def _sfinks_date(el: Tag, page: dict) -> str:
    spans = el.select("span.kali_data_od span")
    day = spans[0].get_text() if spans else ""
    hour = spans[2].get_text() if len(spans) > 2 else ""
    return f"{day} {hour}"


@dataclass(frozen=True)
class SiteRules:
    url: str
    root: str                                   # one match per showing
    title: Callable[[Tag, dict], str]
    showtime: Callable[[Tag, dict], str | None]
    link: str                                   # booking anchor, relative to link_base
    link_base: str
    charset: str | None = None                  # overrides the page's declared encoding
    next_page: str | None = None                # anchors to further pages


SITE_RULES: dict[Venue, SiteRules] = {
    Venue.AGRAFKA: SiteRules(
        url="https://bilety.kinoagrafka.pl/",
        root="div.repertoire-once",
        title=first_text("a"),
        showtime=_ticketing_date,
        link="a.button",
        link_base="https://bilety.kinoagrafka.pl/",
    ),
    Venue.KIJOW: SiteRules(
        url="https://kupbilet.kijow.pl/MSI/mvc/pl?sort=Date&date=1970-01&datestart=0",
        root="div.cd-timeline-block",
        title=all_text("h2"),
        showtime=all_text("span.cd-date"),
        link="a.btn-badge2",
        link_base="https://kupbilet.kijow.pl/",
        next_page="a[href].eventcard.col-6",
    ),
    Venue.KIKA: SiteRules(
        url="https://bilety.kinokika.pl/",
        root="div.repertoire-once",
        title=first_text("a"),
        showtime=_ticketing_date,
        link="a.button",
        link_base="https://bilety.kinokika.pl/",
    ),
    Venue.MIKRO: SiteRules(
        url="https://kinomikro.pl/repertoire/?view=all",
        root="section.row",
        title=all_text("a.repertoire-item-title"),
        showtime=_mikro_date,
        link="a.repertoire-item-button",
        link_base="https://kinomikro.pl/",
    ),
    Venue.PARADOX: SiteRules(
        url="https://kinoparadox.pl/repertuar/",
        root="div.list-item__content__row",
        title=all_text("a.item-title"),
        showtime=_paradox_date,
        link="a.btn",
        link_base="https://kinoparadox.pl/repertuar/",
    ),
    Venue.POD_BARANAMI: SiteRules(
        url="https://www.kinopodbaranami.pl/repertuar.php",
        root="li[title]",
        title=first_text("a"),
        showtime=_pod_baranami_date,
        link="a[onclick]",
        link_base="https://www.kinopodbaranami.pl/",
        charset="iso-8859-2",
    ),
    Venue.SFINKS: SiteRules(
        url="https://kinosfinks.okn.edu.pl/wydarzenia-szukaj-strona-1.html",
        root="span.zajawka",
        title=all_text("span.title"),
        showtime=_sfinks_date,
        link="a",
        link_base="https://kinosfinks.okn.edu.pl/",
        next_page="a[href][title^='Strona']",
    ),
}


class HtmlAdapter(BaseAdapter):
    """Scrapes one cinema's repertoire pages according to its SiteRules."""

    def __init__(self, venue: Venue, session=None, rules: SiteRules | None = None):
        super().__init__(venue, session)
        self.rules = rules or SITE_RULES[venue]
        self.now = datetime.now
        self._lock = threading.Lock()

    def scrape(self) -> dict[str, list[Showing]]:
        titles: dict[str, list[Showing]] = {}
        visited = {self.rules.url}
        frontier = [self.rules.url]
        now = self.now()

        with ThreadPoolExecutor(max_workers=PAGE_WORKERS) as pool:
            for depth in range(1, MAX_DEPTH + 1):
                follow = depth < MAX_DEPTH
                pages = pool.map(
                    self._scrape_page, frontier, repeat(titles), repeat(now), repeat(follow)
                )
                frontier = []
                for links in pages:
                    for link in links:
                        if link not in visited:
                            visited.add(link)
                            frontier.append(link)
                if not frontier:
                    break

        return titles

    def _scrape_page(
        self, url: str, titles: dict[str, list[Showing]], now: datetime, follow: bool
    ) -> list[str]:
        """Add the page's upcoming showings to `titles`; return next-page links."""
        try:
            resp = self.fetch(url)
        except requests.RequestException:
            if url == self.rules.url:
                raise
            logger.warning(f"[{self.name}] Skipping page {url}", exc_info=True)
            return []
        soup = BeautifulSoup(resp.content, "lxml", from_encoding=self.rules.charset)

        page_state: dict = {}
        found = []
        for el in soup.select(self.rules.root):
            parsed = self._parse_showing(el, page_state, now)
            if parsed is None:
                continue
            title, showing = parsed
            if showing.time < now:
                continue
            found.append((title, showing))

        with self._lock:
            for title, showing in found:
                titles.setdefault(title, []).append(showing)
        logger.debug(f"[{self.name}] {len(found)} upcoming showings on {url}")

        if not follow or not self.rules.next_page:
            return []
        return [
            urljoin(url, a["href"])
            for a in soup.select(self.rules.next_page)
            if a.get("href")
        ]

    def _parse_showing(
        self, el: Tag, page_state: dict, now: datetime
    ) -> tuple[str, Showing] | None:
        try:
            # date first: some rules carry state from row to row
            raw_datetime = self.rules.showtime(el, page_state)
            title = self.rules.title(el, page_state).strip()
            if not title or raw_datetime is None:
                return None

            link_el = el.select_one(self.rules.link)
            url = None
            if link_el is not None and link_el.get("href"):
                url = urljoin(self.rules.link_base, link_el["href"])

            showing = Showing(
                venue=self.venue,
                time=parse_datetime(raw_datetime, self.venue, now),
                url=url,
            )
            return title, showing
        except Exception:
            logger.warning(f"[{self.name}] Failed to parse showing", exc_info=True)
            return None
