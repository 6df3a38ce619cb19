from __future__ import annotations

import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from cinemas.base import BaseAdapter, drain
from dates import parse_datetime
from models import Showing, Venue

logger = logging.getLogger(__name__)

API_URL = "https://www.cinema-city.pl/pl/data-api-service/v1/quickbook/10103"
DATES_URL = f"{API_URL}/dates/in-cinema/{{cinema_id}}/until/{{until}}"
EVENTS_URL = f"{API_URL}/film-events/in-cinema/{{cinema_id}}/at-date/{{day}}"

CINEMA_IDS = {
    Venue.CCITY_BONARKA: "1090",
    Venue.CCITY_KAZIMIERZ: "1076",
    Venue.CCITY_ZAKOPIANKA: "1064",
}

DAY_REQUEST_TIMEOUT = 5
DAYS_WINDOW = 5  # seconds to wait for all per-day answers
DAY_WORKERS = 8


def _year_ahead(today: date) -> date:
    try:
        return today.replace(year=today.year + 1)
    except ValueError:  # 29 February
        return today.replace(year=today.year + 1, day=28)


class CinemaCityAdapter(BaseAdapter):
    """Cinema City quickbook API: one request for the dates, one per date."""

    def __init__(self, venue: Venue, session=None):
        super().__init__(venue, session)
        self.cinema_id = CINEMA_IDS[venue]

    def scrape(self) -> dict[str, list[Showing]]:
        days = self._fetch_dates()
        logger.debug(f"[{self.name}] {len(days)} days with showings")

        channel: queue.Queue[dict[str, list[Showing]]] = queue.Queue()
        pool = ThreadPoolExecutor(max_workers=DAY_WORKERS)
        for day in days:
            pool.submit(self._run_day, day, channel)

        titles: dict[str, list[Showing]] = {}
        received = 0
        try:
            for day_titles in drain(channel, len(days), DAYS_WINDOW):
                received += 1
                for title, showings in day_titles.items():
                    titles.setdefault(title, []).extend(showings)
        finally:
            # late days are abandoned, not waited for
            pool.shutdown(wait=False, cancel_futures=True)

        if received < len(days):
            logger.warning(f"[{self.name}] Only {received}/{len(days)} days answered in time")
        return titles

    def _fetch_dates(self) -> list[str]:
        url = DATES_URL.format(
            cinema_id=self.cinema_id, until=_year_ahead(date.today()).isoformat()
        )
        return list(self.fetch(url).json()["body"]["dates"])

    def _run_day(self, day: str, channel: queue.Queue) -> None:
        try:
            titles = self.scrape_day(day)
        except Exception:
            logger.warning(f"[{self.name}] Failed to fetch {day}", exc_info=True)
            return
        channel.put(titles)

    def scrape_day(self, day: str) -> dict[str, list[Showing]]:
        url = EVENTS_URL.format(cinema_id=self.cinema_id, day=day)
        body = self.fetch(url, timeout=DAY_REQUEST_TIMEOUT).json()["body"]

        id_to_title = {film["id"]: film["name"] for film in body.get("films", [])}

        titles: dict[str, list[Showing]] = {}
        for event in body.get("events", []):
            title = id_to_title.get(event["filmId"])
            if not title:
                logger.debug(f"[{self.name}] Event for unknown film {event['filmId']}")
                continue
            titles.setdefault(title, []).append(
                Showing(
                    venue=self.venue,
                    time=parse_datetime(event["eventDateTime"], self.venue),
                    url=event.get("bookingLink") or None,
                )
            )
        return titles
