from __future__ import annotations

import logging
from urllib.parse import urljoin

from cinemas.base import BaseAdapter
from dates import parse_datetime
from models import Showing, Venue

logger = logging.getLogger(__name__)

BASE_URL = "https://multikino.pl/"
# Any microservice call hands out the session cookies the films endpoint wants
COOKIES_URL = f"{BASE_URL}api/microservice/"
FILMS_URL = f"{BASE_URL}api/microservice/showings/cinemas/{{cinema_id}}/films/"

CINEMA_IDS = {
    Venue.MULTIKINO: "0005",
}


class MultikinoAdapter(BaseAdapter):
    def __init__(self, venue: Venue = Venue.MULTIKINO, session=None):
        super().__init__(venue, session)
        self.cinema_id = CINEMA_IDS[venue]

    def scrape(self) -> dict[str, list[Showing]]:
        self.fetch(COOKIES_URL)
        data = self.fetch(FILMS_URL.format(cinema_id=self.cinema_id)).json()

        titles: dict[str, list[Showing]] = {}
        for film in data["result"]:
            title = film["filmTitle"]
            showings = titles.setdefault(title, [])
            for group in film.get("showingGroups", []):
                for session in group.get("sessions", []):
                    showings.append(self._parse_session(session))
        return titles

    def _parse_session(self, session: dict) -> Showing:
        booking = session.get("bookingUrl")
        return Showing(
            venue=self.venue,
            time=parse_datetime(session["startTime"], self.venue),
            url=urljoin(BASE_URL, booking) if booking else None,
        )
