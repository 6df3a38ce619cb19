from __future__ import annotations

import logging
import queue
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator

import requests

from models import Showing, SourceResult, Venue

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/json;q=0.9,*/*;q=0.8",
    "Accept-Language": "pl-PL,pl;q=0.9,en;q=0.8",
}

REQUEST_TIMEOUT = 20


class BaseAdapter(ABC):
    """Base class for all cinema repertoire sources."""

    def __init__(self, venue: Venue, session: requests.Session | None = None):
        self.venue = venue
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)

    @property
    def name(self) -> str:
        return self.venue.display_name

    def fetch(self, url: str, **kwargs) -> requests.Response:
        """Single GET, no retries: a slow source is simply left out."""
        kwargs.setdefault("timeout", REQUEST_TIMEOUT)
        response = self.session.get(url, **kwargs)
        response.raise_for_status()
        return response

    @abstractmethod
    def scrape(self) -> dict[str, list[Showing]]:
        """Raw title -> showings. Must be implemented by subclasses."""

    def run(self, channel: queue.Queue) -> None:
        """Scrape and report once on the channel; report nothing on failure."""
        try:
            titles = self.scrape()
        except Exception:
            logger.exception(f"[{self.name}] Scraping failed")
            return
        result = SourceResult(venue=self.venue, titles=titles)
        logger.info(
            f"[{self.name}] Scraped {result.showing_count} showings "
            f"of {len(titles)} titles"
        )
        channel.put(result)


def drain(channel: queue.Queue, expected: int, window: float) -> Iterator:
    """Yield up to `expected` items from the channel until `window` runs out.

    Whatever arrives after the deadline stays in the channel unread.
    """
    deadline = time.monotonic() + window
    remaining = expected
    while remaining > 0:
        timeout = deadline - time.monotonic()
        if timeout <= 0:
            break
        try:
            item = channel.get(timeout=timeout)
        except queue.Empty:
            break
        remaining -= 1
        yield item
