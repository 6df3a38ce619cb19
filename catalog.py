from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

API_URL = "https://www.filmweb.pl/api/v1"
SEARCH_URL = f"{API_URL}/live/search"
INFO_URL = f"{API_URL}/title/{{id}}/info"

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
    "x-locale": "pl_PL",
}

REQUEST_TIMEOUT = 10


@dataclass
class CatalogEntry:
    id: int
    title: str
    original_title: str | None
    year: int | None

    @property
    def ref(self) -> str:
        """Path fragment of the film page: '<slug>-<year>-<id>'."""
        parts = [_slug(self.title)]
        if self.year:
            parts.append(str(self.year))
        parts.append(str(self.id))
        return "-".join(p for p in parts if p)


def _slug(text: str) -> str:
    text = unicodedata.normalize("NFKD", text.replace("ł", "l").replace("Ł", "L"))
    text = text.encode("ascii", "ignore").decode()
    return re.sub(r"[^A-Za-z0-9]+", "+", text).strip("+")


class FilmwebCatalog:
    """Best-effort lookup of a film's original title on filmweb.pl."""

    name = "filmweb.pl"

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()
        self.session.headers.update(HEADERS)

    def _get_json(self, url: str, **params) -> dict:
        resp = self.session.get(url, params=params or None, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        return resp.json()

    def search(self, title: str) -> int | None:
        """Id of the best hit if it is a film, else None."""
        data = self._get_json(SEARCH_URL, query=title)
        hits = data.get("searchHits") or []
        if not hits:
            return None
        best = hits[0]
        if best.get("type") != "film":
            logger.debug(f"[{self.name}] Best hit for {title!r} is a {best.get('type')}")
            return None
        return int(best["id"])

    def info(self, film_id: int) -> CatalogEntry:
        data = self._get_json(INFO_URL.format(id=film_id))
        year = data.get("year")
        return CatalogEntry(
            id=film_id,
            title=data.get("title") or "",
            original_title=data.get("originalTitle") or None,
            year=int(year) if year else None,
        )

    def lookup(self, title: str) -> CatalogEntry | None:
        try:
            film_id = self.search(title)
            if film_id is None:
                return None
            return self.info(film_id)
        except (requests.RequestException, ValueError, KeyError, TypeError):
            logger.warning(f"[{self.name}] Lookup failed for {title!r}", exc_info=True)
            return None
