from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from models import TitleRecord

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS movies (
    title TEXT NOT NULL PRIMARY KEY,
    first_seen TEXT NOT NULL,
    last_seen TEXT NOT NULL,
    secondary_title TEXT,
    catalog_ref TEXT
)
"""


class RegistryError(RuntimeError):
    """The title registry could not be read or written."""


class TitleRegistry:
    """First/last-seen bookkeeping per canonical title, kept in SQLite.

    One connection is shared by the classifier and the enrichment workers;
    every statement runs under a lock so writes are serialized.
    """

    def __init__(self, db_path: Path | str = "movies.db"):
        self.db_path = db_path
        self._lock = threading.Lock()
        try:
            if db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            with self._conn:
                self._conn.execute(SCHEMA)
        except (sqlite3.Error, OSError) as exc:
            raise RegistryError(f"Cannot open title registry {db_path}: {exc}") from exc
        logger.debug(f"Title registry ready at {db_path}")

    def __enter__(self) -> TitleRegistry:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> list[tuple]:
        with self._lock:
            try:
                with self._conn:
                    return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise RegistryError(f"Registry query failed: {exc}") from exc

    def lookup(self, title: str) -> TitleRecord | None:
        rows = self._execute(
            "SELECT title, first_seen, last_seen, secondary_title, catalog_ref"
            " FROM movies WHERE title = ?",
            (title,),
        )
        if not rows:
            return None
        title, first_seen, last_seen, secondary_title, catalog_ref = rows[0]
        return TitleRecord(
            title=title,
            first_seen=date.fromisoformat(first_seen),
            last_seen=date.fromisoformat(last_seen),
            secondary_title=secondary_title,
            catalog_ref=catalog_ref,
        )

    def insert(self, record: TitleRecord) -> None:
        self._execute(
            "INSERT INTO movies (title, first_seen, last_seen, secondary_title, catalog_ref)"
            " VALUES (?, ?, ?, ?, ?)",
            (
                record.title,
                record.first_seen.isoformat(),
                record.last_seen.isoformat(),
                record.secondary_title,
                record.catalog_ref,
            ),
        )

    def update_dates(self, title: str, last_seen: date, first_seen: date | None = None) -> None:
        if first_seen is None:
            self._execute(
                "UPDATE movies SET last_seen = ? WHERE title = ?",
                (last_seen.isoformat(), title),
            )
        else:
            self._execute(
                "UPDATE movies SET first_seen = ?, last_seen = ? WHERE title = ?",
                (first_seen.isoformat(), last_seen.isoformat(), title),
            )

    def update_enrichment(
        self, title: str, secondary_title: str | None, catalog_ref: str | None
    ) -> None:
        self._execute(
            "UPDATE movies SET secondary_title = ?, catalog_ref = ? WHERE title = ?",
            (secondary_title, catalog_ref, title),
        )

    def lookup_many(self, titles: Iterable[str]) -> dict[str, TitleRecord]:
        records = {}
        for title in titles:
            record = self.lookup(title)
            if record:
                records[title] = record
        return records
