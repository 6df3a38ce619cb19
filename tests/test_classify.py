from __future__ import annotations

import threading
import time
from datetime import date, datetime, timedelta

import pytest

from catalog import CatalogEntry
from classify import classify, classify_title, hours_between
from models import Bucket, Showing, TitleRecord, Venue
from registry import TitleRegistry


@pytest.fixture
def registry(tmp_path):
    with TitleRegistry(tmp_path / "movies.db") as reg:
        yield reg


def _seed(registry, title, first_days_ago, last_days_ago, today):
    registry.insert(TitleRecord(
        title,
        first_seen=today - timedelta(days=first_days_ago),
        last_seen=today - timedelta(days=last_days_ago),
    ))


def test_hours_between():
    assert hours_between(date(2026, 10, 15), date(2026, 10, 17)) == 48


def test_new_title_is_inserted(registry, today):
    assert classify_title(registry, "DUNE", today) == (Bucket.NEW_TODAY, True)
    record = registry.lookup("DUNE")
    assert record.first_seen == record.last_seen == today


def test_title_gone_for_a_while_counts_as_new(registry, today):
    _seed(registry, "DUNE", first_days_ago=30, last_days_ago=2, today=today)

    assert classify_title(registry, "DUNE", today) == (Bucket.NEW_TODAY, False)
    record = registry.lookup("DUNE")
    assert record.first_seen == record.last_seen == today


@pytest.mark.parametrize(
    "first_days_ago, last_days_ago, bucket",
    [
        (0, 0, Bucket.YESTERDAY),
        (1, 1, Bucket.YESTERDAY),
        (2, 1, Bucket.YESTERDAY),
        (3, 1, Bucket.LAST_WEEK),
        (7, 0, Bucket.LAST_WEEK),
        (8, 1, Bucket.EARLIER),
        (40, 1, Bucket.EARLIER),
    ],
)
def test_continuing_titles_bucketed_by_first_seen(registry, today, first_days_ago, last_days_ago, bucket):
    _seed(registry, "DUNE", first_days_ago, last_days_ago, today)

    assert classify_title(registry, "DUNE", today) == (bucket, False)
    record = registry.lookup("DUNE")
    assert record.first_seen == today - timedelta(days=first_days_ago)
    assert record.last_seen == today


class FakeCatalog:
    def __init__(self, entries):
        self.entries = entries
        self.looked_up = []

    def lookup(self, title):
        self.looked_up.append(title)
        return self.entries.get(title)


def test_classify_buckets_and_enriches_new_titles(registry, today):
    _seed(registry, "OLD", first_days_ago=20, last_days_ago=1, today=today)
    showing = Showing(Venue.KIKA, datetime(2026, 10, 18, 20, 0))
    catalog = FakeCatalog({
        "DIUNA": CatalogEntry(id=123, title="Diuna", original_title="Dune", year=2021),
    })

    buckets = classify(
        {"DIUNA": [showing], "NIEZNANY": [showing], "OLD": [showing]},
        registry,
        today=today,
        catalog=catalog,
    )

    assert set(buckets) == set(Bucket)
    assert set(buckets[Bucket.NEW_TODAY]) == {"DIUNA", "NIEZNANY"}
    assert buckets[Bucket.EARLIER] == {"OLD": [showing]}
    assert sorted(catalog.looked_up) == ["DIUNA", "NIEZNANY"]

    record = registry.lookup("DIUNA")
    assert record.secondary_title == "Dune"
    assert record.catalog_ref == "Diuna-2021-123"
    assert registry.lookup("NIEZNANY").secondary_title is None


def test_classify_without_catalog(registry, today):
    buckets = classify({"A": []}, registry, today=today)
    assert buckets[Bucket.NEW_TODAY] == {"A": []}


class TrackingConnection:
    """Wraps the registry connection and records overlapping statements."""

    def __init__(self, conn):
        self.conn = conn
        self.active = 0
        self.peak = 0
        self.guard = threading.Lock()

    def execute(self, sql, params=()):
        with self.guard:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(0.001)
            return self.conn.execute(sql, params)
        finally:
            with self.guard:
                self.active -= 1

    def __enter__(self):
        return self.conn.__enter__()

    def __exit__(self, *exc_info):
        return self.conn.__exit__(*exc_info)

    def close(self):
        self.conn.close()


class SlowCatalog:
    def __init__(self):
        self.active = 0
        self.peak = 0
        self.guard = threading.Lock()

    def lookup(self, title):
        with self.guard:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.02)
        with self.guard:
            self.active -= 1
        return CatalogEntry(id=len(title), title=title, original_title=title.lower(), year=2026)


def test_concurrent_enrichment_writes_one_at_a_time(registry, today):
    tracking = TrackingConnection(registry._conn)
    registry._conn = tracking
    catalog = SlowCatalog()
    titles = [f"FILM {n}" for n in range(12)]

    buckets = classify({t: [] for t in titles}, registry, today=today, catalog=catalog)

    assert set(buckets[Bucket.NEW_TODAY]) == set(titles)
    assert catalog.peak > 1
    assert tracking.peak == 1
    for title in titles:
        assert registry.lookup(title).secondary_title == title.lower()
