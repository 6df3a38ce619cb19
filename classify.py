from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from catalog import FilmwebCatalog
from models import Bucket, Showing, TitleRecord
from registry import TitleRegistry

logger = logging.getLogger(__name__)

# Thresholds in hours between calendar dates, one day of slack each.
GONE_AFTER_HOURS = 25
YESTERDAY_HOURS = 50
LAST_WEEK_HOURS = 170

ENRICH_WORKERS = 4


def hours_between(earlier: date, later: date) -> float:
    return (later - earlier).total_seconds() / 3600


def bucket_for(record: TitleRecord, today: date) -> Bucket:
    """Bucket of a title that is still listed (last seen within the gap)."""
    age = hours_between(record.first_seen, today)
    if age <= YESTERDAY_HOURS:
        return Bucket.YESTERDAY
    if age <= LAST_WEEK_HOURS:
        return Bucket.LAST_WEEK
    return Bucket.EARLIER


def classify_title(registry: TitleRegistry, title: str, today: date) -> tuple[Bucket, bool]:
    """Bucket the title and update the registry. Second value: record created."""
    record = registry.lookup(title)

    if record is None:
        registry.insert(TitleRecord(title=title, first_seen=today, last_seen=today))
        return Bucket.NEW_TODAY, True

    if hours_between(record.last_seen, today) > GONE_AFTER_HOURS:
        # disappeared for a while, counts as a fresh listing
        registry.update_dates(title, last_seen=today, first_seen=today)
        return Bucket.NEW_TODAY, False

    registry.update_dates(title, last_seen=today)
    return bucket_for(record, today), False


def enrich_title(registry: TitleRegistry, catalog: FilmwebCatalog, title: str) -> None:
    entry = catalog.lookup(title)
    if entry is None:
        logger.info(f"No catalog match for {title!r}")
        return
    registry.update_enrichment(title, entry.original_title, entry.ref)
    logger.info(f"Enriched {title!r} -> {entry.original_title!r} ({entry.ref})")


def classify(
    showings: dict[str, list[Showing]],
    registry: TitleRegistry,
    today: date | None = None,
    catalog: FilmwebCatalog | None = None,
) -> dict[Bucket, dict[str, list[Showing]]]:
    """Split titles into age buckets, updating the registry as a side effect.

    New titles are looked up in the catalog (when one is given) on a small
    thread pool; all lookups finish before this returns.
    """
    today = today or date.today()
    buckets: dict[Bucket, dict[str, list[Showing]]] = {b: {} for b in Bucket}

    jobs = []
    with ThreadPoolExecutor(max_workers=ENRICH_WORKERS) as pool:
        for title, title_showings in showings.items():
            bucket, created = classify_title(registry, title, today)
            buckets[bucket][title] = title_showings
            if created and catalog is not None:
                jobs.append(pool.submit(enrich_title, registry, catalog, title))

    # catalog failures are handled inside; registry failures surface here
    for job in jobs:
        job.result()

    for bucket, titles in buckets.items():
        logger.info(f"{bucket.value}: {len(titles)} titles")
    return buckets
