#!/usr/bin/env python3
"""Kino - Kraków cinema repertoire aggregator."""

from __future__ import annotations

import logging
import sys
from datetime import date

from catalog import FilmwebCatalog
from cinemas import all_adapters
from classify import classify
from collector import collect
from config import Settings, parse_args
from dedup import deduplicate
from notify import send_gotify
from registry import RegistryError, TitleRegistry
from summary import format_summary

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        handlers=handlers,
    )


def run(settings: Settings, adapters=None, today: date | None = None) -> str:
    collection = collect(adapters if adapters is not None else all_adapters(), settings.window)

    showings = deduplicate(collection.showings)
    logger.info(f"Titles after dedup: {len(showings)} (raw: {len(collection.showings)})")

    catalog = FilmwebCatalog() if settings.enrich else None
    with TitleRegistry(settings.db_path) as registry:
        buckets = classify(showings, registry, today=today, catalog=catalog)
        records = registry.lookup_many(showings)

    return format_summary(buckets, collection.received, records)


def dispatch(settings: Settings, text: str) -> None:
    if settings.print_summary:
        print(text)
    if settings.output:
        settings.output.parent.mkdir(parents=True, exist_ok=True)
        settings.output.write_text(text, encoding="utf-8")
        logger.info(f"Summary written to {settings.output}")
    if settings.notify:
        send_gotify(settings.gotify_origin, settings.gotify_token, text)


def main(argv: list[str] | None = None) -> int:
    settings = parse_args(argv)
    setup_logging(settings)

    try:
        text = run(settings)
    except RegistryError:
        logger.exception("Title registry failed, aborting")
        return 1

    dispatch(settings, text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
