from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from cinemas.base import BaseAdapter, drain
from models import Showing, SourceResult, Venue

logger = logging.getLogger(__name__)

COLLECTION_WINDOW = 90  # seconds


@dataclass
class Collection:
    showings: dict[str, list[Showing]] = field(default_factory=dict)
    received: dict[Venue, bool] = field(default_factory=dict)

    @property
    def missing(self) -> list[Venue]:
        return [venue for venue, ok in self.received.items() if not ok]


def merge_into(showings: dict[str, list[Showing]], titles: dict[str, list[Showing]]) -> None:
    for title, title_showings in titles.items():
        showings.setdefault(title, []).extend(title_showings)


def collect(adapters: Iterable[BaseAdapter], window: float = COLLECTION_WINDOW) -> Collection:
    """Run every adapter at once and gather what reports within the window.

    Each adapter runs on its own daemon thread, so one that outlives the window
    neither blocks the run nor the interpreter's exit.
    """
    adapters = list(adapters)
    channel: queue.Queue[SourceResult] = queue.Queue()
    collection = Collection(received={a.venue: False for a in adapters})

    for adapter in adapters:
        threading.Thread(
            target=adapter.run,
            args=(channel,),
            name=f"adapter-{adapter.venue.name.lower()}",
            daemon=True,
        ).start()

    started = time.monotonic()
    for result in drain(channel, len(adapters), window):
        collection.received[result.venue] = True
        merge_into(collection.showings, result.titles)
        logger.debug(f"[{result.venue.display_name}] Reported after {time.monotonic() - started:.1f}s")

    if collection.missing:
        names = ", ".join(v.display_name for v in collection.missing)
        logger.warning(f"No results within {window}s from: {names}")
    logger.info(
        f"Collected {len(collection.showings)} raw titles from "
        f"{len(adapters) - len(collection.missing)}/{len(adapters)} cinemas"
    )
    return collection
