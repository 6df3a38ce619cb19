from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from pathlib import Path

from collector import COLLECTION_WINDOW


@dataclass
class Settings:
    gotify_origin: str = ""
    gotify_token: str = ""
    print_summary: bool = False
    log_file: Path | None = None
    output: Path | None = None
    db_path: Path = Path("movies.db")
    window: float = COLLECTION_WINDOW
    enrich: bool = True

    @property
    def notify(self) -> bool:
        return bool(self.gotify_origin and self.gotify_token)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect Kraków cinema repertoires")
    parser.add_argument("--origin", default=os.getenv("GOTIFY_ORIGIN", ""),
                        help='Gotify origin "scheme://authority" (env GOTIFY_ORIGIN)')
    parser.add_argument("--token", default=os.getenv("GOTIFY_TOKEN", ""),
                        help="Gotify application token (env GOTIFY_TOKEN)")
    parser.add_argument("--log", action="store_true", help="Print the summary")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    parser.add_argument("--output", type=Path, default=None, help="Write the summary to this file")
    parser.add_argument("--db", type=Path, default=Path(os.getenv("MOVIES_DB", "movies.db")),
                        help="Title registry database (env MOVIES_DB)")
    parser.add_argument("--window", type=float, default=COLLECTION_WINDOW,
                        help="Seconds to wait for the cinemas")
    parser.add_argument("--no-enrich", action="store_true", help="Skip filmweb.pl lookups of new titles")
    return parser


def parse_args(argv: list[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(
        gotify_origin=args.origin,
        gotify_token=args.token,
        print_summary=args.log,
        log_file=args.log_file,
        output=args.output,
        db_path=args.db,
        window=args.window,
        enrich=not args.no_enrich,
    )
