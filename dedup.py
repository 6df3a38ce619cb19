from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable

from models import Showing

# A title containing any of these is dropped with all its showings.
EXCLUDED_KEYWORDS = (
    "UKRAINIAN",
    "UKRAIŃSKI",
    "DLA OSÓB",
    "KLUB SENIORA",
    "DKF KROPKA DLA DZIECI",
)

# Removed wherever they occur, after punctuation has been blanked out.
REMOVED_PHRASES = (
    "2D",
    "3D",
    "DUBBING",
    "NAPISY",
    "TANI WTOREK",
    "DKF KROPKA",
    "DKF PEŁNA SALA",
    "PRZEDPREMIERA",
    "+ ENG SUB",
    "ENG SUB",
    "POKAZ SPECJALNY Z DYSKUSJĄ",
    "POKAZ SPECJALNY",
    "WERSJA REŻYSERSKA",
)

WHITESPACE_RE = re.compile(r"\s{2,}")


def _blank_punctuation(text: str) -> str:
    return "".join(" " if unicodedata.category(ch).startswith("P") else ch for ch in text)


def _collapse(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def strip_trailing_parens(title: str) -> str:
    """'X (DUBBING) (2D)' -> 'X'. Titles wrapped whole in parens are kept."""
    while title.endswith(")") and not title.startswith("("):
        start = title.rfind("(")
        if start == -1:
            break
        title = title[:start].strip()
    return title


class TitleNormalizer:
    """Turns raw listing titles into canonical merge keys."""

    def __init__(
        self,
        excluded_keywords: Iterable[str] = EXCLUDED_KEYWORDS,
        removed_phrases: Iterable[str] = REMOVED_PHRASES,
        strip_punctuation: bool = True,
    ):
        self.excluded_keywords = tuple(k.upper() for k in excluded_keywords)
        self.strip_punctuation = strip_punctuation
        # longest first so "POKAZ SPECJALNY Z DYSKUSJĄ" wins over "POKAZ SPECJALNY"
        phrases = (p.upper() for p in removed_phrases)
        if strip_punctuation:
            phrases = (_collapse(_blank_punctuation(p)) for p in phrases)
        self.removed_phrases = tuple(
            sorted({p for p in phrases if p}, key=lambda p: (-len(p), p))
        )

    def is_excluded(self, title: str) -> bool:
        upper = title.upper()
        return any(kw in upper for kw in self.excluded_keywords)

    def normalize(self, raw: str) -> str | None:
        """Canonical title, or None when the title is excluded."""
        title = raw.upper()
        if self.is_excluded(title):
            return None

        if self.strip_punctuation:
            title = _blank_punctuation(title)
        # removing one phrase can join the halves of another: "X 23DD" -> "X 2D"
        previous = None
        while title != previous:
            previous = title
            for phrase in self.removed_phrases:
                title = title.replace(phrase, "")
            title = strip_trailing_parens(_collapse(title))

        if self.is_excluded(title):
            return None
        return title or None


def deduplicate(
    titles: dict[str, list[Showing]], normalizer: TitleNormalizer | None = None
) -> dict[str, list[Showing]]:
    """Merge raw titles sharing a canonical form; showings sorted by time."""
    normalizer = normalizer or TitleNormalizer()
    merged: dict[str, list[Showing]] = {}

    for raw, showings in titles.items():
        title = normalizer.normalize(raw)
        if title is None:
            continue
        merged.setdefault(title, []).extend(showings)

    for showings in merged.values():
        showings.sort(key=lambda s: s.time)
    return merged
