"""CSV import and export of deck cards.

Import schema: front, back (UTF-8, quoted fields ok). ``back`` holds the
accepted answers, comma-separated. Extra columns are ignored.
"""

from __future__ import annotations

import csv
import datetime
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import ValidationError
from .models import Deck, Flashcard

logger = logging.getLogger(__name__)

EXPORT_FIELDS = [
    "front",
    "back",
    "ease_factor",
    "repetitions",
    "interval_days",
    "next_review",
    "last_review",
]


@dataclass
class RejectedRow:
    line: int
    reason: str


@dataclass
class ImportResult:
    cards: List[Flashcard] = field(default_factory=list)
    rejected: List[RejectedRow] = field(default_factory=list)


def read_cards_csv(path: str | Path, today: Optional[datetime.date] = None) -> ImportResult:
    """Parse a front/back CSV into new cards; invalid rows are collected, not raised."""
    path = Path(path)
    result = ImportResult()
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        headers = {h.strip().lower(): h for h in reader.fieldnames or []}
        missing = {"front", "back"} - set(headers)
        if missing:
            raise ValueError(f"Missing required columns in {path}: {sorted(missing)}")
        for r in reader:
            try:
                card = Flashcard.create(
                    r.get(headers["front"]), r.get(headers["back"]), today=today
                )
            except ValidationError as exc:
                # line_num is the physical line where the record ends.
                result.rejected.append(RejectedRow(line=reader.line_num, reason=str(exc)))
                continue
            result.cards.append(card)
    logger.info(
        "Read %d cards from %s (%d rejected)", len(result.cards), path, len(result.rejected)
    )
    return result


def import_into_deck(deck: Deck, path: str | Path, today: Optional[datetime.date] = None) -> ImportResult:
    result = read_cards_csv(path, today=today)
    for card in result.cards:
        deck.add_card(card)
    return result


def card_to_row(card: Flashcard) -> dict:
    s = card.scheduling
    return {
        "front": card.prompt,
        "back": card.raw_answer,
        "ease_factor": f"{s.ease_factor:.2f}",
        "repetitions": s.repetitions,
        "interval_days": s.interval_days,
        "next_review": s.next_review.isoformat(),
        "last_review": s.last_review.isoformat() if s.last_review else "",
    }


def write_csv(path: str | Path, rows: Iterable[dict], fieldnames: List[str]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in rows:
            writer.writerow(r)


def export_deck(deck: Deck, path: str | Path) -> int:
    write_csv(path, (card_to_row(c) for c in deck.cards), EXPORT_FIELDS)
    logger.info("Exported %d cards from %r to %s", len(deck), deck.name, path)
    return len(deck)
