"""Whole-collection snapshot persistence.

On-disk format (UTF-8 JSON, version 1):

    {"format": "flashcard-sm2", "version": 1,
     "decks": [{"name": "...",
                "cards": [{"prompt": "...", "answers": ["..."],
                           "ease_factor": 2.5, "repetitions": 0,
                           "interval_days": 0, "next_review": "YYYY-MM-DD",
                           "last_review": null}]}]}

Loads decode the full document before returning, and saves replace the file in
one rename, so callers see either the old snapshot or the new one.
"""

from __future__ import annotations

import datetime
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Tuple

from .errors import PersistenceError
from .models import Collection, Deck, Flashcard
from .scheduling import SchedulingState

logger = logging.getLogger(__name__)

FORMAT_NAME = "flashcard-sm2"
FORMAT_VERSION = 1


class SnapshotStorage(Protocol):
    def load(self) -> Collection: ...

    def save(self, collection: Collection) -> None: ...


def _card_to_dict(card: Flashcard) -> dict:
    s = card.scheduling
    return {
        "prompt": card.prompt,
        "answers": list(card.answers),
        "ease_factor": s.ease_factor,
        "repetitions": s.repetitions,
        "interval_days": s.interval_days,
        "next_review": s.next_review.isoformat(),
        "last_review": s.last_review.isoformat() if s.last_review else None,
    }


def collection_to_dict(collection: Collection) -> dict:
    return {
        "format": FORMAT_NAME,
        "version": FORMAT_VERSION,
        "decks": [
            {"name": deck.name, "cards": [_card_to_dict(c) for c in deck.cards]}
            for deck in collection.decks
        ],
    }


def _parse_date(value: str) -> datetime.date:
    return datetime.date.fromisoformat(value)


def _card_from_dict(data: dict) -> Flashcard:
    prompt = str(data["prompt"]).strip()
    if not isinstance(data["answers"], list):
        raise TypeError("answers must be a list")
    answers = [str(a).strip() for a in data["answers"] if str(a).strip()]
    if not prompt or not answers:
        raise ValueError("card needs a prompt and at least one answer")
    last_review = data.get("last_review")
    scheduling = SchedulingState(
        ease_factor=float(data["ease_factor"]),
        repetitions=int(data["repetitions"]),
        interval_days=int(data["interval_days"]),
        next_review=_parse_date(data["next_review"]),
        last_review=_parse_date(last_review) if last_review else None,
    )
    return Flashcard(prompt=prompt, answers=answers, scheduling=scheduling)


def collection_from_dict(data: dict) -> Collection:
    """Decode a snapshot document; any structural problem raises PersistenceError."""
    if not isinstance(data, dict):
        raise PersistenceError("Snapshot root must be an object")
    if data.get("format") != FORMAT_NAME:
        raise PersistenceError(f"Not a {FORMAT_NAME} snapshot")
    version = data.get("version")
    if version != FORMAT_VERSION:
        raise PersistenceError(f"Unsupported snapshot version: {version!r}")
    collection = Collection()
    try:
        for d in data["decks"]:
            deck = Deck.create(d["name"])
            for c in d.get("cards", []):
                deck.add_card(_card_from_dict(c))
            collection.add_deck(deck)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"Corrupt snapshot: {exc}") from exc
    return collection


class JsonFileStorage:
    """Snapshot storage backed by a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Collection:
        if not self.path.exists():
            logger.info("No snapshot at %s; starting with an empty collection", self.path)
            return Collection()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt snapshot {self.path}: {exc}") from exc
        collection = collection_from_dict(data)
        logger.info(
            "Loaded %d decks (%d cards) from %s",
            len(collection), collection.card_count(), self.path,
        )
        return collection

    def save(self, collection: Collection) -> None:
        payload = json.dumps(collection_to_dict(collection), ensure_ascii=False, indent=2)
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc
        logger.info("Saved %d decks to %s", len(collection), self.path)


class MemoryStorage:
    """In-process storage holding the encoded snapshot."""

    def __init__(self, data: Optional[dict] = None) -> None:
        self.data = data
        self.saves = 0

    def load(self) -> Collection:
        if self.data is None:
            return Collection()
        return collection_from_dict(json.loads(json.dumps(self.data)))

    def save(self, collection: Collection) -> None:
        self.data = collection_to_dict(collection)
        self.saves += 1


def load_or_empty(storage: SnapshotStorage) -> Tuple[Collection, Optional[PersistenceError]]:
    """Load a snapshot, degrading to an empty collection when it cannot be read."""
    try:
        return storage.load(), None
    except PersistenceError as exc:
        logger.error("Load failed, continuing with an empty collection: %s", exc)
        return Collection(), exc
