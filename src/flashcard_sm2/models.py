"""Flashcard, Deck and Collection.

Ownership is strict: a Collection owns its decks, a Deck owns its cards and a
Flashcard owns its SchedulingState. Removing a deck or card discards it.
"""

from __future__ import annotations

import datetime
import logging
import random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .errors import ValidationError
from .normalize import matches, split_answers
from .scheduling import SchedulingState

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], what: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{what} cannot be empty")
    return text


def _check_index(index: int, size: int, what: str) -> None:
    if not 0 <= index < size:
        raise ValidationError(f"{what} index {index} is out of range ({size} available)")


@dataclass
class Flashcard:
    """A prompt with one or more accepted answers and its SM-2 state."""
    prompt: str
    answers: List[str]
    scheduling: SchedulingState = field(default_factory=SchedulingState)

    @classmethod
    def create(
        cls,
        prompt: Optional[str],
        raw_answers: Optional[str],
        today: Optional[datetime.date] = None,
    ) -> "Flashcard":
        """Build a card from the prompt and a comma-separated answer field.

        Empty variants (for example from ``"a,,b"``) are dropped; at least one
        must remain.
        """
        prompt = _require_text(prompt, "Prompt")
        raw = _require_text(raw_answers, "Answer")
        answers = split_answers(raw)
        if not answers:
            raise ValidationError("At least one accepted answer is required")
        return cls(prompt=prompt, answers=answers, scheduling=SchedulingState.new(today))

    @property
    def raw_answer(self) -> str:
        return ", ".join(self.answers)

    def check_answer(self, user_input: Optional[str], strip_accents: bool = False) -> bool:
        return matches(user_input, self.answers, strip_accents=strip_accents)

    def apply_review_result(self, quality: int, today: Optional[datetime.date] = None) -> None:
        self.scheduling.update(quality, today=today)

    def is_due(self, as_of: Optional[datetime.date] = None) -> bool:
        return self.scheduling.is_due(as_of)


@dataclass
class Deck:
    """Named, ordered list of cards. Insertion order is display order."""
    name: str
    cards: List[Flashcard] = field(default_factory=list)

    @classmethod
    def create(cls, name: Optional[str]) -> "Deck":
        return cls(name=_require_text(name, "Deck name"))

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Flashcard]:
        return iter(self.cards)

    def rename(self, new_name: Optional[str]) -> None:
        self.name = _require_text(new_name, "Deck name")

    def add_card(self, card: Flashcard) -> None:
        self.cards.append(card)

    def get_card(self, index: int) -> Flashcard:
        _check_index(index, len(self.cards), "Card")
        return self.cards[index]

    def remove_card(self, index: int) -> Flashcard:
        _check_index(index, len(self.cards), "Card")
        return self.cards.pop(index)

    def replace_card(self, index: int, card: Flashcard) -> Flashcard:
        """Swap in an edited card; the old card and its schedule are discarded."""
        _check_index(index, len(self.cards), "Card")
        old = self.cards[index]
        self.cards[index] = card
        return old

    def due_cards(self, as_of: Optional[datetime.date] = None) -> List[Flashcard]:
        as_of = as_of or datetime.date.today()
        return [c for c in self.cards if c.is_due(as_of)]

    def shuffled(self, rng: Optional[random.Random] = None) -> List[Flashcard]:
        """Shuffled copy of the cards; the deck itself keeps its order."""
        order = list(self.cards)
        (rng or random).shuffle(order)
        return order


@dataclass
class Collection:
    """All decks. Duplicate deck names are allowed."""
    decks: List[Deck] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.decks)

    def __iter__(self) -> Iterator[Deck]:
        return iter(self.decks)

    def create_deck(self, name: Optional[str]) -> Deck:
        deck = Deck.create(name)
        self.decks.append(deck)
        logger.info("Created deck %r", deck.name)
        return deck

    def add_deck(self, deck: Deck) -> None:
        self.decks.append(deck)

    def get_deck(self, index: int) -> Deck:
        _check_index(index, len(self.decks), "Deck")
        return self.decks[index]

    def remove_deck(self, index: int) -> Deck:
        _check_index(index, len(self.decks), "Deck")
        deck = self.decks.pop(index)
        logger.info("Removed deck %r (%d cards)", deck.name, len(deck))
        return deck

    def index_of(self, deck: Deck) -> int:
        # Identity, not equality: two decks may share a name and contents.
        for i, d in enumerate(self.decks):
            if d is deck:
                return i
        raise ValidationError(f"Deck {deck.name!r} is not in this collection")

    def find_deck(self, name: str) -> Optional[Deck]:
        """First deck whose name equals ``name`` (after trimming)."""
        wanted = (name or "").strip()
        for deck in self.decks:
            if deck.name == wanted:
                return deck
        return None

    def card_count(self) -> int:
        return sum(len(d) for d in self.decks)

    def due_cards(self, as_of: Optional[datetime.date] = None) -> List[Tuple[Deck, List[Flashcard]]]:
        """Due cards grouped by deck, in deck then card order; empty groups omitted."""
        as_of = as_of or datetime.date.today()
        groups: List[Tuple[Deck, List[Flashcard]]] = []
        for deck in self.decks:
            due = deck.due_cards(as_of)
            if due:
                groups.append((deck, due))
        return groups

    def due_count(self, as_of: Optional[datetime.date] = None) -> int:
        return sum(len(cards) for _, cards in self.due_cards(as_of))
