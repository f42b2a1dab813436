"""Review sessions: full-deck quiz, due review and single-card review.

A session talks to the user only through a Presenter. ``None`` from a prompt
means the user cancelled. Cancelling an answer ends a full-deck quiz but only
skips the current card during a due review.
"""

from __future__ import annotations

import datetime
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, Union

from .models import Collection, Deck, Flashcard

logger = logging.getLogger(__name__)

AUTO_QUALITY_CORRECT = 5
AUTO_QUALITY_INCORRECT = 2

MODE_QUIZ = "quiz"
MODE_DUE = "due"
MODE_SINGLE = "single"


class Presenter(Protocol):
    """Everything the core needs from a user interface."""

    def prompt_for_deck_name(self, current: Optional[str] = None) -> Optional[str]: ...

    def prompt_for_card_fields(
        self, current: Optional[Flashcard] = None
    ) -> Optional[Tuple[str, str]]: ...

    def prompt_for_free_text_answer(self, card_prompt: str) -> Optional[str]: ...

    def prompt_for_quality_rating(self) -> Union[int, str, None]: ...

    def confirm_destructive_action(self, description: str) -> bool: ...

    def display_message(self, text: str) -> None: ...

    def display_card_table(self, deck: Deck) -> None: ...

    def display_deck_list(self, decks: Sequence[Deck]) -> None: ...


def resolve_quality(raw: Union[int, str, None], correct: bool) -> int:
    """Explicit rating if one was given, otherwise 5 for correct and 2 for wrong.

    Non-numeric text counts as no rating. Out-of-range numbers are passed on
    unchanged; the scheduler clamps them.
    """
    if isinstance(raw, bool):
        raw = None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass
    return AUTO_QUALITY_CORRECT if correct else AUTO_QUALITY_INCORRECT


@dataclass
class CardOutcome:
    card: Flashcard
    deck_name: Optional[str]
    answer: str
    correct: bool
    quality: int


@dataclass
class SessionResult:
    mode: str
    total: int
    outcomes: List[CardOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def reviewed(self) -> int:
        return len(self.outcomes)

    @property
    def correct(self) -> int:
        return sum(1 for o in self.outcomes if o.correct)

    def score_line(self) -> str:
        return f"Score: {self.correct}/{self.total}"


class ReviewSession:
    def __init__(
        self,
        presenter: Presenter,
        clock: Callable[[], datetime.date] = datetime.date.today,
        rng: Optional[random.Random] = None,
        strip_accents: bool = False,
    ) -> None:
        self.presenter = presenter
        self.clock = clock
        self.rng = rng or random.Random()
        self.strip_accents = strip_accents

    def _review(self, card: Flashcard, deck_name: Optional[str] = None) -> Optional[CardOutcome]:
        """Ask, check, rate and reschedule one card. None if the answer was cancelled."""
        label = f"[{deck_name}] Q: {card.prompt}" if deck_name else f"Q: {card.prompt}"
        answer = self.presenter.prompt_for_free_text_answer(label)
        if answer is None:
            return None
        correct = card.check_answer(answer, strip_accents=self.strip_accents)
        self.presenter.display_message("Correct!" if correct else f"Wrong. Ans: {card.raw_answer}")
        quality = resolve_quality(self.presenter.prompt_for_quality_rating(), correct)
        card.apply_review_result(quality, today=self.clock())
        logger.info(
            "Reviewed %r correct=%s quality=%d -> %s",
            card.prompt, correct, quality, card.scheduling.summary(),
        )
        return CardOutcome(card=card, deck_name=deck_name, answer=answer, correct=correct, quality=quality)

    def quiz_deck(self, deck: Deck) -> SessionResult:
        """Every card once in random order; a cancelled answer ends the quiz."""
        result = SessionResult(mode=MODE_QUIZ, total=len(deck))
        if not deck.cards:
            self.presenter.display_message("Deck empty.")
            return result
        for card in deck.shuffled(self.rng):
            outcome = self._review(card)
            if outcome is None:
                result.cancelled = True
                break
            result.outcomes.append(outcome)
        self.presenter.display_message(f"Quiz over. {result.score_line()}")
        return result

    def review_due(self, collection: Collection) -> SessionResult:
        """Cards due today across all decks; a cancelled answer skips that card only."""
        groups = collection.due_cards(self.clock())
        result = SessionResult(mode=MODE_DUE, total=sum(len(cards) for _, cards in groups))
        if not groups:
            self.presenter.display_message("No cards due today. Nice!")
            return result
        for deck, cards in groups:
            for card in cards:
                outcome = self._review(card, deck_name=deck.name)
                if outcome is None:
                    result.cancelled = True
                    continue
                result.outcomes.append(outcome)
        self.presenter.display_message(f"Review session done. {result.score_line()}")
        return result

    def review_card(self, card: Flashcard, deck_name: Optional[str] = None) -> SessionResult:
        result = SessionResult(mode=MODE_SINGLE, total=1)
        outcome = self._review(card, deck_name=deck_name)
        if outcome is None:
            result.cancelled = True
        else:
            result.outcomes.append(outcome)
        return result
