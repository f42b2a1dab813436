"""Plain-text rendering of decks, card tables and session results."""

from __future__ import annotations

import datetime
from typing import List, Optional, Sequence

from .models import Collection, Deck
from .session import SessionResult

CARD_TABLE_HEADERS = ("#", "Question", "Answer", "Scheduling")


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def deck_list_lines(decks: Sequence[Deck]) -> List[str]:
    if not decks:
        return ["No decks yet."]
    return [f"{i:>3}. {d.name} ({len(d)})" for i, d in enumerate(decks, start=1)]


def card_table_rows(deck: Deck) -> List[tuple]:
    """One row per card, numbered from 1 as shown to the user."""
    return [
        (i, c.prompt, c.raw_answer, c.scheduling.summary())
        for i, c in enumerate(deck.cards, start=1)
    ]


def card_table_lines(deck: Deck, width: int = 30) -> List[str]:
    lines = [f"Deck: {deck.name} ({len(deck)} cards)"]
    if not deck.cards:
        lines.append("  (no cards)")
        return lines
    fmt = f"{{:>3}}  {{:<{width}}}  {{:<{width}}}  {{}}"
    lines.append(fmt.format(*CARD_TABLE_HEADERS))
    for num, prompt, answer, sched in card_table_rows(deck):
        lines.append(fmt.format(num, _truncate(prompt, width), _truncate(answer, width), sched))
    return lines


def due_overview_lines(collection: Collection, as_of: Optional[datetime.date] = None) -> List[str]:
    as_of = as_of or datetime.date.today()
    groups = collection.due_cards(as_of)
    if not groups:
        return [f"No cards due on {as_of.isoformat()}."]
    lines = [f"Due on {as_of.isoformat()}:"]
    for deck, cards in groups:
        lines.append(f"  {deck.name:<20} {len(cards):>4}")
    lines.append(f"  {'total':<20} {sum(len(c) for _, c in groups):>4}")
    return lines


def session_summary_lines(result: SessionResult) -> List[str]:
    lines = [
        f"Session ({result.mode}) summary:",
        f"  Reviewed: {result.reviewed}/{result.total}",
        f"  Correct:  {result.correct}",
    ]
    if result.cancelled:
        lines.append("  (some cards were skipped or the session was stopped early)")
    return lines
