"""Terminal implementation of the Presenter boundary.

End-of-input (Ctrl-D) cancels any prompt. A blank answer to a prompt that
needs text also counts as cancelling it.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

from .models import Deck, Flashcard
from .report import card_table_lines, deck_list_lines


class ConsolePresenter:
    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output

    def _ask(self, prompt: str) -> Optional[str]:
        try:
            return self._input(prompt)
        except EOFError:
            self._output("")
            return None

    def _ask_text(self, prompt: str, default: Optional[str] = None) -> Optional[str]:
        suffix = f" [{default}]" if default else ""
        value = self._ask(f"{prompt}{suffix}: ")
        if value is None:
            return None
        value = value.strip()
        if not value:
            return default
        return value

    def prompt_for_deck_name(self, current: Optional[str] = None) -> Optional[str]:
        return self._ask_text("Deck name", default=current)

    def prompt_for_card_fields(self, current: Optional[Flashcard] = None) -> Optional[Tuple[str, str]]:
        prompt = self._ask_text("Question", default=current.prompt if current else None)
        if prompt is None:
            return None
        answers = self._ask_text(
            "Answer(s) (comma-separated)", default=current.raw_answer if current else None
        )
        if answers is None:
            return None
        return prompt, answers

    def prompt_for_free_text_answer(self, card_prompt: str) -> Optional[str]:
        # An empty answer is a wrong answer, not a cancel; only EOF cancels here.
        return self._ask(f"{card_prompt}\n> ")

    def prompt_for_quality_rating(self) -> Optional[str]:
        return self._ask("Rate quality (0-5) or leave empty to auto-rate: ")

    def confirm_destructive_action(self, description: str) -> bool:
        reply = self._ask(f"{description} [y/N]: ")
        return (reply or "").strip().lower() in ("y", "yes")

    def display_message(self, text: str) -> None:
        self._output(text)

    def display_card_table(self, deck: Deck) -> None:
        for line in card_table_lines(deck):
            self._output(line)

    def display_deck_list(self, decks: Sequence[Deck]) -> None:
        for line in deck_list_lines(decks):
            self._output(line)
