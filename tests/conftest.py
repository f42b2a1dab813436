"""Shared test doubles."""

import datetime

import pytest

TODAY = datetime.date(2024, 3, 1)


class ScriptedPresenter:
    """Presenter that replays canned replies and records everything shown."""

    def __init__(self, answers=(), ratings=(), deck_names=(), card_fields=(), confirm=True):
        self.answers = list(answers)
        self.ratings = list(ratings)
        self.deck_names = list(deck_names)
        self.card_fields = list(card_fields)
        self.confirm = confirm
        self.prompts = []
        self.messages = []
        self.tables = []
        self.deck_lists = []
        self.confirmations = []

    @staticmethod
    def _next(queue):
        return queue.pop(0) if queue else None

    def prompt_for_deck_name(self, current=None):
        return self._next(self.deck_names)

    def prompt_for_card_fields(self, current=None):
        return self._next(self.card_fields)

    def prompt_for_free_text_answer(self, card_prompt):
        self.prompts.append(card_prompt)
        return self._next(self.answers)

    def prompt_for_quality_rating(self):
        return self._next(self.ratings)

    def confirm_destructive_action(self, description):
        self.confirmations.append(description)
        return self.confirm

    def display_message(self, text):
        self.messages.append(text)

    def display_card_table(self, deck):
        self.tables.append(deck)

    def display_deck_list(self, decks):
        self.deck_lists.append(list(decks))


@pytest.fixture
def today():
    return TODAY
