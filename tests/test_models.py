"""Tests for Flashcard, Deck and Collection."""

import datetime
import random

import pytest

from flashcard_sm2.errors import ValidationError
from flashcard_sm2.models import Collection, Deck, Flashcard

D = datetime.date(2024, 3, 1)


def card(prompt="2+2=?", answers="4"):
    return Flashcard.create(prompt, answers, today=D)


class TestFlashcardCreate:
    """Test card construction and validation."""

    def test_trims_fields(self):
        c = Flashcard.create("  2+2=? ", " 4 ", today=D)
        assert c.prompt == "2+2=?"
        assert c.answers == ["4"]
        assert c.scheduling.next_review == D

    def test_splits_answers(self):
        c = card("Capital of France?", "Paris, paris city ,Lutetia")
        assert c.answers == ["Paris", "paris city", "Lutetia"]
        assert c.raw_answer == "Paris, paris city, Lutetia"

    def test_drops_empty_variants(self):
        assert card("Q", "a,,b,").answers == ["a", "b"]

    @pytest.mark.parametrize("prompt,answers", [("", "4"), ("   ", "4"), ("Q", ""), ("Q", "  "), (None, "4"), ("Q", None)])
    def test_rejects_empty_fields(self, prompt, answers):
        with pytest.raises(ValidationError):
            Flashcard.create(prompt, answers)

    def test_rejects_only_commas(self):
        with pytest.raises(ValidationError, match="accepted answer"):
            Flashcard.create("Q", " , ,")

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            Flashcard.create("", "")


class TestFlashcardBehaviour:
    """Test answer checking and review delegation."""

    def test_check_answer(self):
        c = card("Capital of France?", "Paris, France")
        assert c.check_answer("  paris ")
        assert c.check_answer("FRANCE!")
        assert not c.check_answer("Lyon")
        assert not c.check_answer(None)

    def test_check_answer_strip_accents(self):
        c = card("Capital of Colombia?", "Bogotá")
        assert not c.check_answer("bogota")
        assert c.check_answer("bogota", strip_accents=True)

    def test_apply_review_result(self):
        c = card()
        c.apply_review_result(5, today=D)
        assert c.scheduling.repetitions == 1
        assert c.scheduling.last_review == D
        assert not c.is_due(D)


class TestDeck:
    """Test deck operations."""

    def test_create_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            Deck.create("  ")

    def test_add_and_get(self):
        deck = Deck.create("Math")
        deck.add_card(card("1+1", "2"))
        deck.add_card(card("2+2", "4"))
        assert len(deck) == 2
        assert deck.get_card(1).prompt == "2+2"
        assert [c.prompt for c in deck] == ["1+1", "2+2"]

    def test_remove_card(self):
        deck = Deck("Math", [card("1+1", "2"), card("2+2", "4")])
        removed = deck.remove_card(0)
        assert removed.prompt == "1+1"
        assert [c.prompt for c in deck.cards] == ["2+2"]

    @pytest.mark.parametrize("index", [-1, 2, 99])
    def test_remove_out_of_range_leaves_deck_unchanged(self, index):
        deck = Deck("Math", [card("1+1", "2"), card("2+2", "4")])
        before = list(deck.cards)
        with pytest.raises(ValidationError):
            deck.remove_card(index)
        assert deck.cards == before

    def test_replace_card_resets_schedule(self):
        deck = Deck("Math", [card("1+1", "2")])
        deck.cards[0].apply_review_result(5, today=D)
        deck.replace_card(0, card("1+1", "two, 2"))
        assert deck.cards[0].answers == ["two", "2"]
        assert deck.cards[0].scheduling.repetitions == 0

    def test_rename(self):
        deck = Deck.create("Math")
        deck.rename("  Arithmetic ")
        assert deck.name == "Arithmetic"

    def test_rename_rejects_empty(self):
        deck = Deck.create("Math")
        with pytest.raises(ValidationError):
            deck.rename("")
        assert deck.name == "Math"

    def test_shuffled_keeps_deck_order(self):
        deck = Deck("Math", [card(str(i), str(i)) for i in range(10)])
        order = deck.shuffled(random.Random(3))
        assert sorted(c.prompt for c in order) == sorted(c.prompt for c in deck)
        assert [c.prompt for c in deck] == [str(i) for i in range(10)]

    def test_cards_is_live_sequence(self):
        deck = Deck.create("Math")
        cards = deck.cards
        deck.add_card(card())
        assert len(cards) == 1


class TestCollection:
    """Test collection-wide operations."""

    def test_duplicate_names_allowed(self):
        col = Collection()
        first = col.create_deck("Spanish")
        second = col.create_deck("Spanish")
        assert len(col) == 2
        assert col.find_deck("Spanish") is first
        assert col.index_of(second) == 1

    def test_find_missing(self):
        assert Collection().find_deck("nope") is None

    def test_remove_deck(self):
        col = Collection()
        col.create_deck("A")
        col.create_deck("B")
        removed = col.remove_deck(0)
        assert removed.name == "A"
        assert [d.name for d in col] == ["B"]

    def test_remove_deck_out_of_range(self):
        col = Collection()
        col.create_deck("A")
        with pytest.raises(ValidationError):
            col.remove_deck(3)
        assert len(col) == 1

    def test_due_cards_grouped_in_order(self):
        col = Collection()
        a = col.create_deck("A")
        b = col.create_deck("B")
        c = col.create_deck("C")
        a.add_card(card("a1", "1"))
        a.add_card(card("a2", "2"))
        b.add_card(card("b1", "1"))
        c.add_card(card("c1", "1"))
        a.cards[0].apply_review_result(5, today=D)  # due tomorrow
        b.cards[0].apply_review_result(5, today=D)

        groups = col.due_cards(D)
        assert [(deck.name, [x.prompt for x in cards]) for deck, cards in groups] == [
            ("A", ["a2"]),
            ("C", ["c1"]),
        ]
        assert col.due_count(D) == 2
        assert col.due_count(D + datetime.timedelta(days=1)) == 4

    def test_card_count(self):
        col = Collection([Deck("A", [card()]), Deck("B", [card(), card()])])
        assert col.card_count() == 3
