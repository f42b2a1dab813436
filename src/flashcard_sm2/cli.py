"""CLI entrypoint for flashcard-sm2.

Usage:
  flashcard-sm2 create-deck "Capitals"
  flashcard-sm2 add-card Capitals --prompt "Capital of France?" --answers "Paris"
  flashcard-sm2 review
"""

from __future__ import annotations

import argparse
import csv
import datetime
import json
import logging
import os
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .console import ConsolePresenter
from .errors import PersistenceError, ValidationError
from .ingest import export_deck, import_into_deck
from .models import Collection, Deck, Flashcard
from .report import due_overview_lines, session_summary_lines
from .session import Presenter, ReviewSession, SessionResult
from .storage import JsonFileStorage, SnapshotStorage, load_or_empty

logger = logging.getLogger(__name__)

STORE_ENV_VAR = "FLASHCARD_SM2_STORE"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def default_config() -> dict:
    return {
        "store_path": "decks_sm2.json",
        "normalization": {"strip_accents": False},
        "log_level": "WARNING",
    }


def load_config(path: str | Path) -> dict:
    cfg = default_config()
    path = Path(path)
    if not path.exists():
        return cfg
    user = json.loads(path.read_text(encoding="utf-8"))
    for key, value in user.items():
        if isinstance(value, dict) and isinstance(cfg.get(key), dict):
            cfg[key] = {**cfg[key], **value}
        else:
            cfg[key] = value
    return cfg


def resolve_store_path(args: argparse.Namespace, cfg: dict) -> Path:
    """--store wins, then the environment variable, then the config file."""
    return Path(args.store or os.environ.get(STORE_ENV_VAR) or cfg["store_path"])


def configure_logging(args: argparse.Namespace, cfg: dict) -> None:
    if args.verbose:
        level = logging.DEBUG if args.verbose > 1 else logging.INFO
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, str(cfg.get("log_level", "WARNING")).upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)


@dataclass
class App:
    collection: Collection
    presenter: Presenter
    session: ReviewSession
    dirty: bool = False


def resolve_deck(collection: Collection, ref: str) -> Deck:
    """Deck by name (first match) or by 1-based position written as ``#N``."""
    if ref.startswith("#") and ref[1:].isdigit():
        return collection.get_deck(int(ref[1:]) - 1)
    deck = collection.find_deck(ref)
    if deck is None:
        raise ValidationError(f"No deck named {ref!r}")
    return deck


def _report_session(app: App, result: SessionResult) -> None:
    if result.reviewed:
        app.dirty = True
    for line in session_summary_lines(result):
        app.presenter.display_message(line)


def cmd_decks(app: App, args: argparse.Namespace) -> int:
    app.presenter.display_deck_list(app.collection.decks)
    return 0


def cmd_create_deck(app: App, args: argparse.Namespace) -> int:
    name = args.name if args.name is not None else app.presenter.prompt_for_deck_name()
    if name is None:
        app.presenter.display_message("Cancelled.")
        return 0
    deck = app.collection.create_deck(name)
    app.dirty = True
    app.presenter.display_message(f"Created deck '{deck.name}'.")
    return 0


def cmd_rename_deck(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    name = args.name if args.name is not None else app.presenter.prompt_for_deck_name(deck.name)
    if name is None:
        app.presenter.display_message("Cancelled.")
        return 0
    old = deck.name
    deck.rename(name)
    app.dirty = True
    app.presenter.display_message(f"Renamed '{old}' to '{deck.name}'.")
    return 0


def cmd_delete_deck(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    if not args.yes and not app.presenter.confirm_destructive_action(
        f"Delete deck '{deck.name}' and its {len(deck)} cards?"
    ):
        app.presenter.display_message("Cancelled.")
        return 0
    app.collection.remove_deck(app.collection.index_of(deck))
    app.dirty = True
    app.presenter.display_message(f"Deleted deck '{deck.name}'.")
    return 0


def cmd_cards(app: App, args: argparse.Namespace) -> int:
    app.presenter.display_card_table(resolve_deck(app.collection, args.deck))
    return 0


def cmd_add_card(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    if args.prompt is not None and args.answers is not None:
        fields = (args.prompt, args.answers)
    else:
        fields = app.presenter.prompt_for_card_fields()
    if fields is None:
        app.presenter.display_message("Cancelled.")
        return 0
    card = Flashcard.create(*fields, today=app.session.clock())
    deck.add_card(card)
    app.dirty = True
    app.presenter.display_message(f"Added card #{len(deck)} to '{deck.name}'.")
    return 0


def cmd_edit_card(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    current = deck.get_card(args.number - 1)
    fields = app.presenter.prompt_for_card_fields(current)
    if fields is None:
        app.presenter.display_message("Cancelled.")
        return 0
    deck.replace_card(args.number - 1, Flashcard.create(*fields, today=app.session.clock()))
    app.dirty = True
    app.presenter.display_message(f"Updated card #{args.number}; its schedule was reset.")
    return 0


def cmd_remove_card(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    card = deck.remove_card(args.number - 1)
    app.dirty = True
    app.presenter.display_message(f"Removed card '{card.prompt}' from '{deck.name}'.")
    return 0


def cmd_quiz(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    _report_session(app, app.session.quiz_deck(deck))
    return 0


def cmd_review(app: App, args: argparse.Namespace) -> int:
    _report_session(app, app.session.review_due(app.collection))
    return 0


def cmd_review_card(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    card = deck.get_card(args.number - 1)
    result = app.session.review_card(card)
    if result.reviewed:
        app.dirty = True
    return 0


def cmd_due(app: App, args: argparse.Namespace) -> int:
    as_of = args.as_of or app.session.clock()
    for line in due_overview_lines(app.collection, as_of):
        app.presenter.display_message(line)
    return 0


def cmd_import_csv(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    try:
        result = import_into_deck(deck, args.path, today=app.session.clock())
    except FileNotFoundError:
        app.presenter.display_message(f"Error: Input file not found: {args.path}")
        return 1
    except (OSError, csv.Error, ValueError) as exc:
        app.presenter.display_message(f"Error: {exc}")
        return 1
    if result.cards:
        app.dirty = True
    app.presenter.display_message(f"Imported {len(result.cards)} cards into '{deck.name}'.")
    for row in result.rejected:
        app.presenter.display_message(f"  skipped line {row.line}: {row.reason}")
    return 0


def cmd_export_csv(app: App, args: argparse.Namespace) -> int:
    deck = resolve_deck(app.collection, args.deck)
    try:
        count = export_deck(deck, args.path)
    except OSError as exc:
        app.presenter.display_message(f"Error: cannot write {args.path}: {exc}")
        return 1
    app.presenter.display_message(f"Wrote {count} cards to {args.path}")
    return 0


def cmd_save(app: App, args: argparse.Namespace) -> int:
    app.dirty = True
    return 0


def _iso_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flashcard-sm2", description="Flashcards with SM-2 scheduling")
    p.add_argument(
        "--config",
        default="flashcard-sm2.json",
        help="Path to config JSON (optional; defaults will be used if missing)",
    )
    p.add_argument("--store", help=f"Snapshot file (overrides ${STORE_ENV_VAR} and config)")
    p.add_argument("--seed", type=int, help="Seed for quiz shuffling")
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("decks", help="List decks with card counts").set_defaults(func=cmd_decks)

    create = sub.add_parser("create-deck", help="Create a deck")
    create.add_argument("name", nargs="?", help="Deck name (prompted if omitted)")
    create.set_defaults(func=cmd_create_deck)

    rename = sub.add_parser("rename-deck", help="Rename a deck")
    rename.add_argument("deck", help="Deck name or #N")
    rename.add_argument("name", nargs="?", help="New name (prompted if omitted)")
    rename.set_defaults(func=cmd_rename_deck)

    delete = sub.add_parser("delete-deck", help="Delete a deck and all its cards")
    delete.add_argument("deck", help="Deck name or #N")
    delete.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    delete.set_defaults(func=cmd_delete_deck)

    cards = sub.add_parser("cards", help="Show the cards of a deck")
    cards.add_argument("deck", help="Deck name or #N")
    cards.set_defaults(func=cmd_cards)

    add = sub.add_parser("add-card", help="Add a card to a deck")
    add.add_argument("deck", help="Deck name or #N")
    add.add_argument("--prompt", help="Question text")
    add.add_argument("--answers", help="Accepted answers, comma-separated")
    add.set_defaults(func=cmd_add_card)

    for name, func, help_text in (
        ("edit-card", cmd_edit_card, "Replace a card (resets its schedule)"),
        ("remove-card", cmd_remove_card, "Remove a card permanently"),
        ("review-card", cmd_review_card, "Review a single card"),
    ):
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("deck", help="Deck name or #N")
        sp.add_argument("number", type=int, help="Card number as shown by 'cards'")
        sp.set_defaults(func=func)

    quiz = sub.add_parser("quiz", help="Quiz every card of a deck in random order")
    quiz.add_argument("deck", help="Deck name or #N")
    quiz.set_defaults(func=cmd_quiz)

    sub.add_parser("review", help="Review cards due today across all decks").set_defaults(func=cmd_review)

    due = sub.add_parser("due", help="Count due cards per deck")
    due.add_argument("--as-of", type=_iso_date, help="Date to check (YYYY-MM-DD, default today)")
    due.set_defaults(func=cmd_due)

    imp = sub.add_parser("import-csv", help="Import cards from a front,back CSV")
    imp.add_argument("deck", help="Deck name or #N")
    imp.add_argument("path", help="CSV file")
    imp.set_defaults(func=cmd_import_csv)

    exp = sub.add_parser("export-csv", help="Export a deck with scheduling data to CSV")
    exp.add_argument("deck", help="Deck name or #N")
    exp.add_argument("path", help="Output CSV file")
    exp.set_defaults(func=cmd_export_csv)

    sub.add_parser("save", help="Write the snapshot file").set_defaults(func=cmd_save)

    return p


def main(
    argv: List[str] | None = None,
    presenter: Optional[Presenter] = None,
    storage: Optional[SnapshotStorage] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = load_config(args.config)
    except (OSError, ValueError) as exc:
        parser.error(f"cannot read config {args.config}: {exc}")
    configure_logging(args, cfg)

    presenter = presenter or ConsolePresenter()
    storage = storage or JsonFileStorage(resolve_store_path(args, cfg))
    collection, load_error = load_or_empty(storage)
    if load_error is not None:
        presenter.display_message(f"Failed to load data: {load_error}")

    session = ReviewSession(
        presenter,
        rng=random.Random(args.seed),
        strip_accents=bool(cfg.get("normalization", {}).get("strip_accents", False)),
    )
    app = App(collection=collection, presenter=presenter, session=session)

    try:
        code = args.func(app, args)
    except ValidationError as exc:
        presenter.display_message(f"Error: {exc}")
        return 1

    if app.dirty:
        try:
            storage.save(app.collection)
        except PersistenceError as exc:
            presenter.display_message(f"Save failed: {exc}")
            return 1
    return code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
