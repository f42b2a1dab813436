"""Exception types shared across the package.

Cancellation and empty input are never exceptions; callers receive ``None``.
"""

from __future__ import annotations


class FlashcardError(Exception):
    """Base class for all flashcard-sm2 errors."""


class ValidationError(FlashcardError, ValueError):
    """Invalid user-supplied data; raised before any state is mutated."""


class PersistenceError(FlashcardError):
    """Snapshot storage could not be read, written or decoded."""
