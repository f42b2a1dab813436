"""flashcard-sm2: flashcard decks with SM-2 spaced-repetition scheduling.

The scheduling core (normalize, scheduling, models, session, storage) has no
user-interface code; ``console`` and ``cli`` are one terminal front end over it.
"""

__version__ = "0.1.0"

__all__ = [
    "normalize",
    "scheduling",
    "models",
    "session",
    "storage",
    "ingest",
    "report",
    "console",
    "cli",
]
