"""Answer normalization and matching.

Policy:
- Apply NFC early for consistency.
- For matching: lowercase, drop everything except letters (with their combining
  marks), digits, whitespace, apostrophes and hyphens, collapse whitespace, trim.
- Accents are kept unless ``strip_accents`` is requested ("parís" != "paris").
"""

from __future__ import annotations

import re
import unicodedata as ud
from typing import Iterable, List, Optional

_WS_RE = re.compile(r"\s+")
_ANSWER_SPLIT_RE = re.compile(r"\s*,\s*")
_KEEP_PUNCT = {"'", "-"}
_MARK_CATEGORIES = {"Mn", "Mc"}


def normalize_text_nfc(text: Optional[str]) -> str:
    """Apply Unicode NFC to input text (safe for None-like inputs)."""
    if text is None:
        return ""
    return ud.normalize("NFC", str(text))


def strip_accents(text: str) -> str:
    """Remove combining marks by NFD decomposition then recompose without marks."""
    text = normalize_text_nfc(text)
    decomposed = ud.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if ud.category(ch) != "Mn")
    return ud.normalize("NFC", stripped)


# normalize_answer takes a keyword of the same name.
_strip_accents = strip_accents


def _keep_char(ch: str) -> bool:
    # Combining marks (Mn, Mc) are kept: Indic vowel signs are part of the word.
    return (
        ch.isalpha()
        or ch.isdecimal()
        or ch.isspace()
        or ch in _KEEP_PUNCT
        or ud.category(ch) in _MARK_CATEGORIES
    )


def normalize_answer(text: Optional[str], strip_accents: bool = False) -> str:
    """Normalize a free-text answer for comparison.

    Steps: NFC -> lowercase -> (optional accent strip) -> drop disallowed
    characters -> collapse whitespace and trim.
    """
    if not text:
        return ""
    t = normalize_text_nfc(text).lower()
    if strip_accents:
        t = _strip_accents(t)
    t = "".join(ch for ch in t if _keep_char(ch))
    return _WS_RE.sub(" ", t).strip()


def split_answers(raw: Optional[str]) -> List[str]:
    """Split a comma-separated answer field into trimmed, non-empty variants."""
    if not raw:
        return []
    return [part.strip() for part in _ANSWER_SPLIT_RE.split(raw) if part.strip()]


def matches(
    user_input: Optional[str],
    accepted_answers: Iterable[str],
    strip_accents: bool = False,
) -> bool:
    """Return True if the input equals any accepted answer after normalization."""
    if user_input is None:
        return False
    given = normalize_answer(user_input, strip_accents=strip_accents)
    if not given:
        return False
    return any(
        normalize_answer(a, strip_accents=strip_accents) == given for a in accepted_answers
    )
