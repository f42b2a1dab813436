"""SM-2 scheduling state for a single card.

The update follows SuperMemo-2:
- quality is clamped to 0..5; 3 and above is a pass.
- passes grow the interval 1 -> 6 -> round(interval * ease).
- fails reset repetitions and schedule the card for tomorrow.
- ease moves by 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02), never below 1.3.

Intervals are rounded half up, so 34.5 days becomes 35, and capped at
MAXIMUM_INTERVAL_DAYS.
"""

from __future__ import annotations

import datetime
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_EASE_FACTOR = 2.5
MINIMUM_EASE_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1
# 100 years; also bounded by the last date datetime can represent.
MAXIMUM_INTERVAL_DAYS = 36500


def clamp_quality(value: int) -> int:
    return max(MIN_QUALITY, min(MAX_QUALITY, int(value)))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ease_delta(quality: int) -> float:
    miss = MAX_QUALITY - quality
    return 0.1 - miss * (0.08 + miss * 0.02)


@dataclass
class SchedulingState:
    """SM-2 parameters of one card.

    Attributes:
        ease_factor: Interval multiplier, floored at MINIMUM_EASE_FACTOR
        repetitions: Consecutive passing reviews
        interval_days: Days between last_review and next_review
        next_review: Date the card becomes due
        last_review: Date of the latest review, None until reviewed
    """
    ease_factor: float = DEFAULT_EASE_FACTOR
    repetitions: int = 0
    interval_days: int = 0
    next_review: datetime.date = field(default_factory=datetime.date.today)
    last_review: Optional[datetime.date] = None

    @classmethod
    def new(cls, today: Optional[datetime.date] = None) -> "SchedulingState":
        """Fresh state, due immediately."""
        return cls(next_review=today or datetime.date.today())

    def update(self, quality: int, today: Optional[datetime.date] = None) -> None:
        today = today or datetime.date.today()
        q = clamp_quality(quality)

        if q >= PASSING_QUALITY:
            if self.repetitions == 0:
                interval = FIRST_INTERVAL_DAYS
            elif self.repetitions == 1:
                interval = SECOND_INTERVAL_DAYS
            else:
                interval = round_half_up(self.interval_days * self.ease_factor)
            repetitions = self.repetitions + 1
        else:
            repetitions = 0
            interval = LAPSE_INTERVAL_DAYS

        interval = min(interval, MAXIMUM_INTERVAL_DAYS, (datetime.date.max - today).days)
        ease = max(MINIMUM_EASE_FACTOR, self.ease_factor + ease_delta(q))
        next_review = today + datetime.timedelta(days=interval)

        self.last_review = today
        self.interval_days = interval
        self.repetitions = repetitions
        self.ease_factor = ease
        self.next_review = next_review
        logger.debug("SM-2 update q=%d -> %s", q, self.summary())

    def is_due(self, as_of: Optional[datetime.date] = None) -> bool:
        return self.next_review <= (as_of or datetime.date.today())

    def days_until_due(self, as_of: Optional[datetime.date] = None) -> int:
        """Days until the card is due; zero or negative when it already is."""
        return (self.next_review - (as_of or datetime.date.today())).days

    def summary(self) -> str:
        return (
            f"Next={self.next_review.isoformat()} | EF={self.ease_factor:.2f} | "
            f"rep={self.repetitions} | int={self.interval_days}d"
        )
