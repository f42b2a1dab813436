"""Tests for the SM-2 scheduling state."""

import datetime

import pytest

from flashcard_sm2.scheduling import (
    MAXIMUM_INTERVAL_DAYS,
    MINIMUM_EASE_FACTOR,
    SchedulingState,
    clamp_quality,
    ease_delta,
    round_half_up,
)

D = datetime.date(2024, 3, 1)


def days(n):
    return datetime.timedelta(days=n)


class TestNewState:
    """Test initial values."""

    def test_defaults(self):
        s = SchedulingState.new(D)
        assert s.ease_factor == 2.5
        assert s.repetitions == 0
        assert s.interval_days == 0
        assert s.next_review == D
        assert s.last_review is None

    def test_due_immediately(self):
        s = SchedulingState.new(D)
        assert s.is_due(D)
        assert not s.is_due(D - days(1))

    def test_summary(self):
        assert SchedulingState.new(D).summary() == "Next=2024-03-01 | EF=2.50 | rep=0 | int=0d"


class TestIntervals:
    """Test interval growth on passing reviews."""

    def test_first_pass_is_one_day(self):
        s = SchedulingState.new(D)
        s.update(3, today=D)
        assert s.interval_days == 1
        assert s.repetitions == 1
        assert s.next_review == D + days(1)

    def test_second_pass_is_six_days(self):
        s = SchedulingState(repetitions=1, interval_days=1, next_review=D)
        s.update(4, today=D)
        assert s.interval_days == 6
        assert s.repetitions == 2

    def test_later_pass_multiplies_by_previous_ease(self):
        s = SchedulingState(ease_factor=2.5, repetitions=2, interval_days=6, next_review=D)
        s.update(4, today=D)
        assert s.interval_days == 15
        assert s.repetitions == 3
        assert s.ease_factor == pytest.approx(2.5)

    def test_interval_rounds_half_up(self):
        """Test that 5 * 2.5 = 12.5 becomes 13, not banker's 12."""
        s = SchedulingState(ease_factor=2.5, repetitions=2, interval_days=5, next_review=D)
        s.update(5, today=D)
        assert s.interval_days == 13

    def test_three_perfect_reviews(self):
        """Test that ease grows by 0.1 per perfect review and feeds the third interval."""
        s = SchedulingState.new(D)
        intervals = []
        for _ in range(3):
            s.update(5, today=D)
            intervals.append(s.interval_days)
        # third interval: round(6 * 2.7)
        assert intervals == [1, 6, 16]
        assert s.ease_factor == pytest.approx(2.8)


class TestFailures:
    """Test resets on failing reviews."""

    @pytest.mark.parametrize("quality", [0, 1, 2])
    def test_fail_resets(self, quality):
        s = SchedulingState(ease_factor=2.0, repetitions=4, interval_days=40, next_review=D)
        s.update(quality, today=D)
        assert s.repetitions == 0
        assert s.interval_days == 1
        assert s.next_review == D + days(1)

    def test_fail_lowers_ease(self):
        s = SchedulingState(ease_factor=2.0, repetitions=4, interval_days=40, next_review=D)
        s.update(1, today=D)
        assert s.ease_factor == pytest.approx(1.46)


class TestEaseFactor:
    """Test ease adjustments and the floor."""

    @pytest.mark.parametrize(
        "quality,delta",
        [(5, 0.1), (4, 0.0), (3, -0.14), (2, -0.32), (1, -0.54), (0, -0.8)],
    )
    def test_delta_table(self, quality, delta):
        assert ease_delta(quality) == pytest.approx(delta)

    @pytest.mark.parametrize("quality", range(-3, 9))
    def test_never_below_floor(self, quality):
        s = SchedulingState(ease_factor=1.35, next_review=D)
        for _ in range(5):
            s.update(quality, today=D)
            assert s.ease_factor >= MINIMUM_EASE_FACTOR

    def test_no_ceiling(self):
        s = SchedulingState.new(D)
        for _ in range(20):
            s.update(5, today=D)
        assert s.ease_factor == pytest.approx(4.5)


class TestQualityClamping:
    """Test out-of-range quality handling."""

    def test_clamp(self):
        assert clamp_quality(9) == 5
        assert clamp_quality(-2) == 0
        assert clamp_quality(3) == 3

    def test_high_quality_treated_as_five(self):
        s = SchedulingState.new(D)
        s.update(42, today=D)
        assert s.ease_factor == pytest.approx(2.6)

    def test_negative_quality_treated_as_zero(self):
        s = SchedulingState.new(D)
        s.update(-7, today=D)
        assert s.repetitions == 0
        assert s.ease_factor == pytest.approx(1.7)


class TestDates:
    """Test review dates and due checks."""

    @pytest.mark.parametrize("quality", range(0, 6))
    def test_next_review_is_last_plus_interval(self, quality):
        s = SchedulingState(ease_factor=2.1, repetitions=3, interval_days=10, next_review=D)
        s.update(quality, today=D + days(3))
        assert s.last_review == D + days(3)
        assert s.next_review == s.last_review + days(s.interval_days)

    def test_is_due_boundary(self):
        s = SchedulingState.new(D)
        s.update(5, today=D)
        assert not s.is_due(D)
        assert s.is_due(D + days(1))
        assert s.is_due(D + days(30))

    def test_days_until_due(self):
        s = SchedulingState(next_review=D + days(4))
        assert s.days_until_due(D) == 4
        assert s.days_until_due(D + days(6)) == -2

    def test_repeated_perfect_reviews_stay_representable(self):
        """Test that intervals are capped instead of running past the last date."""
        s = SchedulingState.new(D)
        for _ in range(20):
            s.update(5, today=D)
            assert s.next_review == s.last_review + days(s.interval_days)
        assert s.interval_days == MAXIMUM_INTERVAL_DAYS
        assert s.repetitions == 20
        assert s.ease_factor == pytest.approx(4.5)

    def test_interval_capped_at_last_date(self):
        near_end = datetime.date.max - days(10)
        s = SchedulingState(ease_factor=2.5, repetitions=2, interval_days=6, next_review=near_end)
        s.update(4, today=near_end)
        assert s.interval_days == 10
        assert s.next_review == datetime.date.max

    def test_deterministic(self):
        a = SchedulingState(ease_factor=2.2, repetitions=2, interval_days=7, next_review=D)
        b = SchedulingState(ease_factor=2.2, repetitions=2, interval_days=7, next_review=D)
        a.update(4, today=D)
        b.update(4, today=D)
        assert a == b


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(15.4) == 15
    assert round_half_up(16.2) == 16
