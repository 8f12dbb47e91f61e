import datetime

from src.services.streak import as_aware, compute_streak, local_date


TODAY = datetime.date(2025, 3, 5)


def test_first_activity_starts_streak_at_one():
    assert compute_streak(0, None, TODAY) == (1, True)


def test_activity_the_day_after_increments():
    assert compute_streak(4, TODAY - datetime.timedelta(days=1), TODAY) == (5, True)


def test_second_activity_same_day_is_unchanged():
    assert compute_streak(4, TODAY, TODAY) == (4, False)


def test_gap_resets_to_one():
    assert compute_streak(12, TODAY - datetime.timedelta(days=3), TODAY) == (1, True)


def test_naive_datetimes_are_treated_as_utc():
    naive = datetime.datetime(2025, 3, 5, 23, 30)
    assert as_aware(naive).tzinfo == datetime.timezone.utc
    assert local_date(naive) == datetime.date(2025, 3, 5)
