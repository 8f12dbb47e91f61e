"""Consecutive-day practice streak.

Days are calendar days in ``settings.TIMEZONE``. The streak is only ever
corrected when the user is active again, never on a schedule.
"""

from __future__ import annotations

import datetime
from zoneinfo import ZoneInfo

from src.config.manager import settings


def app_timezone() -> ZoneInfo:
    return ZoneInfo(settings.TIMEZONE)


def as_aware(moment: datetime.datetime) -> datetime.datetime:
    # SQLite hands back naive datetimes; everything we store is UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.timezone.utc)
    return moment


def local_date(moment: datetime.datetime) -> datetime.date:
    return as_aware(moment).astimezone(app_timezone()).date()


def compute_streak(
    current_streak: int, last_activity_date: datetime.date | None, today: datetime.date
) -> tuple[int, bool]:
    """Return ``(new_streak, changed)`` for an activity on ``today``.

    Same day as the last activity: unchanged. Exactly the day before: +1.
    Anything else (including no previous activity): reset to 1.
    """
    if last_activity_date == today:
        return current_streak, False
    if last_activity_date is not None and last_activity_date == today - datetime.timedelta(days=1):
        return current_streak + 1, True
    return 1, True
