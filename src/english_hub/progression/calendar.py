"""Calendar-day comparisons, login streaks and the activity calendar."""

from datetime import date, datetime, timedelta

import structlog
from pydantic import BaseModel

from english_hub.models.progress import UserData

logger = structlog.get_logger()

CALENDAR_DAYS = 35


def is_same_calendar_day(a: datetime, b: datetime) -> bool:
    """True when both timestamps fall on the same local calendar day."""
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_consecutive_day(now: datetime, previous: datetime) -> bool:
    """True when `previous` falls on the calendar day before `now`."""
    return is_same_calendar_day(now - timedelta(days=1), previous)


def update_login_streak(data: UserData, now: datetime) -> UserData:
    """Apply the load-time login streak rule.

    Logging in again on the same day changes nothing. Logging in the day
    after `last_login` extends the streak, any longer gap resets it to 1.
    """
    if is_same_calendar_day(data.last_login, now):
        return data

    if is_consecutive_day(now, data.last_login):
        streak = data.login_streak + 1
    else:
        streak = 1
    logger.info(
        "login_streak_updated",
        previous=data.login_streak,
        streak=streak,
    )
    return data.model_copy(update={"login_streak": streak, "last_login": now})


class CalendarDay(BaseModel):
    day: date
    count: int
    intensity: int


def _intensity(count: int) -> int:
    if count > 5:
        return 3
    if count > 2:
        return 2
    if count > 0:
        return 1
    return 0


def activity_calendar(
    data: UserData, today: datetime, days: int = CALENDAR_DAYS
) -> list[CalendarDay]:
    """Per-day activity counts for the last `days` days, oldest first."""
    counts: dict[date, int] = {}
    for log in data.logs:
        counts[log.date.date()] = counts.get(log.date.date(), 0) + 1

    start = today.date() - timedelta(days=days - 1)
    calendar = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        count = counts.get(day, 0)
        calendar.append(CalendarDay(day=day, count=count, intensity=_intensity(count)))
    return calendar
