"""Activity streak calculation.

A streak is a run of consecutive calendar days (application timezone) with at
least one logged activity. The current streak may end today or yesterday;
anything older means it is broken.
"""
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Set

from services.timezone_service import app_timezone, local_today, to_local_date

# (minimum current streak, multiplier), checked top-down
STREAK_MULTIPLIERS = (
    (30, 3.0),
    (14, 2.5),
    (7, 2.0),
    (3, 1.5),
)


@dataclass(frozen=True)
class StreakInfo:
    current: int = 0
    longest: int = 0
    multiplier: float = 1.0

    def to_dict(self) -> dict:
        return asdict(self)


def streak_multiplier(current: int) -> float:
    for minimum, multiplier in STREAK_MULTIPLIERS:
        if current >= minimum:
            return multiplier
    return 1.0


def _run_ending_at(days: Set[date], end: date) -> int:
    length = 0
    day = end
    while day in days:
        length += 1
        day -= timedelta(days=1)
    return length


def longest_run(days: Set[date]) -> int:
    longest = 0
    for day in days:
        # Only count from the first day of each run
        if day - timedelta(days=1) in days:
            continue
        length = 0
        while day + timedelta(days=length) in days:
            length += 1
        longest = max(longest, length)
    return longest


def compute_streak_from_days(days: Iterable[date], today: date) -> StreakInfo:
    day_set = {d for d in days if d <= today}
    if not day_set:
        return StreakInfo()

    if today in day_set:
        current = _run_ending_at(day_set, today)
    else:
        current = _run_ending_at(day_set, today - timedelta(days=1))

    longest = max(longest_run(day_set), current)
    return StreakInfo(current=current, longest=longest, multiplier=streak_multiplier(current))


def compute_streak(timestamps: Iterable[datetime], today: Optional[date] = None,
                   tz: Optional[str] = None) -> StreakInfo:
    """Current streak, longest streak and XP multiplier for a set of activity times.

    Args:
        timestamps: Activity creation times (UTC; naive values are UTC)
        today: Reference day; defaults to today in ``tz``
        tz: Timezone used to turn instants into days; defaults to APP_TIMEZONE

    Returns:
        StreakInfo. Activities dated after ``today`` are ignored.
    """
    tz = tz or app_timezone()
    if today is None:
        today = local_today(tz)
    days = {to_local_date(ts, tz) for ts in timestamps}
    return compute_streak_from_days(days, today)
