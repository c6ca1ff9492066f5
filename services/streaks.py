"""Day-streak calculation shared by mood and journal statistics."""

from datetime import date, datetime
from typing import Iterable


def day_streak(timestamps: Iterable[datetime], today: date) -> int:
    """
    Count consecutive calendar days with at least one entry, ending today.

    Several entries on the same day count once. A streak that ended
    yesterday is 0.
    """
    days = {ts.date() for ts in timestamps}
    streak = 0
    while date.fromordinal(today.toordinal() - streak) in days:
        streak += 1
    return streak
