"""Date manipulation utilities"""

import calendar
import math
from datetime import date, datetime, time, timedelta
from typing import Tuple


def is_weekend(day: date) -> bool:
    """Saturday or Sunday"""
    return day.weekday() >= 5


def month_bounds(moment: datetime) -> Tuple[date, date]:
    """First and last calendar day of the month containing ``moment``"""
    last_day = calendar.monthrange(moment.year, moment.month)[1]
    return date(moment.year, moment.month, 1), date(moment.year, moment.month, last_day)


def days_until_month_end(now: datetime) -> int:
    """
    Whole days left between ``now`` and the last instant of its month.

    Partial days count as a full day, so 10:00 on the 30th of a 30-day month is 1.
    """
    _, last_day = month_bounds(now)
    end_of_month = datetime.combine(last_day, time.max, tzinfo=now.tzinfo)
    seconds = (end_of_month - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))
