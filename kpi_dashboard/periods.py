"""
Period resolution: which monthly or weekly buckets of a year may be scored.

Every function takes `today` explicitly so results are reproducible.
"""

import logging
from datetime import date

from .config import CAPTURE_CLOSING_DAY, MODE_DEFINITIVE, MODE_REAL_TIME, N_MONTHS
from .utils import value_or_zero
from .weekly import year_week_map

logger = logging.getLogger(__name__)


def find_last_index_with_data(monthly_progress: list | None, monthly_goals: list | None) -> int:
    """Rightmost index where goal or progress is non-zero, or -1."""
    length = max(len(monthly_progress or []), len(monthly_goals or []))
    for idx in range(length - 1, -1, -1):
        if value_or_zero(monthly_progress, idx) != 0 or value_or_zero(monthly_goals, idx) != 0:
            return idx
    return -1


def resolve_limit_index(
    year: int,
    mode: str,
    today: date,
    monthly_progress: list | None = None,
    monthly_goals: list | None = None,
) -> int:
    """Return the last month index (0-11) that may be scored, or -1 for none.

    Logic
    -----
    - future year: -1
    - past year: 11
    - current year, definitive: the month before the current one
    - current year, real_time: the latest month with data, capped at the
      current month. An open current month with a goal but no progress yet
      is dropped in favour of the previous month.
    """
    if year > today.year:
        return -1
    if year < today.year:
        return N_MONTHS - 1

    current_month = today.month - 1
    if mode == MODE_DEFINITIVE:
        return current_month - 1

    last_idx = find_last_index_with_data(monthly_progress, monthly_goals)
    idx = min(max(last_idx, 0), current_month)
    if (
        idx == current_month
        and value_or_zero(monthly_progress, idx) == 0
        and value_or_zero(monthly_goals, idx) != 0
    ):
        idx = max(0, idx - 1)
    return idx


def is_closed_period(
    year: int,
    limit_index: int,
    today: date,
    weekly: bool = False,
    mode: str = MODE_REAL_TIME,
) -> bool:
    """A resolved window is closed unless it reaches into the open month.

    Weekly indicators are already cut at completed weeks, so in real-time
    mode their window counts as closed.
    """
    if year < today.year:
        return True
    return limit_index < today.month - 1 or (weekly and mode == MODE_REAL_TIME)


def resolve_week_cutoff(year: int, mode: str, today: date, week_start: int) -> int | None:
    """0-based index of the last week of `year` that may be scored, or None for no cutoff.

    Only the current year is cut. The running week is the bucket of
    year_week_map(year) whose dates contain `today`: real-time mode keeps
    it, definitive mode stops at the week before.
    """
    if year != today.year:
        return None
    weeks = year_week_map(year, week_start)
    current_week = next(
        (w.week_index for w in weeks if w.start_date <= today <= w.end_date),
        weeks[-1].week_index,
    )
    if mode == MODE_REAL_TIME:
        return current_week
    return current_week - 1


def last_closed_month_index(today: date, closing_day: int = CAPTURE_CLOSING_DAY) -> int:
    """Month index whose capture window has closed.

    Before `closing_day` the previous month is still in its grace period,
    so the last closed month is two months back. The result may be
    negative early in the year (-1 is December of the previous year).
    """
    current_month = today.month - 1
    if today.day < closing_day:
        return current_month - 2
    return current_month - 1
