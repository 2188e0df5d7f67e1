"""
Weekly proration: week numbering, week-to-month day weighting, and
folding a weekly series into a monthly one.

Each week spreads 1/7 of its weight over the month of each of its days.
Days that spill into the neighbouring calendar year are clamped to
January or December of the target year, so every week keeps a total
weight of exactly 1.
"""

import logging
import math
from datetime import date, timedelta

import numpy as np

from .config import N_MONTHS, N_WEEKS, WEEK_START_MONDAY
from .models import WeekMapping
from .utils import safe_float

logger = logging.getLogger(__name__)

AGG_SUM = "sum"
AGG_AVERAGE = "average"


def _js_weekday(d: date) -> int:
    """Day of week with Sunday = 0 ... Saturday = 6."""
    return d.isoweekday() % 7


def week_number(d: date, week_start: int = WEEK_START_MONDAY) -> int:
    """Return the 1-based week number of `d`.

    Monday-start weeks follow ISO 8601 (the week belongs to the year of its
    Thursday). Sunday-start weeks are anchored on their Wednesday instead.
    """
    day_num = _js_weekday(d)
    if week_start == WEEK_START_MONDAY:
        day_num = day_num or 7
        anchor = d + timedelta(days=4 - day_num)
    else:
        anchor = d + timedelta(days=3 - day_num)
    year_start = date(anchor.year, 1, 1)
    return math.ceil(((anchor - year_start).days + 1) / 7)


def first_week_start(year: int, week_start: int = WEEK_START_MONDAY) -> date:
    """The week-start day on or before January 1st of `year`."""
    jan_1 = date(year, 1, 1)
    day = _js_weekday(jan_1)
    diff = (day + 7 if day < week_start else day) - week_start
    return jan_1 - timedelta(days=diff)


def year_week_map(year: int, week_start: int = WEEK_START_MONDAY) -> list[WeekMapping]:
    """Map the 53 week buckets of `year` onto calendar months.

    Returns
    -------
    List of WeekMapping, ordered by week_index (0-52). month_contributions
    maps month index (0-11) to the fraction of the week's days in it.
    """
    weeks = []
    current = first_week_start(year, week_start)

    for w in range(N_WEEKS):
        day_counts: dict[int, int] = {}
        for offset in range(7):
            day = current + timedelta(days=offset)
            if day.year < year:
                month_idx = 0
            elif day.year > year:
                month_idx = N_MONTHS - 1
            else:
                month_idx = day.month - 1
            day_counts[month_idx] = day_counts.get(month_idx, 0) + 1

        weeks.append(WeekMapping(
            week_index=w,
            start_date=current,
            end_date=current + timedelta(days=6),
            month_contributions={m: n / 7 for m, n in day_counts.items()},
        ))

        current += timedelta(days=7)
        if current.year > year and current.month > 1:
            break

    return weeks


def contribution_matrix(year: int, week_start: int = WEEK_START_MONDAY) -> np.ndarray:
    """Week x month matrix of day-weight fractions; each row sums to 1."""
    mapping = year_week_map(year, week_start)
    matrix = np.zeros((len(mapping), N_MONTHS))
    for week in mapping:
        for month_idx, fraction in week.month_contributions.items():
            matrix[week.week_index, month_idx] = fraction
    return matrix


def aggregate_weekly_to_monthly(
    weekly_series: list | None,
    year: int,
    week_start: int = WEEK_START_MONDAY,
    max_week_index: int | None = None,
    mode: str = AGG_AVERAGE,
) -> list[float | None]:
    """Fold a weekly series into 12 monthly slots.

    Parameters
    ----------
    weekly_series : Up to 53 values; None means no data for that week.
    year : Calendar year the weeks belong to.
    week_start : 0 for Sunday, 1 for Monday.
    max_week_index : Weeks after this 0-based index are ignored.
    mode : "sum" keeps the day-weighted total contributed to each month
        (accumulative indicators); "average" divides it by the accumulated
        weight (rate indicators).

    Returns
    -------
    List of 12 floats; months no week with data touched are None.
    """
    matrix = contribution_matrix(year, week_start)
    n_weeks = matrix.shape[0]

    values = np.full(n_weeks, np.nan)
    for idx, raw in enumerate(list(weekly_series or [])[:n_weeks]):
        val = safe_float(raw)
        if val is not None:
            values[idx] = val

    mask = ~np.isnan(values)
    if max_week_index is not None:
        mask &= np.arange(n_weeks) <= max_week_index

    totals = np.where(mask, values, 0.0) @ matrix
    weights = mask.astype(float) @ matrix

    result: list[float | None] = []
    for total, weight in zip(totals, weights):
        if weight == 0:
            result.append(None)
        elif mode == AGG_SUM:
            result.append(float(total))
        else:
            result.append(float(total / weight))
    return result
