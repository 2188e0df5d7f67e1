"""
Indicator compliance: pure functions over indicator series.

Provides the compliance percentage for maximize/minimize goals, status
classification, per-indicator compliance over the evaluable window, and
advisory capture warnings.
"""

import logging
import math
from datetime import date

from .config import (
    INDICATOR_COMPOUND,
    INDICATOR_FORMULA,
    MODE_REAL_TIME,
    MONTH_LABELS,
    N_MONTHS,
    STATUS_AT_RISK,
    STATUS_IN_PROGRESS,
    STATUS_NEUTRAL,
    STATUS_OFF_TRACK,
    STATUS_ON_TRACK,
    TYPE_ACCUMULATIVE,
)
from .formula import FIELD_GOALS, FIELD_PROGRESS, formula_dependencies, formula_series
from .models import ComplianceResult, Dashboard, Indicator, Thresholds
from .periods import (
    find_last_index_with_data,
    is_closed_period,
    resolve_limit_index,
    resolve_week_cutoff,
)
from .utils import normalise_series, resolve_today, round_half_up, safe_float, value_or_zero
from .weekly import AGG_AVERAGE, AGG_SUM, aggregate_weekly_to_monthly

logger = logging.getLogger(__name__)

__all__ = [
    "calculate_capture_pct",
    "calculate_compliance",
    "calculate_monthly_compliance_percentage",
    "effective_monthly_series",
    "find_last_index_with_data",
    "get_missing_months_warning",
    "get_overdue_warning",
    "get_status_for_percentage",
]


def calculate_monthly_compliance_percentage(
    progress: float,
    target: float,
    lower_is_better: bool,
) -> float:
    """Return compliance as a percentage (100 = exactly on goal).

    Logic
    -----
    - no data (0, 0): 0, never 100
    - target 0, lower_is_better: 100 if nothing was consumed, else 0
    - target 0, higher is better: 100 if anything was achieved, else 0
    - higher is better: progress / target * 100
    - lower_is_better: 100 when progress is 0, otherwise target / progress * 100
    """
    progress = progress or 0.0
    target = target or 0.0

    if target == 0 and progress == 0:
        return 0.0

    if target == 0:
        if lower_is_better:
            return 100.0 if progress == 0 else 0.0
        return 100.0 if progress > 0 else 0.0

    if not lower_is_better:
        return progress / target * 100

    if progress == 0:
        return 100.0
    return target / progress * 100


def get_status_for_percentage(
    percentage: float,
    thresholds: Thresholds | None = None,
    is_active: bool = True,
    is_closed: bool = True,
) -> str:
    """Traffic-light status for a compliance percentage.

    Inactive indicators are neutral and open periods are in progress,
    whatever their percentage.
    """
    if not is_active:
        return STATUS_NEUTRAL
    if not is_closed:
        return STATUS_IN_PROGRESS

    thresholds = thresholds or Thresholds()
    if not math.isfinite(percentage):
        return STATUS_OFF_TRACK
    if percentage >= thresholds.on_track:
        return STATUS_ON_TRACK
    if percentage >= thresholds.at_risk:
        return STATUS_AT_RISK
    return STATUS_OFF_TRACK


def _compound_series(
    indicator: Indicator,
    all_indicators: list[Indicator],
) -> tuple[list[float], list[float]]:
    by_id = {str(ind.id): ind for ind in all_indicators}
    progress = [0.0] * N_MONTHS
    goals = [0.0] * N_MONTHS
    for comp_id in indicator.component_ids:
        child = by_id.get(str(comp_id))
        if child is None:
            continue
        for i in range(N_MONTHS):
            progress[i] += value_or_zero(child.monthly_progress, i)
            goals[i] += value_or_zero(child.monthly_goals, i)
    return progress, goals


def effective_monthly_series(
    indicator: Indicator,
    all_indicators: list[Indicator] | None,
    year: int,
    max_week_index: int | None = None,
) -> tuple[list[float | None], list[float | None]]:
    """Return (monthly_progress, monthly_goals) after derivation and weekly folding.

    Compound and formula indicators are only derived when a context list
    is supplied; otherwise their own stored series are used.
    """
    progress = normalise_series(indicator.monthly_progress, N_MONTHS)
    goals = normalise_series(indicator.monthly_goals, N_MONTHS)

    if all_indicators:
        if indicator.indicator_type == INDICATOR_COMPOUND:
            progress, goals = _compound_series(indicator, all_indicators)
        elif indicator.indicator_type == INDICATOR_FORMULA and indicator.formula:
            known_ids = {str(ind.id) for ind in all_indicators}
            unknown = [ref for ref in formula_dependencies(indicator.formula) if ref not in known_ids]
            if unknown:
                logger.warning(
                    "Formula of '%s' references unknown indicators %s; they count as 0",
                    indicator.name, ", ".join(unknown),
                )
            progress = formula_series(indicator.formula, all_indicators, N_MONTHS, FIELD_PROGRESS)
            goals = formula_series(indicator.formula, all_indicators, N_MONTHS, FIELD_GOALS)

    if indicator.is_weekly:
        agg_mode = AGG_SUM if indicator.type == TYPE_ACCUMULATIVE else AGG_AVERAGE
        progress = aggregate_weekly_to_monthly(
            indicator.weekly_progress, year, indicator.week_start, max_week_index, agg_mode
        )
        goals = aggregate_weekly_to_monthly(
            indicator.weekly_goals, year, indicator.week_start, max_week_index, agg_mode
        )

    return progress, goals


def calculate_compliance(
    indicator: Indicator,
    thresholds: Thresholds | None = None,
    year: int | None = None,
    mode: str = MODE_REAL_TIME,
    all_indicators: list[Indicator] | None = None,
    today: date | None = None,
) -> ComplianceResult:
    """Score one indicator over its evaluable window.

    Parameters
    ----------
    indicator : The indicator to score.
    thresholds : Dashboard thresholds; the indicator's own take precedence.
    year : Year the series belong to. Defaults to the current year.
    mode : "real_time" or "definitive".
    all_indicators : Sibling indicators, needed by compound/formula types.
    today : Reference date. Defaults to the system clock.

    Returns
    -------
    ComplianceResult with cumulated progress/target, percentage and status.
    """
    today = resolve_today(today)
    year = today.year if year is None else year

    max_week = None
    if indicator.is_weekly:
        max_week = resolve_week_cutoff(year, mode, today, indicator.week_start)

    progress, goals = effective_monthly_series(indicator, all_indicators, year, max_week)
    limit_idx = resolve_limit_index(year, mode, today, progress, goals)

    current_progress = 0.0
    current_target = 0.0
    if limit_idx >= 0:
        if indicator.type == TYPE_ACCUMULATIVE:
            current_progress = sum(value_or_zero(progress, i) for i in range(limit_idx + 1))
            current_target = sum(value_or_zero(goals, i) for i in range(limit_idx + 1))
        else:
            populated = [
                (value_or_zero(progress, i), value_or_zero(goals, i))
                for i in range(limit_idx + 1)
                if value_or_zero(progress, i) != 0 or value_or_zero(goals, i) != 0
            ]
            if populated:
                current_progress = sum(p for p, _ in populated) / len(populated)
                current_target = sum(g for _, g in populated) / len(populated)

    percentage = calculate_monthly_compliance_percentage(
        current_progress, current_target, indicator.lower_is_better
    )
    is_active = current_target != 0 or current_progress != 0
    is_closed = is_closed_period(year, limit_idx, today, indicator.is_weekly, mode)

    status = get_status_for_percentage(
        percentage,
        indicator.thresholds or thresholds,
        is_active=is_active,
        is_closed=is_closed,
    )

    return ComplianceResult(
        current_progress=current_progress,
        current_target=current_target,
        percentage=percentage,
        status=status,
        is_active=is_active,
        limit_index=limit_idx,
        is_closed=is_closed,
    )


def get_missing_months_warning(
    monthly_progress: list | None,
    monthly_goals: list | None,
) -> str | None:
    """Warn about months where only one of goal/progress was captured."""
    length = min(max(len(monthly_progress or []), len(monthly_goals or [])), N_MONTHS)
    missing = []
    for i in range(length):
        has_progress = value_or_zero(monthly_progress, i) != 0
        has_goal = value_or_zero(monthly_goals, i) != 0
        if has_progress != has_goal:
            missing.append(MONTH_LABELS[i])

    if not missing:
        return None
    return (
        "Some months have incomplete data (goal without progress or progress "
        f"without goal): {', '.join(missing)}."
    )


def get_overdue_warning(
    monthly_progress: list | None,
    monthly_goals: list | None,
    today: date | None = None,
    year: int | None = None,
) -> str | None:
    """Warn about elapsed months with neither goal nor progress captured.

    Months before the current one are checked; a past `year` checks all
    twelve and a future one none.
    """
    today = resolve_today(today)
    year = today.year if year is None else year
    if year > today.year:
        return None
    last_month = N_MONTHS if year < today.year else today.month - 1

    missing = [
        MONTH_LABELS[i]
        for i in range(last_month)
        if value_or_zero(monthly_progress, i) == 0 and value_or_zero(monthly_goals, i) == 0
    ]
    if not missing:
        return None
    return f"Overdue period: no data captured for {', '.join(missing)}."


def calculate_capture_pct(dashboard: Dashboard, today: date | None = None) -> int:
    """Share (0-100) of indicators with a real capture for the last closed month.

    A (0, 0) pair is a placeholder, not a capture. The base is the
    dashboard's target_indicator_count when set, else its indicator count.
    """
    indicators = dashboard.indicators
    if not indicators:
        return 100

    today = resolve_today(today)
    year = dashboard.resolve_year(today)
    if year > today.year:
        return 100

    is_past_year = year < today.year
    if not is_past_year and today.month == 1:
        return 100

    target_idx = N_MONTHS - 1 if is_past_year else today.month - 2

    captured = 0
    for ind in indicators:
        progress = ind.monthly_progress
        val = safe_float(progress[target_idx]) if target_idx < len(progress) else None
        if val is None:
            continue
        if val == 0 and value_or_zero(ind.monthly_goals, target_idx) == 0:
            continue
        captured += 1

    total = dashboard.target_indicator_count or len(indicators)
    if total <= 0:
        return 100
    return min(100, int(round_half_up(captured / total * 100, 0)))
