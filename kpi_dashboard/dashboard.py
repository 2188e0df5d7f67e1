"""
Dashboard-level scoring and dashboard-ready outputs.

weighted_score and monthly_trend_series fold the indicators of one
dashboard into a single score and a month-by-month trend. The get_*
functions return DataFrames suitable for rendering cards, tables and
group roll-ups in a front end.
"""

import logging
from datetime import date

import pandas as pd

from .config import (
    MODE_REAL_TIME,
    N_MONTHS,
    SCORE_CAP_PCT,
    SCORE_DECIMALS,
    STATUS_COLOURS,
)
from .kpis import (
    calculate_capture_pct,
    calculate_compliance,
    calculate_monthly_compliance_percentage,
    effective_monthly_series,
    get_missing_months_warning,
    get_overdue_warning,
    get_status_for_percentage,
)
from .models import Dashboard, Indicator, Thresholds
from .utils import normalise_group_name, resolve_today, round_half_up, value_or_zero

logger = logging.getLogger(__name__)


def weighted_score(
    indicators: list[Indicator],
    thresholds: Thresholds | None = None,
    year: int | None = None,
    mode: str = MODE_REAL_TIME,
    today: date | None = None,
) -> float:
    """Weighted mean compliance of a dashboard's indicators.

    Inactive indicators are skipped and do not dilute the denominator.
    Each indicator contributes at most SCORE_CAP_PCT. Returns 0 when no
    active indicator carries weight.
    """
    if not indicators:
        return 0.0

    today = resolve_today(today)
    total_score = 0.0
    total_weight = 0.0

    for ind in indicators:
        result = calculate_compliance(ind, thresholds, year, mode, indicators, today)
        if not result.is_active:
            continue
        weight = ind.weight or 0.0
        total_score += min(result.percentage, SCORE_CAP_PCT) * weight
        total_weight += weight

    if total_weight == 0:
        return 0.0
    return round_half_up(total_score / total_weight, SCORE_DECIMALS)


def monthly_trend_series(
    indicators: list[Indicator],
    thresholds: Thresholds | None = None,
    year: int | None = None,
    limit_month_index: int = N_MONTHS - 1,
) -> list[float | None]:
    """Per-month weighted compliance, each month scored on its own values.

    Indicators with neither goal nor progress in a month are left out of
    that month; a month without any is None.
    """
    year = date.today().year if year is None else year
    scores: list[float | None] = [None] * N_MONTHS

    series = [effective_monthly_series(ind, indicators, year) for ind in indicators]

    for m in range(min(limit_month_index, N_MONTHS - 1) + 1):
        weighted_sum = 0.0
        weight_total = 0.0
        has_data = False

        for ind, (progress, goals) in zip(indicators, series):
            p = value_or_zero(progress, m)
            g = value_or_zero(goals, m)
            if p == 0 and g == 0:
                continue
            pct = calculate_monthly_compliance_percentage(p, g, ind.lower_is_better)
            weight = ind.weight or 0.0
            weighted_sum += min(pct, SCORE_CAP_PCT) * weight
            weight_total += weight
            has_data = True

        if has_data and weight_total > 0:
            scores[m] = round_half_up(weighted_sum / weight_total, SCORE_DECIMALS)

    return scores


def get_dashboard_status(score: float, thresholds: Thresholds | None = None) -> str:
    """Traffic light for a dashboard score; a zero score means nothing was scored."""
    return get_status_for_percentage(score, thresholds, is_active=score != 0)


def get_indicator_summary(
    dashboard: Dashboard,
    mode: str = MODE_REAL_TIME,
    today: date | None = None,
) -> pd.DataFrame:
    """One row per indicator of a dashboard.

    Returns
    -------
    DataFrame with columns:
        indicator_id, indicator, unit, type, goal_type, weight, progress,
        target, percentage, status, rag, is_active, missing_warning,
        overdue_warning
    """
    columns = [
        "indicator_id", "indicator", "unit", "type", "goal_type", "weight",
        "progress", "target", "percentage", "status", "rag", "is_active",
        "missing_warning", "overdue_warning",
    ]
    if not dashboard.indicators:
        logger.warning("Dashboard '%s' has no indicators", dashboard.title)
        return pd.DataFrame(columns=columns)

    today = resolve_today(today)
    year = dashboard.resolve_year(today)

    rows = []
    for ind in dashboard.indicators:
        result = calculate_compliance(
            ind, dashboard.thresholds, year, mode, dashboard.indicators, today
        )
        progress, goals = effective_monthly_series(ind, dashboard.indicators, year)
        rows.append({
            "indicator_id": ind.id,
            "indicator": ind.name,
            "unit": ind.unit,
            "type": ind.type,
            "goal_type": ind.goal_type,
            "weight": ind.weight,
            "progress": result.current_progress,
            "target": result.current_target,
            "percentage": result.percentage,
            "status": result.status,
            "rag": STATUS_COLOURS[result.status],
            "is_active": result.is_active,
            "missing_warning": get_missing_months_warning(progress, goals),
            "overdue_warning": get_overdue_warning(progress, goals, today, year),
        })

    return pd.DataFrame(rows, columns=columns)


def get_dashboard_scores(
    dashboards: list[Dashboard],
    mode: str = MODE_REAL_TIME,
    today: date | None = None,
) -> pd.DataFrame:
    """One row per dashboard with its weighted score, status and capture percentage."""
    columns = [
        "dashboard_id", "title", "group", "area", "year", "score", "status",
        "rag", "capture_pct", "n_indicators",
    ]
    if not dashboards:
        return pd.DataFrame(columns=columns)

    today = resolve_today(today)
    rows = []
    for d in dashboards:
        year = d.resolve_year(today)
        score = weighted_score(d.indicators, d.thresholds, year, mode, today)
        status = get_dashboard_status(score, d.thresholds)
        rows.append({
            "dashboard_id": d.id,
            "title": d.title,
            "group": normalise_group_name(d.group),
            "area": normalise_group_name(d.area),
            "year": year,
            "score": score,
            "status": status,
            "rag": STATUS_COLOURS[status],
            "capture_pct": calculate_capture_pct(d, today),
            "n_indicators": len(d.indicators),
        })

    df = pd.DataFrame(rows, columns=columns)
    logger.info("Scored %d dashboards", len(df))
    return df


def get_group_overview(
    dashboards: list[Dashboard],
    by: str = "group",
    mode: str = MODE_REAL_TIME,
    today: date | None = None,
) -> pd.DataFrame:
    """Mean dashboard score per normalised group (or area).

    Dashboards scoring 0 have nothing captured and are left out of the mean.

    Returns
    -------
    DataFrame with columns: <by>, n_dashboards, score, capture_pct
    """
    scores = get_dashboard_scores(dashboards, mode, today)
    if scores.empty:
        return pd.DataFrame(columns=[by, "n_dashboards", "score", "capture_pct"])

    scored = scores.assign(score=scores["score"].where(scores["score"] != 0))
    overview = (
        scored.groupby(by)
        .agg(
            n_dashboards=("dashboard_id", "count"),
            score=("score", "mean"),
            capture_pct=("capture_pct", "mean"),
        )
        .reset_index()
    )
    overview["score"] = overview["score"].fillna(0.0).round(SCORE_DECIMALS)
    overview["capture_pct"] = overview["capture_pct"].round(0)
    return overview.sort_values(by).reset_index(drop=True)


def get_available_groups(dashboards: list[Dashboard], by: str = "group") -> list[str]:
    """Sorted normalised group (or area) names for UI dropdowns."""
    return sorted({normalise_group_name(getattr(d, by, None)) for d in dashboards})
