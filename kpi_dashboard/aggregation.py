"""
Cross-dashboard consolidation: merge many dashboards into one synthetic
aggregate dashboard.

Indicators are matched by trimmed, case-insensitive name. Accumulative
indicators are summed across boards; average indicators are combined as
a weighted mean, each board weighted by the configured strategy:

- equal: every board weighs 1
- manual: the board's own weight, else settings.custom_weights, else 1
- indicator: the latest value of a driver indicator on that board
"""

import logging
from dataclasses import replace
from datetime import date

from .config import (
    AGGREGATE_FIRST_INDICATOR_ID,
    AGGREGATE_ID,
    AGGREGATE_TITLE,
    DRIVER_FALLBACK_WEIGHT,
    EMPTY_AGGREGATE_AT_RISK,
    EMPTY_AGGREGATE_ON_TRACK,
    N_MONTHS,
    N_WEEKS,
    STRATEGY_INDICATOR,
    STRATEGY_MANUAL,
    TYPE_ACCUMULATIVE,
)
from .models import AggregationSettings, Dashboard, Indicator, Thresholds
from .utils import normalise_group_name, normalise_name, resolve_today, round_half_up, safe_float

logger = logging.getLogger(__name__)


def latest_driver_value(series: list | None, today: date) -> float:
    """Driver value for weighting: the current month if set, else the latest
    earlier non-zero value, else the first non-zero value of the year, else 0.
    """
    values = [safe_float(v) for v in (series or [])]
    if not values:
        return 0.0

    current_month = today.month - 1
    for idx in range(min(current_month, len(values) - 1), -1, -1):
        if values[idx]:
            return values[idx]

    for val in values:
        if val:
            return val
    return 0.0


def resolve_dashboard_weights(
    dashboards: list[Dashboard],
    settings: AggregationSettings | None = None,
    today: date | None = None,
) -> dict[str, float]:
    """Weight of each source dashboard, keyed by str(dashboard.id)."""
    settings = settings or AggregationSettings()
    today = resolve_today(today)
    driver_key = normalise_name(settings.indicator_driver)

    weights = {}
    for d in dashboards:
        weight = 1.0
        if settings.strategy == STRATEGY_MANUAL:
            weight = d.dashboard_weight or settings.custom_weights.get(str(d.id), 1.0)
        elif settings.strategy == STRATEGY_INDICATOR and driver_key:
            driver = next(
                (ind for ind in d.indicators if normalise_name(ind.name) == driver_key),
                None,
            )
            value = latest_driver_value(driver.monthly_progress if driver else None, today)
            weight = value or DRIVER_FALLBACK_WEIGHT
        weights[str(d.id)] = weight

    return weights


def _sum_series(series_list: list[list | None], length: int) -> list[float | None]:
    """Slot-wise sum; a slot stays None only when every source is None."""
    result: list[float | None] = [None] * length
    for series in series_list:
        for idx, raw in enumerate(list(series or [])[:length]):
            val = safe_float(raw)
            if val is not None:
                result[idx] = (result[idx] or 0.0) + val
    return result


def _weighted_mean_series(
    series_list: list[tuple[list | None, float]],
    length: int,
    precision: int,
) -> list[float | None]:
    """Slot-wise weighted mean over the sources that have data for the slot."""
    result: list[float | None] = [None] * length
    for idx in range(length):
        sum_val = 0.0
        sum_weight = 0.0
        has_data = False
        for series, weight in series_list:
            val = safe_float(series[idx]) if series and idx < len(series) else None
            if val is None:
                continue
            sum_val += val * weight
            sum_weight += weight
            has_data = True
        if has_data:
            result[idx] = round_half_up(sum_val / sum_weight, precision) if sum_weight > 0 else 0.0
    return result


def _check_metadata(name: str, sources: list[tuple[Dashboard, Indicator]]) -> None:
    base = sources[0][1]
    for board, ind in sources[1:]:
        if (ind.type, ind.goal_type, ind.unit) != (base.type, base.goal_type, base.unit):
            logger.warning(
                "Indicator '%s' on '%s' differs in type/goal/unit from '%s'; "
                "using the first board's definition",
                name, board.title, sources[0][0].title,
            )


def _combine(
    base: Indicator,
    sources: list[tuple[Dashboard, Indicator]],
    weights: dict[str, float],
    precision: int,
) -> dict:
    if base.type == TYPE_ACCUMULATIVE:
        def combine(attr: str, length: int) -> list[float | None]:
            return _sum_series([getattr(ind, attr) for _, ind in sources], length)
    else:
        def combine(attr: str, length: int) -> list[float | None]:
            return _weighted_mean_series(
                [(getattr(ind, attr), weights.get(str(board.id), 0.0)) for board, ind in sources],
                length,
                precision,
            )

    fields = {
        "monthly_progress": combine("monthly_progress", N_MONTHS),
        "monthly_goals": combine("monthly_goals", N_MONTHS),
        "weekly_progress": None,
        "weekly_goals": None,
    }
    if base.weekly_progress is not None:
        fields["weekly_progress"] = combine("weekly_progress", N_WEEKS)
    if base.weekly_goals is not None:
        fields["weekly_goals"] = combine("weekly_goals", N_WEEKS)
    return fields


def consolidate(
    dashboards: list[Dashboard],
    settings: AggregationSettings | None = None,
    today: date | None = None,
    title: str = AGGREGATE_TITLE,
) -> Dashboard:
    """Merge dashboards into one synthetic aggregate dashboard.

    Parameters
    ----------
    dashboards : Source dashboards; they are not modified.
    settings : Weighting strategy and output precision.
    today : Reference date for driver-indicator lookups.
    title : Title of the aggregate.

    Returns
    -------
    Dashboard with id -1 and is_aggregate=True. It inherits the first
    board's thresholds. An indicator found on a single board of a
    multi-board consolidation is renamed "<name> (<board title>)".
    """
    dashboards = [d for d in dashboards or [] if d is not None]
    if not dashboards:
        logger.warning("No dashboards to consolidate; returning an empty aggregate")
        return Dashboard(
            id=AGGREGATE_ID,
            title=title,
            subtitle="Aggregated view",
            thresholds=Thresholds(EMPTY_AGGREGATE_ON_TRACK, EMPTY_AGGREGATE_AT_RISK),
            is_aggregate=True,
        )

    settings = settings or AggregationSettings()
    today = resolve_today(today)
    weights = resolve_dashboard_weights(dashboards, settings, today)

    groups: dict[str, list[tuple[Dashboard, Indicator]]] = {}
    for d in dashboards:
        for ind in d.indicators:
            if ind is None or not str(ind.name or "").strip():
                continue
            groups.setdefault(normalise_name(ind.name), []).append((d, ind))

    indicators = []
    next_id = AGGREGATE_FIRST_INDICATOR_ID
    for name, sources in groups.items():
        base = sources[0][1]
        _check_metadata(name, sources)

        display_name = base.name
        if len(sources) == 1 and len(dashboards) > 1:
            display_name = f"{base.name} ({sources[0][0].title})"

        indicators.append(replace(
            base,
            id=next_id,
            name=display_name,
            monthly_notes=list(base.monthly_notes),
            weekly_notes=list(base.weekly_notes),
            component_ids=list(base.component_ids),
            **_combine(base, sources, weights, settings.decimal_precision),
        ))
        next_id -= 1

    logger.info(
        "Consolidated %d dashboards into %d indicators (strategy=%s)",
        len(dashboards), len(indicators), settings.strategy,
    )
    return Dashboard(
        id=AGGREGATE_ID,
        title=title,
        subtitle=f"Consolidation of {len(dashboards)} dashboards",
        indicators=indicators,
        thresholds=dashboards[0].thresholds,
        year=dashboards[0].year,
        is_aggregate=True,
    )


def consolidate_by_group(
    dashboards: list[Dashboard],
    settings: AggregationSettings | None = None,
    by: str = "group",
    today: date | None = None,
) -> dict[str, Dashboard]:
    """One aggregate per normalised group (or area) name, titled with that name."""
    if by not in ("group", "area"):
        raise ValueError(f"by must be 'group' or 'area', got {by!r}")

    buckets: dict[str, list[Dashboard]] = {}
    for d in dashboards or []:
        buckets.setdefault(normalise_group_name(getattr(d, by, None)), []).append(d)

    result = {}
    for group_name in sorted(buckets):
        aggregate = consolidate(buckets[group_name], settings, today, title=group_name)
        result[group_name] = replace(aggregate, **{by: group_name})
    return result
