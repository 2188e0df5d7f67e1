"""
Simulated dashboard generator.

Generates realistic KPI dashboards for demos and smoke tests.
All values are synthetic; no real dashboard data is used.
"""

import numpy as np

from .config import (
    FREQUENCY_WEEKLY,
    GOAL_MAXIMIZE,
    GOAL_MINIMIZE,
    INDICATOR_COMPOUND,
    INDICATOR_FORMULA,
    N_MONTHS,
    N_WEEKS,
    TYPE_ACCUMULATIVE,
    TYPE_AVERAGE,
)
from .models import Dashboard, Indicator, Thresholds

# Seed for reproducibility
_RNG = np.random.default_rng(42)

# ---------------------------------------------------------------------------
# Typical indicator parameters (realistic ranges)
# ---------------------------------------------------------------------------
# goal: monthly goal; std: noise around goal * bias; bias: typical performance
_INDICATOR_PARAMS = {
    "Sales": {
        "goal": 120_000, "std": 9_000, "bias": 0.97, "unit": "USD",
        "type": TYPE_ACCUMULATIVE, "goal_type": GOAL_MAXIMIZE, "weight": 30,
    },
    "New customers": {
        "goal": 140, "std": 18, "bias": 1.02, "unit": "#",
        "type": TYPE_ACCUMULATIVE, "goal_type": GOAL_MAXIMIZE, "weight": 15,
    },
    "Customer satisfaction": {
        "goal": 90, "std": 2.5, "bias": 0.99, "unit": "%",
        "type": TYPE_AVERAGE, "goal_type": GOAL_MAXIMIZE, "weight": 20,
    },
    "Staff turnover": {
        "goal": 3.0, "std": 0.6, "bias": 1.1, "unit": "%",
        "type": TYPE_AVERAGE, "goal_type": GOAL_MINIMIZE, "weight": 15,
    },
    "Operating cost": {
        "goal": 80_000, "std": 4_000, "bias": 0.98, "unit": "USD",
        "type": TYPE_ACCUMULATIVE, "goal_type": GOAL_MINIMIZE, "weight": 20,
    },
}

_REGIONS = [
    ("North", "Direccion Norte", "OPERATIONS"),
    ("South", "Direccion Sur", "OPERATIONS"),
    ("Centre", "Zona Centro", "OPERATIONS"),
    ("Head office", "Corporate", "TALENT AND CULTURE"),
]


def _noisy(goal: float, std: float, bias: float, n: int, rng) -> list[float]:
    values = goal * bias + rng.normal(0, std, n)
    return [round(float(v), 2) for v in np.maximum(values, 0)]


def generate_indicator(
    indicator_id: int,
    name: str,
    n_months: int = N_MONTHS,
    rng=None,
) -> Indicator:
    """Generate one monthly indicator with `n_months` captured months."""
    rng = _RNG if rng is None else rng
    params = _INDICATOR_PARAMS[name]

    goals = [float(params["goal"])] * n_months + [None] * (N_MONTHS - n_months)
    progress = _noisy(params["goal"], params["std"], params["bias"], n_months, rng)
    progress += [None] * (N_MONTHS - n_months)

    return Indicator(
        id=indicator_id,
        name=name,
        unit=params["unit"],
        type=params["type"],
        goal_type=params["goal_type"],
        monthly_goals=goals,
        monthly_progress=progress,
        weight=params["weight"],
    )


def generate_weekly_indicator(
    indicator_id: int,
    name: str = "Weekly visits",
    weekly_goal: float = 250,
    n_weeks: int = N_WEEKS,
    rng=None,
) -> Indicator:
    """Generate an accumulative weekly indicator with `n_weeks` captured weeks."""
    rng = _RNG if rng is None else rng
    goals = [float(weekly_goal)] * n_weeks + [None] * (N_WEEKS - n_weeks)
    progress = _noisy(weekly_goal, weekly_goal * 0.08, 1.0, n_weeks, rng)
    progress += [None] * (N_WEEKS - n_weeks)

    return Indicator(
        id=indicator_id,
        name=name,
        unit="#",
        type=TYPE_ACCUMULATIVE,
        goal_type=GOAL_MAXIMIZE,
        frequency=FREQUENCY_WEEKLY,
        weekly_goals=goals,
        weekly_progress=progress,
        weight=10,
    )


def generate_dashboard(
    dashboard_id: int,
    title: str,
    year: int,
    n_months: int = N_MONTHS,
    group: str | None = None,
    area: str | None = None,
    rng=None,
) -> Dashboard:
    """Generate a dashboard with every simulated indicator plus derived ones.

    Adds a weekly indicator, a compound indicator summing sales and cost,
    and a formula indicator for the cost-to-sales ratio.
    """
    rng = _RNG if rng is None else rng
    base_id = dashboard_id * 100
    indicators = [
        generate_indicator(base_id + i, name, n_months, rng)
        for i, name in enumerate(_INDICATOR_PARAMS, start=1)
    ]
    sales_id, cost_id = base_id + 1, base_id + 5

    n_weeks = min(N_WEEKS, n_months * 4)
    indicators.append(generate_weekly_indicator(base_id + 10, n_weeks=n_weeks, rng=rng))
    indicators.append(Indicator(
        id=base_id + 20,
        name="Sales and cost volume",
        unit="USD",
        type=TYPE_ACCUMULATIVE,
        indicator_type=INDICATOR_COMPOUND,
        component_ids=[sales_id, cost_id],
        weight=0,
    ))
    indicators.append(Indicator(
        id=base_id + 21,
        name="Cost to sales ratio",
        unit="%",
        type=TYPE_AVERAGE,
        goal_type=GOAL_MINIMIZE,
        indicator_type=INDICATOR_FORMULA,
        formula=f"{{id:{cost_id}}} / {{id:{sales_id}}} * 100",
        weight=0,
    ))

    return Dashboard(
        id=dashboard_id,
        title=title,
        subtitle=f"{title} scorecard {year}",
        indicators=indicators,
        thresholds=Thresholds(95, 80),
        group=group,
        area=area,
        year=year,
        dashboard_weight=float(rng.integers(1, 5)),
    )


def generate_dashboards(year: int, n_months: int = N_MONTHS, rng=None) -> list[Dashboard]:
    """Generate one dashboard per simulated region."""
    rng = _RNG if rng is None else rng
    return [
        generate_dashboard(i, title, year, n_months, group, area, rng)
        for i, (title, group, area) in enumerate(_REGIONS, start=1)
    ]
