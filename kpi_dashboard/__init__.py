"""
KPI Dashboard compliance and aggregation engine.

Scores indicators with monthly or weekly target/actual series against
traffic-light thresholds, rolls them up into weighted dashboard scores,
and consolidates many dashboards into organisational aggregates.

To score a single dashboard:
    Call dashboard.weighted_score(d.indicators, d.thresholds, year, mode)
    or dashboard.get_indicator_summary(d) for a per-indicator DataFrame.

To consolidate dashboards:
    Call aggregation.consolidate(dashboards, settings) with an
    AggregationSettings choosing the equal, manual or indicator strategy.

To load records from the document store:
    Build Dashboard.from_record(doc) and AggregationSettings.from_record(doc)
    from the stored camelCase documents. Malformed values are coerced, never
    raised.
"""

from .aggregation import consolidate, consolidate_by_group, resolve_dashboard_weights
from .dashboard import monthly_trend_series, weighted_score
from .formula import evaluate_formula
from .kpis import calculate_compliance, calculate_monthly_compliance_percentage
from .models import AggregationSettings, ComplianceResult, Dashboard, Indicator, Thresholds
from .periods import resolve_limit_index
from .weekly import aggregate_weekly_to_monthly, week_number, year_week_map

__all__ = [
    "AggregationSettings",
    "ComplianceResult",
    "Dashboard",
    "Indicator",
    "Thresholds",
    "aggregate_weekly_to_monthly",
    "calculate_compliance",
    "calculate_monthly_compliance_percentage",
    "consolidate",
    "consolidate_by_group",
    "evaluate_formula",
    "monthly_trend_series",
    "resolve_dashboard_weights",
    "resolve_limit_index",
    "week_number",
    "weighted_score",
    "year_week_map",
]
