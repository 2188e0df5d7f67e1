"""
KPI Dashboard — End-to-end scoring pipeline.

Scores simulated dashboards, consolidates them under each aggregation
strategy and prints smoke-test summaries.

Usage:
    python main.py
"""

import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from kpi_dashboard.aggregation import consolidate, consolidate_by_group
from kpi_dashboard.config import (
    MODE_DEFINITIVE,
    MODE_REAL_TIME,
    STRATEGY_EQUAL,
    STRATEGY_INDICATOR,
    STRATEGY_MANUAL,
)
from kpi_dashboard.dashboard import (
    get_dashboard_scores,
    get_group_overview,
    get_indicator_summary,
    monthly_trend_series,
    weighted_score,
)
from kpi_dashboard.models import AggregationSettings
from kpi_dashboard.periods import last_closed_month_index
from kpi_dashboard.simulator import generate_dashboards

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main(today: date | None = None) -> None:
    """Run the full scoring pipeline and print smoke-test outputs."""
    today = today or date.today()
    year = today.year
    n_months = today.month

    print("=" * 70)
    print("  KPI DASHBOARD — Compliance & Aggregation Engine")
    print(f"  Scoring Pipeline Smoke Test ({today.isoformat()})")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Simulated source dashboards
    # ------------------------------------------------------------------
    print("[ 1 ] SIMULATED DASHBOARDS")
    print("-" * 40)
    dashboards = generate_dashboards(year, n_months)
    for d in dashboards:
        print(f"  {d.title:12s} | group={d.group!r:20s} | {len(d.indicators)} indicators")

    # ------------------------------------------------------------------
    # 2. Per-dashboard scoring
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] DASHBOARD SCORES")
    print("-" * 40)
    for mode in (MODE_REAL_TIME, MODE_DEFINITIVE):
        print(f"\nMode: {mode}")
        print(get_dashboard_scores(dashboards, mode, today).to_string(index=False))

    first = dashboards[0]
    print(f"\nIndicator summary — {first.title}:")
    summary = get_indicator_summary(first, MODE_REAL_TIME, today)
    print(summary[["indicator", "progress", "target", "percentage", "status"]].to_string(index=False))

    limit_idx = max(last_closed_month_index(today), 0)
    trend = monthly_trend_series(first.indicators, first.thresholds, year, limit_idx)
    print(f"\nMonthly trend — {first.title}: {trend}")

    # ------------------------------------------------------------------
    # 3. Consolidation
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] CONSOLIDATION")
    print("-" * 40)
    for strategy in (STRATEGY_EQUAL, STRATEGY_MANUAL, STRATEGY_INDICATOR):
        settings = AggregationSettings(strategy=strategy, indicator_driver="Sales")
        aggregate = consolidate(dashboards, settings, today)
        score = weighted_score(aggregate.indicators, aggregate.thresholds, year, MODE_REAL_TIME, today)
        print(f"  {strategy:10s} | {len(aggregate.indicators)} indicators | score {score}")

    print("\nGroup overview:")
    print(get_group_overview(dashboards, "group", MODE_REAL_TIME, today).to_string(index=False))

    groups = consolidate_by_group(dashboards, AggregationSettings(), "area", today)
    for name, aggregate in groups.items():
        print(f"  area {name:20s} | {aggregate.subtitle}")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
