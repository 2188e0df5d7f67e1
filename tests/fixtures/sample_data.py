"""
Sample data fixtures for testing

This module provides indicator and dashboard factories with sensible
defaults so each test only spells out the values it cares about.
"""

from datetime import date

from kpi_dashboard.models import Dashboard, Indicator, Thresholds

# Fixed reference dates; tests never read the system clock
TODAY = date(2026, 5, 10)
PAST_YEAR = 2025

THRESHOLDS = Thresholds(on_track=95, at_risk=80)


def make_indicator(indicator_id=1, name="Sales", progress=None, goals=None, **overrides):
    """
    Create an indicator, padding progress/goals to 12 months with None.

    Returns:
        Indicator: maximize / accumulative / monthly unless overridden
    """
    progress = list(progress or [])
    goals = list(goals or [])
    fields = {
        "id": indicator_id,
        "name": name,
        "unit": "USD",
        "monthly_progress": progress + [None] * (12 - len(progress)),
        "monthly_goals": goals + [None] * (12 - len(goals)),
        "weight": 10,
    }
    fields.update(overrides)
    return Indicator(**fields)


def make_constant_indicator(name, type_, value, goal=100, **overrides):
    """Indicator with the same value in all 12 months (goal 100)."""
    return make_indicator(
        name=name,
        type=type_,
        progress=[value] * 12,
        goals=[goal] * 12,
        **overrides,
    )


def make_dashboard(dashboard_id=1, title="DB1", indicators=None, **overrides):
    """
    Create a dashboard with the standard test thresholds.

    Returns:
        Dashboard
    """
    fields = {
        "id": dashboard_id,
        "title": title,
        "indicators": list(indicators or []),
        "thresholds": Thresholds(on_track=90, at_risk=80),
    }
    fields.update(overrides)
    return Dashboard(**fields)
