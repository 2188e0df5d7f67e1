"""
Data records handed to the engine.

Indicators and dashboards are created by the surrounding application and
passed in per call; the engine never mutates them. The from_record
constructors accept the camelCase documents the application persists and
coerce malformed values instead of raising.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .config import (
    DEFAULT_AT_RISK,
    DEFAULT_DECIMAL_PRECISION,
    DEFAULT_ON_TRACK,
    DEFAULT_STRATEGY,
    FREQUENCY_MONTHLY,
    FREQUENCY_WEEKLY,
    GOAL_MAXIMIZE,
    GOAL_MINIMIZE,
    INDICATOR_COMPOUND,
    INDICATOR_FORMULA,
    INDICATOR_SIMPLE,
    MODE_LABELS,
    MODE_REAL_TIME,
    N_MONTHS,
    N_WEEKS,
    STRATEGY_EQUAL,
    STRATEGY_INDICATOR,
    STRATEGY_MANUAL,
    TYPE_ACCUMULATIVE,
    TYPE_AVERAGE,
    WEEK_START_LABELS,
    WEEK_START_MONDAY,
)
from .utils import normalise_series, safe_float

logger = logging.getLogger(__name__)


def _choice(value: Any, allowed: set[str], default: str) -> str:
    if isinstance(value, str) and value in allowed:
        return value
    if value is not None:
        logger.warning("Unknown value %r, falling back to '%s'", value, default)
    return default


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class Thresholds:
    """Cut points: >= on_track is OnTrack, >= at_risk is AtRisk, else OffTrack."""

    on_track: float = DEFAULT_ON_TRACK
    at_risk: float = DEFAULT_AT_RISK

    @classmethod
    def from_record(cls, record: dict | None) -> "Thresholds":
        record = record if isinstance(record, dict) else {}
        on_track = safe_float(record.get("onTrack", record.get("on_track")))
        at_risk = safe_float(record.get("atRisk", record.get("at_risk")))
        return cls(
            on_track=DEFAULT_ON_TRACK if on_track is None else on_track,
            at_risk=DEFAULT_AT_RISK if at_risk is None else at_risk,
        )


@dataclass
class Indicator:
    id: int | str
    name: str
    unit: str = ""
    type: str = TYPE_ACCUMULATIVE
    goal_type: str = GOAL_MAXIMIZE
    frequency: str = FREQUENCY_MONTHLY
    monthly_goals: list[float | None] = field(default_factory=list)
    monthly_progress: list[float | None] = field(default_factory=list)
    weekly_goals: list[float | None] | None = None
    weekly_progress: list[float | None] | None = None
    week_start: int = WEEK_START_MONDAY
    monthly_notes: list[str] = field(default_factory=list)
    weekly_notes: list[str] = field(default_factory=list)
    indicator_type: str = INDICATOR_SIMPLE
    component_ids: list[int | str] = field(default_factory=list)
    formula: str | None = None
    weight: float = 0.0
    thresholds: Thresholds | None = None

    @property
    def lower_is_better(self) -> bool:
        return self.goal_type == GOAL_MINIMIZE

    @property
    def is_weekly(self) -> bool:
        return self.frequency == FREQUENCY_WEEKLY

    @classmethod
    def from_record(cls, record: dict) -> "Indicator":
        """Build an Indicator from a stored document (camelCase keys)."""
        week_start = record.get("weekStart", WEEK_START_MONDAY)
        if isinstance(week_start, str):
            week_start = WEEK_START_LABELS.get(week_start.strip().lower()[:3], WEEK_START_MONDAY)
        elif week_start not in (0, 1):
            week_start = WEEK_START_MONDAY

        weekly_goals = record.get("weeklyGoals")
        weekly_progress = record.get("weeklyProgress")
        weight = safe_float(record.get("weight"))

        return cls(
            id=record.get("id"),
            name=str(record.get("indicator", record.get("name", "")) or ""),
            unit=str(record.get("unit", "") or ""),
            type=_choice(record.get("type"), {TYPE_ACCUMULATIVE, TYPE_AVERAGE}, TYPE_ACCUMULATIVE),
            goal_type=_choice(record.get("goalType"), {GOAL_MAXIMIZE, GOAL_MINIMIZE}, GOAL_MAXIMIZE),
            frequency=_choice(
                record.get("frequency"), {FREQUENCY_MONTHLY, FREQUENCY_WEEKLY}, FREQUENCY_MONTHLY
            ),
            monthly_goals=normalise_series(record.get("monthlyGoals"), N_MONTHS),
            monthly_progress=normalise_series(record.get("monthlyProgress"), N_MONTHS),
            weekly_goals=None if weekly_goals is None else normalise_series(weekly_goals, N_WEEKS),
            weekly_progress=(
                None if weekly_progress is None else normalise_series(weekly_progress, N_WEEKS)
            ),
            week_start=week_start,
            monthly_notes=_as_list(record.get("monthlyNotes")),
            weekly_notes=_as_list(record.get("weeklyNotes")),
            indicator_type=_choice(
                record.get("indicatorType"),
                {INDICATOR_SIMPLE, INDICATOR_COMPOUND, INDICATOR_FORMULA},
                INDICATOR_SIMPLE,
            ),
            component_ids=_as_list(record.get("componentIds")),
            formula=record.get("formula") or None,
            weight=0.0 if weight is None else weight,
            thresholds=(
                Thresholds.from_record(record["thresholds"]) if record.get("thresholds") else None
            ),
        )


@dataclass
class Dashboard:
    id: int | str
    title: str
    subtitle: str = ""
    indicators: list[Indicator] = field(default_factory=list)
    thresholds: Thresholds = field(default_factory=Thresholds)
    group: str | None = None
    area: str | None = None
    year: int | None = None
    dashboard_weight: float | None = None
    is_aggregate: bool = False
    target_indicator_count: int | None = None

    def resolve_year(self, today: date) -> int:
        return self.year if self.year is not None else today.year

    @classmethod
    def from_record(cls, record: dict) -> "Dashboard":
        """Build a Dashboard from a stored document; corrupt items are skipped."""
        indicators = []
        for item in _as_list(record.get("items")):
            if not isinstance(item, dict) or not item.get("indicator"):
                logger.warning("Skipping malformed indicator in dashboard %s", record.get("id"))
                continue
            indicators.append(Indicator.from_record(item))

        year = safe_float(record.get("year"))
        target_count = safe_float(record.get("targetIndicatorCount"))
        return cls(
            id=record.get("id"),
            title=str(record.get("title", "") or ""),
            subtitle=str(record.get("subtitle", "") or ""),
            indicators=indicators,
            thresholds=Thresholds.from_record(record.get("thresholds")),
            group=record.get("group"),
            area=record.get("area"),
            year=None if year is None else int(year),
            dashboard_weight=safe_float(record.get("dashboardWeight")),
            is_aggregate=bool(record.get("isAggregate", False)),
            target_indicator_count=None if target_count is None else int(target_count),
        )


@dataclass
class ComplianceResult:
    current_progress: float
    current_target: float
    percentage: float
    status: str
    is_active: bool
    limit_index: int = -1
    is_closed: bool = True


@dataclass
class AggregationSettings:
    strategy: str = DEFAULT_STRATEGY
    indicator_driver: str | None = None
    custom_weights: dict[str, float] = field(default_factory=dict)
    decimal_precision: int = DEFAULT_DECIMAL_PRECISION
    calculation_mode: str = MODE_REAL_TIME
    thresholds: Thresholds = field(default_factory=Thresholds)

    @classmethod
    def from_record(cls, record: dict | None) -> "AggregationSettings":
        """Parse the persisted system settings document."""
        record = record or {}
        custom_weights = {}
        raw_weights = record.get("customWeights")
        for key, val in (raw_weights if isinstance(raw_weights, dict) else {}).items():
            weight = safe_float(val)
            if weight is not None:
                custom_weights[str(key)] = weight

        precision = safe_float(record.get("decimalPrecision"))
        mode_label = record.get("calculationMode")
        mode = MODE_REAL_TIME
        if isinstance(mode_label, str):
            mode = MODE_LABELS.get(mode_label, MODE_REAL_TIME)
        return cls(
            strategy=_choice(
                record.get("aggregationStrategy"),
                {STRATEGY_EQUAL, STRATEGY_MANUAL, STRATEGY_INDICATOR},
                DEFAULT_STRATEGY,
            ),
            indicator_driver=record.get("indicatorDriver") or None,
            custom_weights=custom_weights,
            decimal_precision=DEFAULT_DECIMAL_PRECISION if precision is None else int(precision),
            calculation_mode=mode,
            thresholds=Thresholds.from_record(record.get("thresholds")),
        )


@dataclass
class WeekMapping:
    week_index: int
    start_date: date
    end_date: date
    month_contributions: dict[int, float] = field(default_factory=dict)
