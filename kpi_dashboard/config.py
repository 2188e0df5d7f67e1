"""
Configuration: default thresholds, status vocabulary, aggregation defaults.

STATUS_COLOURS maps each compliance status to the traffic-light colour a
front end renders for it.
"""

# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------
N_MONTHS = 12
N_WEEKS = 53

MONTH_LABELS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

# Week start convention: 0 = Sunday, 1 = Monday
WEEK_START_SUNDAY = 0
WEEK_START_MONDAY = 1
WEEK_START_LABELS = {"sun": WEEK_START_SUNDAY, "mon": WEEK_START_MONDAY}

# Day of the month after which the previous month counts as closed for capture
CAPTURE_CLOSING_DAY = 5

# ---------------------------------------------------------------------------
# Indicator vocabulary
# ---------------------------------------------------------------------------
TYPE_ACCUMULATIVE = "accumulative"
TYPE_AVERAGE = "average"

GOAL_MAXIMIZE = "maximize"
GOAL_MINIMIZE = "minimize"

FREQUENCY_MONTHLY = "monthly"
FREQUENCY_WEEKLY = "weekly"

INDICATOR_SIMPLE = "simple"
INDICATOR_COMPOUND = "compound"
INDICATOR_FORMULA = "formula"

# ---------------------------------------------------------------------------
# Evaluation modes
# ---------------------------------------------------------------------------
# real_time: the open month may be scored if it carries data
# definitive: only fully closed months are scored
MODE_REAL_TIME = "real_time"
MODE_DEFINITIVE = "definitive"

# Keys used by the persisted settings documents
MODE_LABELS = {
    "realTime": MODE_REAL_TIME,
    "real_time": MODE_REAL_TIME,
    "definitive": MODE_DEFINITIVE,
}

# ---------------------------------------------------------------------------
# Compliance statuses
# ---------------------------------------------------------------------------
STATUS_ON_TRACK = "on_track"
STATUS_AT_RISK = "at_risk"
STATUS_OFF_TRACK = "off_track"
STATUS_NEUTRAL = "neutral"
STATUS_IN_PROGRESS = "in_progress"

STATUS_COLOURS: dict[str, str] = {
    STATUS_ON_TRACK: "green",
    STATUS_AT_RISK: "amber",
    STATUS_OFF_TRACK: "red",
    STATUS_NEUTRAL: "grey",
    STATUS_IN_PROGRESS: "blue",
}

DEFAULT_ON_TRACK = 95.0
DEFAULT_AT_RISK = 80.0

# Thresholds handed to an aggregate built from nothing
EMPTY_AGGREGATE_ON_TRACK = 95.0
EMPTY_AGGREGATE_AT_RISK = 85.0

# A single indicator never contributes more than this to a dashboard score
SCORE_CAP_PCT = 200.0
SCORE_DECIMALS = 1

# ---------------------------------------------------------------------------
# Cross-dashboard aggregation
# ---------------------------------------------------------------------------
STRATEGY_EQUAL = "equal"
STRATEGY_MANUAL = "manual"
STRATEGY_INDICATOR = "indicator"

DEFAULT_STRATEGY = STRATEGY_MANUAL
DEFAULT_DECIMAL_PRECISION = 2

# Weight for a board whose driver indicator never reports a value
DRIVER_FALLBACK_WEIGHT = 0.1

AGGREGATE_ID = -1
AGGREGATE_FIRST_INDICATOR_ID = -100
AGGREGATE_TITLE = "General Dashboard"

# ---------------------------------------------------------------------------
# Group names
# ---------------------------------------------------------------------------
# Hierarchy prefixes stripped before comparing group/area names, so that
# "Direccion Norte" and "Zona Norte" collapse to "NORTE"
GROUP_PREFIXES = [
    "DIRECCION", "DIRECTORF", "DIRECTOR", "METRO", "GRUPO", "ZONA", "AREA",
    "DEPTO", "DEPARTAMENTO",
    "DIRECTORATE", "GROUP", "ZONE", "REGION", "DEPARTMENT", "DEPT",
]
DEFAULT_GROUP = "GENERAL"
