"""
Configuration constants for the progression engine.

All adjustable parameters are centralized here for easy tuning.
Tier tables are ordered from the highest threshold down; a value takes the
multiplier of the first tier whose threshold it meets, else the floor.
"""

from typing import Final

# =============================================================================
# BASELINE ESTIMATION
# =============================================================================

BASELINE_DECAY: Final[float] = 0.7  # Weight of session i is BASELINE_DECAY ** i
RECENT_SESSION_LIMIT: Final[int] = 5  # Sessions considered by baseline and success rate
OUTLIER_STDDEV_THRESHOLD: Final[float] = 2.0  # Sets beyond this many sigmas are dropped
OUTLIER_MIN_ITEMS: Final[int] = 3  # Too few items to estimate spread below this

# =============================================================================
# TREND DETECTION
# =============================================================================

TREND_MIN_POINTS: Final[int] = 3  # Weekly points required to fit a line
TREND_R_SQUARED_MIN: Final[float] = 0.3  # Below this the trend is noise
TREND_MAX_INCREMENT_RATIO: Final[float] = 2.0  # |slope| clamp as multiple of default
TREND_MIN_INCREMENT_RATIO: Final[float] = 0.25  # Flatter slopes fall back to default

# =============================================================================
# COMPOSITE MULTIPLIER
# =============================================================================

NEUTRAL_MULTIPLIER: Final[float] = 1.0
COMPOSITE_MIN: Final[float] = 0.5
COMPOSITE_MAX: Final[float] = 1.5

# =============================================================================
# SUCCESS RATE
# =============================================================================

WARMUP_WEIGHT_FRACTION: Final[float] = 0.9  # Sets below this share of session max are warm-ups

SUCCESS_RATE_TIERS: Final[tuple[tuple[float, float], ...]] = (
    (0.90, 1.2),
    (0.75, 1.0),
    (0.50, 0.7),
)
SUCCESS_RATE_FLOOR: Final[float] = 0.5

# =============================================================================
# CONSISTENCY
# =============================================================================

CONSISTENCY_WINDOW_DAYS: Final[int] = 14
CONSISTENCY_TIERS: Final[tuple[tuple[float, float], ...]] = (
    (1.00, 1.05),
    (0.75, 1.0),
    (0.50, 0.9),
)
CONSISTENCY_FLOOR: Final[float] = 0.8

# =============================================================================
# RECOVERY
# =============================================================================

RECOVERY_SHORT_DAYS: Final[float] = 2.0  # Fewer days than this: under-recovered
RECOVERY_OPTIMAL_MIN_DAYS: Final[float] = 5.0
RECOVERY_OPTIMAL_MAX_DAYS: Final[float] = 7.0
RECOVERY_SHORT_MULTIPLIER: Final[float] = 0.9
RECOVERY_OPTIMAL_MULTIPLIER: Final[float] = 1.05

# =============================================================================
# BODY WEIGHT
# =============================================================================

BODY_WEIGHT_WINDOW_DAYS: Final[int] = 60
BODY_WEIGHT_STABLE_PERCENT: Final[float] = 1.0  # +/- band treated as stable
LBS_PER_KG: Final[float] = 2.20462

# (goal, trend) -> multiplier; missing pairs are neutral
BODY_WEIGHT_MULTIPLIERS: Final[dict[tuple[str, str], float]] = {
    ("build", "gaining"): 1.05,
    ("build", "losing"): 0.9,
    ("lose", "gaining"): 0.95,
    ("maintain", "gaining"): 0.95,
    ("maintain", "losing"): 0.95,
}

# =============================================================================
# MOOD
# =============================================================================

MOOD_SESSION_LIMIT: Final[int] = 5
MOOD_MIN: Final[int] = 1
MOOD_MAX: Final[int] = 5
MOOD_TIERS: Final[tuple[tuple[float, float], ...]] = (
    (4.0, 1.1),
    (3.0, 1.0),
    (2.0, 0.85),
)
MOOD_FLOOR: Final[float] = 0.7

# =============================================================================
# DEFAULT INCREMENTS (experience level x unit)
# =============================================================================

# Advanced values are provisional and pending product sign-off
DEFAULT_INCREMENTS: Final[dict[str, dict[str, float]]] = {
    "lbs": {"beginner": 5.0, "intermediate": 2.5, "advanced": 2.0},
    "kg": {"beginner": 2.5, "intermediate": 1.25, "advanced": 1.0},
}

# =============================================================================
# CONFIDENCE
# =============================================================================

CONFIDENCE_MEDIUM_SESSIONS: Final[int] = 3
CONFIDENCE_HIGH_SESSIONS: Final[int] = 5
CONFIDENCE_HIGH_WEEKS: Final[int] = 3

# =============================================================================
# WEEKLY ANALYSIS
# =============================================================================

ANALYSIS_WINDOW_WEEKS: Final[int] = 10
ANALYSIS_MIN_SESSIONS: Final[int] = 3
PLATEAU_WEIGHT_TOLERANCE: Final[float] = 0.025  # Same-weight band around latest max
PLATEAU_1RM_TOLERANCE: Final[float] = 0.03
PLATEAU_SESSIONS: Final[int] = 4  # Matching sessions needed for a stall signal
PLATEAU_LOOKBACK_SESSIONS: Final[int] = 6
FAILED_REPS_LOOKBACK_SESSIONS: Final[int] = 4
FAILED_REPS_BUFFER: Final[int] = 1
DECLINING_1RM_TREND_PERCENT: Final[float] = -5.0
PLATEAU_1RM_TREND_PERCENT: Final[float] = -2.0

# =============================================================================
# SUGGESTION ROUNDING
# =============================================================================

PLATE_INCREMENTS: Final[dict[str, float]] = {"lbs": 2.5, "kg": 1.25}
