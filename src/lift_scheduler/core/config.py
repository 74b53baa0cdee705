"""
Configuration constants for program generation and bulk writes.

All adjustable parameters are centralized here.  Values that users may
want to tune per installation (writer pacing, store location) can also be
overridden through ~/.lift-scheduler/config.yaml; see
core/engine/config_loader.py.
"""

from typing import Final

# =============================================================================
# PROGRAM TEMPLATE
# =============================================================================

PROGRAM_WEEKS: Final[int] = 12  # Length of the periodized block
DAYS_PER_WEEK: Final[int] = 4  # One session per day-type
DELOAD_WEEK: Final[int] = 6  # Reduced-intensity week

# =============================================================================
# DELOAD (applied to every exercise of DELOAD_WEEK)
# =============================================================================

DELOAD_MIN_SETS: Final[int] = 1  # Floor after halving sets
DELOAD_MIN_RIR: Final[int] = 4  # Reps-in-reserve target is raised to at least this
DELOAD_MARKER: Final[str] = "DELOAD"

# =============================================================================
# BULK WRITER CONCURRENCY
# =============================================================================

MIN_CONCURRENCY: Final[int] = 1
MAX_CONCURRENCY: Final[int] = 5
DEFAULT_CONCURRENCY: Final[int] = 3  # Start at 2-3; drop to 1-2 if rate limits persist

# =============================================================================
# RETRY / BACKOFF (rate-limited responses only)
# =============================================================================

BASE_DELAY_SECONDS: Final[float] = 0.65  # delay = base * 2^(attempt-1) + jitter
JITTER_SECONDS: Final[float] = 0.25  # Upper bound of uniform random jitter
MAX_RETRIES: Final[int] = 7  # Retries after the first attempt

# =============================================================================
# PACING (proactive throttle under the reactive backoff)
# =============================================================================

PACE_EVERY: Final[int] = 20  # Pause after every N dispatched requests
PACE_SECONDS: Final[float] = 0.2

# =============================================================================
# SET LOGGING
# =============================================================================

SET_LOG_CONCURRENCY: Final[int] = 2
SET_LOG_MAX_RETRIES: Final[int] = 4  # 5 attempts in total
SET_LOG_BASE_DELAY_SECONDS: Final[float] = 0.25
SET_LOG_JITTER_SECONDS: Final[float] = 0.2
SET_LOG_MAX_DELAY_SECONDS: Final[float] = 4.0  # Cap on a single backoff wait
SET_LOG_LIST_LIMIT: Final[int] = 500

# =============================================================================
# COLLECTIONS (defaults; overridable in config.yaml)
# =============================================================================

COLLECTION_PROGRAM_DAYS: Final[str] = "program_days"
COLLECTION_PROGRAM_EXERCISES: Final[str] = "program_exercises"
COLLECTION_WORKOUT_LOGS: Final[str] = "workout_logs"
COLLECTION_SET_LOGS: Final[str] = "set_logs"
