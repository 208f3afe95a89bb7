"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_EXPECTED_MINUTES = 480
DEFAULT_ENTRY_TOLERANCE_MINUTES = 10
DEFAULT_MINIMUM_INTERVAL_MINUTES = 60
DEFAULT_REMINDER_DAYS = 3

ADJUSTMENT_MAX_MINUTES = 240
JUSTIFICATION_MIN_LENGTH = 10
JUSTIFICATION_MAX_LENGTH = 500

CYCLE_SAFETY_LIMIT = 20
CYCLE_ZEROING_TAG = "[cycle-zeroing]"

RH_START_DAY_MIN = 1
RH_START_DAY_MAX = 28
