"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TIMEZONE_NAME = "America/New_York"

DEFAULT_BACKFILL_DAYS = 7
DEFAULT_RECENT_PUNCHES = 20
DEFAULT_REPORT_DAYS = 90
DEFAULT_MAX_EXPORT_DAYS = 730
DEFAULT_REGULAR_HOURS_PER_DAY = 8.0

# Seconds around a midnight boundary searched for synthetic punches.
ROLLOVER_WINDOW_PAD_SECONDS = 2
MIN_SCHEDULER_DELAY_SECONDS = 1.0
