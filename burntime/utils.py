"""
Burn-Time Prediction - Utility Functions

Shared helpers used by the predictors and the demo CLI.
"""

import math

# Duration thresholds for format_seconds (s)
SECONDS_THRESHOLD = 120
MINUTES_SECONDS_THRESHOLD = 120 * 60
HOURS_MINUTES_SECONDS_THRESHOLD = 6 * 60 * 60
HOURS_MINUTES_THRESHOLD = 4 * HOURS_MINUTES_SECONDS_THRESHOLD


def format_seconds(total_seconds: int) -> str:
    """
    Compact human-readable duration.

    Examples: "< 1s", "45s", "3m 05s", "1h 02m 03s", "8h 15m", "> 24h".
    Negative input gives "N/A".
    """
    if total_seconds < 0:
        return "N/A"
    if total_seconds == 0:
        return "< 1s"
    if total_seconds <= SECONDS_THRESHOLD:
        return f"{total_seconds}s"
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if total_seconds <= MINUTES_SECONDS_THRESHOLD:
        return f"{total_seconds // 60}m {seconds:02d}s"
    if total_seconds <= HOURS_MINUTES_SECONDS_THRESHOLD:
        return f"{hours}h {minutes:02d}m {seconds:02d}s"
    if total_seconds <= HOURS_MINUTES_THRESHOLD:
        return f"{hours}h {minutes:02d}m"
    return f"> {HOURS_MINUTES_THRESHOLD // 3600}h"


def format_duration(seconds) -> str:
    """format_seconds for a float duration; None, inf and NaN give "N/A"."""
    if seconds is None or not math.isfinite(seconds):
        return "N/A"
    return format_seconds(int(seconds + 0.5))
