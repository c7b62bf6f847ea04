"""Rate ceiling helpers."""

import math


def min_interval(max_per_minute: int) -> float:
    """Minimum seconds between calls for a per-minute ceiling (0 = unlimited)."""
    if not max_per_minute or max_per_minute <= 0:
        return 0.0
    return math.ceil(60000 / max_per_minute) / 1000
