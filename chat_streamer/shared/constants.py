"""
Streaming Constants

Central location for default values of the streaming pipeline.
All durations are in seconds.
"""

# === Scheduler ===
FLUSH_INTERVAL_SECONDS = 0.5
MIN_CHARS_DELTA = 24
MAX_UPDATES_PER_MINUTE = 80  # 0 = unlimited

# === Transport ===
MAX_RETRIES = 5
BASE_RETRY_DELAY_SECONDS = 0.5
MAX_RETRY_DELAY_SECONDS = 8.0
RETRY_JITTER_RATIO = 0.3  # up to 30% of the backoff

# === Session ===
HYBRID_SWITCH_CHARS = 2800
HYBRID_SWITCH_ON_429 = True

# === Rotating Status ===
ROTATING_STATUS_INTERVAL_SECONDS = 2.5
