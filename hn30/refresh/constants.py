"""Refresh cycle constants."""

# Ranking is truncated to this many ids.
TOP_N = 30

# Politeness delay between items (seconds).
ITEM_DELAY_SECONDS = 0.5

# Interval between the end of one cycle and the start of the next (seconds).
REFRESH_INTERVAL_SECONDS = 300.0
