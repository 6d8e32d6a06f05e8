"""Notification eligibility thresholds."""

# An item must have been around this long before it can notify.
NOTIFY_MIN_AGE_SECONDS = 60 * 60

# Running-max score required to notify.
NOTIFY_MIN_SCORE = 600
