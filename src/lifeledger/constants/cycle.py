"""
Cycle tracking defaults.
These are product constants, not medical truths; BaseConfig can override the policy values.
"""

DEFAULT_CYCLE_LENGTH = 28
DEFAULT_PERIOD_LENGTH = 5

# A start with no logged end stops counting as "ongoing" after this many days.
ONGOING_PERIOD_MAX_DAYS = 10

# Start-to-start gaps outside this range are ignored when averaging.
MIN_CYCLE_DAYS = 21
MAX_CYCLE_DAYS = 35

# Number of most recent valid gaps averaged into the prediction.
PREDICTION_WINDOW = 5

# Last day (inclusive) of the follicular and ovulatory phases.
FOLLICULAR_END_DAY = 13
OVULATORY_END_DAY = 16
