"""
Constants and shared numerical settings for the SSA Forecasting System
"""

# Demand counts cannot go below zero
COUNT_LOWER_BOUND = 0.0

# Confidence interval settings
DEFAULT_CONFIDENCE_LEVEL = 0.95

# Rank selection by cumulative singular value energy
DEFAULT_ENERGY_THRESHOLD = 0.9

# Leading singular value at or below this is treated as an all-zero spectrum
SINGULAR_VALUE_TOLERANCE = 1e-10

# Minimum allowed 1 - nu^2 when deriving the recurrence
VERTICALITY_EPSILON = 1e-6

# Checkpoint record format
CHECKPOINT_VERSION = 1

# Default forecast settings
DEFAULT_FORECAST_HORIZON = 14
