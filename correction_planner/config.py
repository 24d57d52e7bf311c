"""
Central configuration for the correction planner.
"""

# --- Statistical Parameters ---

# Default significance level (alpha) used to flag rejected hypotheses
# on the planned q-values.
SIGNIFICANCE_ALPHA: float = 0.05

# Default correction method for multi-member groups.
# None means auto-select: BY when any dependency inside the group is of
# unknown/general kind, BH otherwise.
# Options: None, "bonferroni", "bh", "by"
DEFAULT_METHOD: str | None = None

# --- Nested Model (Stage) Parameters ---

# Threshold a record of an earlier stage must pass for matching records of
# the next stage to be planned at all.
STAGE_GATE_ALPHA: float = 0.05

# Which value of the earlier-stage record is compared to STAGE_GATE_ALPHA.
#   "q_value": corrected value of the earlier stage
#   "p_value": raw value (the earlier stage acts as an uncorrected screen)
STAGE_GATE_STATISTIC: str = "q_value"

# How later-stage records are matched to earlier-stage records.
#   "outcome": any earlier record on the same outcome variable
#   "outcome_term": earlier record on the same outcome and term
STAGE_GATE_KEY: str = "outcome"
