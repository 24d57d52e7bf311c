"""Multiple testing correction utilities.

This package provides methods for controlling the false discovery rate
(FDR) and the family-wise error rate (FWER) over one or several families
of hypothesis tests.

Modules
-------
base
    Bonferroni / Benjamini-Hochberg / Benjamini-Yekutieli for one family
group_wise_correction
    Independent correction within each labelled group
dispatcher
    Unified interface for flat or grouped correction
"""

from .base import CorrectionMethod, adjust_p_values
from .group_wise_correction import group_wise_correction
from .dispatcher import apply_multiple_testing_correction

__all__ = [
    # Core function
    "CorrectionMethod",
    "adjust_p_values",
    # Partitioned correction
    "group_wise_correction",
    # Dispatcher
    "apply_multiple_testing_correction",
]
