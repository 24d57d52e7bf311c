"""Core p-value adjustment for a single correction family.

This module provides the fundamental correction that the group-wise and
planner layers build upon: Bonferroni, Benjamini-Hochberg and
Benjamini-Yekutieli, all through ``statsmodels``.

References
----------
Benjamini, Y., and Hochberg, Y. (1995). Controlling the false discovery
rate: a practical and powerful approach to multiple testing. Journal of
the Royal Statistical Society Series B, 57, 289-300.

Benjamini, Y., and Yekutieli, D. (2001). The control of the false discovery
rate in multiple testing under dependency. Annals of Statistics, 29,
1165-1188.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np
from statsmodels.stats.multitest import multipletests


class CorrectionMethod(str, Enum):
    """Correction applied to one family of tests."""

    NONE = "none"
    BONFERRONI = "bonferroni"
    BH = "bh"
    BY = "by"

    @property
    def statsmodels_name(self) -> str | None:
        return _STATSMODELS_NAMES[self]

    @classmethod
    def parse(cls, value: "CorrectionMethod | str") -> "CorrectionMethod":
        """Resolve a method name or alias (``"fdr_bh"``, ``"BY"``...)."""
        if isinstance(value, CorrectionMethod):
            return value
        key = str(value).strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(
            f"Unknown correction method: {value!r}. "
            f"Supported methods: 'bonferroni', 'bh', 'by', 'none'"
        )


_STATSMODELS_NAMES = {
    CorrectionMethod.NONE: None,
    CorrectionMethod.BONFERRONI: "bonferroni",
    CorrectionMethod.BH: "fdr_bh",
    CorrectionMethod.BY: "fdr_by",
}

_ALIASES = {
    "none": CorrectionMethod.NONE,
    "bonferroni": CorrectionMethod.BONFERRONI,
    "bh": CorrectionMethod.BH,
    "fdr_bh": CorrectionMethod.BH,
    "benjamini-hochberg": CorrectionMethod.BH,
    "by": CorrectionMethod.BY,
    "fdr_by": CorrectionMethod.BY,
    "benjamini-yekutieli": CorrectionMethod.BY,
}


def adjust_p_values(
    p_values: np.ndarray,
    method: CorrectionMethod | str = CorrectionMethod.BH,
    alpha: float = 0.05,
) -> Tuple[np.ndarray, np.ndarray]:
    """Adjust the p-values of one correction family.

    Parameters
    ----------
    p_values : np.ndarray
        Raw p-values of the family, in any order
    method : CorrectionMethod or str, default=BH
        Correction to apply. ``NONE`` returns the raw p-values.
    alpha : float, default=0.05
        Significance level used for the rejection flags

    Returns
    -------
    rejected_hypotheses : np.ndarray (bool)
        True where the adjusted p-value is <= alpha
    adjusted_p_values : np.ndarray (float)
        Adjusted p-values aligned to the input

    Notes
    -----
    ``statsmodels`` computes exactly:

    * Bonferroni: ``min(1, p * n)``
    * BH: step-up ``min(1, min_{j>=k} p_(j) * n / j)``
    * BY: BH with ``n * sum(1/i, i=1..n)`` in place of ``n``

    Returns empty arrays if input is empty.

    Examples
    --------
    >>> import numpy as np
    >>> rejected, adjusted = adjust_p_values(np.array([0.01, 0.04]), "bh")
    >>> adjusted
    array([0.02, 0.04])
    """
    method = CorrectionMethod.parse(method)
    p_values_array = np.asarray(p_values, dtype=float)

    if p_values_array.size == 0:
        return np.array([], dtype=bool), np.array([], dtype=float)

    if method is CorrectionMethod.NONE:
        adjusted = p_values_array.copy()
        return adjusted <= alpha, adjusted

    rejected, adjusted, _, _ = multipletests(
        p_values_array,
        alpha=alpha,
        method=method.statsmodels_name,
        is_sorted=False,
        returnsorted=False,
    )

    return rejected.astype(bool), adjusted.astype(float)


__all__ = ["CorrectionMethod", "adjust_p_values"]
