"""Group-wise correction for partitioned test families.

This module applies a correction separately within each group of tests,
giving each group its own error-rate control.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Hashable, List, Mapping, Sequence, Tuple

import numpy as np

from .base import CorrectionMethod, adjust_p_values


def group_wise_correction(
    p_values: np.ndarray,
    group_labels: Sequence[Hashable],
    methods: Mapping[Hashable, CorrectionMethod | str] | CorrectionMethod | str,
    alpha: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """Apply a correction separately within each group.

    Parameters
    ----------
    p_values : np.ndarray
        Array of p-values for each test
    group_labels : Sequence[Hashable]
        Group label of each test, aligned to ``p_values``
    methods : Mapping or CorrectionMethod or str
        Method per group label, or one method used for every group
    alpha : float
        Significance level for the rejection flags

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (reject_null, adjusted_p_values) arrays aligned to input

    Raises
    ------
    ValueError
        If labels and p-values differ in length, or a group has no method

    Examples
    --------
    >>> import numpy as np
    >>> p_values = np.array([0.01, 0.04, 0.20])
    >>> labels = [0, 0, 1]
    >>> rejected, adjusted = group_wise_correction(
    ...     p_values, labels, {0: "bh", 1: "none"}, alpha=0.05
    ... )
    >>> adjusted
    array([0.02, 0.04, 0.2 ])
    """
    p_values = np.asarray(p_values, dtype=float)
    n = len(p_values)
    if len(group_labels) != n:
        raise ValueError(
            f"group_labels has {len(group_labels)} entries, expected {n}"
        )

    reject_null = np.zeros(n, dtype=bool)
    adjusted_p = np.ones(n, dtype=float)

    if n == 0:
        return reject_null, adjusted_p

    group_indices: Dict[Hashable, List[int]] = defaultdict(list)
    for i, label in enumerate(group_labels):
        group_indices[label].append(i)

    for label, indices in group_indices.items():
        if isinstance(methods, Mapping):
            if label not in methods:
                raise ValueError(f"No correction method given for group {label!r}")
            method = methods[label]
        else:
            method = methods

        group_reject, group_adjusted = adjust_p_values(
            p_values[indices], method=method, alpha=alpha
        )

        # Store results back to original positions
        reject_null[indices] = group_reject
        adjusted_p[indices] = group_adjusted

    return reject_null, adjusted_p


__all__ = ["group_wise_correction"]
