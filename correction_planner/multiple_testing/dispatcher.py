"""Dispatcher for multiple testing correction.

This module provides a unified interface for correcting either a single
flat family or a partition of families.
"""

from __future__ import annotations

from typing import Hashable, Mapping, Optional, Sequence, Tuple

import numpy as np

from .base import CorrectionMethod, adjust_p_values
from .group_wise_correction import group_wise_correction


def apply_multiple_testing_correction(
    p_values: np.ndarray,
    method: Mapping[Hashable, CorrectionMethod | str] | CorrectionMethod | str,
    alpha: float,
    group_labels: Optional[Sequence[Hashable]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Apply a correction with optional partitioning into families.

    Parameters
    ----------
    p_values : np.ndarray
        Array of raw p-values
    method : Mapping or CorrectionMethod or str
        One method for all tests, or a method per group label.
        A mapping requires ``group_labels``.
    alpha : float
        Significance level
    group_labels : Sequence[Hashable], optional
        Family label for each test. When omitted all tests form one family.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (reject_null, adjusted_p_values) arrays aligned to input

    Raises
    ------
    ValueError
        If a per-group method mapping is given without ``group_labels``,
        or a method name is not supported
    """
    if group_labels is None:
        if isinstance(method, Mapping):
            raise ValueError("group_labels required when method is a mapping")
        return adjust_p_values(p_values, method=method, alpha=alpha)
    return group_wise_correction(p_values, group_labels, method, alpha)


__all__ = ["apply_multiple_testing_correction"]
