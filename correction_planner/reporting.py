"""Table adapters between the planner and pandas.

Upstream model-fitting results usually arrive as a DataFrame with one row
per (model, outcome, term) test; downstream reporting wants q-values back
as a DataFrame. Writing the tables to disk is left to the caller.
"""

from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from .records import CorrectionGroup, QValue, TestRecord

QVALUE_COLUMNS = [
    "model",
    "outcome",
    "term",
    "p_value",
    "q_value",
    "reject",
    "group_id",
    "method",
    "stage",
]

GROUP_COLUMNS = ["group_id", "stage", "n_tests", "method", "dependency_kind", "members"]


def records_from_frame(
    df: pd.DataFrame,
    model_col: str = "model",
    outcome_col: str = "outcome",
    term_col: str = "term",
    p_value_col: str = "p_value",
) -> List[TestRecord]:
    """Convert a results table into TestRecords, one per row.

    Raises
    ------
    ValueError
        If a required column is missing.
    """
    required = [model_col, outcome_col, term_col, p_value_col]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Results table is missing columns: {missing}")

    return [
        TestRecord(
            model=model,
            outcome=str(outcome),
            term=str(term),
            p_value=float(p_value),
        )
        for model, outcome, term, p_value in df[required].itertuples(index=False)
    ]


def qvalues_to_frame(qvalues: Iterable[QValue]) -> pd.DataFrame:
    """One row per QValue, in the given order, with ``QVALUE_COLUMNS``."""
    rows = [
        {
            "model": q.record.model,
            "outcome": q.record.outcome,
            "term": q.record.term,
            "p_value": q.record.p_value,
            "q_value": q.q_value,
            "reject": q.reject,
            "group_id": q.group_id,
            "method": q.method.value,
            "stage": q.stage,
        }
        for q in qvalues
    ]
    return pd.DataFrame(rows, columns=QVALUE_COLUMNS)


def groups_to_frame(groups: Iterable[CorrectionGroup]) -> pd.DataFrame:
    """One row per CorrectionGroup; ``members`` lists the record keys."""
    rows = [
        {
            "group_id": g.group_id,
            "stage": g.stage,
            "n_tests": g.size,
            "method": g.method.value,
            "dependency_kind": g.dependency_kind.value,
            "members": [r.key for r in g.records],
        }
        for g in groups
    ]
    return pd.DataFrame(rows, columns=GROUP_COLUMNS)


__all__ = [
    "QVALUE_COLUMNS",
    "GROUP_COLUMNS",
    "records_from_frame",
    "qvalues_to_frame",
    "groups_to_frame",
]
