"""Record types exchanged with the planner.

``TestRecord`` is what the upstream model-fitting step produces, one per
hypothesis test. ``CorrectionGroup`` and ``QValue`` are the derived,
read-only outputs of a planning run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Dict, Hashable, Iterable, Tuple

from .errors import DuplicateTestRecord, InvalidPValue
from .multiple_testing.base import CorrectionMethod

RecordKey = Tuple[Hashable, str, str]


class DependencyKind(str, Enum):
    """Analyst judgment on whether two tests are dependent.

    ``POSITIVE`` covers independence-like dependence under which BH stays
    valid (positive regression dependence). ``UNKNOWN`` is arbitrary or
    unassessed dependence and requires BY.
    """

    NONE = "none"
    POSITIVE = "positive"
    UNKNOWN = "unknown"

    @property
    def is_dependent(self) -> bool:
        return self is not DependencyKind.NONE


# Strength order used when a group holds several kinds of edges.
_KIND_RANK = {
    DependencyKind.NONE: 0,
    DependencyKind.POSITIVE: 1,
    DependencyKind.UNKNOWN: 2,
}


def strongest_kind(kinds: Iterable[DependencyKind]) -> DependencyKind:
    """Return the most general dependency among ``kinds`` (NONE if empty)."""
    return max(kinds, key=_KIND_RANK.__getitem__, default=DependencyKind.NONE)


@dataclass(frozen=True)
class TestRecord:
    """One hypothesis test emitted by the model-fitting step."""

    __test__ = False  # not a pytest test class

    model: Hashable
    outcome: str
    term: str
    p_value: float

    @property
    def key(self) -> RecordKey:
        return (self.model, self.outcome, self.term)

    def validate(self) -> None:
        """Raise ``InvalidPValue`` unless ``p_value`` is a finite real in [0, 1]."""
        p = self.p_value
        if isinstance(p, bool) or not isinstance(p, Real):
            raise InvalidPValue(
                f"p-value for {self.key!r} must be a real number, got {p!r}"
            )
        if math.isnan(p) or not 0.0 <= p <= 1.0:
            raise InvalidPValue(f"p-value for {self.key!r} is outside [0, 1]: {p!r}")


@dataclass(frozen=True)
class CorrectionGroup:
    """Records corrected jointly, with the method applied to them."""

    group_id: int
    stage: int
    records: Tuple[TestRecord, ...]
    method: CorrectionMethod
    dependency_kind: DependencyKind = DependencyKind.NONE

    @property
    def size(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class QValue:
    """Corrected p-value of one planned record."""

    record: TestRecord
    q_value: float
    group_id: int
    method: CorrectionMethod
    stage: int = 0
    reject: bool = False

    @property
    def p_value(self) -> float:
        return self.record.p_value


def validate_records(records: Iterable[TestRecord]) -> Tuple[TestRecord, ...]:
    """Validate p-values and key uniqueness, returning the records as a tuple.

    Raises
    ------
    InvalidPValue
        If any p-value is not a finite real in [0, 1].
    DuplicateTestRecord
        If two records share the same (model, outcome, term) key.
    """
    records = tuple(records)
    seen: Dict[RecordKey, int] = {}
    for i, record in enumerate(records):
        record.validate()
        if record.key in seen:
            raise DuplicateTestRecord(
                f"Record {record.key!r} submitted twice "
                f"(positions {seen[record.key]} and {i})"
            )
        seen[record.key] = i
    return records


__all__ = [
    "RecordKey",
    "DependencyKind",
    "strongest_kind",
    "TestRecord",
    "CorrectionGroup",
    "QValue",
    "validate_records",
]
