"""Errors raised while planning multiple-testing corrections.

All of them describe a malformed analysis plan and subclass ``ValueError``,
so callers that already guard input validation with ``ValueError`` keep
working.
"""

from __future__ import annotations


class PlanningError(ValueError):
    """Base class for planner input errors."""


class InvalidPValue(PlanningError):
    """A raw p-value is not a finite number in [0, 1]."""


class DuplicateTestRecord(PlanningError):
    """Two records share the same (model, outcome, term) key."""


class CyclicNesting(PlanningError):
    """The model nesting order contains a cycle."""


class UnresolvedDependency(PlanningError):
    """The dependency judgment for a pair of records could not be obtained."""


__all__ = [
    "PlanningError",
    "InvalidPValue",
    "DuplicateTestRecord",
    "CyclicNesting",
    "UnresolvedDependency",
]
