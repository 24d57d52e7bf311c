"""Multiple-comparison correction planning.

Partitions hypothesis tests into correction families from analyst-supplied
dependency judgments and a model nesting order, then applies Bonferroni,
Benjamini-Hochberg or Benjamini-Yekutieli within each family.
"""

from .errors import (
    PlanningError,
    InvalidPValue,
    DuplicateTestRecord,
    CyclicNesting,
    UnresolvedDependency,
)
from .records import (
    DependencyKind,
    TestRecord,
    CorrectionGroup,
    QValue,
    validate_records,
)
from .multiple_testing import CorrectionMethod, adjust_p_values
from .dependencies import DependencyTable, independent, resolve_dependency
from .nesting import NestingOrder
from .planner import (
    StagePolicy,
    CorrectionPlan,
    CorrectionPlanner,
    select_correction_method,
    plan,
)
from .reporting import groups_to_frame, qvalues_to_frame, records_from_frame

__all__ = [
    # Errors
    "PlanningError",
    "InvalidPValue",
    "DuplicateTestRecord",
    "CyclicNesting",
    "UnresolvedDependency",
    # Records
    "DependencyKind",
    "TestRecord",
    "CorrectionGroup",
    "QValue",
    "validate_records",
    # Correction
    "CorrectionMethod",
    "adjust_p_values",
    # Dependency knowledge
    "DependencyTable",
    "independent",
    "resolve_dependency",
    # Planning
    "NestingOrder",
    "StagePolicy",
    "CorrectionPlan",
    "CorrectionPlanner",
    "select_correction_method",
    "plan",
    # Reporting
    "groups_to_frame",
    "qvalues_to_frame",
    "records_from_frame",
]
