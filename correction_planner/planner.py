"""Correction planning over staged, dependency-partitioned test families.

The planner turns a flat list of ``TestRecord`` into q-values:

1. Validate records (p-value range, unique keys) and the nesting order.
2. Walk the nesting stages in order. Records of a later stage are only
   planned when the stage gate admits them, i.e. a matching record of a
   directly preceding model passed ``gate_alpha`` (the same "only test
   children of rejected parents" rule as hierarchical BH procedures).
3. Inside a stage, connected components of the dependency graph become
   correction groups. Singletons are left uncorrected; larger groups get
   the caller's method, or BY when any dependency inside the group is of
   unknown kind and BH otherwise.

The dependency judgment is never inferred from the data: it comes from the
analyst as a callback or ``DependencyTable``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from . import config
from .dependencies import DependencyFn, independent
from .grouping import build_dependency_graph, partition_dependency_graph
from .multiple_testing import CorrectionMethod, apply_multiple_testing_correction
from .nesting import NestingOrder, NestingSpec, group_models_by_stage
from .records import (
    CorrectionGroup,
    DependencyKind,
    QValue,
    TestRecord,
    validate_records,
)

logger = logging.getLogger(__name__)

_GATE_STATISTICS = ("q_value", "p_value")
_GATE_KEYS = ("outcome", "outcome_term")


# =============================================================================
# Policy and result types
# =============================================================================


@dataclass(frozen=True)
class StagePolicy:
    """How earlier nesting stages gate entry into later ones.

    Attributes
    ----------
    gate_alpha : float
        Threshold the earlier-stage statistic must not exceed.
    gate_statistic : str
        ``"q_value"`` gates on the corrected earlier-stage value;
        ``"p_value"`` treats the earlier stage as an uncorrected screen.
    gate_key : str
        ``"outcome"`` matches earlier records on the same outcome;
        ``"outcome_term"`` also requires the same term.
    """

    gate_alpha: float = field(default_factory=lambda: config.STAGE_GATE_ALPHA)
    gate_statistic: str = field(default_factory=lambda: config.STAGE_GATE_STATISTIC)
    gate_key: str = field(default_factory=lambda: config.STAGE_GATE_KEY)

    def __post_init__(self) -> None:
        if not 0.0 <= self.gate_alpha <= 1.0:
            raise ValueError(f"gate_alpha must be in [0, 1], got {self.gate_alpha!r}")
        if self.gate_statistic not in _GATE_STATISTICS:
            raise ValueError(
                f"Unknown gate_statistic: {self.gate_statistic!r}. "
                f"Supported: {_GATE_STATISTICS}"
            )
        if self.gate_key not in _GATE_KEYS:
            raise ValueError(
                f"Unknown gate_key: {self.gate_key!r}. Supported: {_GATE_KEYS}"
            )

    def match_key(self, record: TestRecord) -> Tuple[str, ...]:
        if self.gate_key == "outcome":
            return (record.outcome,)
        return (record.outcome, record.term)

    def statistic(self, qvalue: QValue) -> float:
        if self.gate_statistic == "p_value":
            return qvalue.p_value
        return qvalue.q_value


@dataclass
class CorrectionPlan:
    """Full result of a planning run.

    Attributes
    ----------
    qvalues : List[QValue]
        One entry per planned record, in input order.
    groups : List[CorrectionGroup]
        Correction groups, ordered by stage then first member.
    excluded : List[TestRecord]
        Later-stage records the stage gate did not admit.
    stages : Dict[int, List[Hashable]]
        Model ids present in the input, by stage.
    """

    qvalues: List[QValue] = field(default_factory=list)
    groups: List[CorrectionGroup] = field(default_factory=list)
    excluded: List[TestRecord] = field(default_factory=list)
    stages: Dict[int, List[Hashable]] = field(default_factory=dict)

    def qvalue_for(self, record: TestRecord) -> Optional[QValue]:
        """Return the QValue planned for ``record`` (None if excluded)."""
        for qvalue in self.qvalues:
            if qvalue.record.key == record.key:
                return qvalue
        return None


# =============================================================================
# Method selection
# =============================================================================


def select_correction_method(
    group_size: int,
    dependency_kind: DependencyKind,
    override: Optional[CorrectionMethod] = None,
) -> CorrectionMethod:
    """Choose the correction method of one group.

    Singletons need no correction. Otherwise an explicit ``override`` wins;
    without one, unknown dependency selects BY and anything else BH.
    """
    if group_size <= 1:
        return CorrectionMethod.NONE
    if override is not None:
        return override
    if dependency_kind is DependencyKind.UNKNOWN:
        return CorrectionMethod.BY
    return CorrectionMethod.BH


def _parse_override(method: CorrectionMethod | str | None) -> Optional[CorrectionMethod]:
    if method is None:
        return None
    parsed = CorrectionMethod.parse(method)
    if parsed is CorrectionMethod.NONE:
        raise ValueError(
            "method override must be 'bonferroni', 'bh' or 'by'; "
            "use the default (None) for automatic selection"
        )
    return parsed


# =============================================================================
# Planner
# =============================================================================


class CorrectionPlanner:
    """Plan and apply multiple-testing corrections.

    Parameters
    ----------
    method
        Method for every multi-member group (``"bonferroni"``, ``"bh"``,
        ``"by"``). None selects per group from the dependency kinds.
        Defaults to ``config.DEFAULT_METHOD``.
    alpha
        Level for the ``reject`` flag of each QValue. Defaults to
        ``config.SIGNIFICANCE_ALPHA``.
    stage_policy
        Gating policy for nested models. Defaults to ``StagePolicy()``.

    Examples
    --------
    >>> records = [
    ...     TestRecord("m1", "y", "A", 0.01),
    ...     TestRecord("m1", "y", "B", 0.04),
    ...     TestRecord("m2", "y", "C", 0.20),
    ... ]
    >>> deps = DependencyTable([("A", "B", True)], key="term")
    >>> [q.q_value for q in CorrectionPlanner().plan(records, deps)]
    [0.02, 0.04, 0.2]
    """

    def __init__(
        self,
        method: CorrectionMethod | str | None = None,
        alpha: Optional[float] = None,
        stage_policy: Optional[StagePolicy] = None,
    ):
        if method is None:
            method = config.DEFAULT_METHOD
        self.method = _parse_override(method)
        self.alpha = float(config.SIGNIFICANCE_ALPHA if alpha is None else alpha)
        if not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha must be in [0, 1], got {self.alpha!r}")
        self.stage_policy = stage_policy or StagePolicy()

    def plan(
        self,
        records: Iterable[TestRecord],
        dependencies: Optional[DependencyFn] = None,
        nesting: NestingSpec = None,
        method: CorrectionMethod | str | None = None,
    ) -> List[QValue]:
        """Return the q-values of all planned records, in input order."""
        return self.build_plan(records, dependencies, nesting, method).qvalues

    def build_plan(
        self,
        records: Iterable[TestRecord],
        dependencies: Optional[DependencyFn] = None,
        nesting: NestingSpec = None,
        method: CorrectionMethod | str | None = None,
    ) -> CorrectionPlan:
        """Plan correction groups and compute q-values.

        Parameters
        ----------
        records
            Test records from the model-fitting step.
        dependencies
            Callback ``(a, b) -> bool | DependencyKind``, e.g. a
            ``DependencyTable``. None declares all tests independent.
        nesting
            ``NestingOrder``, mapping ``later -> earlier models``, or list of
            ``(earlier, later)`` pairs. None means no nesting.
        method
            Per-call override of the planner's method.

        Raises
        ------
        InvalidPValue, DuplicateTestRecord, CyclicNesting, UnresolvedDependency
            On a malformed analysis plan. Nothing is returned in that case.
        """
        records = validate_records(records)
        order = NestingOrder.coerce(nesting)
        override = _parse_override(method) if method is not None else self.method
        dependencies = dependencies if dependencies is not None else independent
        if not callable(dependencies):
            raise TypeError(
                f"dependencies must be callable, got {type(dependencies).__name__}"
            )

        result = CorrectionPlan(
            stages=group_models_by_stage((r.model for r in records), order)
        )
        if not records:
            return result

        indices_by_stage: Dict[int, List[int]] = defaultdict(list)
        for i, record in enumerate(records):
            indices_by_stage[order.stage_of(record.model)].append(i)

        planned: Dict[int, QValue] = {}
        # (model, match key) -> gate statistics of planned earlier records
        gate_index: Dict[Tuple[Hashable, Tuple[str, ...]], List[float]] = defaultdict(list)

        for stage in sorted(indices_by_stage):
            candidates = indices_by_stage[stage]
            if stage == 0:
                admitted = candidates
            else:
                self._warn_missing_parents(
                    stage, [records[i] for i in candidates], order, records
                )
                admitted = [
                    i for i in candidates if self._passes_gate(records[i], order, gate_index)
                ]
                admitted_set = set(admitted)
                result.excluded.extend(
                    records[i] for i in candidates if i not in admitted_set
                )
                if not admitted:
                    logger.warning(
                        "Stage %d: gate admitted none of %d records", stage, len(candidates)
                    )
                    continue

            stage_qvalues, stage_groups = self._plan_stage(
                [records[i] for i in admitted],
                dependencies,
                override,
                stage,
                first_group_id=len(result.groups),
            )
            result.groups.extend(stage_groups)

            for i, qvalue in zip(admitted, stage_qvalues):
                planned[i] = qvalue
                key = (qvalue.record.model, self.stage_policy.match_key(qvalue.record))
                gate_index[key].append(self.stage_policy.statistic(qvalue))

        result.qvalues = [planned[i] for i in range(len(records)) if i in planned]

        logger.info(
            "Planned %d of %d records in %d groups across %d stages (%d excluded by gate)",
            len(result.qvalues),
            len(records),
            len(result.groups),
            len(indices_by_stage),
            len(result.excluded),
        )
        return result

    # -------------------------------------------------------------------------

    @staticmethod
    def _warn_missing_parents(
        stage: int,
        candidates: Sequence[TestRecord],
        order: NestingOrder,
        records: Sequence[TestRecord],
    ) -> None:
        models_with_records = {r.model for r in records}
        missing: Dict[Hashable, List[Hashable]] = {}
        for model in dict.fromkeys(r.model for r in candidates):
            absent = [p for p in order.parents(model) if p not in models_with_records]
            if absent:
                missing[model] = absent
        for model, absent in missing.items():
            logger.warning(
                "Stage %d: parent model(s) %s of %r have no records; "
                "they cannot admit records of %r",
                stage,
                ", ".join(repr(p) for p in absent),
                model,
                model,
            )

    def _passes_gate(
        self,
        record: TestRecord,
        order: NestingOrder,
        gate_index: Dict[Tuple[Hashable, Tuple[str, ...]], List[float]],
    ) -> bool:
        match_key = self.stage_policy.match_key(record)
        for parent in order.parents(record.model):
            values = gate_index.get((parent, match_key), ())
            if any(v <= self.stage_policy.gate_alpha for v in values):
                return True
        return False

    def _plan_stage(
        self,
        records: Sequence[TestRecord],
        dependencies: DependencyFn,
        override: Optional[CorrectionMethod],
        stage: int,
        first_group_id: int,
    ) -> Tuple[List[QValue], List[CorrectionGroup]]:
        graph = build_dependency_graph(records, dependencies)
        components = partition_dependency_graph(graph)

        labels = np.empty(len(records), dtype=int)
        methods: Dict[int, CorrectionMethod] = {}
        groups: List[CorrectionGroup] = []

        for offset, (members, kind) in enumerate(components):
            group_id = first_group_id + offset
            group_method = select_correction_method(len(members), kind, override)
            labels[members] = group_id
            methods[group_id] = group_method
            groups.append(
                CorrectionGroup(
                    group_id=group_id,
                    stage=stage,
                    records=tuple(records[i] for i in members),
                    method=group_method,
                    dependency_kind=kind,
                )
            )
            logger.debug(
                "Stage %d group %d: %d records, dependency=%s, method=%s",
                stage,
                group_id,
                len(members),
                kind.value,
                group_method.value,
            )

        p_values = np.array([r.p_value for r in records], dtype=float)
        reject, adjusted = apply_multiple_testing_correction(
            p_values, methods, self.alpha, group_labels=labels.tolist()
        )

        qvalues = [
            QValue(
                record=record,
                q_value=float(adjusted[i]),
                group_id=int(labels[i]),
                method=methods[int(labels[i])],
                stage=stage,
                reject=bool(reject[i]),
            )
            for i, record in enumerate(records)
        ]
        return qvalues, groups


def plan(
    records: Iterable[TestRecord],
    dependencies: Optional[DependencyFn] = None,
    nesting: NestingSpec = None,
    method: CorrectionMethod | str | None = None,
    alpha: Optional[float] = None,
    stage_policy: Optional[StagePolicy] = None,
) -> List[QValue]:
    """Plan corrections with a one-off ``CorrectionPlanner``.

    See ``CorrectionPlanner.build_plan`` for the parameters.
    """
    planner = CorrectionPlanner(method=method, alpha=alpha, stage_policy=stage_policy)
    return planner.plan(records, dependencies, nesting)


__all__ = [
    "StagePolicy",
    "CorrectionPlan",
    "CorrectionPlanner",
    "select_correction_method",
    "plan",
]
