from __future__ import annotations

import math

import numpy as np
import pytest

from correction_planner import (
    DependencyKind,
    DependencyTable,
    DuplicateTestRecord,
    InvalidPValue,
    PlanningError,
    TestRecord,
    UnresolvedDependency,
    independent,
    resolve_dependency,
    validate_records,
)
from correction_planner.records import strongest_kind


# =============================================================================
# TestRecord validation
# =============================================================================


class TestRecordValidation:
    def test_key(self) -> None:
        assert TestRecord("m1", "y", "A", 0.5).key == ("m1", "y", "A")

    def test_records_are_immutable(self) -> None:
        record = TestRecord("m1", "y", "A", 0.5)
        with pytest.raises(AttributeError):
            record.p_value = 0.1  # type: ignore[misc]

    @pytest.mark.parametrize("p", [0.0, 1.0, 0.5, np.float64(0.2)])
    def test_valid_p_values_accepted(self, p: float) -> None:
        TestRecord("m1", "y", "A", p).validate()

    @pytest.mark.parametrize("p", [-0.01, 1.0001, math.nan, math.inf, "0.1", None, True])
    def test_invalid_p_values_rejected(self, p) -> None:
        with pytest.raises(InvalidPValue):
            TestRecord("m1", "y", "A", p).validate()

    def test_errors_are_value_errors(self) -> None:
        assert issubclass(InvalidPValue, PlanningError)
        assert issubclass(PlanningError, ValueError)

    def test_validate_records_rejects_duplicates(self) -> None:
        records = [
            TestRecord("m1", "y", "A", 0.01),
            TestRecord("m1", "y", "B", 0.02),
            TestRecord("m1", "y", "A", 0.30),
        ]
        with pytest.raises(DuplicateTestRecord, match="positions 0 and 2"):
            validate_records(records)

    def test_validate_records_returns_tuple_in_order(self) -> None:
        records = [TestRecord("m1", "y", "B", 0.2), TestRecord("m1", "y", "A", 0.1)]
        assert validate_records(iter(records)) == tuple(records)


def test_strongest_kind_orders_none_positive_unknown() -> None:
    assert strongest_kind([]) is DependencyKind.NONE
    assert strongest_kind([DependencyKind.POSITIVE, DependencyKind.NONE]) is DependencyKind.POSITIVE
    assert (
        strongest_kind([DependencyKind.POSITIVE, DependencyKind.UNKNOWN])
        is DependencyKind.UNKNOWN
    )


# =============================================================================
# Dependency resolution
# =============================================================================


class TestResolveDependency:
    a = TestRecord("m1", "y", "A", 0.01)
    b = TestRecord("m1", "y", "B", 0.04)

    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, DependencyKind.POSITIVE),
            (False, DependencyKind.NONE),
            (None, DependencyKind.NONE),
            (DependencyKind.UNKNOWN, DependencyKind.UNKNOWN),
            ("unknown", DependencyKind.UNKNOWN),
        ],
    )
    def test_normalizes_results(self, value, expected: DependencyKind) -> None:
        assert resolve_dependency(lambda a, b: value, self.a, self.b) is expected

    def test_raising_function_is_unresolved(self) -> None:
        def broken(a: TestRecord, b: TestRecord) -> bool:
            raise KeyError(b.term)

        with pytest.raises(UnresolvedDependency, match="failed") as excinfo:
            resolve_dependency(broken, self.a, self.b)
        assert isinstance(excinfo.value.__cause__, KeyError)

    def test_non_judgment_result_is_unresolved(self) -> None:
        with pytest.raises(UnresolvedDependency, match="expected a bool"):
            resolve_dependency(lambda a, b: 0.7, self.a, self.b)

    def test_independent(self) -> None:
        assert independent(self.a, self.b) is DependencyKind.NONE


class TestDependencyTable:
    def test_lookup_is_symmetric(self) -> None:
        table = DependencyTable([("A", "B", DependencyKind.UNKNOWN)], key="term")
        a = TestRecord("m1", "y", "A", 0.01)
        b = TestRecord("m2", "z", "B", 0.04)
        assert table(a, b) is DependencyKind.UNKNOWN
        assert table(b, a) is DependencyKind.UNKNOWN

    def test_keyed_by_outcome(self) -> None:
        table = DependencyTable([("gene1", "gene2", True)], key="outcome")
        a = TestRecord("m1", "gene1", "A", 0.01)
        b = TestRecord("m1", "gene2", "A", 0.02)
        c = TestRecord("m1", "gene3", "A", 0.03)
        assert table(a, b) is DependencyKind.POSITIVE
        assert table(a, c) is DependencyKind.NONE

    def test_keyed_by_record(self) -> None:
        a = TestRecord("m1", "y", "A", 0.01)
        b = TestRecord("m2", "y", "A", 0.02)
        table = DependencyTable([(a.key, b.key, True)])
        assert table(a, b) is DependencyKind.POSITIVE

    def test_default_for_missing_pairs(self) -> None:
        table = DependencyTable(key="term", default=DependencyKind.UNKNOWN)
        a = TestRecord("m1", "y", "A", 0.01)
        b = TestRecord("m1", "y", "B", 0.02)
        assert table(a, b) is DependencyKind.UNKNOWN

    def test_strict_table_raises_for_missing_pairs(self) -> None:
        table = DependencyTable([("A", "B", False)], key="term", strict=True)
        a = TestRecord("m1", "y", "A", 0.01)
        c = TestRecord("m1", "y", "C", 0.02)
        with pytest.raises(UnresolvedDependency):
            table(a, c)

    def test_from_pairs(self) -> None:
        table = DependencyTable.from_pairs(
            [("A", "B"), ("B", "C")], kind=DependencyKind.UNKNOWN, key="term"
        )
        assert len(table) == 2
        assert table.lookup("C", "B") is DependencyKind.UNKNOWN

    def test_unknown_key_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown dependency key"):
            DependencyTable(key="model")

    def test_invalid_kind_raises(self) -> None:
        table = DependencyTable(key="term")
        with pytest.raises(ValueError, match="Invalid dependency kind"):
            table.add("A", "B", 3)


class TestDependencyTableDefault:
    def test_bool_default_is_normalized(self) -> None:
        table = DependencyTable(key="term", default=True)
        a = TestRecord("m1", "y", "A", 0.01)
        b = TestRecord("m1", "y", "B", 0.02)
        assert table(a, b) is DependencyKind.POSITIVE

    def test_string_default_is_normalized(self) -> None:
        assert DependencyTable(default="unknown").default is DependencyKind.UNKNOWN

    def test_invalid_default_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid dependency kind"):
            DependencyTable(default=0.5)
