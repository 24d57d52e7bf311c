from __future__ import annotations

import pytest

from correction_planner import CyclicNesting, NestingOrder
from correction_planner.nesting import group_models_by_stage


class TestNestingOrder:
    def test_chain_stages(self) -> None:
        order = NestingOrder([("y~A", "y~A+B"), ("y~A+B", "y~A*B")])
        assert order.stage_of("y~A") == 0
        assert order.stage_of("y~A+B") == 1
        assert order.stage_of("y~A*B") == 2

    def test_stage_is_longest_chain(self) -> None:
        # m3 follows m1 directly and via m2; it belongs after m2.
        order = NestingOrder([("m1", "m2"), ("m2", "m3"), ("m1", "m3")])
        assert order.stage_of("m3") == 2
        assert sorted(order.parents("m3")) == ["m1", "m2"]

    def test_models_outside_order_are_stage_zero(self) -> None:
        order = NestingOrder([("m1", "m2")])
        assert order.stage_of("other") == 0
        assert order.parents("other") == []
        assert "other" not in order

    def test_cycle_raises(self) -> None:
        with pytest.raises(CyclicNesting, match="cycle"):
            NestingOrder([("m1", "m2"), ("m2", "m3"), ("m3", "m1")])

    def test_self_nesting_raises(self) -> None:
        with pytest.raises(CyclicNesting):
            NestingOrder([("m1", "m1")])

    def test_malformed_edge_raises(self) -> None:
        with pytest.raises(ValueError, match="pairs"):
            NestingOrder([("m1", "m2", "m3")])

    def test_coerce_from_parents_mapping(self) -> None:
        order = NestingOrder.coerce({"m2": ["m1"], "m3": ["m2"]})
        assert order.stage_of("m3") == 2

    def test_coerce_none_and_existing(self) -> None:
        assert len(NestingOrder.coerce(None)) == 0
        order = NestingOrder([("m1", "m2")])
        assert NestingOrder.coerce(order) is order


def test_group_models_by_stage_keeps_first_seen_order() -> None:
    order = NestingOrder([("a", "b")])
    stages = group_models_by_stage(["b", "z", "a", "b", "z"], order)
    assert stages == {0: ["z", "a"], 1: ["b"]}
    assert list(stages) == [0, 1]


class TestNestingInputShapes:
    def test_bare_parent_in_mapping(self) -> None:
        order = NestingOrder.coerce({"y~A*B": "y~A"})
        assert order.parents("y~A*B") == ["y~A"]
        assert order.stage_of("y~A*B") == 1
        assert "y" not in order

    def test_bare_non_string_parent_in_mapping(self) -> None:
        order = NestingOrder.from_parents({2: 1})
        assert order.parents(2) == [1]

    def test_bare_pair_instead_of_edge_list_raises(self) -> None:
        with pytest.raises(ValueError, match="pairs"):
            NestingOrder.coerce(("m1", "m2"))

    @pytest.mark.parametrize("edge", ["ab", ("m1",), 3])
    def test_non_pair_edges_raise(self, edge) -> None:
        with pytest.raises(ValueError, match="pairs"):
            NestingOrder([edge])
