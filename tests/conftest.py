import os
import sys

import pytest

# Ensure the project root is on sys.path so tests can import
# ``correction_planner`` without installing the package.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from correction_planner import DependencyTable, TestRecord  # noqa: E402


@pytest.fixture
def scenario_records() -> list[TestRecord]:
    """Two dependent terms of m1 and one independent term of m2."""
    return [
        TestRecord("m1", "y", "A", 0.01),
        TestRecord("m1", "y", "B", 0.04),
        TestRecord("m2", "y", "C", 0.20),
    ]


@pytest.fixture
def scenario_dependencies() -> DependencyTable:
    return DependencyTable([("A", "B", True)], key="term")
