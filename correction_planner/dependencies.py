"""Analyst-supplied dependency judgments between tests.

Dependency between two tests cannot be inferred from the p-values; it is
domain knowledge. The planner accepts it either as a callback
``(TestRecord, TestRecord) -> bool | DependencyKind`` or as a
``DependencyTable``, which is itself such a callback.
"""

from __future__ import annotations

from typing import Callable, Dict, FrozenSet, Hashable, Iterable, Tuple, Union

import numpy as np

from .errors import UnresolvedDependency
from .records import DependencyKind, TestRecord

DependencyResult = Union[bool, None, DependencyKind]
DependencyFn = Callable[[TestRecord, TestRecord], DependencyResult]

_KEY_FUNCTIONS: Dict[str, Callable[[TestRecord], Hashable]] = {
    "record": lambda r: r.key,
    "outcome": lambda r: r.outcome,
    "term": lambda r: r.term,
}


def _as_kind(value: object) -> DependencyKind | None:
    if isinstance(value, DependencyKind):
        return value
    if value is None:
        return DependencyKind.NONE
    if isinstance(value, (bool, np.bool_)):
        return DependencyKind.POSITIVE if value else DependencyKind.NONE
    if isinstance(value, str):
        try:
            return DependencyKind(value.strip().lower())
        except ValueError:
            return None
    return None


def resolve_dependency(fn: DependencyFn, a: TestRecord, b: TestRecord) -> DependencyKind:
    """Ask ``fn`` for the dependency between ``a`` and ``b``.

    ``True`` maps to ``POSITIVE``, ``False``/``None`` to ``NONE``.

    Raises
    ------
    UnresolvedDependency
        If ``fn`` raises, or returns something that is not a judgment.
    """
    try:
        value = fn(a, b)
    except UnresolvedDependency:
        raise
    except Exception as exc:
        raise UnresolvedDependency(
            f"Dependency function failed for {a.key!r} / {b.key!r}: {exc}"
        ) from exc

    kind = _as_kind(value)
    if kind is None:
        raise UnresolvedDependency(
            f"Dependency function returned {value!r} for {a.key!r} / {b.key!r}; "
            "expected a bool or DependencyKind"
        )
    return kind


class DependencyTable:
    """Symmetric lookup table of dependency judgments.

    Parameters
    ----------
    assertions
        Iterable of ``(a, b, kind)`` triples. ``a`` and ``b`` are keys in the
        space selected by ``key``; ``kind`` is a bool or ``DependencyKind``.
    key
        ``"record"`` to key on ``(model, outcome, term)``, ``"outcome"`` to
        key on outcome variables, ``"term"`` to key on predictor terms.
    default
        Judgment returned for pairs not in the table.
    strict
        If True, pairs not in the table raise ``UnresolvedDependency``.

    Examples
    --------
    >>> table = DependencyTable(key="term")
    >>> table.add("A", "B", DependencyKind.UNKNOWN)
    >>> table(TestRecord("m1", "y", "A", 0.01), TestRecord("m1", "y", "B", 0.04))
    <DependencyKind.UNKNOWN: 'unknown'>
    """

    def __init__(
        self,
        assertions: Iterable[Tuple[Hashable, Hashable, DependencyResult]] = (),
        key: str = "record",
        default: DependencyResult = DependencyKind.NONE,
        strict: bool = False,
    ):
        if key not in _KEY_FUNCTIONS:
            raise ValueError(
                f"Unknown dependency key: {key!r}. "
                f"Supported keys: {sorted(_KEY_FUNCTIONS)}"
            )
        self.key = key
        resolved_default = _as_kind(default)
        if resolved_default is None:
            raise ValueError(f"Invalid dependency kind for default: {default!r}")
        self.default = resolved_default
        self.strict = strict
        self._key_fn = _KEY_FUNCTIONS[key]
        self._table: Dict[FrozenSet[Hashable], DependencyKind] = {}
        for a, b, kind in assertions:
            self.add(a, b, kind)

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[Tuple[Hashable, Hashable]],
        kind: DependencyKind = DependencyKind.POSITIVE,
        **kwargs,
    ) -> "DependencyTable":
        """Build a table marking every pair in ``pairs`` with the same ``kind``."""
        return cls(((a, b, kind) for a, b in pairs), **kwargs)

    def add(self, a: Hashable, b: Hashable, kind: DependencyResult) -> None:
        resolved = _as_kind(kind)
        if resolved is None:
            raise ValueError(f"Invalid dependency kind for ({a!r}, {b!r}): {kind!r}")
        self._table[frozenset((a, b))] = resolved

    def lookup(self, a: Hashable, b: Hashable) -> DependencyKind:
        pair = frozenset((a, b))
        if pair in self._table:
            return self._table[pair]
        if self.strict:
            raise UnresolvedDependency(f"No dependency judgment for ({a!r}, {b!r})")
        return self.default

    def __call__(self, a: TestRecord, b: TestRecord) -> DependencyKind:
        return self.lookup(self._key_fn(a), self._key_fn(b))

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return (
            f"DependencyTable(key={self.key!r}, n_assertions={len(self)}, "
            f"default={self.default.value!r}, strict={self.strict})"
        )


def independent(a: TestRecord, b: TestRecord) -> DependencyKind:
    """Dependency function declaring every pair independent."""
    return DependencyKind.NONE


__all__ = [
    "DependencyFn",
    "DependencyResult",
    "DependencyTable",
    "independent",
    "resolve_dependency",
]
