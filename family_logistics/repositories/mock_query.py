"""
Client-Side Query Builder.

Lets a ``find_all`` query callback written against the PostgREST request
builder (``q.eq(...).in_(...).order(...)``) run unchanged against the
rows of a local table.  Calls are recorded in order and replayed by
:meth:`MockQueryBuilder.apply`:

1. filters, in call order
2. ordering, stable; ``None`` values last when ascending and first when
   descending unless ``nullsfirst`` says otherwise
3. limit

Only the chained subset listed below is supported; any other attribute
raises ``AttributeError``, which the engine reports as an ``ApiError``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Optional

Row = dict[str, Any]
Predicate = Callable[[Row], bool]


def _like_pattern(pattern: str, *, ignore_case: bool) -> re.Pattern[str]:
    regex = "".join(".*" if ch == "%" else re.escape(ch) for ch in pattern)
    return re.compile(f"^{regex}$", re.IGNORECASE if ignore_case else 0)


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(left: Any, right: Any) -> bool:
        if left is None or right is None:
            return False
        try:
            return op(left, right)
        except TypeError:
            return op(str(left), str(right))

    return check


_GT = _compare(lambda a, b: a > b)
_GTE = _compare(lambda a, b: a >= b)
_LT = _compare(lambda a, b: a < b)
_LTE = _compare(lambda a, b: a <= b)


class MockQueryBuilder:
    """Records PostgREST-style filter calls for client-side evaluation."""

    def __init__(self) -> None:
        self._predicates: list[Predicate] = []
        self._orderings: list[tuple[str, bool, bool]] = []
        self._limit: Optional[int] = None

    # -- filters --------------------------------------------------------------

    def _where(self, predicate: Predicate) -> "MockQueryBuilder":
        self._predicates.append(predicate)
        return self

    def select(self, *_columns: str, **_kwargs: Any) -> "MockQueryBuilder":
        return self

    def eq(self, column: str, value: Any) -> "MockQueryBuilder":
        return self._where(lambda row: row.get(column) == value)

    def neq(self, column: str, value: Any) -> "MockQueryBuilder":
        return self._where(lambda row: row.get(column) != value)

    def gt(self, column: str, value: Any) -> "MockQueryBuilder":
        return self._where(lambda row: _GT(row.get(column), value))

    def gte(self, column: str, value: Any) -> "MockQueryBuilder":
        return self._where(lambda row: _GTE(row.get(column), value))

    def lt(self, column: str, value: Any) -> "MockQueryBuilder":
        return self._where(lambda row: _LT(row.get(column), value))

    def lte(self, column: str, value: Any) -> "MockQueryBuilder":
        return self._where(lambda row: _LTE(row.get(column), value))

    def in_(self, column: str, values: Iterable[Any]) -> "MockQueryBuilder":
        allowed = list(values)
        return self._where(lambda row: row.get(column) in allowed)

    def is_(self, column: str, value: Any) -> "MockQueryBuilder":
        expected = None if value in (None, "null") else value
        return self._where(lambda row: row.get(column) is expected or row.get(column) == expected)

    def like(self, column: str, pattern: str) -> "MockQueryBuilder":
        compiled = _like_pattern(pattern, ignore_case=False)
        return self._where(lambda row: bool(compiled.match(str(row.get(column, "")))))

    def ilike(self, column: str, pattern: str) -> "MockQueryBuilder":
        compiled = _like_pattern(pattern, ignore_case=True)
        return self._where(lambda row: bool(compiled.match(str(row.get(column, "")))))

    # -- shaping --------------------------------------------------------------

    def order(
        self,
        column: str,
        *,
        desc: bool = False,
        nullsfirst: Optional[bool] = None,
        **_kwargs: Any,
    ) -> "MockQueryBuilder":
        nulls_first = desc if nullsfirst is None else nullsfirst
        self._orderings.append((column, desc, nulls_first))
        return self

    def limit(self, size: int, **_kwargs: Any) -> "MockQueryBuilder":
        self._limit = size
        return self

    def single(self) -> "MockQueryBuilder":
        return self

    def maybe_single(self) -> "MockQueryBuilder":
        return self

    # -- evaluation -----------------------------------------------------------

    def apply(self, rows: Sequence[Row]) -> list[Row]:
        result = [row for row in rows if all(check(row) for check in self._predicates)]
        # Sort by the last key first so earlier order() calls take precedence.
        for column, desc, nulls_first in reversed(self._orderings):
            present = [row for row in result if row.get(column) is not None]
            missing = [row for row in result if row.get(column) is None]
            present.sort(key=lambda row: row[column], reverse=desc)
            result = missing + present if nulls_first else present + missing
        if self._limit is not None:
            result = result[: self._limit]
        return result
