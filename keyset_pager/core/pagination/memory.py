"""In-memory ``Queryable``/``Executor`` over a Python sequence.

Useful for paging collections that are already loaded (API responses,
cached lists) and as a reference binding in tests. Records may be mappings
or objects; fields are read the same way cursors read them.

NULL handling follows SQL: ``None`` sorts first in ascending order, equals
only ``None``, and never satisfies a strict comparison.

Example:
    rows = [{"id": 1}, {"id": 2}, {"id": 3}]
    page = await paginate(
        MemoryQueryable(rows),
        PaginationOptions(cursor_fields=["id"], limit=2),
        MemoryExecutor(),
    )
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Self

from keyset_pager.core.pagination.cursor import read_field
from keyset_pager.core.pagination.exceptions import CursorError

if TYPE_CHECKING:
    from keyset_pager.core.pagination.config import CursorField
    from keyset_pager.core.pagination.filters import FieldCondition, KeysetPredicate


@dataclass(slots=True, frozen=True)
class MemoryQueryable:
    """Immutable query over an in-memory sequence of records.

    Attributes:
        records: Source records, already filtered by the caller
        ordering: Sort keys, most significant first
        predicates: Keyset predicates, and-ed
        limit: Maximum rows returned
    """

    records: Sequence[Any]
    ordering: tuple[CursorField, ...] = ()
    predicates: tuple[KeysetPredicate, ...] = ()
    limit: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))

    def order_by_keys(self, keys: Sequence[CursorField]) -> Self:
        return replace(self, ordering=tuple(keys))

    def where_keyset(self, predicate: KeysetPredicate) -> Self:
        return replace(self, predicates=(*self.predicates, predicate))

    def limit_rows(self, limit: int) -> Self:
        return replace(self, limit=limit)

    def count_query(self, *, limit: int | None, key_field: str | None) -> Self:
        # Projection is irrelevant here, so key_field has nothing to narrow
        return replace(self, ordering=(), limit=limit)

    def rows(self) -> list[Any]:
        """Evaluate filters, ordering and limit."""
        rows = [record for record in self.records if self._matches(record)]
        for key in reversed(self.ordering):
            rows.sort(key=_sort_key(key.name), reverse=key.direction == "desc")
        if self.limit is not None:
            rows = rows[: self.limit]
        return rows

    def _matches(self, record: Any) -> bool:
        return all(
            any(
                all(_holds(condition, record) for condition in clause.conditions)
                for clause in predicate.clauses
            )
            for predicate in self.predicates
        )


class MemoryExecutor:
    """Executor for ``MemoryQueryable``; ``exec_options`` are ignored."""

    async def fetch(
        self, query: MemoryQueryable, exec_options: Mapping[str, Any] | None = None
    ) -> list[Any]:
        return query.rows()

    async def scalar(
        self, query: MemoryQueryable, exec_options: Mapping[str, Any] | None = None
    ) -> int:
        return len(query.rows())


def _holds(condition: FieldCondition, record: Any) -> bool:
    value = read_field(record, condition.field.name)
    if condition.op == "eq":
        return value == condition.value
    if value is None or condition.value is None:
        return False
    try:
        if condition.op == "gt":
            return value > condition.value
        return value < condition.value
    except TypeError as e:
        raise CursorError(
            "type_mismatch",
            f"Cursor value {condition.value!r} is not comparable with "
            f"field {condition.field.name!r}",
        ) from e


def _sort_key(name: str) -> Callable[[Any], tuple[bool, Any]]:
    def key(record: Any) -> tuple[bool, Any]:
        value = read_field(record, name)
        return (value is not None, value)

    return key


__all__ = ["MemoryExecutor", "MemoryQueryable"]
