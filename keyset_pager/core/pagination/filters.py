"""Keyset boundary filter and ordering.

Implements the seek method: instead of OFFSET, the query is filtered to the
rows strictly past the cursor under a lexicographic multi-column compare.

For ORDER BY created_at DESC, id ASC with an ``after`` cursor at (t1, id1):
    WHERE (created_at < t1) OR (created_at = t1 AND id > id1)

A ``before`` cursor flips every comparison and, when it is the only cursor,
the ordering as well: "the N rows just before X" becomes "the first N rows
after X in reverse order", which a forward scan can answer. The page
assembler flips those rows back.

The predicates here are plain data; each storage binding translates them
into its own filter expressions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

from keyset_pager.core.pagination.cursor import CursorCodec
from keyset_pager.core.pagination.exceptions import CursorError
from keyset_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from keyset_pager.core.pagination.config import Config, CursorField
    from keyset_pager.core.pagination.protocols import Queryable

logger = get_lazy_logger(__name__)

Operator: TypeAlias = Literal["eq", "gt", "lt"]
Sense: TypeAlias = Literal["after", "before"]


@dataclass(slots=True, frozen=True)
class FieldCondition:
    """``field <op> value`` for one cursor field."""

    field: CursorField
    op: Operator
    value: Any


@dataclass(slots=True, frozen=True)
class KeysetClause:
    """Equalities on the leading fields and-ed with one strict comparison."""

    equalities: tuple[FieldCondition, ...]
    comparison: FieldCondition

    @property
    def conditions(self) -> tuple[FieldCondition, ...]:
        return (*self.equalities, self.comparison)


@dataclass(slots=True, frozen=True)
class KeysetPredicate:
    """Disjunction of clauses selecting rows strictly after/before a cursor."""

    sense: Sense
    clauses: tuple[KeysetClause, ...]


def comparison_operator(field: CursorField, sense: Sense) -> Operator:
    """Strict operator for a field: ``gt`` for asc+after or desc+before."""
    ascending = field.direction == "asc"
    if sense == "after":
        return "gt" if ascending else "lt"
    return "lt" if ascending else "gt"


def build_keyset_predicate(
    fields: Sequence[CursorField],
    values: Sequence[Any],
    sense: Sense,
) -> KeysetPredicate:
    """Build the lexicographic boundary predicate for decoded cursor values.

    For fields (a, b, c) and values (v1, v2, v3):
        (a op v1) OR
        (a = v1 AND b op v2) OR
        (a = v1 AND b = v2 AND c op v3)

    Raises:
        CursorError: If the number of values does not match the fields
    """
    if len(values) != len(fields):
        raise CursorError(
            "field_mismatch",
            f"Cursor has {len(values)} values but {len(fields)} cursor fields are configured",
        )

    clauses = []
    for i, (field, value) in enumerate(zip(fields, values, strict=True)):
        equalities = tuple(
            FieldCondition(fields[j], "eq", values[j]) for j in range(i)
        )
        comparison = FieldCondition(field, comparison_operator(field, sense), value)
        clauses.append(KeysetClause(equalities, comparison))

    return KeysetPredicate(sense, tuple(clauses))


class CursorFilter:
    """Derive ordering, boundary filter and fetch limit from a ``Config``.

    Example:
        cursor_filter = CursorFilter(config)
        query = cursor_filter.apply(SelectQueryable(select(Post)))

        # The filter adds:
        # 1. ORDER BY for every cursor field (reversed for "before" only)
        # 2. WHERE conditions to seek past the cursor(s)
        # 3. LIMIT of page size + 1 to detect further pages

    Attributes:
        config: Resolved pagination config
        ordering: Cursor fields with their effective sort direction
        predicates: Boundary predicates, and-ed together
        fetch_limit: Rows to fetch (limit + 1)
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.ordering = self._ordering()
        self.predicates = self._predicates()
        self.fetch_limit = config.limit + 1

    def apply(self, queryable: Queryable) -> Queryable:
        """Attach ordering, boundary filter and limit to ``queryable``."""
        query = queryable.order_by_keys(self.ordering)
        for predicate in self.predicates:
            query = query.where_keyset(predicate)
        return query.limit_rows(self.fetch_limit)

    def _ordering(self) -> tuple[CursorField, ...]:
        fields = self.config.cursor_fields
        if self.config.is_backward:
            return tuple(field.with_direction(field.direction.reversed()) for field in fields)
        return fields

    def _predicates(self) -> tuple[KeysetPredicate, ...]:
        predicates = []
        if self.config.after is not None:
            predicates.append(self._predicate(self.config.after, "after"))
        if self.config.before is not None:
            predicates.append(self._predicate(self.config.before, "before"))
        return tuple(predicates)

    def _predicate(self, cursor: str, sense: Sense) -> KeysetPredicate:
        values = CursorCodec.decode(cursor)
        logger.debug(lambda: f"Seeking {sense} {dict(zip(self.config.field_names, values))}")
        return build_keyset_predicate(self.config.cursor_fields, values, sense)


__all__ = [
    "CursorFilter",
    "FieldCondition",
    "KeysetClause",
    "KeysetPredicate",
    "build_keyset_predicate",
    "comparison_operator",
]
