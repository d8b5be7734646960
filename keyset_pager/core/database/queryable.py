"""SQLAlchemy binding for keyset pagination.

``SelectQueryable`` wraps a ``Select`` and translates ordering and keyset
predicates into SQL. ``SessionExecutor`` runs the statements on an
``AsyncSession``.

Usage:
    from sqlalchemy import select
    from keyset_pager.core.database import SelectQueryable, SessionExecutor

    stmt = select(Post).where(Post.author_id == author_id)
    page = await paginate(
        SelectQueryable(stmt),
        PaginationOptions(cursor_fields=[("inserted_at", "desc"), ("id", "desc")]),
        SessionExecutor(session),
    )

Cursor field names resolve against the selected ORM entities first, then
against the statement's selected (labelled) columns. Pass a column attribute
as cursor field to sort on an expression that is not selected.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, and_, func, or_, select

from keyset_pager.core.pagination.exceptions import ConfigError
from keyset_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement

    from keyset_pager.core.pagination.config import CursorField
    from keyset_pager.core.pagination.filters import FieldCondition, KeysetPredicate

logger = get_lazy_logger(__name__)


@dataclass(slots=True, frozen=True)
class SelectQueryable:
    """``Queryable`` over a SQLAlchemy ``Select`` statement.

    Attributes:
        statement: The wrapped select; every method returns a new wrapper
    """

    statement: Select[Any]

    def order_by_keys(self, keys: Sequence[CursorField]) -> SelectQueryable:
        """Replace the statement's ORDER BY with the cursor ordering."""
        statement = self.statement.order_by(None)
        for key in keys:
            column = self.column_for(key)
            statement = statement.order_by(
                column.desc() if key.direction == "desc" else column.asc()
            )
        return SelectQueryable(statement)

    def where_keyset(self, predicate: KeysetPredicate) -> SelectQueryable:
        """Add the compound seek condition.

        For columns (a, b) with cursor values (v1, v2) and an ascending
        "after" predicate:
            WHERE (a > v1) OR (a = v1 AND b > v2)
        """
        clauses = [
            and_(*(self._condition(condition) for condition in clause.conditions))
            for clause in predicate.clauses
        ]
        return SelectQueryable(self.statement.where(or_(*clauses)))

    def limit_rows(self, limit: int) -> SelectQueryable:
        return SelectQueryable(self.statement.limit(limit))

    def count_query(self, *, limit: int | None, key_field: str | None) -> SelectQueryable:
        """Build ``SELECT count(*) FROM (<base> [LIMIT n]) AS anon``.

        ORDER BY and loader options are dropped. With ``key_field`` the
        inner projection is narrowed to that column. Wrapping in a subquery
        keeps GROUP BY and DISTINCT of the base statement intact.
        """
        inner = _without_loader_options(self.statement.order_by(None))
        if key_field is not None:
            inner = inner.with_only_columns(self.column_for(key_field), maintain_column_froms=True)
        if limit is not None:
            inner = inner.limit(limit)
        return SelectQueryable(select(func.count()).select_from(inner.subquery()))

    def column_for(self, key: CursorField | str) -> ColumnElement[Any]:
        """Resolve a cursor field to a SQL expression.

        Raises:
            ConfigError: If the name matches neither an entity attribute
                nor a selected column
        """
        if not isinstance(key, str):
            if key.column is not None:
                return key.column
            key = key.name

        for description in self.statement.column_descriptions:
            entity = description.get("entity")
            if entity is not None and description.get("expr") is entity:
                attribute = getattr(entity, key, None)
                if attribute is not None and hasattr(attribute, "asc"):
                    return attribute

        column = self.statement.selected_columns.get(key)
        if column is not None:
            return column

        raise ConfigError(
            f"Cursor field {key!r} is not a column of the paginated statement",
            option="cursor_fields",
        )

    def _condition(self, condition: FieldCondition) -> ColumnElement[bool]:
        column = self.column_for(condition.field)
        if condition.op == "eq":
            return column == condition.value
        if condition.op == "gt":
            return column > condition.value
        return column < condition.value


class SessionExecutor:
    """``Executor`` running ``SelectQueryable`` statements on an ``AsyncSession``.

    ``exec_options`` are forwarded as SQLAlchemy execution options.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def fetch(
        self,
        query: SelectQueryable | Select[Any],
        exec_options: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Return ORM instances for single-entity selects, rows otherwise.

        Entity results are uniqued so joined eager loads of collections
        yield one instance per parent row.
        """
        statement = _statement(query)
        result = await self.session.execute(
            statement, execution_options=dict(exec_options or {})
        )
        if _selects_single_entity(statement):
            return list(result.unique().scalars().all())
        return list(result.all())

    async def scalar(
        self,
        query: SelectQueryable | Select[Any],
        exec_options: Mapping[str, Any] | None = None,
    ) -> Any:
        statement = _statement(query)
        result = await self.session.execute(
            statement, execution_options=dict(exec_options or {})
        )
        return result.scalar_one()


def _statement(query: SelectQueryable | Select[Any]) -> Select[Any]:
    if isinstance(query, SelectQueryable):
        return query.statement
    return query


def _selects_single_entity(statement: Select[Any]) -> bool:
    descriptions = statement.column_descriptions
    if len(descriptions) != 1:
        return False
    entity = descriptions[0].get("entity")
    return entity is not None and descriptions[0].get("expr") is entity


def _without_loader_options(statement: Select[Any]) -> Select[Any]:
    # Select has no public API to drop .options(); eager loads are
    # meaningless inside a count subquery and may not compile there.
    if not statement._with_options:
        return statement
    logger.debug("Dropping %d loader option(s) for count query", len(statement._with_options))
    stripped = statement._generate()
    stripped._with_options = ()
    return stripped


__all__ = ["SelectQueryable", "SessionExecutor"]
