"""Paginate a query with opaque before/after cursors.

Flow of one call:

1. Resolve ``PaginationOptions`` against ``PaginatorDefaults`` into a
   ``Config`` (``ConfigError`` if no cursor fields were given).
2. Attach ordering, keyset boundary and ``limit + 1`` to the queryable.
3. Fetch through the executor.
4. Trim the rows to the page and derive the before/after cursors.
5. Optionally run a second, capped count query.

Nothing is shared between calls, so concurrent use is safe. Executor
errors propagate unchanged and no partial page is ever returned.

Example:
    stmt = select(Post).where(Post.published.is_(True))
    page = await paginate(
        SelectQueryable(stmt),
        PaginationOptions(cursor_fields=["inserted_at", "id"], limit=50),
        SessionExecutor(session),
    )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from keyset_pager.core.pagination.assembler import (
    after_cursor,
    before_cursor,
    cursor_for,
    paginate_entries,
)
from keyset_pager.core.pagination.config import (
    Config,
    PaginationOptions,
    PaginatorDefaults,
    SortDirection,
    normalize_cursor_field,
)
from keyset_pager.core.pagination.count import total_count
from keyset_pager.core.pagination.filters import CursorFilter
from keyset_pager.core.pagination.schemas import Page, PageMetadata
from keyset_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_pager.core.pagination.protocols import Executor, Queryable

logger = get_lazy_logger(__name__)


async def paginate(
    queryable: Queryable,
    options: PaginationOptions,
    executor: Executor,
    exec_options: Mapping[str, Any] | None = None,
    *,
    defaults: PaginatorDefaults | None = None,
) -> Page[Any]:
    """Fetch one page of ``queryable`` bounded by the given cursors.

    Args:
        queryable: Base query, already filtered
        options: Per-call options (cursors, cursor fields, limit, ...)
        executor: Runs the page and count queries
        exec_options: Passed through to every executor call
        defaults: Integration defaults that ``options`` override

    Returns:
        Page with entries in sort order and navigation metadata

    Raises:
        ConfigError: If cursor fields are missing or options are invalid
        CursorError: If a supplied cursor cannot be decoded
    """
    config = Config.new(options, defaults)
    logger.debug(
        lambda: (
            f"paginate: fields={list(config.field_names)} limit={config.limit} "
            f"after={config.after is not None} before={config.before is not None}"
        )
    )

    query = CursorFilter(config).apply(queryable)
    sorted_entries = await executor.fetch(query, exec_options)
    entries = paginate_entries(sorted_entries, config)

    count, cap_exceeded = await total_count(queryable, config, executor, exec_options)

    metadata = PageMetadata(
        before=before_cursor(entries, sorted_entries, config),
        after=after_cursor(entries, sorted_entries, config),
        limit=config.limit,
        total_count=count,
        total_count_cap_exceeded=cap_exceeded,
    )
    logger.debug(
        lambda: (
            f"paginate: fetched {len(sorted_entries)} rows -> {len(entries)} entries, "
            f"has_previous={metadata.has_previous_page} has_next={metadata.has_next_page}"
        )
    )
    return Page(entries=entries, metadata=metadata)


def cursor_for_record(record: Any, cursor_fields: Sequence[Any]) -> str:
    """Build a cursor for ``record`` without running a query.

    The result is interchangeable with the cursors ``paginate`` returns as
    long as ``cursor_fields`` matches the fields used there. Directions,
    if given, do not affect the cursor.

    Example:
        cursor = cursor_for_record(post, ["inserted_at", "id"])
        page = await paginate(..., PaginationOptions(after=cursor, ...))
    """
    fields = [normalize_cursor_field(spec, SortDirection.ASC) for spec in cursor_fields]
    return cursor_for(record, fields)


@dataclass(slots=True, frozen=True)
class Paginator:
    """Pagination bound to one integration's defaults and executor.

    Example:
        paginator = Paginator(
            executor=SessionExecutor(session),
            defaults=PaginatorDefaults.from_settings(get_pagination_settings()),
        )
        page = await paginator.paginate(
            SelectQueryable(select(Post)),
            cursor_fields=[("inserted_at", "desc"), ("id", "desc")],
            after=request_cursor,
        )
    """

    executor: Executor
    defaults: PaginatorDefaults = field(default_factory=PaginatorDefaults)

    async def paginate(
        self,
        queryable: Queryable,
        exec_options: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Page[Any]:
        """Paginate with per-call ``options`` (see ``PaginationOptions``)."""
        return await paginate(
            queryable,
            PaginationOptions(**options),
            self.executor,
            exec_options,
            defaults=self.defaults,
        )


__all__ = ["Paginator", "cursor_for_record", "paginate"]
