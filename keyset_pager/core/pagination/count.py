"""Capped total count.

Counting every row of a large table costs as much as scanning it, so by
default the count stops at ``total_count_limit + 1`` rows. The caller gets
``min(count, total_count_limit)`` plus a flag saying whether the real count
is larger.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from keyset_pager.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_pager.core.pagination.config import Config
    from keyset_pager.core.pagination.protocols import Executor, Queryable

logger = get_lazy_logger(__name__)


async def total_count(
    queryable: Queryable,
    config: Config,
    executor: Executor,
    exec_options: Mapping[str, Any] | None = None,
) -> tuple[int | None, bool | None]:
    """Count rows of the base query.

    Args:
        queryable: Base query, before any pagination was applied
        config: Resolved pagination config
        executor: Runs the count query
        exec_options: Passed through to the executor

    Returns:
        ``(None, None)`` when no count was requested, otherwise
        ``(count, cap_exceeded)``
    """
    if not config.include_total_count:
        return None, None

    if config.count_unbounded:
        query = queryable.count_query(limit=None, key_field=config.total_count_key_field)
        result = int(await executor.scalar(query, exec_options))
        logger.debug("Counted %s rows (unbounded)", result)
        return result, False

    cap = config.total_count_limit
    query = queryable.count_query(limit=cap + 1, key_field=config.total_count_key_field)
    result = int(await executor.scalar(query, exec_options))
    logger.debug("Counted %s rows (cap %s)", result, cap)
    return min(result, cap), result > cap


__all__ = ["total_count"]
