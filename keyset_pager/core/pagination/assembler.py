"""Turn fetched rows into page entries and boundary cursors.

``sorted_entries`` holds up to ``limit + 1`` rows in fetch order. The extra
row only signals that another page exists; it never reaches the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from keyset_pager.core.pagination.cursor import CursorCodec

if TYPE_CHECKING:
    from collections.abc import Sequence

    from keyset_pager.core.pagination.config import Config, CursorField


def paginate_entries(sorted_entries: Sequence[Any], config: Config) -> list[Any]:
    """Trim to the page size, restoring forward order for "before" pages."""
    entries = list(sorted_entries[: config.limit])
    if config.is_backward:
        entries.reverse()
    return entries


def before_cursor(
    entries: Sequence[Any], sorted_entries: Sequence[Any], config: Config
) -> str | None:
    """Cursor for the page preceding this one, if there is one.

    Coming forward from an ``after`` cursor, a previous page always exists.
    Without any cursor this is the first page. With only ``before``, a
    previous page exists iff the fetch overflowed the limit.
    """
    if not entries:
        return None
    if config.after is not None:
        return cursor_for(entries[0], config.cursor_fields)
    if config.before is None or len(sorted_entries) <= config.limit:
        return None
    return cursor_for(entries[0], config.cursor_fields)


def after_cursor(
    entries: Sequence[Any], sorted_entries: Sequence[Any], config: Config
) -> str | None:
    """Cursor for the page following this one, if there is one."""
    if not entries:
        return None
    if config.before is not None:
        return cursor_for(entries[-1], config.cursor_fields)
    if len(sorted_entries) <= config.limit:
        return None
    return cursor_for(entries[-1], config.cursor_fields)


def cursor_for(record: Any, cursor_fields: Sequence[CursorField]) -> str:
    return CursorCodec.create_cursor(record, [field.name for field in cursor_fields])


__all__ = ["after_cursor", "before_cursor", "cursor_for", "paginate_entries"]
