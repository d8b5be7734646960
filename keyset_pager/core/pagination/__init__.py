"""Keyset (cursor) pagination.

This package paginates an already filtered query with opaque cursors:
- Stable: Pages don't shift when rows are inserted ahead of the cursor
- Performant: Uses indexed seeks instead of OFFSET scans
- Bounded: The optional total count stops at a configurable cap

Usage:
    from keyset_pager.core.database import SelectQueryable, SessionExecutor
    from keyset_pager.core.pagination import PaginationOptions, paginate

    page = await paginate(
        SelectQueryable(select(Post).order_by(Post.inserted_at, Post.id)),
        PaginationOptions(cursor_fields=["inserted_at", "id"], limit=50, after=cursor),
        SessionExecutor(session),
    )
    page.entries            # at most 50 posts
    page.metadata.after     # cursor for the next page, None on the last one

Cursors are opaque URL-safe strings that clients pass back unchanged.
"""

from keyset_pager.core.pagination.config import (
    UNBOUNDED,
    Config,
    CursorField,
    PaginationOptions,
    PaginatorDefaults,
    SortDirection,
)
from keyset_pager.core.pagination.cursor import CursorCodec
from keyset_pager.core.pagination.exceptions import (
    ConfigError,
    CursorError,
    PaginationError,
)
from keyset_pager.core.pagination.filters import CursorFilter, KeysetPredicate
from keyset_pager.core.pagination.memory import MemoryExecutor, MemoryQueryable
from keyset_pager.core.pagination.paginator import Paginator, cursor_for_record, paginate
from keyset_pager.core.pagination.protocols import Executor, Queryable
from keyset_pager.core.pagination.schemas import Page, PageMetadata

__all__ = [
    "UNBOUNDED",
    # Configuration
    "Config",
    "ConfigError",
    # Cursor utilities
    "CursorCodec",
    "CursorError",
    "CursorField",
    # Predicate building
    "CursorFilter",
    # Interfaces
    "Executor",
    "KeysetPredicate",
    # In-memory binding
    "MemoryExecutor",
    "MemoryQueryable",
    # Result schemas
    "Page",
    "PageMetadata",
    "PaginationError",
    "PaginationOptions",
    # Entry points
    "Paginator",
    "PaginatorDefaults",
    "Queryable",
    "SortDirection",
    "cursor_for_record",
    "paginate",
]
