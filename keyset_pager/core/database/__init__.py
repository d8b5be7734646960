"""SQLAlchemy storage binding for keyset pagination."""

from keyset_pager.core.database.queryable import SelectQueryable, SessionExecutor

__all__ = [
    "SelectQueryable",
    "SessionExecutor",
]
