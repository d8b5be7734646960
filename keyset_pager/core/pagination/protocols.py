"""Interfaces between the pagination engine and a storage binding.

The engine never builds or runs queries itself. It hands ordering,
boundary and limit instructions to a ``Queryable`` and runs the result
through an ``Executor``. ``keyset_pager.core.database`` implements both for
SQLAlchemy; ``keyset_pager.core.pagination.memory`` for Python sequences.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from keyset_pager.core.pagination.config import CursorField
    from keyset_pager.core.pagination.filters import KeysetPredicate


@runtime_checkable
class Queryable(Protocol):
    """A query that pagination instructions can be attached to.

    Every method returns a new queryable and leaves the receiver untouched.
    """

    def order_by_keys(self, keys: Sequence[CursorField]) -> Self:
        """Order by the given keys, replacing any existing ordering."""
        ...

    def where_keyset(self, predicate: KeysetPredicate) -> Self:
        """Add a keyset boundary filter (and-ed with existing filters)."""
        ...

    def limit_rows(self, limit: int) -> Self:
        """Return at most ``limit`` rows."""
        ...

    def count_query(self, *, limit: int | None, key_field: str | None) -> Self:
        """Build a query counting the rows of this one.

        Existing ordering, projection and eager-load instructions are
        stripped. With ``limit`` set, at most that many rows are counted.
        """
        ...


@runtime_checkable
class Executor(Protocol):
    """Runs queries produced by a ``Queryable``."""

    async def fetch(
        self, query: Any, exec_options: Mapping[str, Any] | None = None
    ) -> list[Any]:
        """Return the rows of ``query`` in the requested order."""
        ...

    async def scalar(self, query: Any, exec_options: Mapping[str, Any] | None = None) -> Any:
        """Return the single value produced by ``query``."""
        ...


__all__ = ["Executor", "Queryable"]
