"""Pagination configuration.

Three layers, resolved once per call into an immutable ``Config``:

1. ``PaginatorDefaults`` - fixed per integration (usually built from
   ``PaginationSettings``).
2. ``PaginationOptions`` - whatever the individual call asks for.
3. Built-in fallbacks (limit 50, maximum 500, count cap 10000, ascending).

Per-call options win over integration defaults, which win over fallbacks.

Example:
    defaults = PaginatorDefaults(limit=20, maximum_limit=100)
    config = Config.new(
        PaginationOptions(cursor_fields=["inserted_at", ("id", "desc")], limit=500),
        defaults,
    )
    config.limit  # 100
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final, Literal, TypeAlias

from keyset_pager.core.pagination.exceptions import ConfigError

if TYPE_CHECKING:
    from keyset_pager.core.settings.pagination import PaginationSettings

DEFAULT_LIMIT: Final = 50
DEFAULT_MAXIMUM_LIMIT: Final = 500
DEFAULT_TOTAL_COUNT_LIMIT: Final = 10_000

UNBOUNDED: Final = "infinity"
"""Sentinel for ``total_count_limit`` that disables the count cap."""

TotalCountLimit: TypeAlias = int | Literal["infinity"]


class SortDirection(StrEnum):
    """Sort direction of a single cursor field."""

    ASC = "asc"
    DESC = "desc"

    def reversed(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC

    @classmethod
    def parse(cls, value: Any) -> SortDirection:
        """Coerce "asc"/"desc" (any case) or a SortDirection."""
        if isinstance(value, SortDirection):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ConfigError(
            f"Unknown sort direction {value!r}, expected 'asc' or 'desc'",
            option="sort_direction",
        )


@dataclass(slots=True, frozen=True)
class CursorField:
    """One sort/boundary column of the cursor.

    Attributes:
        name: Field name read from records and stored in the cursor
        direction: Configured sort direction
        column: Optional SQL expression to sort on instead of resolving
            ``name`` against the statement
    """

    name: str
    direction: SortDirection = SortDirection.ASC
    column: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection.parse(self.direction))

    def with_direction(self, direction: SortDirection) -> CursorField:
        return CursorField(self.name, direction, self.column)


@dataclass(slots=True, frozen=True)
class PaginatorDefaults:
    """Integration-level defaults, constructed once and shared by every call.

    ``None`` means "use the built-in fallback".
    """

    limit: int | None = None
    maximum_limit: int | None = None
    include_total_count: bool = False
    total_count_limit: TotalCountLimit | None = None
    total_count_key_field: str | None = None
    sort_direction: SortDirection | str | None = None

    @classmethod
    def from_settings(cls, settings: PaginationSettings) -> PaginatorDefaults:
        """Build defaults from loaded ``PaginationSettings``."""
        return cls(
            limit=settings.default_limit,
            maximum_limit=settings.maximum_limit,
            include_total_count=settings.include_total_count,
            total_count_limit=(
                UNBOUNDED if settings.total_count_unbounded else settings.total_count_limit
            ),
            total_count_key_field=settings.total_count_key_field,
            sort_direction=settings.sort_direction,
        )


@dataclass(slots=True, frozen=True, kw_only=True)
class PaginationOptions:
    """Per-call pagination options. Unset (None) values fall back to defaults.

    Attributes:
        after: Fetch the records after this cursor
        before: Fetch the records before this cursor
        cursor_fields: Ordered cursor fields; bare names, ``(name, direction)``
            pairs, ``CursorField`` values or SQLAlchemy column attributes
        limit: Requested page size (capped by ``maximum_limit``)
        maximum_limit: Cap for ``limit``
        include_total_count: Also compute a (capped) total count
        total_count_limit: Count cap, or ``UNBOUNDED``
        total_count_key_field: Column projected inside the count subquery
        sort_direction: Direction for fields that do not name one
    """

    after: str | None = None
    before: str | None = None
    cursor_fields: Sequence[Any] | None = None
    limit: int | None = None
    maximum_limit: int | None = None
    include_total_count: bool | None = None
    total_count_limit: TotalCountLimit | None = None
    total_count_key_field: str | None = None
    sort_direction: SortDirection | str | None = None


@dataclass(slots=True, frozen=True)
class Config:
    """Fully resolved, immutable configuration of one pagination call."""

    cursor_fields: tuple[CursorField, ...]
    limit: int
    after: str | None = None
    before: str | None = None
    include_total_count: bool = False
    total_count_limit: TotalCountLimit = DEFAULT_TOTAL_COUNT_LIMIT
    total_count_key_field: str | None = None

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(cursor_field.name for cursor_field in self.cursor_fields)

    @property
    def is_backward(self) -> bool:
        """True when only a ``before`` cursor steers the query."""
        return self.before is not None and self.after is None

    @property
    def count_unbounded(self) -> bool:
        return self.total_count_limit == UNBOUNDED

    @classmethod
    def new(
        cls,
        options: PaginationOptions,
        defaults: PaginatorDefaults | None = None,
    ) -> Config:
        """Resolve per-call options against integration defaults.

        Raises:
            ConfigError: If cursor fields are missing or any option is invalid
        """
        defaults = defaults or PaginatorDefaults()

        if not options.cursor_fields:
            raise ConfigError(
                "expected `cursor_fields` to be set in call to paginate",
                option="cursor_fields",
            )

        direction = SortDirection.parse(
            _first_set(options.sort_direction, defaults.sort_direction, SortDirection.ASC)
        )
        cursor_fields = tuple(
            normalize_cursor_field(spec, direction) for spec in options.cursor_fields
        )

        requested = _first_set(options.limit, defaults.limit, DEFAULT_LIMIT)
        maximum = _first_set(options.maximum_limit, defaults.maximum_limit, DEFAULT_MAXIMUM_LIMIT)
        if requested < 1:
            raise ConfigError(f"limit must be positive, got {requested}", option="limit")
        if maximum < 1:
            raise ConfigError(
                f"maximum_limit must be positive, got {maximum}", option="maximum_limit"
            )

        return cls(
            cursor_fields=cursor_fields,
            limit=min(requested, maximum),
            after=options.after or None,
            before=options.before or None,
            include_total_count=_first_set(
                options.include_total_count, defaults.include_total_count, False
            ),
            total_count_limit=_resolve_count_limit(
                _first_set(
                    options.total_count_limit,
                    defaults.total_count_limit,
                    DEFAULT_TOTAL_COUNT_LIMIT,
                )
            ),
            total_count_key_field=_first_set(
                options.total_count_key_field, defaults.total_count_key_field, None
            ),
        )


def normalize_cursor_field(spec: Any, default_direction: SortDirection) -> CursorField:
    """Turn one ``cursor_fields`` entry into a ``CursorField``."""
    if isinstance(spec, CursorField):
        return spec
    if isinstance(spec, tuple):
        if len(spec) != 2:
            raise ConfigError(
                f"cursor field pairs must be (field, direction), got {spec!r}",
                option="cursor_fields",
            )
        target, direction = spec
        return _field_for(target, SortDirection.parse(direction))
    return _field_for(spec, default_direction)


def _field_for(target: Any, direction: SortDirection) -> CursorField:
    if isinstance(target, str):
        if not target:
            raise ConfigError("cursor field names must not be empty", option="cursor_fields")
        return CursorField(target, direction)
    # SQLAlchemy attributes and columns expose their name as `key`
    key = getattr(target, "key", None)
    if isinstance(key, str) and key:
        return CursorField(key, direction, target)
    raise ConfigError(f"Unsupported cursor field {target!r}", option="cursor_fields")


def _resolve_count_limit(value: Any) -> TotalCountLimit:
    if value == UNBOUNDED or (isinstance(value, float) and math.isinf(value)):
        return UNBOUNDED
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(
            f"total_count_limit must be a positive integer or {UNBOUNDED!r}, got {value!r}",
            option="total_count_limit",
        )
    return value


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_MAXIMUM_LIMIT",
    "DEFAULT_TOTAL_COUNT_LIMIT",
    "UNBOUNDED",
    "Config",
    "CursorField",
    "PaginationOptions",
    "PaginatorDefaults",
    "SortDirection",
    "normalize_cursor_field",
]
