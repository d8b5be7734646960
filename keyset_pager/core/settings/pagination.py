"""Pagination settings.

Integration-wide defaults for keyset pagination. Every value can still be
overridden per call; these only fill in what a call leaves unset.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_DEFAULT_LIMIT=25, PAGINATION_MAXIMUM_LIMIT=100
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        default_limit: Page size when a call does not request one.
        maximum_limit: Hard cap applied to any requested page size.
        include_total_count: Whether pages carry a total count by default.
        total_count_limit: Ceiling for the capped total count.
        total_count_unbounded: Count every row instead of capping.
        total_count_key_field: Column projected inside the count subquery.
        sort_direction: Direction for cursor fields that do not name one.

    Example:
        settings = PaginationSettings()
        defaults = PaginatorDefaults.from_settings(settings)
    """

    default_limit: int = Field(
        default=50,
        ge=1,
        description="Default page size when limit not specified",
    )
    maximum_limit: int = Field(
        default=500,
        ge=1,
        description="Maximum allowed page size (hard limit)",
    )
    include_total_count: bool = Field(
        default=False,
        description="Include a (capped) total count in every page",
    )
    total_count_limit: int = Field(
        default=10_000,
        ge=1,
        description="Stop counting after this many rows",
    )
    total_count_unbounded: bool = Field(
        default=False,
        description="Count all rows, ignoring total_count_limit",
    )
    total_count_key_field: str | None = Field(
        default=None,
        description="Column selected inside the count subquery",
    )
    sort_direction: Literal["asc", "desc"] = Field(
        default="asc",
        description="Default direction for cursor fields",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
