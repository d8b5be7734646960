"""Page result models.

A ``Page`` is built fresh for every call and never mutated afterwards.
Framing it for a transport (JSON envelope, Link headers, GraphQL
connection) is left to the caller.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PageMetadata(BaseModel):
    """Navigation metadata of a page.

    Attributes:
        before: Cursor to fetch the previous page (None on the first page)
        after: Cursor to fetch the next page (None on the last page)
        limit: Effective page size after clamping
        total_count: Row count of the base query, capped (optional)
        total_count_cap_exceeded: Whether the real count exceeds the cap
    """

    before: str | None = Field(
        default=None,
        description="Cursor of the first entry when a previous page exists",
    )
    after: str | None = Field(
        default=None,
        description="Cursor of the last entry when a next page exists",
    )
    limit: int = Field(ge=1, description="Effective page size")
    total_count: int | None = Field(
        default=None,
        description="Total count (optional, capped)",
    )
    total_count_cap_exceeded: bool | None = Field(
        default=None,
        description="True when the total count hit its cap",
    )

    model_config = ConfigDict(frozen=True)

    @property
    def has_previous_page(self) -> bool:
        return self.before is not None

    @property
    def has_next_page(self) -> bool:
        return self.after is not None


class Page(BaseModel, Generic[T]):
    """One page of entries plus its metadata.

    Usage:
        page = await paginate(SelectQueryable(stmt), options, executor)
        for post in page.entries:
            ...
        if page.metadata.after:
            next_page = await paginate(..., PaginationOptions(after=page.metadata.after, ...))

    Attributes:
        entries: Records of this page, in sort order
        metadata: Cursors, limit and optional total count
    """

    entries: list[T] = Field(
        default_factory=list,
        description="Records of this page",
    )
    metadata: PageMetadata = Field(description="Pagination metadata")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


__all__ = ["Page", "PageMetadata"]
