"""Pydantic Settings v2 configuration.

Import settings via the cached loader:
    from keyset_pager.core.settings import get_pagination_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .loader import clear_settings_cache, get_pagination_settings
from .pagination import PaginationSettings

__all__ = [
    "PaginationSettings",
    "clear_settings_cache",
    "get_pagination_settings",
]
