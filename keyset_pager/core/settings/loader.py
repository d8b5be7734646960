"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Testing:
    In tests, clear the cache to force reload:
    clear_settings_cache()

    Or construct settings directly:
    settings = PaginationSettings(default_limit=10)
"""

from __future__ import annotations

from functools import lru_cache

from .pagination import PaginationSettings


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings.

    Returns:
        Validated and frozen PaginationSettings instance.
    """
    return PaginationSettings()


def clear_settings_cache() -> None:
    """Clear every cached settings instance."""
    get_pagination_settings.cache_clear()
