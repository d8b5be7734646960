"""Logging helpers.

Modules log through stdlib ``logging``; configuring handlers and levels is
up to the host application.

Basic usage:
    from keyset_pager.infra.logging import get_lazy_logger

    logger = get_lazy_logger(__name__)
    logger.debug(lambda: f"Expensive: {describe(rows)}")  # Only runs if DEBUG enabled
"""

from keyset_pager.infra.logging.lazy import LazyLoggerAdapter, get_lazy_logger

__all__ = [
    "LazyLoggerAdapter",
    "get_lazy_logger",
]
