"""Keyset (cursor) pagination for sorted, queryable record sets."""

__version__ = "0.1.0"
