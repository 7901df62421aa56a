"""Media repositories: the persistence and aggregate-query layer.

Available repositories:
- :class:`InMemoryMediaRepository`: list-backed reference implementation.
- :class:`SqlMediaRepository`: async SQLAlchemy adapter (PostgreSQL or
  SQLite), one logical partition per repository label.
"""

from __future__ import annotations

from humane_logistics.storage.base import DEFAULT_PENDING_PAGE_SIZE, MediaRepository
from humane_logistics.storage.memory import InMemoryMediaRepository
from humane_logistics.storage.sql import SqlMediaRepository

__all__ = [
    "DEFAULT_PENDING_PAGE_SIZE",
    "InMemoryMediaRepository",
    "MediaRepository",
    "SqlMediaRepository",
]
