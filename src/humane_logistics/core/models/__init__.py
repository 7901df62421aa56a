"""ORM models for the SQL-backed media repository."""

from __future__ import annotations

from humane_logistics.core.models.base import Base
from humane_logistics.core.models.media import MediaRecord

__all__ = ["Base", "MediaRecord"]
