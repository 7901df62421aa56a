"""Media item ORM model.

Every stored media item lives in ``media_items``.  The ``partition`` column
carries the repository label, so several logical repositories (for example
``"News"`` and ``"Social Posts"``) can share one database while answering
their aggregate queries independently.

IMPORTANT DESIGN NOTES
----------------------
1. Rows are never deleted by the pipeline.  ``id`` is an autoincrement
   integer so that ``ORDER BY id`` reproduces insertion order, which the
   daily sentiment trend computation depends on.

2. Deduplication is by exact ``content`` equality within a partition and is
   enforced by the repository (check-then-insert), not by a unique index:
   article bodies are unbounded text and would make a poor index key.

3. ``damage_type`` stores the :class:`~humane_logistics.core.media.DamageCategory`
   code.  Unrecognised values read back as ``UNKNOWN``.

4. ``timestamp`` is stored in UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from humane_logistics.core.media import DamageCategory, MediaItem, MediaKind
from humane_logistics.core.models.base import Base


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime; naive values are taken as UTC.

    SQLite keeps no offset, so rows must be written in UTC for trend dates
    to come back on the same calendar day.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MediaRecord(Base):
    """A single persisted media item.

    Columns are grouped by concern:

    Identity
        id, partition, kind, source, url

    Payload
        topic, content, timestamp

    Enrichment
        sentiment (0.0 sentinel), damage_type (``UNKNOWN`` sentinel)
    """

    __tablename__ = "media_items"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    partition: Mapped[str] = mapped_column(sa.String(100), nullable=False, index=True)

    topic: Mapped[str] = mapped_column(sa.String(500), nullable=False, index=True)
    content: Mapped[str] = mapped_column(sa.Text, nullable=False, default="")
    url: Mapped[Optional[str]] = mapped_column(sa.String(2000), nullable=True)
    timestamp: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=True,
    )

    sentiment: Mapped[float] = mapped_column(
        sa.Float,
        nullable=False,
        default=0.0,
        server_default=sa.text("0"),
    )
    damage_type: Mapped[str] = mapped_column(
        sa.String(50),
        nullable=False,
        default=DamageCategory.UNKNOWN.value,
        server_default=DamageCategory.UNKNOWN.value,
    )

    kind: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    source: Mapped[Optional[str]] = mapped_column(sa.String(500), nullable=True)

    __table_args__ = (
        sa.Index("ix_media_items_partition_topic", "partition", "topic"),
    )

    @classmethod
    def from_item(cls, item: MediaItem, partition: str) -> MediaRecord:
        """Build an ORM row from a domain item."""
        return cls(
            partition=partition,
            topic=item.topic,
            content=item.content or "",
            url=item.url,
            timestamp=_as_utc(item.timestamp),
            sentiment=float(item.sentiment),
            damage_type=DamageCategory.parse(item.damage_type).value,
            kind=MediaKind(item.kind).value,
            source=item.source if item.kind is MediaKind.NEWS else None,
        )

    def to_item(self) -> MediaItem:
        """Build a detached domain item from this row."""
        try:
            kind = MediaKind(self.kind)
        except ValueError:
            kind = MediaKind.NEWS
        return MediaItem(
            topic=self.topic,
            content=self.content or "",
            url=self.url,
            timestamp=_as_utc(self.timestamp),  # type: ignore[arg-type]
            sentiment=float(self.sentiment or 0.0),
            damage_type=DamageCategory.parse(self.damage_type),
            kind=kind,
            source=self.source,
        )

    def __repr__(self) -> str:
        return (
            f"<MediaRecord id={self.id} partition={self.partition!r} "
            f"topic={self.topic!r} kind={self.kind!r}>"
        )
