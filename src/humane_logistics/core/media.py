"""Media item entity shared by every stage of the pipeline.

A ``MediaItem`` is one unit of content (a news article or a social post)
about a disaster topic.  Both variants share a single record type tagged by
:class:`MediaKind`; the ``source`` field is only meaningful for news.

Two sentinel values mark missing enrichment:

- ``sentiment == 0.0`` means "not yet scored".  A genuinely neutral score of
  exactly 0.0 is indistinguishable from an unscored item and will be
  re-scored on the next rescan.
- a ``damage_type`` that parses to ``DamageCategory.UNKNOWN`` (the member
  itself, ``None``, or any unrecognised code) means "not yet classified".

:meth:`MediaItem.needs_analysis` is the single predicate deciding whether an
item needs enrichment, at ingest time and at rescan time alike.
"""

from __future__ import annotations

import urllib.parse
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

UNANALYZED_SENTIMENT: float = 0.0


class DamageCategory(str, Enum):
    """Closed set of damage categories plus the ``UNKNOWN`` sentinel.

    Members are persisted by their code (``"FLOOD"``) and presented by their
    :attr:`display_name` (``"Flood"``).
    """

    CASUALTIES = "CASUALTIES"
    DISPLACEMENT = "DISPLACEMENT"
    HOUSING = "HOUSING"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    FLOOD = "FLOOD"
    FIRE = "FIRE"
    LANDSLIDE = "LANDSLIDE"
    ECONOMIC = "ECONOMIC"
    OTHER = "OTHER"
    UNKNOWN = "UNKNOWN"

    @property
    def display_name(self) -> str:
        """Human-readable label used as the damage-histogram key."""
        return _DISPLAY_NAMES[self]

    @classmethod
    def parse(cls, value: object) -> DamageCategory:
        """Map a stored code or a display name back to a member.

        Matching is case-insensitive.  Anything unrecognised, including
        ``None``, maps to :attr:`UNKNOWN`.
        """
        if isinstance(value, DamageCategory):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        cleaned = value.strip().upper().replace(" ", "_")
        try:
            return cls(cleaned)
        except ValueError:
            pass
        for member, display in _DISPLAY_NAMES.items():
            if display.upper() == value.strip().upper():
                return member
        return cls.UNKNOWN


_DISPLAY_NAMES: dict[DamageCategory, str] = {
    DamageCategory.CASUALTIES: "Casualties",
    DamageCategory.DISPLACEMENT: "Displacement",
    DamageCategory.HOUSING: "Damaged Housing",
    DamageCategory.INFRASTRUCTURE: "Damaged Infrastructure",
    DamageCategory.FLOOD: "Flood",
    DamageCategory.FIRE: "Fire",
    DamageCategory.LANDSLIDE: "Landslide",
    DamageCategory.ECONOMIC: "Economic Disruption",
    DamageCategory.OTHER: "Other",
    DamageCategory.UNKNOWN: "Unknown",
}


class MediaKind(str, Enum):
    """Variant discriminator for :class:`MediaItem`.

    The value doubles as the type label in daily sentiment trends.
    """

    NEWS = "news"
    SOCIAL_POST = "social_post"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MediaItem:
    """One news article or social post about a topic.

    Attributes:
        topic: Disaster/event label used as the primary query key.
        content: Text body; may be empty.
        url: Source locator, or ``None``.
        timestamp: When the item was published or observed.
        sentiment: Sentiment score; ``0.0`` is the unanalyzed sentinel.
        damage_type: Damage category; ``UNKNOWN`` is the unclassified sentinel.
        kind: ``NEWS`` or ``SOCIAL_POST``.
        source: Publisher name; only meaningful for ``NEWS``.
    """

    topic: str
    content: str = ""
    url: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    sentiment: float = UNANALYZED_SENTIMENT
    damage_type: DamageCategory = DamageCategory.UNKNOWN
    kind: MediaKind = MediaKind.NEWS
    source: str | None = None

    @classmethod
    def news(
        cls,
        topic: str,
        content: str,
        url: str | None,
        timestamp: datetime,
        source: str | None,
    ) -> MediaItem:
        """Build an unanalyzed news item."""
        return cls(
            topic=topic,
            content=content,
            url=url,
            timestamp=timestamp,
            kind=MediaKind.NEWS,
            source=source,
        )

    @classmethod
    def social_post(
        cls,
        topic: str,
        content: str,
        url: str | None,
        timestamp: datetime,
    ) -> MediaItem:
        """Build an unanalyzed social post."""
        return cls(
            topic=topic,
            content=content,
            url=url,
            timestamp=timestamp,
            kind=MediaKind.SOCIAL_POST,
        )

    def needs_analysis(self) -> bool:
        """Return True when either enrichment dimension still holds its sentinel."""
        return (
            self.sentiment == UNANALYZED_SENTIMENT
            or DamageCategory.parse(self.damage_type) is DamageCategory.UNKNOWN
        )

    def has_content(self) -> bool:
        return bool(self.content and self.content.strip())

    def has_valid_url(self) -> bool:
        """Return True if ``url`` is an absolute HTTP(S) link."""
        if not self.url:
            return False
        try:
            parsed = urllib.parse.urlparse(self.url)
        except ValueError:
            return False
        return parsed.scheme in ("http", "https") and bool(parsed.netloc)

    def content_key(self) -> str:
        """Identity used for dedup on save and matching on update.

        Exact content equality: two distinct items with identical text
        collide, and any formatting difference prevents a match.
        """
        return self.content
