"""In-memory reference implementation of :class:`MediaRepository`.

Keeps items in a list in insertion order.  Used by the test suite and as the
executable definition of the repository semantics that the SQL adapter must
match.  Stored items are copies, so callers never alias stored state.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from itertools import islice

from humane_logistics.core.media import DamageCategory, MediaItem
from humane_logistics.storage.aggregation import accumulate_daily_trends, mean_of_nonzero
from humane_logistics.storage.base import DEFAULT_PENDING_PAGE_SIZE, MediaRepository


class InMemoryMediaRepository(MediaRepository):
    """List-backed media repository.

    Args:
        items: Optional initial items, stored in the given order without
            deduplication (useful for seeding fixtures that need duplicates).
    """

    def __init__(self, items: list[MediaItem] | None = None) -> None:
        self._items: list[MediaItem] = [replace(item) for item in (items or [])]

    @property
    def items(self) -> list[MediaItem]:
        """Snapshot copies of every stored item, in insertion order."""
        return [replace(item) for item in self._items]

    async def save(self, item: MediaItem) -> bool:
        key = item.content_key()
        if any(stored.content_key() == key for stored in self._items):
            return False
        self._items.append(replace(item))
        return True

    async def update_analysis(self, item: MediaItem) -> bool:
        key = item.content_key()
        matched = False
        for stored in self._items:
            if stored.content_key() == key:
                stored.sentiment = item.sentiment
                stored.damage_type = item.damage_type
                matched = True
        return matched

    async def find_pending_by_topic(
        self,
        topic: str,
        limit: int = DEFAULT_PENDING_PAGE_SIZE,
        offset: int = 0,
    ) -> list[MediaItem]:
        pending = (
            stored for stored in self._items if stored.topic == topic and stored.needs_analysis()
        )
        return [replace(stored) for stored in islice(pending, max(0, offset), max(0, offset) + limit)]

    async def count_by_topic(self, topic: str) -> int:
        return sum(1 for stored in self._items if stored.topic == topic)

    async def average_sentiment(self, topic: str) -> float:
        return mean_of_nonzero(
            stored.sentiment for stored in self._items if stored.topic == topic
        )

    async def damage_distribution(self, topic: str) -> dict[str, int]:
        distribution: dict[str, int] = {}
        for stored in self._items:
            if stored.topic != topic:
                continue
            category = DamageCategory.parse(stored.damage_type)
            if category is DamageCategory.UNKNOWN:
                continue
            name = category.display_name
            distribution[name] = distribution.get(name, 0) + 1
        return distribution

    async def daily_sentiment_trends(self, topic: str) -> dict[str, dict[date, float]]:
        return accumulate_daily_trends(
            (stored.kind.value, stored.timestamp, stored.sentiment)
            for stored in self._items
            if stored.topic == topic
        )

    def __len__(self) -> int:
        return len(self._items)
