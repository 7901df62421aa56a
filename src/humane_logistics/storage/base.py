"""Abstract base class for media repositories.

A repository persists :class:`~humane_logistics.core.media.MediaItem`
records with content-based deduplication and answers the four aggregate
queries the dashboard needs.  Several named repositories may coexist; the
orchestrator treats them as a federation and merges their answers.

Example usage::

    repo = InMemoryMediaRepository()
    await repo.save(item)
    pending = await repo.find_pending_by_topic("Typhoon Yagi", limit=50)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from humane_logistics.core.media import MediaItem

DEFAULT_PENDING_PAGE_SIZE: int = 50


class MediaRepository(ABC):
    """Persistence and aggregate-query contract for media items.

    Identity is exact ``content`` equality: ``save`` skips an item whose
    content is already stored and ``update_analysis`` targets the stored
    record(s) with the same content.

    All aggregate queries ignore the enrichment sentinels: sentiment values
    of 0.0 never enter an average and ``UNKNOWN`` never appears in the
    damage histogram.
    """

    @abstractmethod
    async def save(self, item: MediaItem) -> bool:
        """Insert *item* unless a record with identical content exists.

        Returns:
            True if a record was inserted, False if it was a duplicate.

        Raises:
            PersistenceError: If the write fails.
        """

    @abstractmethod
    async def update_analysis(self, item: MediaItem) -> bool:
        """Copy *item*'s sentiment and damage type onto the matching record.

        Returns:
            True if at least one stored record matched *item*'s content.

        Raises:
            PersistenceError: If the write fails.
        """

    @abstractmethod
    async def find_pending_by_topic(
        self,
        topic: str,
        limit: int = DEFAULT_PENDING_PAGE_SIZE,
        offset: int = 0,
    ) -> list[MediaItem]:
        """Return up to *limit* items for *topic* that still need analysis.

        "Needs analysis" is decided by :meth:`MediaItem.needs_analysis` on
        the item as it reads back.  Items are returned in storage order as
        detached copies; mutating them does not change the store until
        ``update_analysis`` is called.

        Args:
            topic: Topic to page through.
            limit: Maximum page size.
            offset: Number of pending items to skip from the start of the
                pending sequence, so a caller can step past items it could
                not enrich.
        """

    @abstractmethod
    async def count_by_topic(self, topic: str) -> int:
        """Return the number of stored items for *topic*."""

    @abstractmethod
    async def average_sentiment(self, topic: str) -> float:
        """Return the mean sentiment over analyzed items (0.0 excluded).

        Returns 0.0 when no item for *topic* has been scored.
        """

    @abstractmethod
    async def damage_distribution(self, topic: str) -> dict[str, int]:
        """Return ``{damage display name: count}`` for *topic*, ``UNKNOWN`` excluded."""

    @abstractmethod
    async def daily_sentiment_trends(self, topic: str) -> dict[str, dict[date, float]]:
        """Return ``{type label: {date: average}}`` for *topic*.

        Per-date values follow the pairwise running-average recurrence of
        :func:`~humane_logistics.storage.aggregation.accumulate_daily_trends`.
        """

    async def close(self) -> None:
        """Release any resources held by the repository."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
