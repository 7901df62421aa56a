"""Abstract base class for all media collectors.

A collector turns a topic and a date range into candidate
:class:`~humane_logistics.core.media.MediaItem` records.  Collectors are
registered with the orchestrator in order; the orchestrator asks each one
for candidates during an ingest cycle.

Example usage::

    from humane_logistics.collectors.base import MediaCollector

    class MyCollector(MediaCollector):
        collector_name = "my_source"

        async def collect(self, topic, date_from, date_to, page=1): ...
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime, time, timezone

from humane_logistics.core.media import MediaItem

logger = logging.getLogger(__name__)

DateBound = date | datetime | str | None

#: Accepted string formats for date bounds.  ``%m/%d/%Y`` is the
#: month/day/year form typed into the ingestion tool (``9/4/2024``).
_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y",
)


class MediaCollector(ABC):
    """Abstract base class for all collectors.

    Subclasses must define ``collector_name`` and implement :meth:`collect`.

    Class Attributes:
        collector_name: Short identifier used in logs and cycle reports
            (e.g. ``"google_news"``).
    """

    collector_name: str

    @abstractmethod
    async def collect(
        self,
        topic: str,
        date_from: DateBound,
        date_to: DateBound,
        page: int = 1,
    ) -> list[MediaItem]:
        """Return candidate items for *topic* published in the date range.

        Items must be unanalyzed (sentiment 0.0, damage type ``UNKNOWN``).

        Args:
            topic: Disaster/event label to search for.
            date_from: Earliest publication date (inclusive).
            date_to: Latest publication date (inclusive).
            page: 1-based result page for sources that paginate.

        Returns:
            Zero or more candidate items.

        Raises:
            CollectionError: On a transient or unrecoverable collection failure.
            CollectorRateLimitError: When the upstream source rate-limits us.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(collector_name={self.collector_name!r})"


def parse_date_bound(value: DateBound) -> datetime | None:
    """Parse a date boundary to a timezone-aware datetime.

    Args:
        value: ``date``, ``datetime``, ISO 8601 or ``M/D/YYYY`` string, or ``None``.

    Returns:
        Timezone-aware :class:`datetime` (UTC when no zone is given), or
        ``None`` when *value* is ``None`` or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    for fmt in _DATE_FORMATS:
        try:
            dt = datetime.strptime(value.strip(), fmt)
        except ValueError:
            continue
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    logger.warning("collectors: could not parse date bound '%s'", value)
    return None
