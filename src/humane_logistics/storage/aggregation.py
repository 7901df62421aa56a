"""Pure aggregation helpers shared by every repository and the orchestrator.

The formulas here define the dashboard's numbers, so each repository
implementation must route its raw values through these helpers rather than
re-deriving them:

- :func:`mean_of_nonzero`: averages skip the 0.0 "unanalyzed" sentinel.
  Used both for a repository's own average and for the orchestrator's
  mean-of-means across repositories.
- :func:`pairwise_running_average`: the daily trend recurrence
  ``(stored + new) / 2``.  This weights later observations more heavily
  than a true cumulative mean; dashboards built on it expect exactly
  this recurrence.
- :func:`merge_counts`: key-wise sum of damage histograms, dropping the
  ``UNKNOWN`` bucket.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, datetime, timezone

from humane_logistics.core.media import UNANALYZED_SENTIMENT, DamageCategory

_UNKNOWN_KEYS: frozenset[str] = frozenset(
    {DamageCategory.UNKNOWN.value, DamageCategory.UNKNOWN.display_name}
)


def mean_of_nonzero(values: Iterable[float]) -> float:
    """Return the mean of the values that are not the 0.0 sentinel.

    Returns 0.0 when no value qualifies.

    >>> mean_of_nonzero([0.0, 0.4, -0.2])
    0.1
    """
    total = 0.0
    count = 0
    for value in values:
        if value != UNANALYZED_SENTIMENT:
            total += value
            count += 1
    return total / count if count else 0.0


def pairwise_running_average(stored: float | None, new_value: float) -> float:
    """Fold *new_value* into the stored per-date average.

    The first observation is stored as-is; each later one replaces the
    stored value with ``(stored + new_value) / 2``.
    """
    if stored is None:
        return new_value
    return (stored + new_value) / 2.0


def trend_date(timestamp: datetime) -> date:
    """Return the UTC calendar date of *timestamp*.

    Naive timestamps are taken to be UTC already.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.date()


def accumulate_daily_trends(
    observations: Iterable[tuple[str, datetime | None, float]],
) -> dict[str, dict[date, float]]:
    """Build the per-type daily trend map from ordered observations.

    Args:
        observations: ``(type_label, timestamp, sentiment)`` tuples in
            storage order.  Rows without a timestamp and rows still holding
            the 0.0 sentinel are skipped.

    Returns:
        ``{type_label: {date: running_average}}`` with dates ascending.
    """
    trends: dict[str, dict[date, float]] = {}
    for type_label, timestamp, sentiment in observations:
        if timestamp is None or sentiment == UNANALYZED_SENTIMENT:
            continue
        day = trend_date(timestamp)
        per_day = trends.setdefault(type_label, {})
        per_day[day] = pairwise_running_average(per_day.get(day), sentiment)
    return {label: dict(sorted(per_day.items())) for label, per_day in trends.items()}


def merge_counts(
    total: dict[str, int],
    partial: Mapping[str, int],
) -> dict[str, int]:
    """Add *partial* into *total* key-wise, skipping the ``UNKNOWN`` bucket.

    *total* is updated in place and returned.
    """
    for key, count in partial.items():
        if key in _UNKNOWN_KEYS:
            continue
        total[key] = total.get(key, 0) + count
    return total
