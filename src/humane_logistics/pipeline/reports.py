"""Result records returned by the orchestrator's cycles and queries."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

#: Sentiment above this is labelled positive, below its negation negative.
SENTIMENT_LABEL_THRESHOLD: float = 0.1

#: Characters of content kept when reporting a failed item.
_PREVIEW_CHARS: int = 80


def sentiment_label(score: float) -> str:
    """Return ``"positive"``, ``"negative"`` or ``"neutral"`` for *score*."""
    if score > SENTIMENT_LABEL_THRESHOLD:
        return "positive"
    if score < -SENTIMENT_LABEL_THRESHOLD:
        return "negative"
    return "neutral"


def content_preview(content: str) -> str:
    text = " ".join((content or "").split())
    if len(text) <= _PREVIEW_CHARS:
        return text
    return text[: _PREVIEW_CHARS - 3] + "..."


@dataclass
class FailedItem:
    """One item whose save or update raised."""

    preview: str
    url: str | None
    error: str


@dataclass
class IngestReport:
    """Outcome of one ingest cycle."""

    topic: str
    write_target: str
    collected: int = 0
    saved: int = 0
    duplicates: int = 0
    enriched: int = 0
    failed_collectors: list[str] = field(default_factory=list)
    failed_items: list[FailedItem] = field(default_factory=list)
    cancelled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RepositoryRescan:
    """Per-repository breakdown of a rescan."""

    label: str
    offset: int = 0
    fetched: int = 0
    updated: int = 0
    skipped: int = 0
    unchanged: int = 0
    failed: int = 0
    more: bool = False
    error: str | None = None


@dataclass
class RescanReport:
    """Outcome of one rescan cycle.

    ``updated`` counts items enriched and written back; ``skipped`` counts
    fetched items that turned out to be analyzed already; ``unchanged``
    counts items whose enrichment attempt changed nothing (no usable text or
    both engines failed).

    ``more_pending`` is True when some repository returned a full page, so
    pending items may remain past it.
    """

    topic: str
    per_repository: list[RepositoryRescan] = field(default_factory=list)
    failed_items: list[FailedItem] = field(default_factory=list)
    cancelled: bool = False

    @property
    def updated(self) -> int:
        return sum(r.updated for r in self.per_repository)

    @property
    def skipped(self) -> int:
        return sum(r.skipped for r in self.per_repository)

    @property
    def unchanged(self) -> int:
        return sum(r.unchanged for r in self.per_repository)

    @property
    def failed(self) -> int:
        return sum(r.failed for r in self.per_repository)

    @property
    def more_pending(self) -> bool:
        return any(r.more for r in self.per_repository)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data.update(
            updated=self.updated,
            skipped=self.skipped,
            unchanged=self.unchanged,
            failed=self.failed,
            more_pending=self.more_pending,
        )
        return data


@dataclass
class TopicAggregate:
    """Merged aggregate statistics for one topic across the federation."""

    topic: str
    total_count: int
    average_sentiment: float
    damage_distribution: dict[str, int]
    sentiment_trends: dict[str, dict[date, float]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "total_count": self.total_count,
            "average_sentiment": self.average_sentiment,
            "damage_distribution": dict(self.damage_distribution),
            "sentiment_trends": {
                label: {day.isoformat(): value for day, value in per_day.items()}
                for label, per_day in self.sentiment_trends.items()
            },
        }


@dataclass
class DashboardSummary:
    """Headline numbers for the dashboard's summary cards."""

    topic: str
    total_posts: int
    sentiment_score: float
    sentiment_label: str
    top_damage: str | None
    top_damage_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
