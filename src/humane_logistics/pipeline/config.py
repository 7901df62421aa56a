"""Explicit pipeline configuration passed to the orchestrator.

Collectors and repositories are handed to the orchestrator through this
struct instead of process-wide registries.  The ingest write target is
named explicitly; ``None`` falls back to the first registered repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from humane_logistics.storage.base import DEFAULT_PENDING_PAGE_SIZE

if TYPE_CHECKING:
    from humane_logistics.collectors.base import MediaCollector
    from humane_logistics.storage.base import MediaRepository


@dataclass
class PipelineConfig:
    """Collectors, repositories and tuning knobs for one orchestrator.

    Attributes:
        collectors: Collectors queried during ingest, in order.
        repositories: Label → repository, in registration order.  Labels
            only tag sentiment-trend results.
        write_target: Label of the single repository that receives ingested
            items.  ``None`` selects the first registered repository.
        rescan_batch_size: Pending items fetched per repository per rescan.
        rescan_delay_seconds: Pause between per-item enrichment calls
            during a rescan.
        collector_concurrency: Collectors fetched concurrently during ingest.
            Items are still processed in collector registration order.
    """

    collectors: list[MediaCollector] = field(default_factory=list)
    repositories: dict[str, MediaRepository] = field(default_factory=dict)
    write_target: str | None = None
    rescan_batch_size: int = DEFAULT_PENDING_PAGE_SIZE
    rescan_delay_seconds: float = 1.0
    collector_concurrency: int = 1
