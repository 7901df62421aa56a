"""The ingestion, enrichment and aggregation pipeline."""

from __future__ import annotations

from humane_logistics.pipeline.cancellation import CancellationToken
from humane_logistics.pipeline.config import PipelineConfig
from humane_logistics.pipeline.orchestrator import AnalysisOrchestrator
from humane_logistics.pipeline.reports import (
    DashboardSummary,
    FailedItem,
    IngestReport,
    RepositoryRescan,
    RescanReport,
    TopicAggregate,
    sentiment_label,
)

__all__ = [
    "AnalysisOrchestrator",
    "CancellationToken",
    "DashboardSummary",
    "FailedItem",
    "IngestReport",
    "PipelineConfig",
    "RepositoryRescan",
    "RescanReport",
    "TopicAggregate",
    "sentiment_label",
]
