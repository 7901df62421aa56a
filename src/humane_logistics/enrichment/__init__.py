"""Enrichment engines and the per-item enrichment step.

Available engines:
- :class:`AfinnSentimentScorer`: lexicon-based English sentiment scores.
- :class:`KeywordDamageClassifier`: local keyword-table damage classifier.
- :class:`OpenRouterDamageClassifier`: hosted LLM damage classifier.

:class:`ContentEnrichmentService` combines a scorer, a classifier and the
content fetcher into the enrichment step used by the orchestrator.
"""

from __future__ import annotations

from humane_logistics.enrichment.base import DamageClassifier, SentimentScorer
from humane_logistics.enrichment.classifiers import KeywordDamageClassifier
from humane_logistics.enrichment.openrouter import OpenRouterDamageClassifier
from humane_logistics.enrichment.sentiment import AfinnSentimentScorer
from humane_logistics.enrichment.service import ContentEnrichmentService, EnrichmentOutcome

__all__ = [
    "AfinnSentimentScorer",
    "ContentEnrichmentService",
    "DamageClassifier",
    "EnrichmentOutcome",
    "KeywordDamageClassifier",
    "OpenRouterDamageClassifier",
    "SentimentScorer",
]
