"""Build a ready-to-run orchestrator from :class:`~humane_logistics.config.Settings`.

Wiring:

- one :class:`SqlMediaRepository` per configured repository label, all
  sharing a single engine (each label is a partition of the same table);
- the AFINN sentiment scorer;
- the OpenRouter damage classifier when an API key is configured, the
  local keyword classifier otherwise;
- the content fetcher for items without inline text;
- the Google News collector.
"""

from __future__ import annotations

import structlog

from humane_logistics.collectors.google_news import GoogleNewsCollector
from humane_logistics.config.settings import Settings
from humane_logistics.core.exceptions import ConfigurationError, RepositoryUnavailableError
from humane_logistics.enrichment.base import DamageClassifier
from humane_logistics.enrichment.classifiers import KeywordDamageClassifier
from humane_logistics.enrichment.openrouter import OpenRouterDamageClassifier
from humane_logistics.enrichment.sentiment import AfinnSentimentScorer
from humane_logistics.enrichment.service import ContentEnrichmentService
from humane_logistics.pipeline.config import PipelineConfig
from humane_logistics.pipeline.orchestrator import AnalysisOrchestrator
from humane_logistics.scraper.content_fetcher import ContentFetcher
from humane_logistics.storage.base import MediaRepository
from humane_logistics.storage.sql import SqlMediaRepository

logger = structlog.get_logger(__name__)


def build_classifier(settings: Settings) -> DamageClassifier:
    if settings.openrouter_api_key:
        return OpenRouterDamageClassifier(
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
        )
    return KeywordDamageClassifier()


def build_enrichment(settings: Settings) -> ContentEnrichmentService:
    return ContentEnrichmentService(
        scorer=AfinnSentimentScorer(),
        classifier=build_classifier(settings),
        fetcher=ContentFetcher(
            timeout=settings.fetch_timeout_seconds,
            user_agent=settings.fetch_user_agent,
        ),
    )


async def build_repositories(settings: Settings) -> dict[str, MediaRepository]:
    """Open one SQL repository per configured label.

    Raises:
        RepositoryUnavailableError: If the database cannot be reached.
    """
    labels = settings.repository_labels
    primary = await SqlMediaRepository.connect(settings.database_url, partition=labels[0])
    try:
        await primary.create_schema()
    except RepositoryUnavailableError:
        await primary.close()
        raise
    repositories: dict[str, MediaRepository] = {labels[0]: primary}
    for label in labels[1:]:
        repositories[label] = SqlMediaRepository(primary.engine, partition=label)
    return repositories


async def build_orchestrator(settings: Settings) -> AnalysisOrchestrator:
    """Return an orchestrator wired from *settings*.

    Raises:
        RepositoryUnavailableError: If the database cannot be reached.
        ConfigurationError: If ``write_target`` names an unknown label.
    """
    repositories = await build_repositories(settings)
    config = PipelineConfig(
        collectors=[
            GoogleNewsCollector(
                language=settings.google_news_language,
                country=settings.google_news_country,
            )
        ],
        repositories=repositories,
        write_target=settings.write_target,
        rescan_batch_size=settings.rescan_batch_size,
        rescan_delay_seconds=settings.rescan_delay_seconds,
        collector_concurrency=settings.collector_concurrency,
    )
    orchestrator = AnalysisOrchestrator(build_enrichment(settings), config)
    # Resolve early so a bad write target fails at startup.
    try:
        target = orchestrator.write_target_label
    except ConfigurationError:
        await orchestrator.aclose()
        raise
    logger.info(
        "orchestrator: built",
        repositories=list(repositories),
        write_target=target,
        classifier=orchestrator.enrichment.classifier.engine_name,
    )
    return orchestrator
