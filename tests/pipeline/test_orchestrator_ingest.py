"""Ingest-cycle tests for the AnalysisOrchestrator.

Covers:
- single write target (default first registered, or named explicitly)
- dedup across cycles, search-only vs search + analyze
- collector and per-item save failures do not abort the cycle
- fatal configuration and storage errors propagate
- cancellation and concurrent collector fetches
"""

from __future__ import annotations

import pytest

from humane_logistics.core.exceptions import (
    CollectionError,
    CollectorRateLimitError,
    ConfigurationError,
    RepositoryUnavailableError,
)
from humane_logistics.core.logging_config import cycle_id_var
from humane_logistics.core.media import DamageCategory, MediaItem
from humane_logistics.enrichment.service import ContentEnrichmentService
from humane_logistics.pipeline import AnalysisOrchestrator, CancellationToken, PipelineConfig
from humane_logistics.storage.memory import InMemoryMediaRepository
from tests.doubles import FixedClassifier, FixedScorer, FlakyRepository, StaticCollector
from tests.factories.media import NewsItemFactory, SocialPostFactory

TOPIC = "Typhoon Yagi"
START = "9/4/2024"
END = "11/30/2024"


def _orchestrator(
    enrichment: ContentEnrichmentService,
    collectors: list[StaticCollector],
    repositories: dict[str, InMemoryMediaRepository],
    **config: object,
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        enrichment,
        PipelineConfig(collectors=collectors, repositories=repositories, **config),
    )


class CancellingRepository(InMemoryMediaRepository):
    """Cancels *token* right after the first successful save."""

    def __init__(self, token: CancellationToken) -> None:
        super().__init__()
        self.token = token

    async def save(self, item: MediaItem) -> bool:
        inserted = await super().save(item)
        self.token.cancel()
        return inserted


@pytest.mark.asyncio
class TestWriteTarget:
    async def test_items_go_only_to_first_registered_repository(
        self, enrichment: ContentEnrichmentService
    ) -> None:
        news, social = InMemoryMediaRepository(), InMemoryMediaRepository()
        collector = StaticCollector("news", NewsItemFactory.build_batch(3))
        orchestrator = _orchestrator(enrichment, [collector], {"News": news, "Social": social})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.write_target == "News"
        assert report.saved == 3
        assert len(news) == 3
        assert len(social) == 0

    async def test_named_write_target(self, enrichment: ContentEnrichmentService) -> None:
        news, social = InMemoryMediaRepository(), InMemoryMediaRepository()
        collector = StaticCollector("social", SocialPostFactory.build_batch(2))
        orchestrator = _orchestrator(
            enrichment, [collector], {"News": news, "Social": social}, write_target="Social"
        )

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.write_target == "Social"
        assert len(social) == 2
        assert len(news) == 0

    async def test_unknown_write_target_is_configuration_error(
        self, enrichment: ContentEnrichmentService
    ) -> None:
        orchestrator = _orchestrator(
            enrichment, [], {"News": InMemoryMediaRepository()}, write_target="Archive"
        )

        with pytest.raises(ConfigurationError):
            await orchestrator.ingest_cycle(TOPIC, START, END, False)

    async def test_no_repository_is_configuration_error(
        self, enrichment: ContentEnrichmentService
    ) -> None:
        orchestrator = AnalysisOrchestrator(enrichment)
        orchestrator.register_collector(StaticCollector("news", NewsItemFactory.build_batch(1)))

        with pytest.raises(ConfigurationError):
            await orchestrator.ingest_cycle(TOPIC, START, END, False)

    async def test_add_repository_after_construction(
        self, enrichment: ContentEnrichmentService
    ) -> None:
        orchestrator = AnalysisOrchestrator(enrichment)
        repo = InMemoryMediaRepository()
        orchestrator.add_repository("News", repo)
        orchestrator.register_collector(StaticCollector("news", NewsItemFactory.build_batch(2)))

        await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert orchestrator.write_repository is repo
        assert len(repo) == 2


@pytest.mark.asyncio
class TestIngestSemantics:
    async def test_collectors_receive_topic_and_dates(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        collector = StaticCollector("news")
        orchestrator = _orchestrator(enrichment, [collector], {"News": memory_repo})

        await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert collector.calls == [(TOPIC, START, END)]

    async def test_second_cycle_counts_duplicates(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        collector = StaticCollector("news", NewsItemFactory.build_batch(4))
        orchestrator = _orchestrator(enrichment, [collector], {"News": memory_repo})

        first = await orchestrator.ingest_cycle(TOPIC, START, END, False)
        second = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert (first.saved, first.duplicates) == (4, 0)
        assert (second.collected, second.saved, second.duplicates) == (4, 0, 4)
        assert len(memory_repo) == 4

    async def test_search_only_stores_unanalyzed(self, memory_repo: InMemoryMediaRepository) -> None:
        scorer = FixedScorer(0.5)
        enrichment = ContentEnrichmentService(scorer, FixedClassifier())
        collector = StaticCollector("news", NewsItemFactory.build_batch(2))
        orchestrator = _orchestrator(enrichment, [collector], {"News": memory_repo})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.enriched == 0
        assert scorer.calls == []
        assert all(item.needs_analysis() for item in memory_repo.items)

    async def test_analyze_immediately_stores_enriched(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        collector = StaticCollector("news", NewsItemFactory.build_batch(3))
        orchestrator = _orchestrator(enrichment, [collector], {"News": memory_repo})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, True)

        assert report.enriched == 3
        stored = memory_repo.items
        assert all(item.sentiment == 0.5 for item in stored)
        assert all(item.damage_type is DamageCategory.FLOOD for item in stored)

    async def test_enrichment_failure_still_saves_item(
        self, memory_repo: InMemoryMediaRepository
    ) -> None:
        enrichment = ContentEnrichmentService(FixedScorer(fail=True), FixedClassifier(fail=True))
        collector = StaticCollector("news", NewsItemFactory.build_batch(2))
        orchestrator = _orchestrator(enrichment, [collector], {"News": memory_repo})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, True)

        assert report.saved == 2
        assert report.enriched == 0
        assert all(item.needs_analysis() for item in memory_repo.items)

    async def test_collector_failure_does_not_abort_cycle(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        broken = StaticCollector("broken", error=CollectionError("upstream down"))
        limited = StaticCollector("limited", error=CollectorRateLimitError("slow down"))
        healthy = StaticCollector("healthy", NewsItemFactory.build_batch(2))
        unexpected = StaticCollector("buggy", error=KeyError("items"))
        orchestrator = _orchestrator(
            enrichment, [broken, limited, healthy, unexpected], {"News": memory_repo}
        )

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.failed_collectors == ["broken", "limited", "buggy"]
        assert report.saved == 2

    async def test_save_failure_recorded_per_item(self, enrichment: ContentEnrichmentService) -> None:
        items = NewsItemFactory.build_batch(3)
        repo = FlakyRepository(fail_save_for={items[1].content})
        orchestrator = _orchestrator(enrichment, [StaticCollector("news", items)], {"News": repo})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.saved == 2
        assert len(report.failed_items) == 1
        assert report.failed_items[0].url == items[1].url
        assert "disk full" in report.failed_items[0].error

    async def test_unavailable_store_propagates(self, enrichment: ContentEnrichmentService) -> None:
        repo = FlakyRepository(unavailable=True)
        orchestrator = _orchestrator(
            enrichment, [StaticCollector("news", NewsItemFactory.build_batch(1))], {"News": repo}
        )

        with pytest.raises(RepositoryUnavailableError):
            await orchestrator.ingest_cycle(TOPIC, START, END, False)

    async def test_cycle_id_cleared_after_cycle(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        orchestrator = _orchestrator(enrichment, [], {"News": memory_repo})

        await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert cycle_id_var.get() is None

    async def test_clear_collectors(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        orchestrator = _orchestrator(
            enrichment, [StaticCollector("news", NewsItemFactory.build_batch(1))], {"News": memory_repo}
        )
        orchestrator.clear_collectors()

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.collected == 0
        assert orchestrator.collectors == []


@pytest.mark.asyncio
class TestIngestCancellationAndConcurrency:
    async def test_cancelled_before_start_saves_nothing(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        token = CancellationToken()
        token.cancel()
        collector = StaticCollector("news", NewsItemFactory.build_batch(3))
        orchestrator = _orchestrator(enrichment, [collector], {"News": memory_repo})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False, cancel_token=token)

        assert report.cancelled is True
        assert len(memory_repo) == 0

    async def test_cancel_stops_at_next_item(self, enrichment: ContentEnrichmentService) -> None:
        token = CancellationToken()
        repo = CancellingRepository(token)
        first = StaticCollector("first", NewsItemFactory.build_batch(3))
        second = StaticCollector("second", NewsItemFactory.build_batch(3))
        orchestrator = _orchestrator(enrichment, [first, second], {"News": repo})

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False, cancel_token=token)

        assert report.cancelled is True
        assert report.saved == 1
        assert len(repo) == 1

    async def test_concurrent_fetch_keeps_registration_order(
        self, enrichment: ContentEnrichmentService, memory_repo: InMemoryMediaRepository
    ) -> None:
        slow_items = [NewsItemFactory.build(content=f"slow {i}") for i in range(2)]
        fast_items = [NewsItemFactory.build(content=f"fast {i}") for i in range(2)]
        slow = StaticCollector("slow", slow_items, delay=0.05)
        fast = StaticCollector("fast", fast_items)
        orchestrator = _orchestrator(
            enrichment, [slow, fast], {"News": memory_repo}, collector_concurrency=2
        )

        report = await orchestrator.ingest_cycle(TOPIC, START, END, False)

        assert report.saved == 4
        assert [item.content for item in memory_repo.items] == [
            "slow 0", "slow 1", "fast 0", "fast 1",
        ]
