"""Pipeline orchestrator: ingest, rescan and federated aggregation.

The orchestrator owns an ordered list of collectors and an ordered mapping
of labelled repositories, and coordinates three activities:

- **Ingest** pulls candidates from every collector, optionally enriches
  them, and saves each one into the single *write target* repository.
- **Rescan** walks one bounded page of pending items per repository,
  enriches what still needs it, and writes changed items back.  The next
  page starts past the items that stayed pending.
- **Aggregation** runs the four read queries against every repository
  concurrently and merges the answers.

Failure policy: a failing collector, engine or per-item write is logged and
counted on the cycle's report; the cycle moves on.  Only
:class:`~humane_logistics.core.exceptions.ConfigurationError` and
:class:`~humane_logistics.core.exceptions.RepositoryUnavailableError`
escape a cycle.

Every cycle runs under a fresh ``cycle_id`` that is merged into each log
record emitted while the cycle is active.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

import structlog

from humane_logistics.collectors.base import DateBound, MediaCollector
from humane_logistics.core.exceptions import (
    ConfigurationError,
    RepositoryUnavailableError,
)
from humane_logistics.core.logging_config import cycle_id_var
from humane_logistics.core.media import MediaItem
from humane_logistics.enrichment.service import ContentEnrichmentService, EnrichmentOutcome
from humane_logistics.pipeline.cancellation import CancellationToken
from humane_logistics.pipeline.config import PipelineConfig
from humane_logistics.pipeline.reports import (
    DashboardSummary,
    FailedItem,
    IngestReport,
    RepositoryRescan,
    RescanReport,
    TopicAggregate,
    content_preview,
    sentiment_label,
)
from humane_logistics.storage.aggregation import mean_of_nonzero, merge_counts
from humane_logistics.storage.base import MediaRepository

logger = structlog.get_logger(__name__)


@contextmanager
def _cycle_context(cycle: str, topic: str) -> Iterator[str]:
    """Bind a fresh ``cycle_id`` for the duration of one cycle."""
    cycle_id = uuid.uuid4().hex[:12]
    token = cycle_id_var.set(cycle_id)
    try:
        with structlog.contextvars.bound_contextvars(cycle=cycle, topic=topic):
            yield cycle_id
    finally:
        cycle_id_var.reset(token)


class AnalysisOrchestrator:
    """Coordinates collectors, the enrichment step and a repository federation.

    Args:
        enrichment: The enrichment step shared by ingest and rescan.
        config: Initial collectors, repositories and tuning.  The
            orchestrator copies the collections, so later changes to the
            config object do not leak in.
    """

    def __init__(
        self,
        enrichment: ContentEnrichmentService,
        config: PipelineConfig | None = None,
    ) -> None:
        config = config or PipelineConfig()
        self.enrichment = enrichment
        self.config = config
        self._collectors: list[MediaCollector] = list(config.collectors)
        self._repositories: dict[str, MediaRepository] = dict(config.repositories)
        # (label, topic) -> position in the pending sequence for the next rescan
        self._rescan_offsets: dict[tuple[str, str], int] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_collector(self, *collectors: MediaCollector) -> None:
        self._collectors.extend(collectors)

    def clear_collectors(self) -> None:
        self._collectors.clear()

    def add_repository(self, label: str, repository: MediaRepository) -> None:
        """Register *repository* under *label*.

        Re-using a label replaces the earlier repository but keeps its
        position in the registration order.
        """
        self._repositories[label] = repository
        self._rescan_offsets = {
            key: offset for key, offset in self._rescan_offsets.items() if key[0] != label
        }

    @property
    def collectors(self) -> list[MediaCollector]:
        return list(self._collectors)

    @property
    def repositories(self) -> dict[str, MediaRepository]:
        return dict(self._repositories)

    @property
    def write_target_label(self) -> str:
        """Label of the repository ingest writes to.

        Raises:
            ConfigurationError: If no repository is registered, or the
                configured write target names an unknown label.
        """
        self._require_repositories()
        target = self.config.write_target
        if target is None:
            return next(iter(self._repositories))
        if target not in self._repositories:
            raise ConfigurationError(
                f"Write target '{target}' is not a registered repository "
                f"(registered: {', '.join(self._repositories)})"
            )
        return target

    @property
    def write_repository(self) -> MediaRepository:
        return self._repositories[self.write_target_label]

    def _require_repositories(self) -> None:
        if not self._repositories:
            raise ConfigurationError("No media repository is registered")

    # ------------------------------------------------------------------
    # Ingest
    # ------------------------------------------------------------------

    async def ingest_cycle(
        self,
        topic: str,
        start_date: DateBound,
        end_date: DateBound,
        analyze_immediately: bool = False,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> IngestReport:
        """Collect, optionally enrich, and save items for *topic*.

        Collectors may be fetched concurrently (``collector_concurrency``),
        but their results are processed strictly in registration order and
        every item is written to the write target only.

        Raises:
            ConfigurationError: If no repository is registered.
        """
        label = self.write_target_label
        target = self._repositories[label]
        token = cancel_token or CancellationToken()
        report = IngestReport(topic=topic, write_target=label)

        with _cycle_context("ingest", topic):
            log = logger.bind(write_target=label, analyze=analyze_immediately)
            log.info("ingest: cycle started", collectors=len(self._collectors))

            collectors = list(self._collectors)
            semaphore = asyncio.Semaphore(max(1, self.config.collector_concurrency))
            tasks = [
                asyncio.create_task(
                    self._collect_from(collector, topic, start_date, end_date, semaphore, token)
                )
                for collector in collectors
            ]
            try:
                for collector, task in zip(collectors, tasks):
                    if token.cancelled:
                        report.cancelled = True
                        break
                    candidates = await task
                    if candidates is None:
                        report.failed_collectors.append(collector.collector_name)
                        continue
                    report.collected += len(candidates)
                    await self._store_candidates(
                        candidates, target, label, analyze_immediately, token, report
                    )
                    if report.cancelled:
                        break
            finally:
                pending = [task for task in tasks if not task.done()]
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

            log.info(
                "ingest: cycle finished",
                collected=report.collected,
                saved=report.saved,
                duplicates=report.duplicates,
                enriched=report.enriched,
                failed_collectors=len(report.failed_collectors),
                failed_items=len(report.failed_items),
                cancelled=report.cancelled,
            )
        return report

    async def _collect_from(
        self,
        collector: MediaCollector,
        topic: str,
        start_date: DateBound,
        end_date: DateBound,
        semaphore: asyncio.Semaphore,
        token: CancellationToken,
    ) -> list[MediaItem] | None:
        """Run one collector; return ``None`` when it failed."""
        async with semaphore:
            if token.cancelled:
                return []
            try:
                return list(await collector.collect(topic, start_date, end_date))
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.warning(
                    "ingest: collector failed",
                    collector=collector.collector_name,
                    error=str(exc),
                    error_type=exc.__class__.__name__,
                )
                return None

    async def _store_candidates(
        self,
        candidates: list[MediaItem],
        target: MediaRepository,
        label: str,
        analyze_immediately: bool,
        token: CancellationToken,
        report: IngestReport,
    ) -> None:
        for item in candidates:
            if token.cancelled:
                report.cancelled = True
                return
            if analyze_immediately:
                outcome = await self._enrich(item)
                if outcome is not None and (outcome.sentiment_set or outcome.damage_set):
                    report.enriched += 1
            try:
                inserted = await target.save(item)
            except RepositoryUnavailableError:
                raise
            except Exception as exc:  # noqa: BLE001
                report.failed_items.append(
                    FailedItem(content_preview(item.content), item.url, str(exc))
                )
                logger.warning(
                    "ingest: save failed",
                    repository=label,
                    url=item.url,
                    error=str(exc),
                )
                continue
            if inserted:
                report.saved += 1
            else:
                report.duplicates += 1

    async def _enrich(self, item: MediaItem) -> EnrichmentOutcome | None:
        try:
            return await self.enrichment.enrich(item)
        except Exception as exc:  # noqa: BLE001
            logger.warning("enrichment: unexpected failure", url=item.url, error=str(exc))
            return None

    # ------------------------------------------------------------------
    # Rescan
    # ------------------------------------------------------------------

    async def rescan_cycle(
        self,
        topic: str,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> RescanReport:
        """Enrich one page of pending items per repository and write back.

        Only items the enrichment step actually changed are written back.
        ``rescan_delay_seconds`` is slept between consecutive enrichment
        calls across the whole cycle.

        Items that are still pending after their turn (no usable text,
        failing engines, partial results) are stepped over on the next
        cycle: each repository's page starts after them until a short page
        shows the end of the pending sequence, and the walk starts over.

        Raises:
            ConfigurationError: If no repository is registered.
        """
        self._require_repositories()
        token = cancel_token or CancellationToken()
        report = RescanReport(topic=topic)
        limit = self.config.rescan_batch_size
        delay = self.config.rescan_delay_seconds
        enriched_any = False

        with _cycle_context("rescan", topic):
            logger.info("rescan: cycle started", repositories=len(self._repositories))
            for label, repository in list(self._repositories.items()):
                if token.cancelled:
                    report.cancelled = True
                    break
                offset = self._rescan_offsets.get((label, topic), 0)
                stats = RepositoryRescan(label=label, offset=offset)
                report.per_repository.append(stats)
                try:
                    pending = await repository.find_pending_by_topic(
                        topic, limit=limit, offset=offset
                    )
                except RepositoryUnavailableError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    stats.error = str(exc)
                    logger.warning("rescan: pending query failed", repository=label, error=str(exc))
                    continue
                stats.fetched = len(pending)
                still_pending = 0

                for item in pending:
                    if token.cancelled:
                        report.cancelled = True
                        break
                    if not item.needs_analysis():
                        stats.skipped += 1
                        continue
                    if enriched_any and await token.sleep(delay):
                        report.cancelled = True
                        break
                    enriched_any = True
                    outcome = await self._enrich(item)
                    if outcome is None or not outcome.changed:
                        stats.unchanged += 1
                        still_pending += 1
                        continue
                    written = await self._write_back(repository, label, item, stats, report)
                    if not written or item.needs_analysis():
                        still_pending += 1

                if not report.cancelled:
                    stats.more = limit > 0 and len(pending) >= limit
                    self._rescan_offsets[(label, topic)] = (
                        offset + still_pending if stats.more else 0
                    )

                logger.info(
                    "rescan: repository done",
                    repository=label,
                    offset=offset,
                    fetched=stats.fetched,
                    updated=stats.updated,
                    skipped=stats.skipped,
                    unchanged=stats.unchanged,
                    failed=stats.failed,
                )
                if report.cancelled:
                    break

            logger.info(
                "rescan: cycle finished",
                updated=report.updated,
                failed=report.failed,
                more_pending=report.more_pending,
                cancelled=report.cancelled,
            )
        return report

    async def _write_back(
        self,
        repository: MediaRepository,
        label: str,
        item: MediaItem,
        stats: RepositoryRescan,
        report: RescanReport,
    ) -> bool:
        try:
            matched = await repository.update_analysis(item)
        except RepositoryUnavailableError:
            raise
        except Exception as exc:  # noqa: BLE001
            stats.failed += 1
            report.failed_items.append(
                FailedItem(content_preview(item.content), item.url, str(exc))
            )
            logger.warning("rescan: update failed", repository=label, url=item.url, error=str(exc))
            return False
        if matched:
            stats.updated += 1
            return True
        stats.failed += 1
        report.failed_items.append(
            FailedItem(content_preview(item.content), item.url, "no stored record matched")
        )
        logger.warning("rescan: no stored record matched", repository=label, url=item.url)
        return False

    # ------------------------------------------------------------------
    # Aggregation
    # ------------------------------------------------------------------

    async def _query_all(self, query: str, topic: str) -> list[tuple[str, Any]]:
        """Run the repository method named *query* on every repository.

        Repositories whose query raises are logged and left out of the
        merge, so one unhealthy store does not blank the dashboard.
        """
        self._require_repositories()
        entries = list(self._repositories.items())
        results = await asyncio.gather(
            *(getattr(repository, query)(topic) for _, repository in entries),
            return_exceptions=True,
        )
        answers: list[tuple[str, Any]] = []
        for (label, _), result in zip(entries, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    "aggregate: repository query failed",
                    repository=label,
                    query=query,
                    error=str(result),
                )
                continue
            answers.append((label, result))
        return answers

    async def total_count(self, topic: str) -> int:
        """Sum of per-repository counts.  Items are not deduplicated across stores."""
        return sum(count for _, count in await self._query_all("count_by_topic", topic))

    async def overall_sentiment(self, topic: str) -> float:
        """Unweighted mean of the non-zero per-repository averages."""
        averages = [avg for _, avg in await self._query_all("average_sentiment", topic)]
        return mean_of_nonzero(averages)

    async def damage_distribution(self, topic: str) -> dict[str, int]:
        total: dict[str, int] = {}
        for _, partial in await self._query_all("damage_distribution", topic):
            merge_counts(total, partial)
        return total

    async def sentiment_trends(self, topic: str) -> dict[str, dict[date, float]]:
        """Per-repository trend maps keyed by repository label.

        Each repository's per-type maps are flattened under its label; when
        a repository reports several types, the last one wins.
        """
        trends: dict[str, dict[date, float]] = {}
        for label, per_type in await self._query_all("daily_sentiment_trends", topic):
            for per_day in per_type.values():
                trends[label] = dict(per_day)
        return trends

    async def aggregate(self, topic: str) -> TopicAggregate:
        total, average, distribution, trends = await asyncio.gather(
            self.total_count(topic),
            self.overall_sentiment(topic),
            self.damage_distribution(topic),
            self.sentiment_trends(topic),
        )
        return TopicAggregate(
            topic=topic,
            total_count=total,
            average_sentiment=average,
            damage_distribution=distribution,
            sentiment_trends=trends,
        )

    async def dashboard_summary(self, topic: str) -> DashboardSummary:
        """Headline figures: post count, sentiment and the dominant damage type."""
        total, average, distribution = await asyncio.gather(
            self.total_count(topic),
            self.overall_sentiment(topic),
            self.damage_distribution(topic),
        )
        top_damage: str | None = None
        top_count = 0
        if distribution:
            top_damage, top_count = min(distribution.items(), key=lambda kv: (-kv[1], kv[0]))
        return DashboardSummary(
            topic=topic,
            total_posts=total,
            sentiment_score=round(average, 4),
            sentiment_label=sentiment_label(average),
            top_damage=top_damage,
            top_damage_count=top_count,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close every repository and the enrichment step's HTTP clients."""
        for label, repository in self._repositories.items():
            try:
                await repository.close()
            except Exception as exc:  # noqa: BLE001
                logger.warning("orchestrator: repository close failed", repository=label, error=str(exc))
        await self.enrichment.aclose()
