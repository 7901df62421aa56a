"""The enrichment step: sentiment + damage classification for one item.

Text selection:

1. The item's own ``content`` when it is non-blank.
2. Otherwise, when the item has a valid HTTP(S) ``url``, the paragraph text
   of the linked page (via :class:`~humane_logistics.scraper.ContentFetcher`).
3. Otherwise nothing: enrichment is skipped and both sentinels stay in place.
   This is logged, not raised.

With text in hand, the scorer and the classifier run independently.  A
failure in one is caught and logged and does not stop the other, so an item
can leave this step half-enriched.  Whatever dimension failed keeps its
previous value, which keeps the item eligible for the next rescan.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from humane_logistics.core.media import MediaItem
from humane_logistics.enrichment.base import DamageClassifier, SentimentScorer
from humane_logistics.scraper.content_fetcher import ContentFetcher

logger = structlog.get_logger(__name__)

TEXT_SOURCE_CONTENT = "content"
TEXT_SOURCE_URL = "url"
TEXT_SOURCE_NONE = "none"


@dataclass
class EnrichmentOutcome:
    """What one enrichment attempt did to an item.

    Attributes:
        text_source: ``"content"``, ``"url"`` or ``"none"`` (skipped).
        sentiment_set: The scorer succeeded and the score was stored.
        damage_set: The classifier succeeded and the category was stored.
        sentiment_error: Error message from the scorer, if it failed.
        damage_error: Error message from the classifier, if it failed.
        changed: Whether the item's sentiment or damage type changed.
    """

    text_source: str = TEXT_SOURCE_NONE
    sentiment_set: bool = False
    damage_set: bool = False
    sentiment_error: str | None = None
    damage_error: str | None = None
    changed: bool = False

    @property
    def skipped(self) -> bool:
        return self.text_source == TEXT_SOURCE_NONE

    @property
    def failed(self) -> bool:
        return self.sentiment_error is not None or self.damage_error is not None


class ContentEnrichmentService:
    """Run sentiment scoring and damage classification on media items.

    Args:
        scorer: Sentiment scoring engine.
        classifier: Damage classification engine.  ``None`` disables
            classification (damage types stay ``UNKNOWN``).
        fetcher: Content fetcher for items without inline content.  ``None``
            disables the URL fallback.
    """

    def __init__(
        self,
        scorer: SentimentScorer,
        classifier: DamageClassifier | None,
        fetcher: ContentFetcher | None = None,
    ) -> None:
        self.scorer = scorer
        self.classifier = classifier
        self.fetcher = fetcher

    async def resolve_text(self, item: MediaItem) -> tuple[str, str]:
        """Return ``(text, text_source)`` for *item*."""
        if item.has_content():
            return item.content, TEXT_SOURCE_CONTENT
        if item.has_valid_url() and self.fetcher is not None:
            fetched = await self.fetcher.fetch_text(item.url)
            if fetched.strip():
                return fetched, TEXT_SOURCE_URL
        return "", TEXT_SOURCE_NONE

    async def enrich(self, item: MediaItem) -> EnrichmentOutcome:
        """Enrich *item* in place and report what happened.

        Never raises for scorer, classifier or fetch failures.
        """
        log = logger.bind(topic=item.topic, url=item.url)
        text, source = await self.resolve_text(item)
        outcome = EnrichmentOutcome(text_source=source)

        if source == TEXT_SOURCE_NONE:
            log.info("enrichment: no usable text; skipping item")
            return outcome

        before = (item.sentiment, item.damage_type)

        try:
            item.sentiment = float(await self.scorer.score(text))
            outcome.sentiment_set = True
        except Exception as exc:  # noqa: BLE001
            outcome.sentiment_error = str(exc) or exc.__class__.__name__
            log.warning(
                "enrichment: sentiment scoring failed",
                engine=self.scorer.engine_name,
                error=outcome.sentiment_error,
            )

        if self.classifier is not None:
            try:
                item.damage_type = await self.classifier.classify(text)
                outcome.damage_set = True
            except Exception as exc:  # noqa: BLE001
                outcome.damage_error = str(exc) or exc.__class__.__name__
                log.warning(
                    "enrichment: damage classification failed",
                    engine=self.classifier.engine_name,
                    error=outcome.damage_error,
                )

        outcome.changed = (item.sentiment, item.damage_type) != before
        log.debug(
            "enrichment: item enriched",
            text_source=source,
            sentiment=item.sentiment,
            damage_type=item.damage_type.value,
            needs_analysis=item.needs_analysis(),
        )
        return outcome

    async def aclose(self) -> None:
        """Close HTTP clients held by the fetcher and the classifier."""
        if self.fetcher is not None:
            await self.fetcher.aclose()
        close = getattr(self.classifier, "aclose", None)
        if close is not None:
            await close()
