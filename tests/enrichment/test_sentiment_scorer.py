"""Tests for the AFINN sentiment scorer."""

from __future__ import annotations

import math

import pytest

from humane_logistics.core.exceptions import EnrichmentError
from humane_logistics.enrichment.sentiment import AfinnSentimentScorer


@pytest.fixture(scope="module")
def scorer() -> AfinnSentimentScorer:
    return AfinnSentimentScorer()


@pytest.mark.asyncio
class TestAfinnSentimentScorer:
    async def test_negative_text_scores_negative(self, scorer: AfinnSentimentScorer) -> None:
        score = await scorer.score("Dozens killed and many injured in a terrible disaster")
        assert -1.0 <= score < 0.0

    async def test_positive_text_scores_positive(self, scorer: AfinnSentimentScorer) -> None:
        score = await scorer.score("Volunteers bring wonderful help and great hope to survivors")
        assert 0.0 < score <= 1.0

    async def test_text_without_lexicon_hits_scores_zero(self, scorer: AfinnSentimentScorer) -> None:
        assert await scorer.score("The report was published on Tuesday") == 0.0

    async def test_score_is_tanh_of_scaled_raw_sum(self, scorer: AfinnSentimentScorer) -> None:
        text = "terrible disaster"
        raw = scorer._afinn.score(text)
        assert await scorer.score(text) == round(math.tanh(raw / 10.0), 4)

    async def test_afinn_failure_wrapped(self, scorer: AfinnSentimentScorer) -> None:
        with pytest.raises(EnrichmentError) as exc_info:
            await scorer.score(None)  # type: ignore[arg-type]
        assert exc_info.value.engine == "afinn"
