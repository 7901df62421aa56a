"""English sentiment scorer using the AFINN package.

AFINN is a lexicon-based approach that assigns integer polarity scores to
words.  The scorer sums the polarities of every word in the text and
normalizes the raw sum to [-1.0, 1.0] with ``tanh(raw / 10)``.

Text with no lexicon hits scores exactly 0.0, which the pipeline reads as
"not yet analyzed"; such items are re-scored on every rescan.
"""

from __future__ import annotations

import math

import structlog
from afinn import Afinn  # type: ignore[import-untyped]

from humane_logistics.core.exceptions import EnrichmentError
from humane_logistics.enrichment.base import SentimentScorer

logger = structlog.get_logger(__name__)


class AfinnSentimentScorer(SentimentScorer):
    """Compute sentiment scores with the AFINN lexicon.

    Args:
        language: AFINN lexicon language code.  Defaults to ``"en"``.
        scale: Divisor applied to the raw AFINN sum before ``tanh``.
    """

    engine_name = "afinn"

    def __init__(self, language: str = "en", scale: float = 10.0) -> None:
        self._afinn = Afinn(language=language)
        self._scale = scale

    async def score(self, text: str) -> float:
        """Return the normalized AFINN score of *text*.

        Raises:
            EnrichmentError: If AFINN raises an unexpected error.
        """
        try:
            raw_score = float(self._afinn.score(text))
        except Exception as exc:
            logger.warning("sentiment_scorer: AFINN error", error=str(exc))
            raise EnrichmentError(
                f"AFINN sentiment analysis failed: {exc}", engine=self.engine_name
            ) from exc

        normalized = round(math.tanh(raw_score / self._scale), 4)
        logger.debug(
            "sentiment_scorer: computed sentiment",
            raw_score=round(raw_score, 2),
            normalized_score=normalized,
        )
        return normalized
