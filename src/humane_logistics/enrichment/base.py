"""Abstract contracts for the enrichment engines.

Two independent capabilities make up the enrichment engine:

- :class:`SentimentScorer` turns text into a floating-point score.
- :class:`DamageClassifier` turns text into a
  :class:`~humane_logistics.core.media.DamageCategory`.

Either may be backed by a hosted model or a local one.  Both may fail; a
failure is non-fatal for the item being enriched.

Usage::

    scorer = AfinnSentimentScorer()
    classifier = KeywordDamageClassifier()
    score = await scorer.score(text)
    category = await classifier.classify(text)
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from humane_logistics.core.media import DamageCategory


class SentimentScorer(ABC):
    """Pluggable sentiment scoring interface.

    A returned score of exactly 0.0 coincides with the "unanalyzed"
    sentinel, so the item will be scored again on the next rescan.
    """

    engine_name: str  # must be set by subclasses; used in logs and errors

    @abstractmethod
    async def score(self, text: str) -> float:
        """Return the sentiment score of *text*, in [-1.0, 1.0].

        Raises:
            EnrichmentError: If scoring fails and the error should be logged.
        """

    def __repr__(self) -> str:
        """Return a human-readable representation of this scorer."""
        return f"{self.__class__.__name__}(engine_name={self.engine_name!r})"


class DamageClassifier(ABC):
    """Pluggable damage classification interface."""

    engine_name: str  # must be set by subclasses; used in logs and errors

    @abstractmethod
    async def classify(self, text: str) -> DamageCategory:
        """Return the damage category described by *text*.

        Raises:
            EnrichmentError: If classification fails and the error should be logged.
        """

    def __repr__(self) -> str:
        """Return a human-readable representation of this classifier."""
        return f"{self.__class__.__name__}(engine_name={self.engine_name!r})"
