"""Factory Boy factories for test data generation.

Available factories
-------------------
NewsItemFactory          unanalyzed news ``MediaItem`` about Typhoon Yagi
SocialPostFactory        unanalyzed social-post ``MediaItem``
AnalyzedNewsItemFactory  news item that already carries sentiment and damage type
GoogleNewsEntryFactory   fields of one Google News RSS ``<item>``
"""

from __future__ import annotations

from tests.factories.media import (
    AnalyzedNewsItemFactory,
    GoogleNewsEntryFactory,
    NewsItemFactory,
    SocialPostFactory,
)

__all__ = [
    "AnalyzedNewsItemFactory",
    "GoogleNewsEntryFactory",
    "NewsItemFactory",
    "SocialPostFactory",
]
