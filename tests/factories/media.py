"""Factory Boy factories for media items.

Usage::

    from tests.factories.media import NewsItemFactory

    item = NewsItemFactory.build(content="Floodwaters submerged Hanoi streets")
"""

from __future__ import annotations

from datetime import datetime, timezone

import factory

from humane_logistics.core.media import DamageCategory, MediaItem, MediaKind

#: Default publication time for test items.
NOON_UTC = datetime(2024, 9, 8, 12, 0, 0, tzinfo=timezone.utc)


class NewsItemFactory(factory.Factory):
    """Unanalyzed news item (sentinel sentiment and damage type)."""

    class Meta:
        model = MediaItem

    topic = "Typhoon Yagi"
    content = factory.Sequence(
        lambda n: f"Report {n}: Typhoon Yagi made landfall in northern Vietnam"
    )
    url = factory.Sequence(lambda n: f"https://news.example.com/yagi/article-{n}")
    timestamp = NOON_UTC
    sentiment = 0.0
    damage_type = DamageCategory.UNKNOWN
    kind = MediaKind.NEWS
    source = "Example News"


class SocialPostFactory(NewsItemFactory):
    """Unanalyzed social post; ``source`` is not meaningful for posts."""

    content = factory.Sequence(lambda n: f"Post {n}: stay safe everyone, the river is rising")
    url = factory.Sequence(lambda n: f"https://social.example.com/posts/{n}")
    kind = MediaKind.SOCIAL_POST
    source = None


class AnalyzedNewsItemFactory(NewsItemFactory):
    """News item that no longer needs analysis."""

    sentiment = -0.5
    damage_type = DamageCategory.FLOOD


class GoogleNewsEntryFactory(factory.Factory):
    """One ``<item>`` element of a Google News RSS search response."""

    class Meta:
        model = dict

    title = factory.Sequence(lambda n: f"Typhoon Yagi headline {n}")
    source = "VnExpress International"
    link = factory.Sequence(lambda n: f"https://news.google.com/rss/articles/yagi-{n}")
    pub_date = "Sun, 08 Sep 2024 12:00:00 GMT"


def render_google_news_feed(entries: list[dict]) -> str:
    """Render *entries* as a Google News RSS document."""
    items = "".join(
        "<item>"
        f"<title>{e['title']} - {e['source']}</title>"
        f"<link>{e['link']}</link>"
        f"<pubDate>{e['pub_date']}</pubDate>"
        f'<source url="https://e.vnexpress.net">{e["source"]}</source>'
        "</item>"
        for e in entries
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Google News</title>'
        f"{items}</channel></rss>"
    )
